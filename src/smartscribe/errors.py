"""
Error Types

Exception hierarchy shared by the capture, streaming, summary and record
store components.
"""


class ScribeError(Exception):
    """Base class for all SmartScribe errors."""


class CaptureError(ScribeError):
    """Microphone capture could not be started."""


class MicrophonePermissionError(CaptureError):
    """Access to the microphone was denied by the operating system."""


class MicrophoneNotFoundError(CaptureError):
    """No usable audio input device is available."""


class StreamConnectionError(ScribeError):
    """The speech streaming backend could not be reached."""


class SummaryError(ScribeError):
    """The summarization backend failed or was used incorrectly."""


class RecordStoreError(ScribeError):
    """A record store request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotAuthenticatedError(RecordStoreError):
    """A record store call was made without a signed-in session."""
