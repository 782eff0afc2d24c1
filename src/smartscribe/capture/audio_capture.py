"""
Audio Capture

Microphone capture for live transcription. The input stream delivers fixed
size float blocks from the PortAudio callback thread; consumers receive them
as AudioChunk objects through the callback passed to start().
"""

from dataclasses import dataclass
from typing import Callable
import logging

import numpy as np

from smartscribe.capture.audio_utils import AudioChunk, to_mono
from smartscribe.errors import (
    CaptureError,
    MicrophoneNotFoundError,
    MicrophonePermissionError,
)

logger = logging.getLogger(__name__)

_PERMISSION_MARKERS = ("permission", "denied", "not authorized", "notallowed")
_DEVICE_MARKERS = (
    "no input device",
    "invalid device",
    "invalid number of channels",
    "device unavailable",
    "error querying device",
    "no default",
    "notfound",
)


@dataclass
class CaptureConfig:
    """Configuration for microphone capture."""

    sample_rate: int = 16000
    channels: int = 1
    blocksize: int = 4096  # frames per callback
    dtype: str = "float32"
    device: int | str | None = None  # None = default input device


def _sounddevice():
    import sounddevice as sd

    return sd


def classify_capture_error(error: Exception) -> CaptureError:
    """Map a PortAudio / device lookup failure onto the capture error taxonomy."""
    if isinstance(error, CaptureError):
        return error

    message = str(error)
    lowered = message.lower()
    if any(marker in lowered for marker in _PERMISSION_MARKERS):
        return MicrophonePermissionError(f"Microphone access denied: {message}")
    if any(marker in lowered for marker in _DEVICE_MARKERS):
        return MicrophoneNotFoundError(f"No microphone found: {message}")
    return CaptureError(f"Failed to open microphone: {message}")


class AudioCapture:
    """Owns one sounddevice input stream for the duration of a recording."""

    def __init__(self, config: CaptureConfig | None = None):
        """Initialize audio capture."""
        self.config = config or CaptureConfig()
        self._stream = None
        self._is_capturing = False
        self._on_chunk: Callable[[AudioChunk], None] | None = None
        self._sequence_number = 0

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def is_capturing(self) -> bool:
        return self._is_capturing

    def _audio_callback(
        self, indata: np.ndarray, frames: int, time_info, status
    ) -> None:
        """Callback for the input stream (runs on the PortAudio thread)."""
        if status:
            logger.debug("Audio capture status: %s", status)

        on_chunk = self._on_chunk
        if on_chunk is None:
            return

        chunk = AudioChunk(
            data=to_mono(indata),
            sample_rate=self.config.sample_rate,
            timestamp_ms=self._sequence_number * frames * 1000 / self.config.sample_rate,
            sequence_number=self._sequence_number,
        )
        self._sequence_number += 1
        on_chunk(chunk)

    def open(self) -> None:
        """Acquire the input device without starting the audio callbacks.

        Raises MicrophonePermissionError, MicrophoneNotFoundError or
        CaptureError when the device cannot be opened.
        """
        if self._stream is not None:
            return

        try:
            sd = _sounddevice()
            self._stream = sd.InputStream(
                samplerate=self.config.sample_rate,
                channels=self.config.channels,
                dtype=self.config.dtype,
                blocksize=self.config.blocksize,
                device=self.config.device,
                callback=self._audio_callback,
            )
        except Exception as e:
            self._stream = None
            raise classify_capture_error(e) from e

        logger.debug("Opened input stream (device=%s)", self.config.device)

    def start(self, on_chunk: Callable[[AudioChunk], None]) -> None:
        """Start delivering captured chunks to on_chunk."""
        if self._is_capturing:
            return

        self.open()
        self._on_chunk = on_chunk
        self._sequence_number = 0

        try:
            self._stream.start()
        except Exception as e:
            self._on_chunk = None
            raise classify_capture_error(e) from e

        self._is_capturing = True

    def stop(self) -> None:
        """Stop audio callbacks. Safe to call when not capturing."""
        self._on_chunk = None
        if not self._is_capturing:
            return

        self._is_capturing = False
        if self._stream is not None:
            self._stream.stop()

    def close(self) -> None:
        """Release the input device. Safe to call repeatedly."""
        self.stop()
        if self._stream is None:
            return

        stream, self._stream = self._stream, None
        stream.close()

    def __enter__(self) -> "AudioCapture":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @staticmethod
    def list_devices() -> list[dict]:
        """List available audio input devices."""
        sd = _sounddevice()

        devices = sd.query_devices()
        input_devices = []

        for i, device in enumerate(devices):
            if device["max_input_channels"] > 0:
                input_devices.append(
                    {
                        "index": i,
                        "name": device["name"],
                        "channels": device["max_input_channels"],
                        "sample_rate": device["default_samplerate"],
                    }
                )

        return input_devices
