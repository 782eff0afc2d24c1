"""
Pytest Configuration and Shared Fixtures

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

import asyncio
import json
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
import numpy as np

from smartscribe.transcription.transcript_types import TranscriptSegment


# =============================================================================
# AUDIO FIXTURES
# =============================================================================


@pytest.fixture
def sample_audio_data() -> np.ndarray:
    """One capture block of low-amplitude noise."""
    return (np.random.randn(4096) * 0.01).astype(np.float32)


@pytest.fixture
def sample_rate() -> int:
    """Standard sample rate for tests."""
    return 16000


# =============================================================================
# SESSION FAKES
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCapture:
    """Stands in for AudioCapture and records lifecycle calls."""

    def __init__(self, calls: list[str] | None = None):
        self.calls = calls if calls is not None else []
        self.on_chunk: Callable | None = None
        self.open_error: Exception | None = None
        self.start_error: Exception | None = None
        self.stop_error: Exception | None = None
        self.close_error: Exception | None = None

    def open(self) -> None:
        self.calls.append("capture.open")
        if self.open_error:
            raise self.open_error

    def start(self, on_chunk: Callable) -> None:
        self.calls.append("capture.start")
        if self.start_error:
            raise self.start_error
        self.on_chunk = on_chunk

    def stop(self) -> None:
        self.calls.append("capture.stop")
        self.on_chunk = None
        if self.stop_error:
            raise self.stop_error

    def close(self) -> None:
        self.calls.append("capture.close")
        if self.close_error:
            raise self.close_error


class FakeStream:
    """In-memory DeepgramStream.

    Messages pushed with push() are yielded by the async iterator; finish()
    ends the iteration like a normal server close.
    """

    _END = object()

    def __init__(self, calls: list[str] | None = None):
        self.calls = calls if calls is not None else []
        self.sent: list[bytes] = []
        self.close_stream_error: Exception | None = None
        self.close_error: Exception | None = None
        self._messages: asyncio.Queue = asyncio.Queue()

    def push(self, message: dict[str, Any] | str) -> None:
        if isinstance(message, dict):
            message = json.dumps(message)
        self._messages.put_nowait(message)

    def finish(self) -> None:
        self._messages.put_nowait(self._END)

    async def send_audio(self, frame: bytes) -> None:
        self.sent.append(frame)

    async def close_stream(self) -> None:
        self.calls.append("stream.close_stream")
        if self.close_stream_error:
            raise self.close_stream_error

    async def close(self) -> None:
        self.calls.append("stream.close")
        self.finish()
        if self.close_error:
            raise self.close_error

    async def _iterate(self):
        while True:
            message = await self._messages.get()
            if message is self._END:
                return
            yield message

    def __aiter__(self):
        return self._iterate()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def call_log() -> list[str]:
    return []


@pytest.fixture
def fake_capture(call_log: list[str]) -> FakeCapture:
    return FakeCapture(call_log)


@pytest.fixture
def make_stream_factory(call_log: list[str]):
    """Factory returning (stream_factory, streams) for a session under test."""

    def _make(error: Exception | None = None):
        streams: list[FakeStream] = []

        async def factory(config):
            call_log.append("stream.connect")
            if error:
                raise error
            stream = FakeStream(call_log)
            streams.append(stream)
            return stream

        return factory, streams

    return _make


# =============================================================================
# TRANSCRIPT FIXTURES
# =============================================================================


def recognition_event(
    transcript: str,
    is_final: bool = True,
    speaker: int | None = 0,
    confidence: float = 0.98,
) -> dict[str, Any]:
    """Build a recognition event in the backend's wire format."""
    words = []
    if speaker is not None:
        words = [
            {"word": w.lower().strip(".,?"), "speaker": speaker, "start": 0.0, "end": 0.3}
            for w in transcript.split()
        ]
    return {
        "type": "Results",
        "is_final": is_final,
        "channel": {
            "alternatives": [
                {"transcript": transcript, "confidence": confidence, "words": words}
            ]
        },
    }


@pytest.fixture
def make_event():
    return recognition_event


@pytest.fixture
def sample_segments() -> list[TranscriptSegment]:
    """A short doctor-patient exchange."""
    return [
        TranscriptSegment("Doctor", "What brings you in today?", "00:02", True, 0.99),
        TranscriptSegment("Patient", "I've had chest pain for two hours.", "00:05", True, 0.97),
        TranscriptSegment("Doctor", "Any shortness of breath?", "00:09", True, 0.98),
    ]


@pytest.fixture
def sample_soap_response() -> str:
    """Model output in the requested SOAP format."""
    return (
        "SUBJECTIVE:\n45-year-old male with two hours of substernal chest pain.\n\n"
        "OBJECTIVE:\nBP 150/90, HR 88.\n\n"
        "ASSESSMENT:\nChest pain, rule out acute coronary syndrome.\n\n"
        "PLAN:\nECG, troponin, aspirin 325 mg."
    )


@pytest.fixture
def mock_response() -> Callable[..., MagicMock]:
    """Build a requests.Response stand-in."""

    def _make(status_code: int = 200, payload: Any = None, text: str = "") -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = payload
        response.text = text or (json.dumps(payload) if payload is not None else "")
        response.content = response.text.encode()
        return response

    return _make
