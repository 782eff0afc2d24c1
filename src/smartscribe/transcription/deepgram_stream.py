"""
Deepgram Streaming Client

Persistent WebSocket connection to the Deepgram live transcription API.

The client sends binary linear16 frames and receives JSON recognition
events of the form:

    {"is_final": bool,
     "channel": {"alternatives": [{"transcript": str,
                                   "confidence": float,
                                   "words": [{"speaker": int, ...}]}]}}

A {"type": "CloseStream"} text message asks the server to flush pending
results before the socket is closed.
"""

from dataclasses import dataclass
from typing import AsyncIterator
from urllib.parse import urlencode
import json
import logging
import os

import websockets
from smartscribe.errors import StreamConnectionError

logger = logging.getLogger(__name__)

CLOSE_STREAM_MESSAGE = json.dumps({"type": "CloseStream"})


def _flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass
class DeepgramStreamConfig:
    """Negotiated parameters for a live transcription connection."""

    api_key: str | None = None
    url: str = "wss://api.deepgram.com/v1/listen"
    model: str = "nova-2-medical"
    language: str = "en-US"
    punctuate: bool = True
    diarize: bool = True
    utterances: bool = True
    smart_format: bool = True
    interim_results: bool = True
    endpointing_ms: int = 300  # silence before an utterance is finalized
    encoding: str = "linear16"
    sample_rate: int = 16000
    channels: int = 1
    open_timeout: float = 10.0
    close_timeout: float = 5.0

    @classmethod
    def from_env(cls) -> "DeepgramStreamConfig":
        """Create configuration from environment variables."""
        return cls(
            api_key=os.environ.get("DEEPGRAM_API_KEY"),
            url=os.environ.get("DEEPGRAM_URL", "wss://api.deepgram.com/v1/listen"),
            model=os.environ.get("DEEPGRAM_MODEL", "nova-2-medical"),
            language=os.environ.get("DEEPGRAM_LANGUAGE", "en-US"),
        )

    def query_params(self) -> dict[str, str]:
        """Query string parameters for the listen endpoint."""
        return {
            "model": self.model,
            "language": self.language,
            "punctuate": _flag(self.punctuate),
            "diarize": _flag(self.diarize),
            "utterances": _flag(self.utterances),
            "smart_format": _flag(self.smart_format),
            "interim_results": _flag(self.interim_results),
            "endpointing": str(self.endpointing_ms),
            "encoding": self.encoding,
            "sample_rate": str(self.sample_rate),
            "channels": str(self.channels),
        }

    def build_url(self) -> str:
        """Full WebSocket URL including the negotiated parameters."""
        return f"{self.url}?{urlencode(self.query_params())}"


class DeepgramStream:
    """One live transcription connection."""

    def __init__(self, config: DeepgramStreamConfig | None = None):
        self.config = config or DeepgramStreamConfig()
        self.api_key = self.config.api_key or os.environ.get("DEEPGRAM_API_KEY")
        self._connection = None

    @classmethod
    async def connect(cls, config: DeepgramStreamConfig | None = None) -> "DeepgramStream":
        """Open a connection and return the ready stream."""
        stream = cls(config)
        await stream.open()
        return stream

    @property
    def _headers(self) -> dict[str, str]:
        """Handshake headers."""
        if not self.api_key:
            return {}
        return {"Authorization": f"Token {self.api_key}"}

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    async def open(self) -> None:
        """Perform the WebSocket handshake.

        Raises StreamConnectionError when the backend is unreachable or
        rejects the handshake.
        """
        if not self.api_key:
            raise StreamConnectionError(
                "Deepgram API key required. "
                "Set DEEPGRAM_API_KEY environment variable or pass api_key in config."
            )

        try:
            self._connection = await websockets.connect(
                self.config.build_url(),
                additional_headers=self._headers,
                open_timeout=self.config.open_timeout,
                close_timeout=self.config.close_timeout,
            )
        except Exception as e:
            raise StreamConnectionError(f"Failed to connect to Deepgram: {e}") from e

        logger.info("Connected to Deepgram (model=%s)", self.config.model)

    async def send_audio(self, frame: bytes) -> None:
        """Send one binary PCM frame."""
        if self._connection is None:
            return
        await self._connection.send(frame)

    async def close_stream(self) -> None:
        """Ask the server to flush and finish the stream."""
        if self._connection is None:
            return
        await self._connection.send(CLOSE_STREAM_MESSAGE)

    async def close(self) -> None:
        """Close the WebSocket. Safe to call repeatedly."""
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        await connection.close()
        logger.info("Deepgram connection closed")

    async def events(self) -> AsyncIterator[str]:
        """Yield text messages until the server closes the connection.

        A normal close ends the iteration; an abnormal close raises
        websockets.exceptions.ConnectionClosedError.
        """
        connection = self._connection
        if connection is None:
            return
        async for message in connection:
            if isinstance(message, bytes):
                continue
            yield message

    def __aiter__(self) -> AsyncIterator[str]:
        return self.events()


__all__ = [
    "CLOSE_STREAM_MESSAGE",
    "DeepgramStream",
    "DeepgramStreamConfig",
]
