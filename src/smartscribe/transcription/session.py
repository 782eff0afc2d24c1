"""
Transcription Session

Live transcription of a consultation: microphone capture, a streaming
connection to the speech backend, and reconciliation of interim and final
recognition results into an append-only transcript.

Usage:
    session = TranscriptionSession(stream_config=DeepgramStreamConfig.from_env())
    await session.start(lambda segment: print(segment.format()))
    ...
    await session.stop()
    print(session.get_formatted_transcript())

The PortAudio callback thread only converts frames and hands them to the
event loop; everything else (sending, receiving, event handling) runs on the
loop that called start().
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping
import asyncio
import json
import logging
import time

from websockets.exceptions import ConnectionClosed, ConnectionClosedError

from smartscribe.capture.audio_capture import AudioCapture, CaptureConfig
from smartscribe.capture.audio_utils import AudioChunk
from smartscribe.errors import StreamConnectionError
from smartscribe.transcription.deepgram_stream import DeepgramStream, DeepgramStreamConfig
from smartscribe.transcription.transcript_types import (
    UNKNOWN_SPEAKER,
    CallbackObserver,
    SpeakerLabels,
    TranscriptObserver,
    TranscriptSegment,
    format_timestamp,
    format_transcript,
)

if TYPE_CHECKING:
    from smartscribe.config import ScribeConfig

logger = logging.getLogger(__name__)

StreamFactory = Callable[[DeepgramStreamConfig], Awaitable[DeepgramStream]]


class TranscriptionSession:
    """Owns the microphone, audio forwarding and backend connection of one recording.

    Lifecycle is Idle -> Capturing -> Idle. A second start() while capturing
    and a stop() while idle are no-ops that log a warning.
    """

    def __init__(
        self,
        stream_config: DeepgramStreamConfig | None = None,
        capture: AudioCapture | None = None,
        speaker_labels: Mapping[int | str, str] | None = None,
        stream_factory: StreamFactory | None = None,
        on_stream_closed: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize a session.

        Args:
            stream_config: Backend connection parameters.
            capture: Microphone capture; defaults to mono input at the
                stream's sample rate.
            speaker_labels: Diarization id to name map (default Doctor/Patient).
            stream_factory: Coroutine opening the backend connection.
            on_stream_closed: Called with a reason when the backend connection
                ends while the session is still capturing.
            clock: Monotonic clock in seconds.
        """
        self.stream_config = stream_config or DeepgramStreamConfig()
        self._capture = capture or AudioCapture(
            CaptureConfig(
                sample_rate=self.stream_config.sample_rate,
                channels=self.stream_config.channels,
            )
        )
        self._speakers = SpeakerLabels(speaker_labels)
        self._stream_factory = stream_factory or DeepgramStream.connect
        self._on_stream_closed = on_stream_closed
        self._clock = clock

        self._observer: TranscriptObserver | None = None
        self._transcript: list[TranscriptSegment] = []
        self._start_time: float | None = None
        self._stop_time: float | None = None
        self._is_recording = False
        self._is_starting = False

        self._stream: DeepgramStream | None = None
        self._stream_open = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._frames: asyncio.Queue[bytes] | None = None
        self._sender: asyncio.Task | None = None
        self._receiver: asyncio.Task | None = None

    @classmethod
    def from_config(cls, config: "ScribeConfig", **kwargs: Any) -> "TranscriptionSession":
        """Create a session from the application configuration."""
        kwargs.setdefault("capture", AudioCapture(config.capture))
        kwargs.setdefault("speaker_labels", config.speakers)
        return cls(stream_config=config.stream, **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(
        self, observer: TranscriptObserver | Callable[[TranscriptSegment], None]
    ) -> None:
        """Open the microphone and the backend connection, then begin streaming.

        Raises:
            MicrophonePermissionError: microphone access was denied.
            MicrophoneNotFoundError: no input device is available.
            CaptureError: any other capture failure.
            StreamConnectionError: the backend could not be reached.
        """
        if self._is_recording or self._is_starting:
            logger.warning("Already recording")
            return

        if not hasattr(observer, "on_transcript_update"):
            observer = CallbackObserver(observer)

        self._is_starting = True
        try:
            self._observer = observer
            self._transcript = []
            self._start_time = None
            self._stop_time = None
            self._loop = asyncio.get_running_loop()
            self._frames = asyncio.Queue()

            self._capture.open()

            try:
                self._stream = await self._stream_factory(self.stream_config)
            except BaseException as e:
                # Also reached when start() is cancelled mid-handshake.
                self._release_capture()
                if isinstance(e, StreamConnectionError) or not isinstance(e, Exception):
                    raise
                raise StreamConnectionError(f"Failed to connect to speech backend: {e}") from e
            self._stream_open = True

            try:
                self._capture.start(self._on_audio_chunk)
            except BaseException:
                self._release_capture()
                await self._close_stream()
                raise

            self._start_time = self._clock()
            self._is_recording = True
            self._sender = asyncio.create_task(self._forward_audio())
            self._receiver = asyncio.create_task(self._receive_events())
        finally:
            self._is_starting = False

        logger.info("Recording started")

    async def stop(self) -> None:
        """Release all recording resources.

        Order: halt audio forwarding, stop the audio stream, release the
        device, send CloseStream, close the connection. Each step runs even
        when an earlier one fails.
        """
        if not self._is_recording:
            logger.warning("Not currently recording")
            return

        self._is_recording = False
        self._stop_time = self._clock()

        if self._sender is not None:
            self._sender.cancel()
            try:
                await self._sender
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning("Audio forwarding ended with error: %s", e)
            self._sender = None

        self._release_capture()
        await self._close_stream()

        if self._receiver is not None:
            try:
                await asyncio.wait_for(
                    self._receiver, timeout=self.stream_config.close_timeout
                )
            except asyncio.TimeoutError:
                logger.warning("Timed out waiting for the backend to finish")
            except Exception as e:
                logger.warning("Event receiver ended with error: %s", e)
            self._receiver = None

        self._frames = None
        logger.info("Recording stopped (%d final segments)", len(self._transcript))

    def _release_capture(self) -> None:
        try:
            self._capture.stop()
        except Exception as e:
            logger.warning("Failed to stop audio stream: %s", e)

        try:
            self._capture.close()
        except Exception as e:
            logger.warning("Failed to release microphone: %s", e)

    async def _close_stream(self) -> None:
        stream, self._stream = self._stream, None
        self._stream_open = False
        if stream is None:
            return

        try:
            await stream.close_stream()
        except Exception as e:
            logger.warning("Failed to send CloseStream: %s", e)

        try:
            await stream.close()
        except Exception as e:
            logger.warning("Failed to close backend connection: %s", e)

    # ------------------------------------------------------------------
    # Audio forwarding
    # ------------------------------------------------------------------

    def _on_audio_chunk(self, chunk: AudioChunk) -> None:
        """Runs on the PortAudio thread."""
        loop, frames = self._loop, self._frames
        if loop is None or frames is None:
            return

        try:
            loop.call_soon_threadsafe(frames.put_nowait, chunk.to_linear16())
        except RuntimeError:
            logger.debug("Event loop closed, dropping audio frame")

    async def _forward_audio(self) -> None:
        while True:
            frame = await self._frames.get()
            stream = self._stream
            if stream is None or not self._stream_open:
                continue

            try:
                await stream.send_audio(frame)
            except ConnectionClosed as e:
                self._stream_open = False
                logger.error("Speech backend connection closed, audio no longer forwarded: %s", e)
            except Exception as e:
                self._stream_open = False
                logger.error("Failed to send audio, audio no longer forwarded: %s", e)

    # ------------------------------------------------------------------
    # Recognition events
    # ------------------------------------------------------------------

    async def _receive_events(self) -> None:
        stream = self._stream
        reason = "closed by server"

        try:
            async for message in stream:
                try:
                    self.handle_event(message)
                except Exception:
                    logger.exception("Transcript observer failed")
        except ConnectionClosedError as e:
            reason = f"connection error: {e}"
            logger.error("Speech backend connection dropped: %s", e)
        except Exception as e:
            reason = f"receive error: {e}"
            logger.error("Error receiving from speech backend: %s", e)
        finally:
            self._stream_open = False

        if self._is_recording:
            logger.warning("Speech backend closed while recording (%s)", reason)
            if self._on_stream_closed is not None:
                self._on_stream_closed(reason)

    def handle_event(
        self, message: str | bytes | dict[str, Any]
    ) -> TranscriptSegment | None:
        """Process one recognition event from the backend.

        Final segments are appended to the transcript. Every segment, interim
        or final, is passed to the observer. Events without text are ignored
        and malformed events are logged and dropped.
        """
        try:
            data = json.loads(message) if isinstance(message, (str, bytes)) else message
            segment = self._parse_event(data)
        except (ValueError, TypeError, AttributeError, KeyError, IndexError) as e:
            logger.warning("Dropping malformed recognition event: %s", e)
            return None

        if segment is None:
            return None

        if segment.is_final:
            self._transcript.append(segment)
            logger.debug("%s", segment.format())

        if self._observer is not None:
            self._observer.on_transcript_update(segment)

        return segment

    def _parse_event(self, data: dict[str, Any]) -> TranscriptSegment | None:
        channel = data.get("channel")
        if not isinstance(channel, dict):
            return None

        alternatives = channel.get("alternatives") or []
        if not alternatives:
            return None

        alternative = alternatives[0]
        text = alternative.get("transcript") or ""
        if not text.strip():
            return None

        speaker = UNKNOWN_SPEAKER
        words = alternative.get("words") or []
        if words and words[0].get("speaker") is not None:
            speaker = self._speakers.resolve(int(words[0]["speaker"]))

        return TranscriptSegment(
            speaker=speaker,
            text=text,
            timestamp=format_timestamp(self.get_duration()),
            is_final=bool(data.get("is_final", False)),
            confidence=alternative.get("confidence") or 0.0,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_transcript(self) -> list[TranscriptSegment]:
        """Final segments in the order they were committed (a copy)."""
        return list(self._transcript)

    def get_formatted_transcript(self) -> str:
        """Transcript as "[MM:SS] speaker: text" blocks separated by a blank line."""
        return format_transcript(self._transcript)

    def clear_transcript(self) -> None:
        self._transcript = []

    def set_speaker_labels(self, labels: Mapping[int | str, str]) -> None:
        """Replace the speaker map. Committed segments keep their labels."""
        self._speakers = SpeakerLabels(labels)

    @property
    def speaker_labels(self) -> dict[int, str]:
        return self._speakers.to_dict()

    def is_active(self) -> bool:
        return self._is_recording

    def get_duration(self) -> int:
        """Milliseconds since start (frozen at stop); 0 if never started."""
        if self._start_time is None:
            return 0
        end = self._stop_time if self._stop_time is not None else self._clock()
        return max(int((end - self._start_time) * 1000), 0)

    def get_formatted_duration(self) -> str:
        return format_timestamp(self.get_duration())
