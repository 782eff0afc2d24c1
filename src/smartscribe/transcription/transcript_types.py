"""
Transcript Data Types

Data models for live transcription results.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Callable


DEFAULT_SPEAKER_LABELS: dict[int, str] = {0: "Doctor", 1: "Patient"}
UNKNOWN_SPEAKER = "Unknown"


def format_timestamp(ms: float) -> str:
    """Format a millisecond offset as MM:SS."""
    total_seconds = int(max(ms, 0) // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


@dataclass
class TranscriptSegment:
    """One utterance, as seen by the observer or committed to the transcript."""

    speaker: str
    text: str
    timestamp: str
    is_final: bool = False
    confidence: float = 0.0

    def format(self) -> str:
        """Render as "[MM:SS] speaker: text"."""
        return f"[{self.timestamp}] {self.speaker}: {self.text}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "speaker": self.speaker,
            "text": self.text,
            "timestamp": self.timestamp,
            "isFinal": self.is_final,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranscriptSegment":
        """Create from dictionary."""
        return cls(
            speaker=data.get("speaker", UNKNOWN_SPEAKER),
            text=data["text"],
            timestamp=data.get("timestamp", "00:00"),
            is_final=data.get("isFinal", data.get("is_final", True)),
            confidence=data.get("confidence") or 0.0,
        )


def format_transcript(segments: list[TranscriptSegment], separator: str = "\n\n") -> str:
    """Join segments as "[MM:SS] speaker: text" lines."""
    return separator.join(segment.format() for segment in segments)


class SpeakerLabels:
    """Maps backend diarization ids to display names."""

    def __init__(self, labels: Mapping[int | str, str] | None = None):
        if labels is None:
            labels = DEFAULT_SPEAKER_LABELS
        self._labels = {int(k): v for k, v in labels.items()}

    def resolve(self, speaker_id: int) -> str:
        """Name for a speaker id; unmapped ids become "Speaker N"."""
        return self._labels.get(speaker_id, f"Speaker {speaker_id}")

    def to_dict(self) -> dict[int, str]:
        return dict(self._labels)


class TranscriptObserver(Protocol):
    """Receives every interim and final segment in backend delivery order."""

    def on_transcript_update(self, segment: TranscriptSegment) -> None:
        ...


class CallbackObserver:
    """Adapts a plain function to the TranscriptObserver interface."""

    def __init__(self, callback: Callable[[TranscriptSegment], None]):
        self._callback = callback

    def on_transcript_update(self, segment: TranscriptSegment) -> None:
        self._callback(segment)
