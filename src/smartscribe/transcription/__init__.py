"""
Transcription Module

Live speech-to-text sessions against the Deepgram streaming API.
"""

from smartscribe.transcription.transcript_types import (
    SpeakerLabels,
    TranscriptObserver,
    TranscriptSegment,
)
from smartscribe.transcription.deepgram_stream import DeepgramStream, DeepgramStreamConfig
from smartscribe.transcription.session import TranscriptionSession
from smartscribe.transcription.export import export_transcript

__all__ = [
    "DeepgramStream",
    "DeepgramStreamConfig",
    "SpeakerLabels",
    "TranscriptObserver",
    "TranscriptSegment",
    "TranscriptionSession",
    "export_transcript",
]
