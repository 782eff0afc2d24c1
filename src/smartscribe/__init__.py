"""
SmartScribe

Live clinical transcription with speaker attribution, SOAP note generation
and transcript export.

Usage:
    from smartscribe import TranscriptionSession, load_config

    config = load_config("smartscribe.yaml")
    session = TranscriptionSession.from_config(config)
    await session.start(lambda segment: print(segment.format()))
    ...
    await session.stop()
"""

__version__ = "0.1.0"

from smartscribe.transcription.session import TranscriptionSession
from smartscribe.transcription.transcript_types import TranscriptSegment
from smartscribe.config import ScribeConfig, load_config

__all__ = [
    "ScribeConfig",
    "TranscriptSegment",
    "TranscriptionSession",
    "load_config",
    "__version__",
]
