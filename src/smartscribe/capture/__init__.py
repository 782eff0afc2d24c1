"""
Audio Capture Module

Microphone capture and PCM conversion for live transcription.
"""

from smartscribe.capture.audio_capture import AudioCapture, CaptureConfig
from smartscribe.capture.audio_utils import AudioChunk, float_to_linear16

__all__ = [
    "AudioCapture",
    "AudioChunk",
    "CaptureConfig",
    "float_to_linear16",
]
