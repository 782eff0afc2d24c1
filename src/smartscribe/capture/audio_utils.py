"""
Audio Utilities

Data types and conversion helpers for captured audio frames.
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class AudioChunk:
    """A block of captured audio handed over by the input stream callback."""

    data: np.ndarray
    sample_rate: int
    timestamp_ms: float
    sequence_number: int = 0

    @property
    def duration_ms(self) -> float:
        """Duration of this chunk in milliseconds."""
        return (len(self.data) / self.sample_rate) * 1000

    def to_linear16(self) -> bytes:
        """Encode this chunk as 16-bit little-endian PCM."""
        return float_to_linear16(self.data)


def to_mono(indata: np.ndarray) -> np.ndarray:
    """Collapse a (frames, channels) block to a 1-D float32 signal."""
    if len(indata.shape) > 1:
        data = np.mean(indata, axis=1)
    else:
        data = indata.flatten()
    return data.astype(np.float32)


def float_to_linear16(samples: np.ndarray) -> bytes:
    """Convert float samples in [-1, 1] to 16-bit little-endian PCM bytes.

    Values are clipped first. Negative samples scale by 0x8000 and positive
    samples by 0x7FFF so both extremes map onto the full int16 range.
    """
    clipped = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * 0x8000, clipped * 0x7FFF)
    return scaled.astype("<i2").tobytes()
