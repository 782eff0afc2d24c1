"""
SmartScribe Configuration

Configuration management for capture, streaming transcription, summarization
and the record store. Secrets left unset in the file are read from the
environment by each client.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

import yaml

from smartscribe.capture.audio_capture import CaptureConfig
from smartscribe.records.record_store import RecordStoreConfig
from smartscribe.summary.gemini_client import GeminiClientConfig
from smartscribe.transcription.deepgram_stream import DeepgramStreamConfig
from smartscribe.transcription.transcript_types import DEFAULT_SPEAKER_LABELS


def _section(cls, data: dict[str, Any] | None):
    """Build a section dataclass, ignoring unknown keys."""
    if not data:
        return cls()
    known = cls.__dataclass_fields__
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ScribeConfig:
    """Complete application configuration."""

    name: str = "smartscribe"
    export_dir: str = "transcripts"

    capture: CaptureConfig = field(default_factory=CaptureConfig)
    stream: DeepgramStreamConfig = field(default_factory=DeepgramStreamConfig)
    speakers: dict[int, str] = field(default_factory=lambda: dict(DEFAULT_SPEAKER_LABELS))
    summary: GeminiClientConfig = field(default_factory=GeminiClientConfig)
    records: RecordStoreConfig = field(default_factory=RecordStoreConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScribeConfig":
        """Create config from dictionary."""
        config = cls()

        if "name" in data:
            config.name = data["name"]
        if "export_dir" in data:
            config.export_dir = data["export_dir"]

        if "capture" in data:
            config.capture = _section(CaptureConfig, data["capture"])
        if "stream" in data:
            config.stream = _section(DeepgramStreamConfig, data["stream"])
        if data.get("speakers"):
            config.speakers = {int(k): str(v) for k, v in data["speakers"].items()}
        if "summary" in data:
            config.summary = _section(GeminiClientConfig, data["summary"])
        if "records" in data:
            config.records = _section(RecordStoreConfig, data["records"])

        # Capture must produce what the stream negotiates
        config.capture.sample_rate = config.stream.sample_rate
        config.capture.channels = config.stream.channels

        return config

    def to_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        """Convert config to dictionary."""
        data = {
            "name": self.name,
            "export_dir": self.export_dir,
            "capture": asdict(self.capture),
            "stream": asdict(self.stream),
            "speakers": dict(self.speakers),
            "summary": asdict(self.summary),
            "records": asdict(self.records),
        }
        if not include_secrets:
            data["stream"].pop("api_key")
            data["summary"].pop("api_key")
            data["records"].pop("anon_key")
        return data


def load_config(config_path: str | Path) -> ScribeConfig:
    """Load configuration from YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return ScribeConfig.from_dict(data)
