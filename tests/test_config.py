"""
Tests for application configuration.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

from pathlib import Path

import pytest
import yaml

from smartscribe.config import ScribeConfig, load_config


class TestScribeConfig:
    """Tests for ScribeConfig class."""

    def test_default_config(self):
        """Test defaults match the streaming backend."""
        config = ScribeConfig()

        assert config.stream.model == "nova-2-medical"
        assert config.capture.sample_rate == config.stream.sample_rate == 16000
        assert config.speakers == {0: "Doctor", 1: "Patient"}
        assert config.summary.model == "gemini-2.0-flash"

    def test_from_dict(self):
        """Test config creation from dictionary."""
        config = ScribeConfig.from_dict({
            "name": "clinic-a",
            "export_dir": "/tmp/out",
            "stream": {"model": "nova-2", "endpointing_ms": 500, "unknown": 1},
            "speakers": {"0": "Dr. A", "1": "Mrs. B"},
            "summary": {"temperature": 0.1},
            "records": {"url": "https://demo.supabase.co"},
        })

        assert config.name == "clinic-a"
        assert config.export_dir == "/tmp/out"
        assert config.stream.model == "nova-2"
        assert config.stream.endpointing_ms == 500
        assert config.speakers == {0: "Dr. A", 1: "Mrs. B"}
        assert config.summary.temperature == 0.1
        assert config.records.url == "https://demo.supabase.co"

    def test_capture_follows_stream_format(self):
        """Test capture format is forced to the negotiated stream format."""
        config = ScribeConfig.from_dict({
            "capture": {"sample_rate": 44100, "channels": 2, "blocksize": 2048},
            "stream": {"sample_rate": 16000, "channels": 1},
        })

        assert config.capture.sample_rate == 16000
        assert config.capture.channels == 1
        assert config.capture.blocksize == 2048

    def test_to_dict_hides_secrets(self):
        """Test API keys are omitted unless requested."""
        config = ScribeConfig.from_dict({"stream": {"api_key": "dg-key"}})

        assert "api_key" not in config.to_dict()["stream"]
        assert config.to_dict(include_secrets=True)["stream"]["api_key"] == "dg-key"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_yaml(self, tmp_path: Path):
        """Test loading from YAML file."""
        path = tmp_path / "smartscribe.yaml"
        path.write_text(yaml.safe_dump({"name": "yaml-test", "speakers": {0: "Clinician"}}))

        config = load_config(path)

        assert config.name == "yaml-test"
        assert config.speakers == {0: "Clinician"}

    def test_empty_file(self, tmp_path: Path):
        """Test an empty file yields defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path).name == "smartscribe"

    def test_missing_file(self, tmp_path: Path):
        """Test missing file error."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")
