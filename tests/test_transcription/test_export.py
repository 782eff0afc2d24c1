"""
Tests for transcript export.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

import asyncio
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from smartscribe.records.record_types import PatientInfo
from smartscribe.transcription.export import (
    export_filename,
    export_transcript,
    render_transcript_export,
)
from smartscribe.transcription.session import TranscriptionSession


NOW = datetime(2024, 3, 5, 14, 30, 15)


@pytest.fixture
def recorded_session(fake_capture, fake_clock, make_stream_factory, make_event):
    """A stopped session with two committed segments and 1:05 of audio."""
    factory, _ = make_stream_factory()
    session = TranscriptionSession(
        capture=fake_capture, stream_factory=factory, clock=fake_clock
    )

    async def run():
        await session.start(MagicMock())
        fake_clock.advance(2)
        session.handle_event(make_event("What brings you in today?", speaker=0))
        fake_clock.advance(3)
        session.handle_event(make_event("Chest pain.", speaker=1))
        fake_clock.advance(60)
        await session.stop()

    asyncio.run(run())
    return session


class TestRenderTranscriptExport:
    """Tests for the export document layout."""

    def test_document(self):
        """Test header, transcript body and footer."""
        text = render_transcript_export(
            "[00:02] Doctor: Hello.",
            PatientInfo(name="Jane Doe", mrn="MRN-1"),
            "00:10",
            NOW,
        )

        lines = text.splitlines()
        assert lines[0] == "SmartScribe - Consultation Transcript"
        assert lines[1] == "=" * 46
        assert "Patient: Jane Doe" in lines
        assert "MRN: MRN-1" in lines
        assert "Date: 2024-03-05" in lines
        assert "Time: 14:30:15" in lines
        assert "Duration: 00:10" in lines
        assert "[00:02] Doctor: Hello." in lines
        assert lines[-1] == "Generated by SmartScribe"

    def test_unknown_patient(self):
        """Test missing patient details."""
        text = render_transcript_export("[00:00] Doctor: Hi.", PatientInfo(), "00:00", NOW)

        assert "Patient: Unknown" in text
        assert "MRN: Unknown" in text


class TestExportTranscript:
    """Tests for writing export files."""

    def test_filename(self):
        """Test name includes MRN and epoch milliseconds."""
        name = export_filename(PatientInfo(mrn="MRN-1"), NOW)

        assert name == f"transcript-MRN-1-{int(NOW.timestamp() * 1000)}.txt"

    def test_filename_without_mrn(self):
        """Test fallback name segment."""
        assert export_filename(PatientInfo(), NOW).startswith("transcript-unknown-")

    def test_export(self, recorded_session: TranscriptionSession, tmp_path: Path):
        """Test the written file contains the session transcript."""
        path = export_transcript(
            recorded_session, PatientInfo(name="Jane Doe", mrn="MRN-1"), tmp_path, NOW
        )

        assert path is not None
        assert path.parent == tmp_path
        content = path.read_text()
        assert "Duration: 01:05" in content
        assert (
            "[00:02] Doctor: What brings you in today?\n\n[00:05] Patient: Chest pain."
            in content
        )

    def test_export_creates_directory(self, recorded_session, tmp_path: Path):
        """Test missing output directories are created."""
        path = export_transcript(recorded_session, PatientInfo(), tmp_path / "out", NOW)

        assert path.exists()

    def test_empty_transcript_writes_nothing(self, fake_capture, tmp_path: Path):
        """Test nothing is exported without final segments."""
        session = TranscriptionSession(capture=fake_capture)

        assert export_transcript(session, PatientInfo(mrn="MRN-1"), tmp_path) is None
        assert list(tmp_path.iterdir()) == []
