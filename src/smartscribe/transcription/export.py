"""
Transcript Export

Plain-text consultation transcript documents.
"""

from datetime import datetime
from pathlib import Path
import logging

from smartscribe.records.record_types import PatientInfo
from smartscribe.transcription.session import TranscriptionSession

logger = logging.getLogger(__name__)

BANNER = "SmartScribe - Consultation Transcript"
FOOTER = "Generated by SmartScribe"
RULE = "=" * 46


def render_transcript_export(
    formatted_transcript: str,
    patient: PatientInfo,
    duration: str,
    now: datetime | None = None,
) -> str:
    """Render the export document body."""
    now = now or datetime.now()
    return (
        f"{BANNER}\n"
        f"{RULE}\n"
        "\n"
        f"Patient: {patient.name or 'Unknown'}\n"
        f"MRN: {patient.mrn or 'Unknown'}\n"
        f"Date: {now.strftime('%Y-%m-%d')}\n"
        f"Time: {now.strftime('%H:%M:%S')}\n"
        f"Duration: {duration}\n"
        "\n"
        "Transcript:\n"
        "-----------\n"
        "\n"
        f"{formatted_transcript}\n"
        "\n"
        f"{RULE}\n"
        f"{FOOTER}\n"
    )


def export_filename(patient: PatientInfo, now: datetime | None = None) -> str:
    """transcript-<mrn>-<epoch ms>.txt"""
    now = now or datetime.now()
    return f"transcript-{patient.mrn or 'unknown'}-{int(now.timestamp() * 1000)}.txt"


def export_transcript(
    session: TranscriptionSession,
    patient: PatientInfo,
    output_dir: str | Path = ".",
    now: datetime | None = None,
) -> Path | None:
    """Write the session transcript to a text file.

    Returns the written path, or None when there is no transcript to export.
    """
    formatted = session.get_formatted_transcript()
    if not formatted.strip():
        logger.warning("No transcript to export")
        return None

    now = now or datetime.now()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    path = output_dir / export_filename(patient, now)
    path.write_text(
        render_transcript_export(formatted, patient, session.get_formatted_duration(), now)
    )
    logger.info("Transcript exported to %s", path)
    return path
