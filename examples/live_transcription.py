#!/usr/bin/env python3
"""
Live Transcription Example

Records a consultation from the default microphone, prints segments as
they are recognized and exports the transcript when finished.

Usage:
    python examples/live_transcription.py [--duration 30] [--mrn MRN-1]

Requirements:
    - DEEPGRAM_API_KEY environment variable set
    - Microphone connected
"""

import argparse
import asyncio

from smartscribe.capture import AudioCapture
from smartscribe.records import PatientInfo
from smartscribe.transcription import (
    DeepgramStreamConfig,
    TranscriptSegment,
    TranscriptionSession,
    export_transcript,
)


def list_devices():
    """List available audio input devices."""
    devices = AudioCapture.list_devices()

    if not devices:
        print("No audio input devices found")
        return

    print("Available audio input devices:")
    print("-" * 50)
    for device in devices:
        print(f"  [{device['index']}] {device['name']}")
        print(f"      Channels: {device['channels']}, Sample Rate: {device['sample_rate']} Hz")
    print()


def show(segment: TranscriptSegment):
    if segment.is_final:
        print(segment.format())
    else:
        print(f"  ... {segment.speaker}: {segment.text}", end="\r")


async def record(duration: float, speakers: dict[int, str]) -> TranscriptionSession:
    session = TranscriptionSession(
        stream_config=DeepgramStreamConfig.from_env(),
        speaker_labels=speakers,
        on_stream_closed=lambda reason: print(f"\nConnection lost: {reason}"),
    )

    await session.start(show)
    try:
        await asyncio.sleep(duration)
    finally:
        await session.stop()
    return session


def main():
    parser = argparse.ArgumentParser(description="Live consultation transcription")
    parser.add_argument("--duration", "-d", type=float, default=30.0,
                        help="Recording duration in seconds")
    parser.add_argument("--name", help="Patient name")
    parser.add_argument("--mrn", help="Medical record number")
    parser.add_argument("--doctor", default="Doctor", help="Label for speaker 0")
    parser.add_argument("--patient", default="Patient", help="Label for speaker 1")
    parser.add_argument("--list-devices", action="store_true",
                        help="List audio devices and exit")
    args = parser.parse_args()

    if args.list_devices:
        list_devices()
        return

    print("=" * 60)
    print("SmartScribe Live Transcription")
    print("=" * 60)
    print(f"Duration: {args.duration}s")
    print("Speak now. Press Ctrl+C to stop early.")
    print("-" * 60)

    try:
        session = asyncio.run(record(args.duration, {0: args.doctor, 1: args.patient}))
    except KeyboardInterrupt:
        print("\n\nRecording cancelled by user.")
        return

    print("-" * 60)
    print(f"Duration: {session.get_formatted_duration()}, "
          f"{len(session.get_transcript())} segments")

    path = export_transcript(session, PatientInfo(name=args.name, mrn=args.mrn))
    if path:
        print(f"Transcript saved to: {path}")


if __name__ == "__main__":
    main()
