"""
Command Line Interface

CLI for live consultation transcription and note generation.
"""

from pathlib import Path
from typing import Optional
import asyncio
import json
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from smartscribe import __version__
from smartscribe.capture.audio_capture import AudioCapture
from smartscribe.config import ScribeConfig, load_config
from smartscribe.errors import (
    MicrophoneNotFoundError,
    MicrophonePermissionError,
    ScribeError,
)
from smartscribe.records.record_store import RecordStore
from smartscribe.records.record_types import PatientInfo
from smartscribe.summary.gemini_client import GeminiClient
from smartscribe.summary.summary_types import SOAPNote
from smartscribe.transcription.export import export_transcript
from smartscribe.transcription.session import TranscriptionSession
from smartscribe.transcription.transcript_types import TranscriptSegment

app = typer.Typer(
    name="smartscribe",
    help="Live clinical transcription and SOAP note generation",
    add_completion=False,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(config: Optional[Path]) -> ScribeConfig:
    if config:
        return load_config(config)
    return ScribeConfig()


class ConsoleObserver:
    """Prints final segments and the latest interim text."""

    def __init__(self, out: Console):
        self.out = out

    def on_transcript_update(self, segment: TranscriptSegment) -> None:
        if segment.is_final:
            self.out.print(
                f"[dim]{segment.timestamp}[/dim] [bold]{segment.speaker}[/bold]: {segment.text}"
            )
        else:
            self.out.print(
                f"[dim]{segment.speaker} is speaking: {segment.text}...[/dim]",
                end="\r",
            )


def _print_soap(note: SOAPNote) -> None:
    for title, body in (
        ("Subjective", note.subjective),
        ("Objective", note.objective),
        ("Assessment", note.assessment),
        ("Plan", note.plan),
    ):
        console.print(Panel(body or "Not documented", title=title, title_align="left"))


async def _run_session(session: TranscriptionSession, duration: Optional[float]) -> None:
    await session.start(ConsoleObserver(console))
    try:
        if duration:
            await asyncio.sleep(duration)
        else:
            await asyncio.Event().wait()
    finally:
        await session.stop()


@app.command()
def record(
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Patient name"),
    mrn: Optional[str] = typer.Option(None, "--mrn", "-m", help="Medical record number"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    duration: Optional[float] = typer.Option(
        None, "--duration", "-d", help="Stop after this many seconds (default: Ctrl+C)"
    ),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Export directory"),
    export: bool = typer.Option(True, "--export/--no-export", help="Write transcript file"),
    summarize: bool = typer.Option(False, "--summarize", "-s", help="Generate a SOAP note"),
    save: bool = typer.Option(False, "--save", help="Save transcript to the record store"),
    email: Optional[str] = typer.Option(None, "--email", envvar="SMARTSCRIBE_EMAIL"),
    password: Optional[str] = typer.Option(None, "--password", envvar="SMARTSCRIBE_PASSWORD"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Record and transcribe a consultation live."""
    _configure_logging(verbose)
    scribe_config = _load(config)
    patient = PatientInfo(name=name, mrn=mrn)
    session = TranscriptionSession.from_config(scribe_config)

    console.print("[bold]Starting recording...[/bold] [dim]Press Ctrl+C to stop.[/dim]")
    try:
        asyncio.run(_run_session(session, duration))
    except KeyboardInterrupt:
        console.print("\n[yellow]Recording stopped[/yellow]")
    except MicrophonePermissionError:
        console.print("[red]Please allow microphone access[/red]")
        raise typer.Exit(1)
    except MicrophoneNotFoundError:
        console.print("[red]No microphone found[/red]")
        raise typer.Exit(1)
    except ScribeError as e:
        console.print(f"[red]Failed to start: {e}[/red]")
        raise typer.Exit(1)

    segments = session.get_transcript()
    console.print(
        f"\n[dim]{len(segments)} segments, duration {session.get_formatted_duration()}[/dim]"
    )
    if not segments:
        console.print("[yellow]No transcript to export[/yellow]")
        return

    if export:
        path = export_transcript(session, patient, output_dir or Path(scribe_config.export_dir))
        if path:
            console.print(f"[green]Transcript exported to: {path}[/green]")

    if save:
        try:
            store = RecordStore(scribe_config.records)
            store.sign_in(email or "", password or "")
            store.save_transcript(patient, segments, session.get_duration() / 1000)
            console.print("[green]Transcript saved[/green]")
        except (ScribeError, ValueError) as e:
            console.print(f"[red]Error saving transcript: {e}[/red]")

    if summarize:
        try:
            client = GeminiClient(scribe_config.summary)
            _print_soap(client.generate_summary(segments, patient.to_dict()))
        except (ScribeError, ValueError) as e:
            console.print(f"[red]Error generating summary: {e}[/red]")


@app.command()
def summarize(
    transcript_file: Path = typer.Argument(..., help="Transcript JSON file"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Patient name"),
    mrn: Optional[str] = typer.Option(None, "--mrn", "-m", help="Medical record number"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    recommendations: bool = typer.Option(
        False, "--recommendations", "-r", help="Also generate recommendations"
    ),
    sidebar: bool = typer.Option(False, "--sidebar", help="Print structured sidebar JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate a SOAP note from a saved transcript."""
    _configure_logging(verbose)

    if not transcript_file.exists():
        console.print(f"[red]Error: File not found: {transcript_file}[/red]")
        raise typer.Exit(1)

    data = json.loads(transcript_file.read_text())
    if isinstance(data, dict):
        data = data.get("transcript", [])
    segments = [TranscriptSegment.from_dict(item) for item in data]

    if not segments:
        console.print("[yellow]Transcript is empty[/yellow]")
        raise typer.Exit(1)

    scribe_config = _load(config)
    patient_info = PatientInfo(name=name, mrn=mrn).to_dict()
    try:
        client = GeminiClient(scribe_config.summary)
        note = client.generate_summary(segments, patient_info)
        _print_soap(note)

        if recommendations:
            recs = client.generate_recommendations(segments, note, patient_info)
            for key, value in recs.to_dict().items():
                console.print(f"[bold]{key.title()}:[/bold] {value}")

        if sidebar:
            console.print_json(data=client.generate_sidebar_data(segments, patient_info))
    except (ScribeError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def devices() -> None:
    """List available audio input devices."""
    devices = AudioCapture.list_devices()

    if not devices:
        console.print("[yellow]No audio input devices found[/yellow]")
        raise typer.Exit(0)

    console.print("[bold]Available audio input devices:[/bold]\n")
    for device in devices:
        console.print(
            f"  [{device['index']}] {device['name']}"
            f"\n      Channels: {device['channels']}, "
            f"Sample Rate: {device['sample_rate']} Hz"
        )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(3001, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
) -> None:
    """Run the companion API server."""
    import uvicorn

    console.print(f"SmartScribe API running on http://{host}:{port}")
    uvicorn.run("smartscribe.server:app", host=host, port=port, reload=reload)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"smartscribe version {__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
