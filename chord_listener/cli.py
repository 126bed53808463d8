"""Command-line interface for Chord Listener.

Provides commands for:
- listen: Record from the microphone and identify the chord
- analyze: Identify the chord in an audio file
- chords: Identify chords from note names
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .core import (
    DEFAULT_CAPTURE_SECONDS,
    AnalysisConfig,
    ChordListenerError,
    InferenceUnavailable,
    Note,
)
from .inference import ChordRanking, load_scorer

app = typer.Typer(
    name="chord-listener",
    help="Audio to notes and chords",
    rich_markup_mode="markdown",
)
console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _build_config(ensemble: bool) -> AnalysisConfig:
    return AnalysisConfig(blend_mode="ensemble" if ensemble else "fallback")


def _load_model(model: Optional[str]):
    """Load the chord model, or continue without one."""
    if model is None:
        return None
    try:
        return load_scorer(model)
    except InferenceUnavailable as e:
        err_console.print(f"[yellow]Warning: {escape(str(e))}. Using rule-based recognition only.[/yellow]")
        return None


def _report(notes: List[Note], ranking: ChordRanking, top: int, json_output: bool) -> None:
    if json_output:
        payload = {
            "notes": [
                {"name": n.name, "frequency": round(n.frequency, 2)} for n in notes
            ],
            "source": ranking.source,
            "chords": [
                {"symbol": r.symbol, "score": round(r.score, 4), "source": r.source}
                for r in ranking.chords[:top]
            ],
        }
        if ranking.inference_error is not None:
            payload["inference_error"] = str(ranking.inference_error)
        typer.echo(json.dumps(payload, indent=2))
        return

    _show_notes_table(notes)
    if not ranking.chords:
        console.print("[yellow]No chord matched these notes.[/yellow]")
        return
    _show_chords_table(ranking, top)
    console.print(f"\n[green]Chord: {ranking.top.symbol}[/green]")


def _identify(notes: List[Note], model: Optional[str], ensemble: bool) -> ChordRanking:
    from .pipeline import identify_chord

    return identify_chord(notes, scorer=_load_model(model), config=_build_config(ensemble))


@app.command()
def listen(
    seconds: float = typer.Argument(
        DEFAULT_CAPTURE_SECONDS, help="Recording length in seconds (>= 0.2)"
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Chord model (.npz), or 'templates' for the baseline"
    ),
    ensemble: bool = typer.Option(
        False, "--ensemble", help="Always blend model scores with the rule-based ranking"
    ),
    top: int = typer.Option(5, "--top", "-n", help="Number of chord candidates to show"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Record from the default microphone and identify the chord.

    **Examples:**

        chord-listener listen

        chord-listener listen 2.5 --model templates
    """
    from .pipeline import capture_notes

    _setup_logging(verbose)
    config = _build_config(ensemble)

    try:
        if not json_output:
            console.print(f"[cyan]Listening for {seconds:.1f}s...[/cyan]")
        notes = capture_notes(seconds, config=config)
        ranking = _identify(notes, model, ensemble)
    except ChordListenerError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    _report(notes, ranking, top, json_output)


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    offset: float = typer.Option(0.0, "--offset", help="Start this many seconds in"),
    duration: Optional[float] = typer.Option(
        None, "--duration", "-d", help="Analyze at most this many seconds"
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Chord model (.npz), or 'templates' for the baseline"
    ),
    ensemble: bool = typer.Option(
        False, "--ensemble", help="Always blend model scores with the rule-based ranking"
    ),
    top: int = typer.Option(5, "--top", "-n", help="Number of chord candidates to show"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Identify the notes and chord in an audio file.

    **Examples:**

        chord-listener analyze chord.wav

        chord-listener analyze song.mp3 --offset 12 --duration 2
    """
    from .pipeline import notes_from_file

    _setup_logging(verbose)

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        notes = notes_from_file(
            input_file, offset=offset, duration=duration, config=_build_config(ensemble)
        )
        ranking = _identify(notes, model, ensemble)
    except (ChordListenerError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    _report(notes, ranking, top, json_output)


@app.command()
def chords(
    notes: List[str] = typer.Argument(..., help="Note names, e.g. C4 E4 G4 Bb4"),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Chord model (.npz), or 'templates' for the baseline"
    ),
    ensemble: bool = typer.Option(
        False, "--ensemble", help="Always blend model scores with the rule-based ranking"
    ),
    top: int = typer.Option(5, "--top", "-n", help="Number of chord candidates to show"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Identify chords from note names."""
    _setup_logging(verbose)

    try:
        parsed = sorted(Note.parse(name) for name in notes)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    _report(parsed, _identify(parsed, model, ensemble), top, json_output)


def _show_notes_table(notes: List[Note]):
    """Display notes in a table."""
    table = Table(title="Detected Notes")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", style="green")

    for note in notes:
        table.add_row(note.name, f"{note.frequency:.2f}")

    console.print(table)


def _show_chords_table(ranking: ChordRanking, top: int):
    """Display chord candidates in a table."""
    table = Table(title="Chord Candidates")
    table.add_column("Chord", style="cyan")
    table.add_column("Tones", style="green")
    table.add_column("Score", style="magenta")
    table.add_column("Source", style="yellow")

    for ranked in ranking.chords[:top]:
        table.add_row(
            ranked.symbol,
            " ".join(p.label for p in ranked.chord.pitch_classes),
            f"{ranked.score:.2f}",
            ranked.source,
        )

    console.print(table)
    if ranking.inference_error is not None:
        console.print(f"[yellow]Model skipped: {escape(str(ranking.inference_error))}[/yellow]")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
