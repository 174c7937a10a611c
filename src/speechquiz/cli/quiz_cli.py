# -*- coding: utf-8 -*-
"""CLI commands for checking audio, recognition and answers without the GUI."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from speechquiz.config import load_config
from speechquiz.constants import DEFAULT_SETTINGS_FILE
from speechquiz.core.matcher import evaluate_answer
from speechquiz.diagnose import run_diagnostics
from speechquiz.pipeline.audio_recorder import list_input_devices
from speechquiz.pipeline.recognizer import RecognitionError, SpeechRecognizer

app = typer.Typer(help="Speech quiz helper commands")
logger = logging.getLogger(__name__)


@app.command()
def devices() -> None:
    """List microphones usable for recording."""
    found = list_input_devices()
    if not found:
        typer.echo("No input devices found (is sounddevice/PortAudio installed?)")
        raise typer.Exit(1)
    for device in found:
        typer.echo(
            f"[{device['index']}] {device['name']} "
            f"({device['channels']} ch, {device['default_samplerate']:.0f} Hz)"
        )


@app.command()
def check(
    text: str = typer.Argument(..., help="Transcribed answer"),
    target: str = typer.Option("a", help="Letter the answer must contain"),
) -> None:
    """Print 'success' or 'retry' for a transcription."""
    typer.echo(evaluate_answer(text, target).value)


@app.command()
def transcribe(
    audio_path: Path = typer.Argument(..., help="WAV/FLAC/AIFF file to transcribe"),
    settings: Path = typer.Option(Path(DEFAULT_SETTINGS_FILE), help="Settings JSON"),
    provider: str = typer.Option(None, help="Override provider: google, sphinx, openai"),
    verbose: bool = typer.Option(False, help="Verbose output"),
) -> None:
    """Run the configured recognizer on an audio file."""
    if verbose:
        logging.basicConfig(level=logging.INFO)

    config = load_config(settings)
    if provider:
        config["speech_to_text"]["provider"] = provider
    recognizer = SpeechRecognizer.from_config(config)

    try:
        for result in recognizer.recognize(audio_path):
            prefix = "final" if result.is_final else "partial"
            typer.echo(f"{prefix}: {result.text}")
    except RecognitionError as e:
        typer.echo(f"Recognition failed: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def diagnose(
    settings: Path = typer.Option(Path(DEFAULT_SETTINGS_FILE), help="Settings JSON"),
    output: Path = typer.Option(None, help="Also write the report to this file"),
) -> None:
    """Print a JSON report of audio backends, devices and the recognizer."""
    report = run_diagnostics(settings)
    text = json.dumps(report, indent=2)
    typer.echo(text)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
    if report["status"] == "error":
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
