# -*- coding: utf-8 -*-
"""Tests for the diagnostics report."""

from __future__ import annotations

from pathlib import Path

from speechquiz import diagnose
from speechquiz.pipeline import audio_recorder
from speechquiz.pipeline.recognizer import SpeechRecognizer


def test_report_ok_with_device_and_recognizer(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        audio_recorder,
        "list_input_devices",
        lambda: [{"index": 0, "name": "Mic", "channels": 1, "default_samplerate": 48000.0}],
    )
    monkeypatch.setattr(SpeechRecognizer, "is_available", lambda self: True)

    report = diagnose.run_diagnostics(tmp_path / "settings.json")

    assert report["status"] == "ok"
    assert report["errors"] == []
    assert report["recognizer"] == {"provider": "google", "language": "en-US", "available": True}
    assert report["sounds"] == {"question": True, "welldone": True}
    assert report["recording_path"].endswith("recording.flac")


def test_report_collects_errors(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(audio_recorder, "list_input_devices", lambda: [])
    monkeypatch.setattr(SpeechRecognizer, "is_available", lambda self: False)

    report = diagnose.run_diagnostics(tmp_path / "settings.json")

    assert report["status"] == "error"
    assert "No microphone found. Recording will fail." in report["errors"]
    assert "Speech provider 'google' is not available." in report["errors"]
