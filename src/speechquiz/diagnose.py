# -*- coding: utf-8 -*-
"""System diagnostics for the quiz: audio backends, devices and recognizer."""

from __future__ import annotations

import importlib.util
import os
import sys
from pathlib import Path
from typing import Any

from speechquiz.config import load_config, resolve_recording_path
from speechquiz.pipeline import audio_recorder, player
from speechquiz.pipeline.recognizer import SpeechRecognizer
from speechquiz.utils.file_utils import resource_path


def _has_module(name: str) -> bool:
    return importlib.util.find_spec(name) is not None


def run_diagnostics(settings_path: str | Path | None = None) -> dict[str, Any]:
    """Collect a report of everything the quiz flow depends on."""
    settings = load_config(settings_path)
    report: dict[str, Any] = {
        "status": "ok",
        "system": {
            "os": os.name,
            "platform": sys.platform,
            "python_version": sys.version.split()[0],
        },
        "dependencies": {
            "sounddevice": audio_recorder.sd is not None,
            "soundfile": audio_recorder.sf is not None,
            "numpy": audio_recorder.np is not None,
            "speech_recognition": _has_module("speech_recognition"),
            "pocketsphinx": _has_module("pocketsphinx"),
        },
        "input_devices": [],
        "recognizer": {},
        "sounds": {},
        "recording_path": str(resolve_recording_path(settings)),
        "errors": [],
    }

    try:
        report["input_devices"] = audio_recorder.list_input_devices()
    except Exception as exc:
        report["errors"].append(f"Device query failed: {exc}")
    if not report["input_devices"]:
        report["errors"].append("No microphone found. Recording will fail.")

    recognizer = SpeechRecognizer.from_config(settings)
    report["recognizer"] = {
        "provider": recognizer.provider,
        "language": recognizer.language,
        "available": recognizer.is_available(),
    }
    if not report["recognizer"]["available"]:
        report["errors"].append(f"Speech provider '{recognizer.provider}' is not available.")

    sound_player = player.SoundPlayer()
    quiz = settings.get("quiz", {})
    for name in (quiz.get("question_sound"), quiz.get("success_sound")):
        found = sound_player.sound_path(str(name)).exists()
        report["sounds"][str(name)] = found
        if not found:
            report["errors"].append(f"Sound '{name}' missing in {resource_path('sounds')}")

    if report["errors"]:
        report["status"] = "error"
    return report
