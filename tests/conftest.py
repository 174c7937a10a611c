# -*- coding: utf-8 -*-
"""Shared pytest fixtures: src on sys.path, offscreen Qt and fake quiz services."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable

import pytest


SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qt_app():
    pytest.importorskip("PyQt6")
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def default_config(tmp_path: Path) -> dict:
    from speechquiz.config import get_default_config

    config = get_default_config()
    config["recording"]["documents_dir"] = str(tmp_path / "documents")
    return config


class FakeRecorder:
    def __init__(self, output_path: Path, finish_ok: bool = True) -> None:
        self.output_path = output_path
        self.finish_ok = finish_ok
        self.recording = False
        self.stopped = 0

    def record(self) -> None:
        self.recording = True

    def stop(self) -> bool:
        self.recording = False
        self.stopped += 1
        return self.finish_ok


class FakeRecorderFactory:
    def __init__(self, fail: bool = False, finish_ok: bool = True, error: Exception | None = None) -> None:
        self.fail = fail
        self.error = error
        self.finish_ok = finish_ok
        self.created: list[FakeRecorder] = []
        self.attempts = 0

    def __call__(self, output_path: Path, settings=None, device=None) -> FakeRecorder:
        from speechquiz.pipeline.audio_recorder import RecorderError

        self.attempts += 1
        if self.fail:
            raise RecorderError("Cannot open microphone: device busy")
        if self.error is not None:
            raise self.error
        recorder = FakeRecorder(output_path, self.finish_ok)
        self.created.append(recorder)
        return recorder


class FakeRecognizer:
    def __init__(self, results=None, available: bool = True, error: Exception | None = None) -> None:
        self.results = list(results or [])
        self.available = available
        self.error = error
        self.paths: list[Path] = []

    def is_available(self) -> bool:
        return self.available

    def recognize(self, audio_path: Path):
        self.paths.append(audio_path)
        if self.error is not None:
            raise self.error
        yield from self.results


class FakePlayer:
    def __init__(self) -> None:
        self.played: list[str] = []

    def play(self, name: str) -> bool:
        self.played.append(name)
        return True


class FakeSpeechAuthorizer:
    def __init__(self, status) -> None:
        self.status = status
        self.calls = 0

    def request_authorization(self, handler: Callable) -> None:
        self.calls += 1
        handler(self.status)


class FakeRecordPermission:
    def __init__(self, allowed: bool = True, session_error: Exception | None = None) -> None:
        self.allowed = allowed
        self.session_error = session_error
        self.calls = 0

    def request_record_permission(self, handler: Callable) -> None:
        self.calls += 1
        if self.session_error is not None:
            raise self.session_error
        handler(self.allowed)


class ManualScheduler:
    """Collects delayed callbacks so tests decide when timers fire."""

    def __init__(self) -> None:
        self.pending: list[tuple[int, Callable[[], None]]] = []
        self.delays: list[int] = []

    def __call__(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.pending.append((delay_ms, callback))
        self.delays.append(delay_ms)

    def run_next(self) -> int:
        delay, callback = self.pending.pop(0)
        callback()
        return delay

    def run_all(self) -> None:
        while self.pending:
            _, callback = self.pending.pop(0)
            callback()


@pytest.fixture
def fake_player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def make_controller(qt_app, default_config, fake_player, scheduler):
    """Build a QuizController with fakes; keyword overrides replace any service."""
    from speechquiz.core.permissions import AuthorizationStatus
    from speechquiz.gui.controller import QuizController

    def _make(**overrides):
        run_in_thread = overrides.pop("run_in_thread", False)
        services = {
            "speech_authorizer": FakeSpeechAuthorizer(AuthorizationStatus.AUTHORIZED),
            "record_permission": FakeRecordPermission(allowed=True),
            "recognizer": FakeRecognizer(),
            "player": fake_player,
            "recorder_factory": FakeRecorderFactory(),
        }
        services.update(overrides)
        controller = QuizController(
            default_config,
            schedule=scheduler,
            run_in_thread=run_in_thread,
            **services,
        )
        events: dict[str, list] = {"alerts": [], "celebrations": [], "finished": [], "retries": [], "texts": []}
        controller.alert_requested.connect(events["alerts"].append)
        controller.celebration_started.connect(lambda: events["celebrations"].append(True))
        controller.celebration_finished.connect(lambda: events["finished"].append(True))
        controller.try_again_requested.connect(lambda: events["retries"].append(True))
        controller.transcription_received.connect(events["texts"].append)
        controller.events = events
        controller.services = services
        return controller

    return _make
