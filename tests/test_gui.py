# -*- coding: utf-8 -*-
"""Tests for the quiz window, try-again panel and confetti overlay."""

from __future__ import annotations

import pytest

pytest.importorskip("PyQt6")

from PyQt6.QtCore import QPoint

from speechquiz.constants import TRY_AGAIN_ANIMATION_MS
from speechquiz.gui.confetti_widget import ConfettiOverlay
from speechquiz.gui.main_window import OFFSCREEN_OFFSET, QuizWindow, TryAgainPanel


def test_confetti_emits_and_moves_particles(qt_app) -> None:
    overlay = ConfettiOverlay(intensity=0.5, shape="diamond", seed=7)
    overlay.resize(400, 600)
    overlay.start_confetti()
    overlay.step(0.016)
    assert len(overlay.particles) == 6

    overlay.step(0.1)
    assert len(overlay.particles) == 12
    assert all(p.y > -10.0 for p in overlay.particles[:6])
    overlay.stop_confetti()
    overlay.deleteLater()


def test_confetti_drains_after_stop(qt_app) -> None:
    overlay = ConfettiOverlay(seed=1)
    overlay.resize(200, 100)
    overlay.start_confetti()
    overlay.step(0.016)
    overlay.stop_confetti()
    assert overlay.is_active() is False
    for _ in range(50):
        overlay.step(0.1)
    assert overlay.particles == []
    overlay.deleteLater()


def test_confetti_rejects_unknown_shape(qt_app) -> None:
    with pytest.raises(ValueError):
        ConfettiOverlay(shape="circle")


@pytest.mark.parametrize("shape", ["confetti", "triangle", "star", "diamond"])
def test_confetti_paints_every_shape(qt_app, shape: str) -> None:
    overlay = ConfettiOverlay(shape=shape, seed=3)
    overlay.resize(120, 120)
    overlay.start_confetti()
    overlay.step(0.05)
    assert not overlay.grab().isNull()
    overlay.deleteLater()


def test_try_again_panel_slides_cover_off_screen(qt_app) -> None:
    panel = TryAgainPanel()
    panel.resize(300, 64)
    assert panel.is_revealed() is False

    animation = panel.reveal()
    assert animation.duration() == TRY_AGAIN_ANIMATION_MS
    assert animation.endValue() == QPoint(panel.cover.x(), OFFSCREEN_OFFSET)
    animation.setCurrentTime(animation.duration())
    assert panel.is_revealed() is True
    panel.deleteLater()


@pytest.fixture
def window(make_controller, default_config, monkeypatch):
    alerts: list[str] = []
    monkeypatch.setattr(QuizWindow, "show_alert", lambda self, message: alerts.append(message))
    controller = make_controller()
    win = QuizWindow(controller, default_config)
    win.resize(420, 640)
    win.alerts = alerts
    yield win
    win.close()
    win.deleteLater()


def test_window_button_follows_session_state(window) -> None:
    assert window.answer_button.isEnabled() is False
    window.controller.start()
    assert window.answer_button.isEnabled() is True
    assert window.status_label.text() == "Ready"


def test_window_celebration_overlay_lifecycle(window) -> None:
    window.controller.celebration_started.emit()
    overlay = window.confetti_view
    assert overlay is not None
    assert overlay.is_active() is True
    assert overlay.geometry() == window.centralWidget().rect()

    window.controller.celebration_finished.emit()
    assert window.confetti_view is None


def test_window_try_again_reveal(window) -> None:
    window.controller.try_again_requested.emit()
    animation = window.try_again_panel._animation
    assert animation is not None
    assert animation.endValue().y() == OFFSCREEN_OFFSET


def test_window_routes_alerts(window) -> None:
    window.controller.alert_requested.emit("Speech Recognition not available.")
    assert window.alerts == ["Speech Recognition not available."]


def test_window_shows_transcription(window) -> None:
    window.controller.transcription_received.emit("Apple")
    assert window.transcript_label.text() == 'You said: "Apple"'
    window.controller.transcription_received.emit("")
    assert window.transcript_label.text() == "Nothing was recognized."
