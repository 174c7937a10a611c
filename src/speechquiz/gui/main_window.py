# -*- coding: utf-8 -*-
"""The single quiz screen."""

from __future__ import annotations

import logging
from typing import Any

from PyQt6.QtCore import QEasingCurve, QPoint, QPropertyAnimation, Qt
from PyQt6.QtWidgets import (
    QFrame,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from speechquiz.constants import APP_NAME, APP_VERSION, TRY_AGAIN_ANIMATION_MS
from speechquiz.core.state import SessionState
from speechquiz.gui.confetti_widget import ConfettiOverlay
from speechquiz.gui.controller import QuizController

logger = logging.getLogger(__name__)

OFFSCREEN_OFFSET = 10000


class TryAgainPanel(QWidget):
    """A "try again" label hidden under a cover that slides away on reveal."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setMinimumHeight(64)
        self.try_again_label = QLabel("Not quite. Try again!", self)
        self.try_again_label.setObjectName("tryAgainText")
        self.try_again_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.cover = QFrame(self)
        self.cover.setObjectName("tryAgainCover")
        self.cover.raise_()
        self._animation: QPropertyAnimation | None = None

    def resizeEvent(self, event) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        self.try_again_label.setGeometry(self.rect())
        if not self.is_revealed():
            self.cover.setGeometry(self.rect())
        else:
            self.cover.resize(self.size())

    def is_revealed(self) -> bool:
        return self.cover.y() >= OFFSCREEN_OFFSET

    def reveal(self, duration_ms: int = TRY_AGAIN_ANIMATION_MS) -> QPropertyAnimation:
        """Slide the cover off-screen to show the prompt."""
        self._animation = QPropertyAnimation(self.cover, b"pos", self)
        self._animation.setDuration(duration_ms)
        self._animation.setStartValue(self.cover.pos())
        self._animation.setEndValue(QPoint(self.cover.x(), OFFSCREEN_OFFSET))
        self._animation.setEasingCurve(QEasingCurve.Type.InOutQuad)
        self._animation.start()
        return self._animation


class QuizWindow(QMainWindow):
    """Question, "Say your answer" button, try-again prompt and confetti."""

    def __init__(self, controller: QuizController, settings: dict[str, Any], parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.settings = settings
        self.confetti_view: ConfettiOverlay | None = None

        self.setWindowTitle(f"{APP_NAME} v{APP_VERSION}")
        self.resize(420, 640)

        self._build_ui()
        self._apply_styles()
        self._connect_controller()
        self._refresh_ui(self.controller.state.value)

    def _build_ui(self) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(24, 32, 24, 32)
        layout.setSpacing(18)

        target = str(self.settings.get("quiz", {}).get("target_letter", "a")).upper()
        self.title_label = QLabel("Listen to the question")
        self.title_label.setObjectName("appTitle")
        self.title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.hint_label = QLabel(f'Answer with a word that has the letter "{target}".')
        self.hint_label.setObjectName("mutedText")
        self.hint_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.hint_label.setWordWrap(True)

        self.answer_button = QPushButton("Say your answer")
        self.answer_button.setObjectName("primaryButton")
        self.answer_button.clicked.connect(self.controller.say_your_answer)

        self.status_label = QLabel("")
        self.status_label.setObjectName("statusBadge")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.transcript_label = QLabel("")
        self.transcript_label.setObjectName("mutedText")
        self.transcript_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.try_again_panel = TryAgainPanel()

        layout.addWidget(self.title_label)
        layout.addWidget(self.hint_label)
        layout.addStretch(1)
        layout.addWidget(self.answer_button)
        layout.addWidget(self.status_label)
        layout.addWidget(self.transcript_label)
        layout.addStretch(1)
        layout.addWidget(self.try_again_panel)
        self.setCentralWidget(central)

    def _apply_styles(self) -> None:
        self.setStyleSheet(
            """
            QMainWindow, QWidget {
                background: #f3f5f8;
                color: #1f2937;
                font-family: "Segoe UI", "Noto Sans", sans-serif;
                font-size: 13px;
            }
            QLabel#appTitle {
                font-size: 22px;
                font-weight: 700;
                color: #0f172a;
            }
            QLabel#mutedText {
                color: #6b7280;
            }
            QLabel#statusBadge {
                background: #e0ecff;
                color: #1d4ed8;
                border: 1px solid #bfdbfe;
                border-radius: 8px;
                padding: 6px 10px;
                font-weight: 600;
            }
            QLabel#tryAgainText {
                font-size: 18px;
                font-weight: 700;
                color: #dc2626;
            }
            QFrame#tryAgainCover {
                background: #f3f5f8;
            }
            QPushButton#primaryButton {
                background: #0f766e;
                color: white;
                border: 1px solid #115e59;
                border-radius: 10px;
                padding: 12px 18px;
                font-size: 16px;
                font-weight: 700;
            }
            QPushButton#primaryButton:hover {
                background: #0d9488;
            }
            QPushButton#primaryButton:disabled {
                background: #94a3b8;
                border-color: #94a3b8;
            }
            """
        )

    def _connect_controller(self) -> None:
        self.controller.state_changed.connect(self._refresh_ui)
        self.controller.alert_requested.connect(self.show_alert)
        self.controller.transcription_received.connect(self._show_transcription)
        self.controller.celebration_started.connect(self.start_celebration)
        self.controller.celebration_finished.connect(self.stop_celebration)
        self.controller.try_again_requested.connect(self.show_try_again)

    def _refresh_ui(self, state: str) -> None:
        labels = {
            SessionState.IDLE.value: "Starting...",
            SessionState.AWAITING_PERMISSION.value: "Waiting for permission...",
            SessionState.READY.value: "Ready",
            SessionState.RECORDING.value: "Listening...",
            SessionState.RECOGNIZING.value: "Thinking...",
            SessionState.SUCCESS.value: "Well done!",
            SessionState.RETRY.value: "Try again",
        }
        self.status_label.setText(labels.get(state, state))
        self.answer_button.setEnabled(self.controller.session.can_record())

    def _show_transcription(self, text: str) -> None:
        self.transcript_label.setText(f'You said: "{text}"' if text else "Nothing was recognized.")

    def show_alert(self, message: str) -> None:
        box = QMessageBox(self)
        box.setWindowTitle(APP_NAME)
        box.setText(message)
        box.setStandardButtons(QMessageBox.StandardButton.Ok)
        box.exec()

    def ask_consent(self, title: str, question: str) -> bool | None:
        """Consent prompt; "Ask Later" leaves the decision open."""
        box = QMessageBox(self)
        box.setWindowTitle(title)
        box.setText(question)
        box.setStandardButtons(
            QMessageBox.StandardButton.Yes
            | QMessageBox.StandardButton.No
            | QMessageBox.StandardButton.Cancel
        )
        allow_button = box.button(QMessageBox.StandardButton.Yes)
        deny_button = box.button(QMessageBox.StandardButton.No)
        allow_button.setText("Allow")
        deny_button.setText("Don't Allow")
        box.button(QMessageBox.StandardButton.Cancel).setText("Ask Later")
        box.setEscapeButton(QMessageBox.StandardButton.Cancel)
        box.exec()
        clicked = box.clickedButton()
        if clicked is allow_button:
            return True
        if clicked is deny_button:
            return False
        return None

    def start_celebration(self) -> None:
        celebration = self.settings.get("celebration", {})
        self.stop_celebration()
        self.confetti_view = ConfettiOverlay(
            self.centralWidget(),
            intensity=float(celebration.get("intensity", 0.5)),
            shape=str(celebration.get("shape", "diamond")),
        )
        self.confetti_view.setGeometry(self.centralWidget().rect())
        self.confetti_view.show()
        self.confetti_view.raise_()
        self.confetti_view.start_confetti()

    def stop_celebration(self) -> None:
        if self.confetti_view is None:
            return
        self.confetti_view.stop_confetti()
        self.confetti_view.hide()
        self.confetti_view.deleteLater()
        self.confetti_view = None

    def show_try_again(self) -> None:
        self.try_again_panel.reveal()

    def resizeEvent(self, event) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        if self.confetti_view is not None:
            self.confetti_view.setGeometry(self.centralWidget().rect())
