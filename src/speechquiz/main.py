# -*- coding: utf-8 -*-
"""Application entry point."""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QApplication, QMessageBox

from speechquiz.config import load_config
from speechquiz.constants import APP_NAME, DEFAULT_SETTINGS_FILE
from speechquiz.core.permissions import PermissionStore, RecordPermission, SpeechAuthorizer
from speechquiz.gui.controller import QuizController
from speechquiz.gui.main_window import QuizWindow
from speechquiz.pipeline.audio_recorder import AudioSession, RecordingSettings
from speechquiz.pipeline.player import SoundPlayer
from speechquiz.pipeline.recognizer import SpeechRecognizer
from speechquiz.utils.logger import setup_session_logging


def global_exception_handler(exc_type, exc_value, exc_traceback):
    """Log fatal errors and keep a copy of the last crash next to the logs."""
    error_msg = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    logging.getLogger().critical("FATAL CRASH:\n%s", error_msg)

    crash_path = Path.cwd() / "logs" / "LAST_CRASH.log"
    crash_path.parent.mkdir(parents=True, exist_ok=True)
    crash_path.write_text(error_msg, encoding="utf-8")

    if QApplication.instance():
        QMessageBox.critical(None, "Application Crash", f"A fatal error occurred.\nDetails saved to: {crash_path}")

    sys.__excepthook__(exc_type, exc_value, exc_traceback)


def build_window(settings: dict, settings_path: Path) -> QuizWindow:
    """Wire the services, controller and window for one quiz screen."""
    window: QuizWindow | None = None

    def _prompt(title: str, question: str) -> bool | None:
        return window.ask_consent(title, question) if window is not None else None

    store = PermissionStore(settings, settings_path)
    recording_settings = RecordingSettings.from_config(settings)
    session = AudioSession(recording_settings, device=settings.get("recording", {}).get("microphone_index"))
    controller = QuizController(
        settings,
        speech_authorizer=SpeechAuthorizer(store, _prompt),
        record_permission=RecordPermission(store, _prompt, session),
        recognizer=SpeechRecognizer.from_config(settings),
        player=SoundPlayer(),
    )
    window = QuizWindow(controller, settings)
    return window


def main() -> int:
    """Start the GUI application."""
    sys.excepthook = global_exception_handler
    session_log_path = setup_session_logging(Path.cwd(), APP_NAME)
    logger = logging.getLogger(__name__)
    app = QApplication(sys.argv)
    if session_log_path is not None:
        logger.info("Session log file: %s", session_log_path)

    settings_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(DEFAULT_SETTINGS_FILE)
    settings = load_config(settings_path)
    logger.info("Settings loaded from %s (provider=%s)", settings_path, settings["speech_to_text"]["provider"])

    window = build_window(settings, settings_path)
    window.show()
    # Permission prompts need the window on screen
    QTimer.singleShot(0, window.controller.start)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
