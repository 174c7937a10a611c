# -*- coding: utf-8 -*-
"""Worker classes for asynchronous background processing."""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QObject, pyqtSignal

from speechquiz.pipeline.recognizer import RecognitionError, SpeechRecognizer

logger = logging.getLogger(__name__)


class RecognitionWorker(QObject):
    """Runs one recognition task; emits partials, then one final result or one error."""
    partial = pyqtSignal(object)
    finished = pyqtSignal(object)
    error = pyqtSignal(str)

    def __init__(self, recognizer: SpeechRecognizer, audio_path: Path) -> None:
        super().__init__()
        self.recognizer = recognizer
        self.audio_path = audio_path

    def run(self) -> None:
        try:
            logger.info("RecognitionWorker: starting (%s)", self.audio_path)
            for result in self.recognizer.recognize(self.audio_path):
                if result.is_final:
                    self.finished.emit(result)
                    return
                self.partial.emit(result)
            self.error.emit("Speech recognition ended without a final result.")
        except RecognitionError as e:
            logger.warning("RecognitionWorker: %s", e)
            self.error.emit(str(e))
        except Exception as e:
            logger.exception("RecognitionWorker: recognition crashed")
            self.error.emit(str(e))
