# -*- coding: utf-8 -*-
"""Quiz controller: permissions, recording, recognition and the answer reaction."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal, pyqtSlot

from speechquiz.config import resolve_recording_path
from speechquiz.constants import (
    CELEBRATION_DURATION_SECONDS,
    MSG_ALLOW_RECORDING,
    MSG_ALLOW_SPEECH,
    MSG_RECOGNIZER_UNAVAILABLE,
    MSG_RECORDING_FAILED,
    QUESTION_SOUND,
    RECORDING_DURATION_SECONDS,
    SUCCESS_SOUND,
    TARGET_LETTER,
)
from speechquiz.core.matcher import Outcome, evaluate_answer
from speechquiz.core.permissions import AuthorizationStatus, RecordPermission, SpeechAuthorizer
from speechquiz.core.state import QuizSession, SessionState
from speechquiz.gui.workers import RecognitionWorker
from speechquiz.pipeline.audio_recorder import AudioRecorder, AudioSessionError, RecorderError, RecordingSettings
from speechquiz.pipeline.player import SoundPlayer
from speechquiz.pipeline.recognizer import RecognitionResult, SpeechRecognizer

logger = logging.getLogger(__name__)

Scheduler = Callable[[int, Callable[[], None]], None]
RecorderFactory = Callable[..., AudioRecorder]


def _qt_schedule(delay_ms: int, callback: Callable[[], None]) -> None:
    QTimer.singleShot(delay_ms, callback)


class QuizController(QObject):
    """
    Drives one quiz screen through
    IDLE -> AWAITING_PERMISSION -> READY -> RECORDING -> RECOGNIZING -> SUCCESS | RETRY.
    The view only listens to the signals below.
    """
    state_changed = pyqtSignal(str)
    alert_requested = pyqtSignal(str)
    transcription_received = pyqtSignal(str)
    celebration_started = pyqtSignal()
    celebration_finished = pyqtSignal()
    try_again_requested = pyqtSignal()

    def __init__(
        self,
        settings: dict[str, Any],
        *,
        speech_authorizer: SpeechAuthorizer,
        record_permission: RecordPermission,
        recognizer: SpeechRecognizer,
        player: SoundPlayer,
        recorder_factory: RecorderFactory = AudioRecorder,
        schedule: Scheduler = _qt_schedule,
        run_in_thread: bool = True,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.speech_authorizer = speech_authorizer
        self.record_permission = record_permission
        self.recognizer = recognizer
        self.player = player
        self.recorder_factory = recorder_factory
        self._schedule = schedule
        self._run_in_thread = run_in_thread

        self.session = QuizSession()
        self.speech_status = AuthorizationStatus.NOT_DETERMINED
        self.recorder: AudioRecorder | None = None
        self.recording_path: Path = resolve_recording_path(settings)
        self.recording_settings = RecordingSettings.from_config(settings)

        quiz = settings.get("quiz", {})
        self.target_letter = str(quiz.get("target_letter", TARGET_LETTER))
        self.question_sound = str(quiz.get("question_sound", QUESTION_SOUND))
        self.success_sound = str(quiz.get("success_sound", SUCCESS_SOUND))
        recording = settings.get("recording", {})
        self.recording_ms = int(float(recording.get("duration_seconds", RECORDING_DURATION_SECONDS)) * 1000)
        celebration = settings.get("celebration", {})
        self.celebration_ms = int(float(celebration.get("duration_seconds", CELEBRATION_DURATION_SECONDS)) * 1000)

        self._active_threads: list[QThread] = []
        self._recognition_worker: RecognitionWorker | None = None
        # A newer celebration owns the overlay until its own timer fires
        self._celebration_id = 0

    @property
    def state(self) -> SessionState:
        return self.session.state

    def _set_state(self, target: SessionState) -> None:
        self.session.transition(target)
        self.state_changed.emit(target.value)

    def _alert(self, message: str) -> None:
        logger.warning("Alert: %s", message)
        self.alert_requested.emit(message)

    def _cleanup_threads(self) -> None:
        """Release finished threads; only the active list may delete them."""
        running: list[QThread] = []
        for thread in self._active_threads:
            if thread.isRunning():
                running.append(thread)
            else:
                thread.deleteLater()
        self._active_threads = running

    # Permission and greeting flow

    def start(self) -> None:
        """Screen loaded: ask for speech recognition authorization."""
        self._set_state(SessionState.AWAITING_PERMISSION)
        self.speech_authorizer.request_authorization(self._on_speech_authorization)

    def _on_speech_authorization(self, status: AuthorizationStatus) -> None:
        self.speech_status = status
        if status is AuthorizationStatus.AUTHORIZED:
            logger.info("Authorized")
            self.player.play(self.question_sound)
            self._request_record_permission()
        elif status is AuthorizationStatus.NOT_DETERMINED:
            logger.info("Speech recognition authorization not determined yet")
        else:
            self._alert(MSG_ALLOW_SPEECH)
            self._request_record_permission()

    def _request_record_permission(self) -> None:
        try:
            self.record_permission.request_record_permission(self._on_record_permission)
        except AudioSessionError as exc:
            self._alert(str(exc))

    def _on_record_permission(self, allowed: bool) -> None:
        if allowed:
            logger.info("Allowed audio recording")
            self._set_state(SessionState.READY)
        else:
            self._alert(MSG_ALLOW_RECORDING)

    # Recording

    def say_your_answer(self) -> bool:
        """User action: record for a fixed window. Returns False when rejected."""
        if not self.session.can_record():
            logger.warning("Recording request ignored in state %s", self.state.value)
            return False
        self._set_state(SessionState.RECORDING)

        try:
            self.recorder = self.recorder_factory(
                self.recording_path,
                self.recording_settings,
                device=self.settings.get("recording", {}).get("microphone_index"),
            )
            self.recorder.record()
        except RecorderError as exc:
            logger.error("Recorder construction failed: %s", exc)
            self._finish_recording(success=False)
            return True
        except Exception:
            logger.exception("Recorder crashed while starting")
            self._finish_recording(success=False)
            return True

        self._schedule(self.recording_ms, lambda: self._finish_recording(success=True))
        return True

    def _finish_recording(self, success: bool) -> None:
        if self.recorder is not None:
            finished_ok = self.recorder.stop()
            self.recorder = None
            success = success and finished_ok

        if success:
            self._set_state(SessionState.RECOGNIZING)
            self._recognize_speech()
        else:
            self._set_state(SessionState.READY)
            self._alert(MSG_RECORDING_FAILED)

    # Recognition

    def _recognize_speech(self) -> None:
        if self.speech_status is not AuthorizationStatus.AUTHORIZED:
            self._set_state(SessionState.READY)
            self._alert(MSG_ALLOW_SPEECH)
            return
        if not self.recognizer.is_available():
            self._set_state(SessionState.READY)
            self._alert(MSG_RECOGNIZER_UNAVAILABLE)
            return

        worker = RecognitionWorker(self.recognizer, self.recording_path)
        self._recognition_worker = worker
        worker.partial.connect(self._on_partial_result)
        worker.finished.connect(self._on_final_result)
        worker.error.connect(self._on_recognition_error)

        if not self._run_in_thread:
            worker.run()
            return

        self._cleanup_threads()
        thread = QThread(self)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(thread.quit)
        worker.error.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)
        self._active_threads.append(thread)
        thread.start()

    @pyqtSlot(object)
    def _on_partial_result(self, result: RecognitionResult) -> None:
        logger.debug("Partial transcription ignored: %r", result.text)

    @pyqtSlot(object)
    def _on_final_result(self, result: RecognitionResult) -> None:
        if self.state is not SessionState.RECOGNIZING:
            logger.warning("Final result outside recognition ignored: %r", result.text)
            return
        logger.info("Final transcription: %s", result.text)
        self.transcription_received.emit(result.text)
        self.handle_final_result(result.text)

    @pyqtSlot(str)
    def _on_recognition_error(self, message: str) -> None:
        if self.state is not SessionState.RECOGNIZING:
            return
        self._set_state(SessionState.READY)
        self._alert(message)

    # Result handling

    def handle_final_result(self, text: str) -> Outcome:
        outcome = evaluate_answer(text, self.target_letter)
        if outcome is Outcome.SUCCESS:
            self._set_state(SessionState.SUCCESS)
            self._celebration_id += 1
            celebration_id = self._celebration_id
            self.celebration_started.emit()
            self._schedule(self.celebration_ms, lambda: self._end_celebration(celebration_id))
            self.player.play(self.success_sound)
        else:
            self._set_state(SessionState.RETRY)
            self.try_again_requested.emit()
        return outcome

    def _end_celebration(self, celebration_id: int) -> None:
        if celebration_id != self._celebration_id:
            logger.debug("Stale celebration timer %d ignored", celebration_id)
            return
        self.celebration_finished.emit()
