# -*- coding: utf-8 -*-
"""Consent-based authorization for speech recognition and recording."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from speechquiz.config import save_config
from speechquiz.pipeline.audio_recorder import AudioSession

logger = logging.getLogger(__name__)

# (title, question) -> True granted, False refused, None dismissed without answer
ConsentPrompt = Callable[[str, str], Optional[bool]]

SPEECH_PERMISSION = "speech_recognition"
RECORD_PERMISSION = "record"


class AuthorizationStatus(str, Enum):
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    RESTRICTED = "restricted"
    AUTHORIZED = "authorized"


class PermissionStore:
    """Keeps consent answers in the ``permissions`` section of the settings."""

    def __init__(self, settings: dict[str, Any], settings_path: Path | None = None) -> None:
        self.settings = settings
        self.settings_path = settings_path

    def get(self, name: str) -> AuthorizationStatus:
        raw = self.settings.get("permissions", {}).get(name, AuthorizationStatus.NOT_DETERMINED.value)
        try:
            return AuthorizationStatus(raw)
        except ValueError:
            logger.warning("Unknown stored status %r for %s, treating as not determined", raw, name)
            return AuthorizationStatus.NOT_DETERMINED

    def set(self, name: str, status: AuthorizationStatus) -> None:
        self.settings.setdefault("permissions", {})[name] = status.value
        if self.settings_path is not None:
            save_config(self.settings, self.settings_path)
        logger.debug("Stored %s permission: %s", name, status.value)

    def is_restricted(self, name: str) -> bool:
        return not bool(self.settings.get("permissions", {}).get(f"{name}_allowed", True))


def _ask(store: PermissionStore, name: str, prompt: ConsentPrompt, title: str, question: str) -> AuthorizationStatus:
    status = store.get(name)
    if status is not AuthorizationStatus.NOT_DETERMINED:
        return status
    answer = prompt(title, question)
    if answer is None:
        return AuthorizationStatus.NOT_DETERMINED
    status = AuthorizationStatus.AUTHORIZED if answer else AuthorizationStatus.DENIED
    store.set(name, status)
    return status


class SpeechAuthorizer:
    """Requests permission to send recordings to the speech recognizer."""

    def __init__(self, store: PermissionStore, prompt: ConsentPrompt) -> None:
        self.store = store
        self.prompt = prompt

    def authorization_status(self) -> AuthorizationStatus:
        if self.store.is_restricted(SPEECH_PERMISSION):
            return AuthorizationStatus.RESTRICTED
        return self.store.get(SPEECH_PERMISSION)

    def request_authorization(self, handler: Callable[[AuthorizationStatus], None]) -> None:
        """Resolve the status (asking once) and hand it to ``handler``."""
        if self.store.is_restricted(SPEECH_PERMISSION):
            status = AuthorizationStatus.RESTRICTED
        else:
            status = _ask(
                self.store,
                SPEECH_PERMISSION,
                self.prompt,
                "Speech Recognition",
                "Your spoken answers are sent to a speech recognition service. Allow speech recognition?",
            )
        logger.info("Speech recognition authorization: %s", status.value)
        handler(status)


class RecordPermission:
    """Activates the audio session and asks for microphone consent."""

    def __init__(self, store: PermissionStore, prompt: ConsentPrompt, session: AudioSession) -> None:
        self.store = store
        self.prompt = prompt
        self.session = session

    def request_record_permission(self, handler: Callable[[bool], None]) -> None:
        """Activate the session; AudioSessionError propagates to the caller."""
        self.session.activate()
        status = _ask(
            self.store,
            RECORD_PERMISSION,
            self.prompt,
            "Microphone",
            "Allow this app to record your voice with the microphone?",
        )
        handler(status is AuthorizationStatus.AUTHORIZED)
