# -*- coding: utf-8 -*-
"""Quiz session state with guarded transitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_PERMISSION = "awaiting_permission"
    READY = "ready"
    RECORDING = "recording"
    RECOGNIZING = "recognizing"
    SUCCESS = "success"
    RETRY = "retry"


ALLOWED_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.AWAITING_PERMISSION}),
    SessionState.AWAITING_PERMISSION: frozenset({SessionState.READY}),
    SessionState.READY: frozenset({SessionState.RECORDING}),
    SessionState.RECORDING: frozenset({SessionState.RECOGNIZING, SessionState.READY}),
    SessionState.RECOGNIZING: frozenset({SessionState.SUCCESS, SessionState.RETRY, SessionState.READY}),
    SessionState.SUCCESS: frozenset({SessionState.RECORDING}),
    SessionState.RETRY: frozenset({SessionState.RECORDING}),
}

BUSY_STATES = frozenset({SessionState.RECORDING, SessionState.RECOGNIZING})


class InvalidTransitionError(RuntimeError):
    """Raised when a state change is not allowed from the current state."""

    def __init__(self, current: SessionState, target: SessionState) -> None:
        super().__init__(f"Cannot go from {current.value} to {target.value}")
        self.current = current
        self.target = target


@dataclass
class QuizSession:
    """Single-flight state holder for one quiz screen."""

    state: SessionState = SessionState.IDLE
    history: list[SessionState] = field(default_factory=list)

    def can_transition(self, target: SessionState) -> bool:
        return target in ALLOWED_TRANSITIONS.get(self.state, frozenset())

    def transition(self, target: SessionState) -> SessionState:
        """Move to ``target`` or raise InvalidTransitionError."""
        if not self.can_transition(target):
            raise InvalidTransitionError(self.state, target)
        logger.debug("Session state: %s -> %s", self.state.value, target.value)
        self.history.append(self.state)
        self.state = target
        return target

    def is_busy(self) -> bool:
        """True while a recording or recognition attempt is in flight."""
        return self.state in BUSY_STATES

    def can_record(self) -> bool:
        return self.can_transition(SessionState.RECORDING)
