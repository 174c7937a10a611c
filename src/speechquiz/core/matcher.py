# -*- coding: utf-8 -*-
"""Answer checking for recognized speech."""

from __future__ import annotations

from enum import Enum

from speechquiz.constants import TARGET_LETTER


class Outcome(str, Enum):
    SUCCESS = "success"
    RETRY = "retry"


def contains_target(text: str, target: str = TARGET_LETTER) -> bool:
    """Case-insensitive containment check of the target character."""
    if not target:
        raise ValueError("target must not be empty")
    return target.casefold() in (text or "").casefold()


def evaluate_answer(text: str, target: str = TARGET_LETTER) -> Outcome:
    return Outcome.SUCCESS if contains_target(text, target) else Outcome.RETRY
