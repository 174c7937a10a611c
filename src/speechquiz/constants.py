# -*- coding: utf-8 -*-
"""Application constants."""

APP_NAME = "speech-quiz"
APP_VERSION = "0.1.0"

DEFAULT_SETTINGS_FILE = "settings.json"
DEFAULT_DOCUMENTS_DIR = "~/Documents/speech-quiz"

RECORDING_FILENAME = "recording.flac"
RECORDING_DURATION_SECONDS = 2
CELEBRATION_DURATION_SECONDS = 3
TRY_AGAIN_ANIMATION_MS = 300

TARGET_LETTER = "a"
QUESTION_SOUND = "question"
SUCCESS_SOUND = "welldone"

SPEECH_PROVIDERS = ("google", "sphinx", "openai")
CONFETTI_SHAPES = ("confetti", "triangle", "star", "diamond")

CONFETTI_COLORS = (
    (0.95, 0.40, 0.27),
    (1.00, 0.78, 0.36),
    (0.48, 0.78, 0.64),
    (0.30, 0.76, 0.85),
    (0.58, 0.39, 0.55),
)

MSG_ALLOW_SPEECH = "Please allow speech recognition"
MSG_ALLOW_RECORDING = "Your permission is required to record an audio."
MSG_RECORDING_FAILED = "Failed to record your voice."
MSG_RECOGNIZER_UNAVAILABLE = "Speech Recognition not available."
