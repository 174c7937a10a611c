# -*- coding: utf-8 -*-
"""Settings persistence and validation."""

from __future__ import annotations

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any

from speechquiz.constants import (
    CELEBRATION_DURATION_SECONDS,
    CONFETTI_SHAPES,
    DEFAULT_DOCUMENTS_DIR,
    DEFAULT_SETTINGS_FILE,
    QUESTION_SOUND,
    RECORDING_DURATION_SECONDS,
    RECORDING_FILENAME,
    SPEECH_PROVIDERS,
    SUCCESS_SOUND,
    TARGET_LETTER,
)
from speechquiz.utils.file_utils import read_json_file, write_json_file

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: dict[str, Any] = {
    "api_keys": {"openai": "USE_ENV_FILE"},
    "quiz": {
        "target_letter": TARGET_LETTER,
        "question_sound": QUESTION_SOUND,
        "success_sound": SUCCESS_SOUND,
    },
    "recording": {
        "format": "FLAC",
        "subtype": "PCM_16",
        "sample_rate": 12000,
        "channels": 1,
        "duration_seconds": RECORDING_DURATION_SECONDS,
        "filename": RECORDING_FILENAME,
        "documents_dir": DEFAULT_DOCUMENTS_DIR,
        "microphone_index": None,
    },
    "speech_to_text": {"provider": "google", "language": "en-US"},
    "celebration": {
        "duration_seconds": CELEBRATION_DURATION_SECONDS,
        "intensity": 0.5,
        "shape": "diamond",
    },
    "permissions": {
        "speech_recognition_allowed": True,
        "speech_recognition": "not_determined",
        "record": "not_determined",
    },
}


class ConfigError(ValueError):
    """Raised when settings are invalid."""


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default config."""
    return deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load a simple .env file (KEY=VALUE)."""
    values: dict[str, str] = {}
    if not env_path.exists():
        return values

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if (value.startswith('"') and value.endswith('"')) or (
            value.startswith("'") and value.endswith("'")
        ):
            value = value[1:-1]
        values[key] = value
    return values


def _apply_env_overrides(config: dict[str, Any], env_values: dict[str, str]) -> dict[str, Any]:
    """Apply environment-based overrides to runtime config."""
    merged = deepcopy(config)
    openai_key = env_values.get("OPENAI_API_KEY", "").strip()
    if openai_key:
        merged.setdefault("api_keys", {})
        merged["api_keys"]["openai"] = openai_key
    return merged


def validate_config(config: dict[str, Any]) -> None:
    """Validate the fields the quiz flow depends on."""
    target = config.get("quiz", {}).get("target_letter")
    if not isinstance(target, str) or len(target) != 1:
        raise ConfigError("quiz.target_letter must be a single character")

    recording = config.get("recording", {})
    sample_rate = recording.get("sample_rate")
    if not isinstance(sample_rate, int) or not (8000 <= sample_rate <= 48000):
        raise ConfigError("recording.sample_rate must be an int in range 8000..48000")
    if recording.get("channels") != 1:
        raise ConfigError("recording.channels must be 1")
    duration = recording.get("duration_seconds")
    if not isinstance(duration, (int, float)) or not (0 < float(duration) <= 60):
        raise ConfigError("recording.duration_seconds must be in range 0..60")

    provider = config.get("speech_to_text", {}).get("provider")
    if provider not in SPEECH_PROVIDERS:
        raise ConfigError(f"speech_to_text.provider must be one of {', '.join(SPEECH_PROVIDERS)}")

    celebration = config.get("celebration", {})
    intensity = celebration.get("intensity")
    if not isinstance(intensity, (float, int)) or not (0 <= float(intensity) <= 1):
        raise ConfigError("celebration.intensity must be in range 0..1")
    if celebration.get("shape") not in CONFETTI_SHAPES:
        raise ConfigError(f"celebration.shape must be one of {', '.join(CONFETTI_SHAPES)}")


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load config from JSON and merge into defaults."""
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    env_values = _load_env_file(config_path.parent / ".env")
    merged = get_default_config()
    if config_path.exists():
        merged = _deep_merge(merged, read_json_file(config_path))
    else:
        logger.info("No settings file at %s, using defaults", config_path)

    merged = _apply_env_overrides(merged, env_values)
    validate_config(merged)
    return merged


def _strip_api_keys(config: dict[str, Any]) -> dict[str, Any]:
    """Remove actual API keys from config before saving to disk."""
    config_copy = deepcopy(config)
    api_keys = config_copy.get("api_keys", {})
    current_value = api_keys.get("openai")
    # Anything long enough to be a real key goes back to the .env placeholder
    if current_value and len(current_value) > 20:
        api_keys["openai"] = "USE_ENV_FILE"
    return config_copy


def save_config(config: dict[str, Any], path: str | Path | None = None) -> Path:
    """Validate and save config as JSON, but without real API keys.

    API keys should be stored in .env file, not in settings.json.
    """
    validate_config(config)
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    write_json_file(config_path, _strip_api_keys(config))
    return config_path


def resolve_recording_path(config: dict[str, Any]) -> Path:
    """Return the fixed recording file inside the documents directory."""
    recording = config.get("recording", {})
    documents_dir = Path(str(recording.get("documents_dir") or DEFAULT_DOCUMENTS_DIR)).expanduser()
    return documents_dir / str(recording.get("filename") or RECORDING_FILENAME)
