# -*- coding: utf-8 -*-
"""Playback of bundled sound cues."""

from __future__ import annotations

import logging
from pathlib import Path

from speechquiz.utils.file_utils import resource_path

try:
    import sounddevice as sd  # type: ignore[import-not-found]
except Exception:  # pragma: no cover - PortAudio missing raises OSError
    sd = None  # type: ignore[assignment]

try:
    import soundfile as sf  # type: ignore[import-not-found]
except Exception:  # pragma: no cover - libsndfile missing raises OSError
    sf = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class SoundPlayer:
    """Plays ``<sounds_dir>/<name>.wav`` without blocking the caller."""

    def __init__(self, sounds_dir: Path | None = None, device: int | None = None) -> None:
        self.sounds_dir = Path(sounds_dir) if sounds_dir is not None else resource_path("sounds")
        self.device = device

    def sound_path(self, name: str) -> Path:
        return self.sounds_dir / f"{name}.wav"

    def play(self, name: str) -> bool:
        """Start playback; failures are logged and reported as False."""
        path = self.sound_path(name)
        if sd is None or sf is None:
            logger.warning("sounddevice/soundfile not installed, cannot play %s", name)
            return False
        try:
            data, samplerate = sf.read(str(path), dtype="float32")
            sd.play(data, samplerate=samplerate, device=self.device)
        except Exception as exc:
            logger.warning("Playback of %s failed: %s", path, exc)
            return False
        logger.info("Playing %s (%.2fs @ %d Hz)", name, len(data) / float(samplerate), samplerate)
        return True
