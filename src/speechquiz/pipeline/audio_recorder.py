# -*- coding: utf-8 -*-
"""Microphone session and fixed-settings recording with sounddevice + soundfile."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from speechquiz.utils.file_utils import ensure_dir

try:  # Optional runtime dependency used by sounddevice callbacks
    import numpy as np  # type: ignore[import-not-found]
except Exception:  # pragma: no cover - depends on local environment
    np = None  # type: ignore[assignment]

try:  # Optional runtime dependency for microphone capture
    import sounddevice as sd  # type: ignore[import-not-found]
except Exception:  # pragma: no cover - PortAudio missing raises OSError
    sd = None  # type: ignore[assignment]

try:
    import soundfile as sf  # type: ignore[import-not-found]
except Exception:  # pragma: no cover - libsndfile missing raises OSError
    sf = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class RecorderError(RuntimeError):
    """Raised when a recorder cannot be constructed or started."""


class AudioSessionError(RuntimeError):
    """Raised when the microphone session cannot be activated."""


@dataclass(frozen=True)
class RecordingSettings:
    """Fixed encoding parameters for the answer recording."""

    format: str = "FLAC"
    subtype: str = "PCM_16"
    sample_rate: int = 12000
    channels: int = 1

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "RecordingSettings":
        recording = config.get("recording", {})
        return cls(
            format=str(recording.get("format", cls.format)),
            subtype=str(recording.get("subtype", cls.subtype)),
            sample_rate=int(recording.get("sample_rate", cls.sample_rate)),
            channels=int(recording.get("channels", cls.channels)),
        )


def list_input_devices() -> list[dict[str, Any]]:
    """Return input-capable devices as plain dicts."""
    if sd is None:
        return []
    devices = []
    for index, device in enumerate(sd.query_devices()):
        if int(device.get("max_input_channels", 0)) > 0:
            devices.append({
                "index": index,
                "name": str(device.get("name", f"Device {index}")),
                "channels": int(device["max_input_channels"]),
                "default_samplerate": float(device.get("default_samplerate", 0.0)),
            })
    return devices


class AudioSession:
    """Recording session for the selected microphone."""

    def __init__(self, settings: RecordingSettings | None = None, device: int | None = None) -> None:
        self.settings = settings or RecordingSettings()
        self.device = device
        self._active = False

    def activate(self) -> None:
        """Check the input device accepts the recording settings."""
        if sd is None:
            raise AudioSessionError("sounddevice is not installed (audio capture unavailable).")
        try:
            sd.check_input_settings(
                device=self.device,
                channels=self.settings.channels,
                samplerate=self.settings.sample_rate,
            )
        except Exception as exc:
            raise AudioSessionError(f"Microphone unavailable: {exc}") from exc
        self._active = True
        logger.info("Audio session active (device=%s, %s Hz)", self.device, self.settings.sample_rate)

    def deactivate(self) -> None:
        self._active = False

    def is_active(self) -> bool:
        return self._active


class AudioRecorder:
    """Record the microphone into one file with fixed settings.

    Construction validates the format and opens the input stream, so a broken
    device or unsupported format surfaces as RecorderError before capture starts.
    """

    def __init__(
        self,
        output_path: Path,
        settings: RecordingSettings | None = None,
        device: int | None = None,
    ) -> None:
        self.output_path = Path(output_path)
        self.settings = settings or RecordingSettings()
        self.device = device
        self._frames: list[Any] = []
        self._frames_lock = threading.Lock()
        self._recording = False
        self._callback_error = ""

        if sd is None or np is None:
            raise RecorderError("sounddevice/numpy not installed.")
        if sf is None:
            raise RecorderError("soundfile not installed.")
        if not sf.check_format(self.settings.format, self.settings.subtype):
            raise RecorderError(f"Unsupported format {self.settings.format}/{self.settings.subtype}")

        try:
            ensure_dir(self.output_path.parent)
        except OSError as exc:
            raise RecorderError(f"Cannot create {self.output_path.parent}: {exc}") from exc

        def _callback(indata, frames, time_info, status) -> None:  # pragma: no cover - callback
            del frames, time_info
            if status:
                logger.warning("Recorder callback status: %s", status)
                self._callback_error = str(status)
            with self._frames_lock:
                self._frames.append(indata.copy())

        try:
            self._stream = sd.InputStream(
                samplerate=self.settings.sample_rate,
                channels=self.settings.channels,
                dtype="int16",
                device=self.device,
                callback=_callback,
            )
        except Exception as exc:
            raise RecorderError(f"Cannot open microphone: {exc}") from exc
        logger.debug("Recorder constructed for %s (%s)", self.output_path, self.settings)

    def record(self) -> None:
        """Start capturing."""
        with self._frames_lock:
            self._frames = []
        self._callback_error = ""
        try:
            self._stream.start()
        except Exception as exc:
            raise RecorderError(f"Cannot start recording: {exc}") from exc
        self._recording = True
        logger.info("Started audio recording to: %s", self.output_path)

    def stop(self) -> bool:
        """Stop capturing, release the stream and write the file.

        Returns whether the recording finished successfully.
        """
        was_recording = self._recording
        self._recording = False
        try:
            self._stream.stop()
        except Exception as exc:
            logger.error("Error stopping audio stream: %s", exc)
        try:
            self._stream.close()
        except Exception as exc:
            logger.error("Error closing audio stream: %s", exc)

        if not was_recording:
            return False

        with self._frames_lock:
            frames = list(self._frames)
            self._frames = []
        if not frames:
            logger.warning("No audio frames captured for %s", self.output_path)
            return False

        data = np.concatenate(frames, axis=0)
        try:
            sf.write(
                str(self.output_path),
                data,
                self.settings.sample_rate,
                format=self.settings.format,
                subtype=self.settings.subtype,
            )
        except Exception as exc:
            logger.error("Failed to save audio: %s", exc)
            return False

        duration = len(data) / float(self.settings.sample_rate)
        logger.info("Saved %.1fs audio to: %s", duration, self.output_path)
        return True

    def is_recording(self) -> bool:
        return self._recording

    def get_last_error(self) -> str:
        return self._callback_error
