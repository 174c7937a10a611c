# -*- coding: utf-8 -*-
"""Tests for the microphone session and the fixed-settings recorder."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import numpy as np
import pytest

from speechquiz.pipeline import audio_recorder as recorder_mod
from speechquiz.pipeline.audio_recorder import (
    AudioRecorder,
    AudioSession,
    AudioSessionError,
    RecorderError,
    RecordingSettings,
)


class _FakeStream:
    instances: list["_FakeStream"] = []

    def __init__(self, samplerate, channels, dtype, device, callback) -> None:
        self.samplerate = samplerate
        self.channels = channels
        self.dtype = dtype
        self.device = device
        self.callback = callback
        self.started = False
        self.closed = False
        _FakeStream.instances.append(self)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.started = False

    def close(self) -> None:
        self.closed = True


def _fake_sd(devices=None, check_error: Exception | None = None, stream_cls=_FakeStream):
    def _check_input_settings(device=None, channels=None, samplerate=None):
        if check_error is not None:
            raise check_error

    return SimpleNamespace(
        InputStream=stream_cls,
        check_input_settings=_check_input_settings,
        query_devices=lambda: devices or [],
    )


class _FakeSoundFile:
    def __init__(self) -> None:
        self.writes: list[dict] = []

    def check_format(self, fmt, subtype) -> bool:
        return fmt == "FLAC" and subtype == "PCM_16"

    def write(self, path, data, samplerate, format=None, subtype=None) -> None:
        self.writes.append({"path": path, "frames": len(data), "samplerate": samplerate, "format": format})


@pytest.fixture
def fake_backends(monkeypatch):
    _FakeStream.instances = []
    sf = _FakeSoundFile()
    monkeypatch.setattr(recorder_mod, "sd", _fake_sd())
    monkeypatch.setattr(recorder_mod, "sf", sf)
    return sf


def test_settings_from_config(default_config: dict) -> None:
    settings = RecordingSettings.from_config(default_config)
    assert settings == RecordingSettings(format="FLAC", subtype="PCM_16", sample_rate=12000, channels=1)


def test_construction_fails_without_sounddevice(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(recorder_mod, "sd", None)
    with pytest.raises(RecorderError, match="sounddevice"):
        AudioRecorder(tmp_path / "recording.flac")


def test_construction_fails_for_unsupported_format(fake_backends, tmp_path: Path) -> None:
    with pytest.raises(RecorderError, match="Unsupported format"):
        AudioRecorder(tmp_path / "recording.ogg", RecordingSettings(format="OGG", subtype="VORBIS"))


def test_construction_fails_when_stream_cannot_open(monkeypatch, fake_backends, tmp_path: Path) -> None:
    def _broken_stream(**kwargs):
        raise OSError("Invalid device")

    monkeypatch.setattr(recorder_mod, "sd", _fake_sd(stream_cls=_broken_stream))
    with pytest.raises(RecorderError, match="Cannot open microphone"):
        AudioRecorder(tmp_path / "recording.flac")


def test_record_and_stop_writes_fixed_settings(fake_backends, tmp_path: Path) -> None:
    target = tmp_path / "docs" / "recording.flac"
    recorder = AudioRecorder(target)
    stream = _FakeStream.instances[0]
    assert stream.samplerate == 12000
    assert stream.channels == 1
    assert target.parent.is_dir()

    recorder.record()
    assert recorder.is_recording() is True
    block = np.zeros((1200, 1), dtype=np.int16)
    stream.callback(block, 1200, None, None)
    stream.callback(block, 1200, None, None)

    assert recorder.stop() is True
    assert stream.closed is True
    assert fake_backends.writes == [
        {"path": str(target), "frames": 2400, "samplerate": 12000, "format": "FLAC"}
    ]


def test_stop_without_frames_is_unsuccessful(fake_backends, tmp_path: Path) -> None:
    recorder = AudioRecorder(tmp_path / "recording.flac")
    recorder.record()
    assert recorder.stop() is False
    assert fake_backends.writes == []


def test_stop_without_record_is_unsuccessful(fake_backends, tmp_path: Path) -> None:
    recorder = AudioRecorder(tmp_path / "recording.flac")
    assert recorder.stop() is False


def test_session_activation_checks_input_settings(monkeypatch) -> None:
    monkeypatch.setattr(recorder_mod, "sd", _fake_sd())
    session = AudioSession()
    session.activate()
    assert session.is_active() is True


def test_session_activation_failure(monkeypatch) -> None:
    monkeypatch.setattr(recorder_mod, "sd", _fake_sd(check_error=ValueError("No input device")))
    session = AudioSession()
    with pytest.raises(AudioSessionError, match="No input device"):
        session.activate()
    assert session.is_active() is False


def test_session_without_sounddevice(monkeypatch) -> None:
    monkeypatch.setattr(recorder_mod, "sd", None)
    with pytest.raises(AudioSessionError):
        AudioSession().activate()


def test_list_input_devices_filters_outputs(monkeypatch) -> None:
    devices = [
        {"name": "Speakers", "max_input_channels": 0, "default_samplerate": 48000.0},
        {"name": "USB Mic", "max_input_channels": 1, "default_samplerate": 44100.0},
    ]
    monkeypatch.setattr(recorder_mod, "sd", _fake_sd(devices=devices))
    assert recorder_mod.list_input_devices() == [
        {"index": 1, "name": "USB Mic", "channels": 1, "default_samplerate": 44100.0}
    ]
