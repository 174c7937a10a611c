# -*- coding: utf-8 -*-
"""Speech-to-text on a recorded file with provider dispatch."""

from __future__ import annotations

import importlib.util
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Protocol

from speechquiz.integrations.openai_client import OpenAIClient

try:
    import speech_recognition as sr  # type: ignore[import-not-found]
except Exception:  # pragma: no cover - depends on local environment
    sr = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class RecognitionError(RuntimeError):
    """Raised when the service fails to transcribe a recording."""


class RecognitionUnavailableError(RecognitionError):
    """Raised when the configured service cannot be used at all."""


@dataclass
class RecognitionResult:
    text: str
    is_final: bool
    confidence: float | None = None
    alternatives: list[str] = field(default_factory=list)


class _TranscribeProvider(Protocol):
    def transcribe(self, audio_path: Path, language: str = "en") -> dict[str, Any]:
        ...

    def validate_key(self, api_key: str | None = None) -> bool:
        ...


class SpeechRecognizer:
    """Transcribes one audio file and yields partial then final results."""

    def __init__(
        self,
        provider: str = "google",
        language: str = "en-US",
        openai_client: _TranscribeProvider | None = None,
    ) -> None:
        self.provider = provider
        self.language = language
        self.openai_client = openai_client or OpenAIClient()

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "SpeechRecognizer":
        stt = config.get("speech_to_text", {})
        api_key = str(config.get("api_keys", {}).get("openai", ""))
        return cls(
            provider=str(stt.get("provider", "google")),
            language=str(stt.get("language", "en-US")),
            openai_client=OpenAIClient(api_key=api_key),
        )

    def is_available(self) -> bool:
        if self.provider == "openai":
            return self.openai_client.validate_key()
        if sr is None:
            return False
        if self.provider == "sphinx":
            return importlib.util.find_spec("pocketsphinx") is not None
        return self.provider == "google"

    def recognize(self, audio_path: Path) -> Iterator[RecognitionResult]:
        """Yield recognition results for ``audio_path``; the last one is final.

        Raises RecognitionUnavailableError before any work when the provider
        cannot be used, RecognitionError for every failure afterwards.
        """
        if not self.is_available():
            raise RecognitionUnavailableError(f"Speech provider '{self.provider}' not available")
        if not audio_path.exists():
            raise RecognitionError(f"Audio file not found: {audio_path}")

        logger.info("Recognizing %s with %s (%s)", audio_path, self.provider, self.language)
        if self.provider == "openai":
            yield from self._recognize_openai(audio_path)
        else:
            yield from self._recognize_speech_recognition(audio_path)

    def _recognize_openai(self, audio_path: Path) -> Iterator[RecognitionResult]:
        try:
            payload = self.openai_client.transcribe(audio_path, language=self.language)
        except ValueError as exc:
            raise RecognitionError(str(exc)) from exc

        for segment in payload.get("segments", []) or []:
            yield RecognitionResult(text=str(segment.get("text", "")).strip(), is_final=False)
        yield RecognitionResult(text=str(payload.get("text", "")).strip(), is_final=True)

    def _recognize_speech_recognition(self, audio_path: Path) -> Iterator[RecognitionResult]:
        recognizer = sr.Recognizer()
        try:
            with sr.AudioFile(str(audio_path)) as source:
                audio = recognizer.record(source)
        except (ValueError, OSError) as exc:
            raise RecognitionError(f"Cannot read audio file: {exc}") from exc

        try:
            if self.provider == "sphinx":
                text = recognizer.recognize_sphinx(audio, language=self.language)
                yield RecognitionResult(text=str(text), is_final=True)
                return
            response = recognizer.recognize_google(audio, language=self.language, show_all=True)
        except sr.UnknownValueError as exc:
            raise RecognitionError("No speech detected.") from exc
        except sr.RequestError as exc:
            raise RecognitionError(f"Speech recognition request failed: {exc}") from exc

        alternatives = response.get("alternative", []) if isinstance(response, dict) else []
        if not alternatives:
            raise RecognitionError("No speech detected.")
        best = alternatives[0]
        yield RecognitionResult(
            text=str(best.get("transcript", "")),
            is_final=True,
            confidence=best.get("confidence"),
            alternatives=[str(alt.get("transcript", "")) for alt in alternatives[1:]],
        )
