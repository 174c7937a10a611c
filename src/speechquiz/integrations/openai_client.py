# -*- coding: utf-8 -*-
"""OpenAI Whisper transcription over plain HTTP."""

from __future__ import annotations

import json
import mimetypes
import uuid
from pathlib import Path
from typing import Any
from urllib import error, request

TRANSCRIPTIONS_URL = "https://api.openai.com/v1/audio/transcriptions"


class OpenAIClient:
    """Thin wrapper for Whisper transcription and key validation."""

    def __init__(self, api_key: str = "", timeout: float = 45.0) -> None:
        self.api_key = api_key
        self.timeout = timeout

    def validate_key(self, api_key: str | None = None) -> bool:
        """Format check only; no network round trip."""
        key = (api_key if api_key is not None else self.api_key).strip()
        return bool(key) and (key.startswith("sk-") or key.startswith("test-"))

    def _multipart_body(self, audio_path: Path, fields: dict[str, str], boundary: str) -> bytes:
        body_parts = []
        for key, value in fields.items():
            body_parts.append(f"--{boundary}\r\n".encode("utf-8"))
            body_parts.append(f'Content-Disposition: form-data; name="{key}"\r\n\r\n'.encode("utf-8"))
            body_parts.append(f"{value}\r\n".encode("utf-8"))

        filename = audio_path.name
        mimetype = mimetypes.guess_type(filename)[0] or "audio/flac"
        body_parts.append(f"--{boundary}\r\n".encode("utf-8"))
        body_parts.append(f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'.encode("utf-8"))
        body_parts.append(f"Content-Type: {mimetype}\r\n\r\n".encode("utf-8"))
        body_parts.append(audio_path.read_bytes())
        body_parts.append(b"\r\n")
        body_parts.append(f"--{boundary}--\r\n".encode("utf-8"))
        return b"".join(body_parts)

    def transcribe(self, audio_path: Path, language: str = "en") -> dict[str, Any]:
        """Send audio to whisper-1 and return ``{"text", "segments", ...}``."""
        if not self.api_key:
            raise ValueError("OpenAI API key is missing. Set OPENAI_API_KEY in .env.")

        boundary = uuid.uuid4().hex
        fields = {
            "model": "whisper-1",
            "language": language[:2].lower(),
            "response_format": "verbose_json",
        }
        req = request.Request(
            TRANSCRIPTIONS_URL,
            data=self._multipart_body(audio_path, fields, boundary),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": f"multipart/form-data; boundary={boundary}",
            },
            method="POST",
        )

        try:
            with request.urlopen(req, timeout=self.timeout) as response:
                body = response.read().decode("utf-8", errors="ignore")
        except error.HTTPError as exc:
            err_body = exc.read().decode("utf-8", errors="ignore")
            raise ValueError(f"OpenAI API error {exc.code}: {err_body}") from exc
        except error.URLError as exc:
            raise ValueError(f"OpenAI API unreachable: {exc.reason}") from exc

        try:
            res_json = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ValueError(f"OpenAI API non-JSON response: {body[:200]}") from exc
        return {
            "text": res_json.get("text", ""),
            "segments": res_json.get("segments", []),
            "provider": "openai:whisper-1",
            "language": language,
        }
