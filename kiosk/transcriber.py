from __future__ import annotations

import io
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from openai import AzureOpenAI

from .config import AudioSettings

logger = logging.getLogger(__name__)


class AzureAudioTranscriber:
    """Azure OpenAI audio transcription (Whisper / GPT-4o-transcribe).

    Used when the Speech SDK is not configured.
    """

    def __init__(self, settings: Optional[AudioSettings] = None) -> None:
        settings = settings or AudioSettings.from_env()
        self.key = settings.key
        self.deployment = settings.deployment
        self.api_version = settings.api_version

        base, deployment, api_version = _parse_azure_endpoint(settings.endpoint)
        self.endpoint = base or settings.endpoint or None
        if deployment and not self.deployment:
            self.deployment = deployment
        if api_version:
            self.api_version = api_version

        self._client = None
        if self.key and self.endpoint and self.deployment:
            try:
                self._client = AzureOpenAI(
                    api_key=self.key,
                    api_version=self.api_version,
                    azure_endpoint=self.endpoint,
                )
            except Exception:
                logger.exception("Azure OpenAI audio client setup failed")
                self._client = None

    @property
    def available(self) -> bool:
        return self._client is not None

    def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.wav",
        language: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not self.available:
            return {"error": "Audio model not configured"}
        buffer = io.BytesIO(audio)
        buffer.name = filename
        kwargs: Dict[str, Any] = {"model": self.deployment, "file": buffer, "response_format": "verbose_json"}
        if language:
            kwargs["language"] = language
        try:
            result = self._client.audio.transcriptions.create(**kwargs)  # type: ignore[union-attr]
        except Exception as exc:  # pragma: no cover - network failures
            logger.warning("Audio transcription failed: %s", exc)
            return {"error": str(exc)}
        text = getattr(result, "text", None)
        raw_payload: Optional[Dict[str, Any]] = None
        if hasattr(result, "model_dump"):
            raw_payload = result.model_dump()
        return {"text": text, "raw": raw_payload}


def _parse_azure_endpoint(url: str) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """Split a pasted deployment URL into (base, deployment, api-version)."""
    if not url:
        return None, None, None
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None, None, None
    segments = [seg for seg in parsed.path.split("/") if seg]
    base_segments: List[str] = segments
    deployment = None
    if "deployments" in segments:
        idx = segments.index("deployments")
        base_segments = segments[:idx]
        if idx + 1 < len(segments):
            deployment = segments[idx + 1]
    base = f"{parsed.scheme}://{parsed.netloc}"
    if base_segments:
        base = f"{base}/{'/'.join(base_segments)}"
    if not base.endswith("/"):
        base = base + "/"
    api_version = (parse_qs(parsed.query or "").get("api-version") or [None])[0]
    return base, deployment, api_version


__all__ = ["AzureAudioTranscriber"]
