from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

try:  # External dependency; installed with the ``speech`` extra
    import azure.cognitiveservices.speech as speechsdk  # type: ignore
except ImportError:  # pragma: no cover - gracefully degrade if package missing
    speechsdk = None  # type: ignore

from .config import SpeechSettings
from .languages import SPEECH_LOCALES, Language, resolve_language

logger = logging.getLogger(__name__)


@dataclass
class SpeechResult:
    text: Optional[str]
    locale: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


class AzureSpeechService:
    """Single-utterance recognition through the Azure Speech SDK.

    Each uploaded clip is recognized once and yields one final transcript;
    the kiosk language picks the recognition locale per call.
    """

    def __init__(self, settings: Optional[SpeechSettings] = None) -> None:
        self.settings = settings or SpeechSettings.from_env()

    @property
    def available(self) -> bool:
        return speechsdk is not None and bool(self.settings.key) and bool(
            self.settings.endpoint or self.settings.region
        )

    def locale_for(self, language: Union[str, Language, None]) -> str:
        if language is None:
            return self.settings.language
        return SPEECH_LOCALES[resolve_language(language)]

    def _speech_config(self, locale: str) -> Any:
        if self.settings.endpoint:
            cfg = speechsdk.SpeechConfig(subscription=self.settings.key, endpoint=self.settings.endpoint)
        else:
            cfg = speechsdk.SpeechConfig(subscription=self.settings.key, region=self.settings.region)
        cfg.speech_recognition_language = locale
        return cfg

    def transcribe(self, audio: bytes, language: Union[str, Language, None] = None) -> SpeechResult:
        locale = self.locale_for(language)
        if not self.available:
            return SpeechResult(text=None, locale=locale, error="Azure Speech SDK not configured")

        stream = speechsdk.audio.PushAudioInputStream()
        stream.write(audio)
        stream.close()
        try:
            recognizer = speechsdk.SpeechRecognizer(
                speech_config=self._speech_config(locale),
                audio_config=speechsdk.audio.AudioConfig(stream=stream),
            )
            outcome = recognizer.recognize_once_async().get()
        except Exception as exc:  # pragma: no cover - network/runtime errors
            logger.warning("Azure Speech recognition failed for %s: %s", locale, exc)
            return SpeechResult(text=None, locale=locale, error=str(exc))
        return self._to_result(outcome, locale)

    @staticmethod
    def _to_result(outcome: Any, locale: str) -> SpeechResult:
        reason = getattr(outcome, "reason", None)
        raw: Dict[str, Any] = {
            "reason": str(reason),
            "offset": getattr(outcome, "offset", None),
            "duration": getattr(outcome, "duration", None),
        }
        if reason == speechsdk.ResultReason.RecognizedSpeech:
            raw["text"] = outcome.text
            return SpeechResult(text=outcome.text, locale=locale, raw=raw)
        if reason == speechsdk.ResultReason.NoMatch:
            raw["details"] = str(outcome.no_match_details)
            return SpeechResult(text=None, locale=locale, raw=raw, error="No speech match")
        if reason == speechsdk.ResultReason.Canceled:
            details = outcome.cancellation_details
            raw["details"] = str(details.reason)
            if details.reason == speechsdk.CancellationReason.Error:
                raw["error_details"] = details.error_details
            return SpeechResult(text=None, locale=locale, raw=raw, error="Recognition canceled")
        return SpeechResult(text=None, locale=locale, raw=raw, error="Unknown recognition result")


__all__ = ["AzureSpeechService", "SpeechResult"]
