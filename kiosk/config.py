"""Runtime configuration read from environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .languages import Language, resolve_language
from .parser import QUANTITY_WINDOW

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_MENU_PATH = PROJECT_ROOT / "data" / "kiosk_menu.json"
DEFAULT_HISTORY_PATH = PROJECT_ROOT / "data" / "order_history.json"

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class KioskConfig(BaseSettings):
    """Service settings, read from ``KIOSK_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="KIOSK_",
        env_ignore_empty=True,
        str_strip_whitespace=True,
        extra="ignore",
        frozen=True,
    )

    menu_path: Path = DEFAULT_MENU_PATH
    history_path: Optional[Path] = DEFAULT_HISTORY_PATH
    default_language: Language = Language.KO
    quantity_window: int = Field(QUANTITY_WINDOW, ge=0)
    collapse_overlapping: bool = True
    log_level: LogLevel = "INFO"

    @field_validator("history_path", mode="before")
    @classmethod
    def _in_memory_history(cls, value: Any) -> Any:
        # "memory" keeps confirmed orders in-process only
        if isinstance(value, str) and value.strip().lower() == "memory":
            return None
        return value

    @field_validator("default_language", mode="before")
    @classmethod
    def _known_language(cls, value: Any) -> Language:
        return resolve_language(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls) -> "KioskConfig":
        return cls()


class SpeechSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    key: str = Field("", validation_alias=AliasChoices("AZURE_SPEECH_KEY", "SPEECH_KEY"))
    region: str = Field("", validation_alias=AliasChoices("AZURE_SPEECH_REGION", "SPEECH_REGION"))
    endpoint: str = Field("", validation_alias=AliasChoices("AZURE_SPEECH_ENDPOINT", "SPEECH_ENDPOINT"))
    language: str = Field("ko-KR", validation_alias="AZURE_SPEECH_LANGUAGE")

    @classmethod
    def from_env(cls) -> "SpeechSettings":
        return cls()


class AudioSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    key: str = Field("", validation_alias="AZURE_OPENAI_API_KEY")
    endpoint: str = Field("", validation_alias=AliasChoices("AUDIO_OPENAI_ENDPOINT", "AZURE_AUDIO_ENDPOINT"))
    deployment: str = Field("", validation_alias="AUDIO_OPENAI_DEPLOYMENT")
    api_version: str = Field(
        "2024-08-01-preview",
        validation_alias=AliasChoices("AUDIO_OPENAI_API_VERSION", "AZURE_OPENAI_API_VERSION"),
    )

    @classmethod
    def from_env(cls) -> "AudioSettings":
        return cls()


__all__ = ["KioskConfig", "SpeechSettings", "AudioSettings", "DEFAULT_MENU_PATH", "DEFAULT_HISTORY_PATH"]
