from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when a language has no keyword/quantity tables registered."""

    def __init__(self, language: object, message: str = "") -> None:
        self.language = language
        super().__init__(message or f"unsupported language: {language!r}")


__all__ = ["ConfigurationError"]
