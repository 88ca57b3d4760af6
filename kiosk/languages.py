from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError


class Language(str, Enum):
    KO = "ko"
    EN = "en"
    ZH = "zh"
    JA = "ja"


@dataclass(frozen=True)
class QuantityLexicon:
    """Quantity phrases for one language, in declaration order.

    Lookup is a case-insensitive substring test. Order matters: when several
    phrases match near a keyword, the last one in this order wins.
    """

    language: Language
    phrases: Tuple[Tuple[str, int], ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, language: Language, mapping: Mapping[str, int]) -> "QuantityLexicon":
        phrases = []
        for phrase, qty in mapping.items():
            key = str(phrase).strip().lower()
            if not key:
                continue
            if int(qty) <= 0:
                raise ValueError(f"quantity for {phrase!r} must be positive")
            phrases.append((key, int(qty)))
        return cls(language=language, phrases=tuple(phrases))

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self.phrases)

    def __len__(self) -> int:
        return len(self.phrases)

    def lookup(self, token: str) -> Optional[int]:
        """Exact lookup of a whole token (used by the fallback heuristic)."""
        needle = (token or "").strip().lower()
        for phrase, qty in self.phrases:
            if phrase == needle:
                return qty
        return None


# 한국어/영어/중국어/일본어 수량 표현
_DEFAULT_QUANTITIES: Dict[Language, Dict[str, int]] = {
    Language.KO: {
        "하나": 1, "한개": 1, "한 개": 1, "1개": 1, "일개": 1,
        "둘": 2, "두개": 2, "두 개": 2, "2개": 2, "이개": 2,
        "셋": 3, "세개": 3, "세 개": 3, "3개": 3, "삼개": 3,
        "넷": 4, "네개": 4, "네 개": 4, "4개": 4, "사개": 4,
        "다섯": 5, "5개": 5, "오개": 5,
    },
    Language.EN: {
        "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
        "1": 1, "2": 2, "3": 3, "4": 4, "5": 5,
    },
    Language.ZH: {
        "一": 1, "二": 2, "三": 3, "四": 4, "五": 5,
        "一个": 1, "两个": 2, "三个": 3, "四个": 4, "五个": 5,
        "1": 1, "2": 2, "3": 3, "4": 4, "5": 5,
    },
    Language.JA: {
        "一つ": 1, "二つ": 2, "三つ": 3, "四つ": 4, "五つ": 5,
        "ひとつ": 1, "ふたつ": 2, "みっつ": 3, "よっつ": 4, "いつつ": 5,
        "1": 1, "2": 2, "3": 3, "4": 4, "5": 5,
    },
}


def default_lexicons() -> Dict[Language, QuantityLexicon]:
    return {lang: QuantityLexicon.from_mapping(lang, table) for lang, table in _DEFAULT_QUANTITIES.items()}


def resolve_language(code: Union[str, Language, None]) -> Language:
    """Map a language tag such as ``"en"`` or ``"ko-KR"`` onto :class:`Language`."""
    if isinstance(code, Language):
        return code
    raw = str(code or "").strip().lower()
    primary = raw.replace("_", "-").split("-", 1)[0]
    try:
        return Language(primary)
    except ValueError:
        raise ConfigurationError(code) from None


# Readback phrases: (count format, total format, separator)
_READBACK: Dict[Language, Tuple[str, str, str]] = {
    Language.KO: ("{name} {qty}개", "총 {total:,}원", ", "),
    Language.EN: ("{qty} x {name}", "total {total:,} won", ", "),
    Language.ZH: ("{name} {qty}份", "共 {total:,}韩元", "，"),
    Language.JA: ("{name} {qty}個", "合計 {total:,}ウォン", "、"),
}


def format_count(language: Language, name: str, qty: int) -> str:
    return _READBACK[language][0].format(name=name, qty=qty)


def format_total(language: Language, total: int) -> str:
    return _READBACK[language][1].format(total=total)


def list_separator(language: Language) -> str:
    return _READBACK[language][2]


_REPEAT_PROMPTS: Dict[Language, str] = {
    Language.KO: "죄송합니다. 메뉴를 다시 말씀해 주세요.",
    Language.EN: "Sorry, please tell me the menu again.",
    Language.ZH: "对不起，请再说一遍菜名。",
    Language.JA: "すみません、もう一度メニューをおっしゃってください。",
}


def repeat_prompt(language: Language) -> str:
    return _REPEAT_PROMPTS[language]


SPEECH_LOCALES: Dict[Language, str] = {
    Language.KO: "ko-KR",
    Language.EN: "en-US",
    Language.ZH: "zh-CN",
    Language.JA: "ja-JP",
}


__all__ = [
    "Language",
    "QuantityLexicon",
    "default_lexicons",
    "resolve_language",
    "format_count",
    "format_total",
    "list_separator",
    "repeat_prompt",
    "SPEECH_LOCALES",
]