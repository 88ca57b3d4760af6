"""Turns a final speech transcript into order lines.

Matching is a keyword scan over the normalized transcript. For each keyword
hit the quantity is read from a fixed-width character window on both sides
of the keyword (``QUANTITY_WINDOW`` characters). When several quantity
phrases fall inside the windows, the phrase declared last in the lexicon
wins; such hits are logged as ambiguous.

The scan lives behind :class:`KeywordMatcher` so a tokenizer or fuzzy matcher
can replace it without touching the merge contract in :mod:`kiosk.order`.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError
from .languages import Language, QuantityLexicon, default_lexicons, resolve_language
from .menus import MenuCatalog, MenuEntry
from .order import OrderLine

logger = logging.getLogger(__name__)

QUANTITY_WINDOW = 10

MATCH_BASE_CONFIDENCE = 0.7
MATCH_STEP_CONFIDENCE = 0.1
MATCH_MAX_CONFIDENCE = 0.95
FALLBACK_CONFIDENCE = 0.5

# ASCII punctuation plus the CJK full-width forms recognizers emit
_PUNCT_RE = re.compile(r"[.,!?。，！？]")
_INT_RE = re.compile(r"^\d+$")


def normalize_transcript(transcript: Optional[str]) -> str:
    """Lower-case, drop ``. , ! ?`` and trim."""
    return _PUNCT_RE.sub("", (transcript or "").lower()).strip()


@dataclass(frozen=True)
class KeywordMatch:
    start: int
    end: int
    quantity: int = 1
    quantity_hits: Tuple[Tuple[str, int], ...] = ()

    @property
    def ambiguous(self) -> bool:
        return len({qty for _, qty in self.quantity_hits}) > 1

    def overlaps(self, span: Tuple[int, int]) -> bool:
        return self.start < span[1] and span[0] < self.end


class KeywordMatcher(ABC):
    """Locates a keyword in normalized text and reads the quantity spoken near it."""

    @abstractmethod
    def match(self, text: str, keyword: str, lexicon: QuantityLexicon) -> Optional[KeywordMatch]:
        """Return the first hit of ``keyword`` in ``text`` or ``None``."""


class WindowedKeywordMatcher(KeywordMatcher):
    """Substring search with a fixed character window on each side of the hit."""

    def __init__(self, window: int = QUANTITY_WINDOW) -> None:
        if window < 0:
            raise ValueError("window must be non-negative")
        self.window = window

    def match(self, text: str, keyword: str, lexicon: QuantityLexicon) -> Optional[KeywordMatch]:
        needle = (keyword or "").strip().lower()
        if not needle:
            return None
        start = text.find(needle)
        if start < 0:
            return None
        end = start + len(needle)
        before = text[max(0, start - self.window):start]
        after = text[end:end + self.window]

        quantity = 1
        hits: List[Tuple[str, int]] = []
        for phrase, qty in lexicon:
            if phrase in before or phrase in after:
                quantity = qty
                hits.append((phrase, qty))
        return KeywordMatch(start=start, end=end, quantity=quantity, quantity_hits=tuple(hits))


@dataclass(frozen=True)
class UnresolvedItem:
    """Fallback guess that is not tied to a catalog entry yet."""

    name: str
    quantity: int = 1

    def to_api(self) -> Dict[str, object]:
        return {"name": self.name, "quantity": self.quantity}


@dataclass
class ParseResult:
    transcript: str
    lines: List[OrderLine] = field(default_factory=list)
    unresolved: Optional[UnresolvedItem] = None
    confidence: float = 0.0
    ambiguous: List[str] = field(default_factory=list)

    @property
    def low_confidence(self) -> bool:
        return not self.lines

    def to_api(self, language: Optional[Language] = None) -> Dict[str, object]:
        return {
            "transcript": self.transcript,
            "items": [line.to_api(language) for line in self.lines],
            "unresolved": self.unresolved.to_api() if self.unresolved else None,
            "confidence": round(self.confidence, 2),
            "ambiguous": list(self.ambiguous),
        }


CatalogLike = Union[MenuCatalog, Iterable[MenuEntry]]


class VoiceOrderParser:
    """Keyword/quantity scanner over an explicitly supplied catalog."""

    def __init__(
        self,
        catalog: Optional[CatalogLike] = None,
        lexicons: Optional[Mapping[Language, QuantityLexicon]] = None,
        matcher: Optional[KeywordMatcher] = None,
        *,
        collapse_overlapping: bool = False,
    ) -> None:
        self.catalog = catalog
        self.lexicons: Dict[Language, QuantityLexicon] = dict(
            lexicons if lexicons is not None else default_lexicons()
        )
        self.matcher = matcher or WindowedKeywordMatcher()
        self.collapse_overlapping = collapse_overlapping

    # ------------------------------------------------------------------
    def lexicon(self, language: Union[str, Language]) -> QuantityLexicon:
        lang = resolve_language(language)
        lexicon = self.lexicons.get(lang)
        if lexicon is None:
            raise ConfigurationError(lang, f"no quantity lexicon registered for {lang.value}")
        return lexicon

    def _catalog(self, catalog: Optional[CatalogLike]) -> MenuCatalog:
        source = catalog if catalog is not None else self.catalog
        if isinstance(source, MenuCatalog):
            return source
        return MenuCatalog(source)

    # ------------------------------------------------------------------
    def parse(
        self,
        transcript: Optional[str],
        language: Union[str, Language],
        catalog: Optional[CatalogLike] = None,
    ) -> ParseResult:
        lang = resolve_language(language)
        lexicon = self.lexicon(lang)
        menu = self._catalog(catalog)
        if not menu.supports(lang):
            raise ConfigurationError(lang, f"no menu keywords registered for {lang.value}")

        text = normalize_transcript(transcript)
        result = ParseResult(transcript=text)
        if not text:
            return result

        found: Dict[str, OrderLine] = {}
        spans: Dict[str, List[Tuple[int, int]]] = {}
        for entry in menu.list():
            if not entry.available:
                continue
            for keyword in entry.keywords_for(lang):
                hit = self.matcher.match(text, keyword, lexicon)
                if hit is None:
                    continue
                taken = spans.setdefault(entry.id, [])
                if self.collapse_overlapping and any(hit.overlaps(span) for span in taken):
                    continue
                taken.append((hit.start, hit.end))
                if hit.ambiguous:
                    if entry.id not in result.ambiguous:
                        result.ambiguous.append(entry.id)
                    logger.warning(
                        "Ambiguous quantity for %s near %r: %s -> %d",
                        entry.id, keyword, [phrase for phrase, _ in hit.quantity_hits], hit.quantity,
                    )
                if entry.id in found:
                    found[entry.id].quantity += hit.quantity
                else:
                    found[entry.id] = OrderLine(menu_entry=entry, quantity=hit.quantity)

        if found:
            result.lines = list(found.values())
            result.confidence = min(
                MATCH_BASE_CONFIDENCE + MATCH_STEP_CONFIDENCE * len(result.lines),
                MATCH_MAX_CONFIDENCE,
            )
            logger.debug("Parsed %r -> %s", text, [(line.menu_entry.id, line.quantity) for line in result.lines])
            return result

        result.unresolved = self._fallback(text, lexicon)
        if result.unresolved is not None:
            result.confidence = FALLBACK_CONFIDENCE
        logger.info("No keyword matched in %r (fallback=%s)", text, result.unresolved)
        return result

    def parse_transcript(
        self,
        transcript: Optional[str],
        language: Union[str, Language],
        catalog: Optional[CatalogLike] = None,
    ) -> List[OrderLine]:
        return self.parse(transcript, language, catalog).lines

    # ------------------------------------------------------------------
    @staticmethod
    def _fallback(text: str, lexicon: QuantityLexicon) -> Optional[UnresolvedItem]:
        quantity = 1
        name: Optional[str] = None
        for token in text.split():
            if _INT_RE.match(token):
                value = int(token)
                if value > 0:
                    quantity = value
                continue
            qty = lexicon.lookup(token)
            if qty is not None:
                quantity = qty
                continue
            if name is None and len(token) > 1:
                name = token
        if name is None:
            return None
        return UnresolvedItem(name=name, quantity=quantity)


def parse_transcript(
    transcript: Optional[str],
    language: Union[str, Language],
    catalog: CatalogLike,
) -> List[OrderLine]:
    """One-shot parse with the default lexicons and window."""
    return VoiceOrderParser().parse_transcript(transcript, language, catalog)


__all__ = [
    "QUANTITY_WINDOW",
    "KeywordMatch",
    "KeywordMatcher",
    "WindowedKeywordMatcher",
    "UnresolvedItem",
    "ParseResult",
    "VoiceOrderParser",
    "normalize_transcript",
    "parse_transcript",
]
