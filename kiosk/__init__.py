"""Domain services for the senior voice-ordering kiosk."""

from .errors import ConfigurationError
from .history import OrderHistoryStore
from .languages import Language, QuantityLexicon, default_lexicons, resolve_language
from .memory import SessionStore
from .menus import MenuCatalog, MenuEntry
from .order import (
    OrderLine,
    OrderSummary,
    describe_order,
    merge_into_order,
    remove_line,
    set_quantity,
    summarize_order,
    total_price,
)
from .parser import (
    KeywordMatcher,
    ParseResult,
    UnresolvedItem,
    VoiceOrderParser,
    WindowedKeywordMatcher,
    normalize_transcript,
    parse_transcript,
)
from .recommendations import RecommendationEngine
from .state import OrderSession

__all__ = [
    "ConfigurationError",
    "Language",
    "QuantityLexicon",
    "default_lexicons",
    "resolve_language",
    "MenuCatalog",
    "MenuEntry",
    "OrderLine",
    "OrderSummary",
    "describe_order",
    "merge_into_order",
    "remove_line",
    "set_quantity",
    "summarize_order",
    "total_price",
    "KeywordMatcher",
    "ParseResult",
    "UnresolvedItem",
    "VoiceOrderParser",
    "WindowedKeywordMatcher",
    "normalize_transcript",
    "parse_transcript",
    "OrderHistoryStore",
    "RecommendationEngine",
    "SessionStore",
    "OrderSession",
]
