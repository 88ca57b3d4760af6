from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .languages import Language, resolve_language


@dataclass(frozen=True)
class MenuEntry:
    """Represents a single orderable menu entry."""

    id: str
    display_name: Dict[Language, str] = field(default_factory=dict)
    keywords: Dict[Language, Tuple[str, ...]] = field(default_factory=dict)
    price: int = 0
    category: str = ""
    available: bool = True
    popularity: int = 50

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("menu entry id required")
        if self.price < 0:
            raise ValueError(f"price must be non-negative for {self.id!r}")

    def name(self, language: Language) -> str:
        """Localized name, falling back to Korean and then the id."""
        return self.display_name.get(language) or self.display_name.get(Language.KO) or self.id

    def keywords_for(self, language: Language) -> Tuple[str, ...]:
        return self.keywords.get(language, ())

    def to_api(self, language: Optional[Language] = None) -> Dict[str, object]:
        data: Dict[str, object] = {
            "id": self.id,
            "price": self.price,
            "category": self.category,
            "available": self.available,
            "popularity": self.popularity,
        }
        if language is None:
            data["name"] = {lang.value: text for lang, text in self.display_name.items()}
            data["keywords"] = {lang.value: list(words) for lang, words in self.keywords.items()}
        else:
            data["name"] = self.name(language)
            data["keywords"] = list(self.keywords_for(language))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "MenuEntry":
        names = data.get("name") or data.get("displayName") or {}
        if isinstance(names, str):
            names = {Language.KO.value: names}
        keywords = data.get("keywords") or {}
        return cls(
            id=str(data.get("id", "")).strip(),
            display_name={resolve_language(k): str(v) for k, v in dict(names).items()},
            keywords={
                resolve_language(k): tuple(str(w) for w in (v or []) if str(w).strip())
                for k, v in dict(keywords).items()
            },
            price=int(data.get("price", 0) or 0),
            category=str(data.get("category") or ""),
            available=bool(data.get("available", True)),
            popularity=int(data.get("popularity", 50)),
        )


class MenuCatalog:
    """Thread-safe in-memory catalogue shared by the parser and the API."""

    def __init__(self, entries: Optional[Iterable[MenuEntry]] = None) -> None:
        self._entries: Dict[str, MenuEntry] = {}
        self._lock = RLock()
        if entries is not None:
            self.upsert(entries)

    # ------------------------------------------------------------------
    def bootstrap_from_file(self, path: Path) -> int:
        if not path.exists():
            return 0
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
        raw_items = payload.get("menu", []) if isinstance(payload, dict) else payload
        entries = [MenuEntry.from_dict(it) for it in raw_items or []]
        self.upsert(entries)
        return len(entries)

    # ------------------------------------------------------------------
    def upsert(self, entries: Iterable[MenuEntry]) -> None:
        items = list(entries)
        seen = set()
        for entry in items:
            if entry.id in seen:
                raise ValueError(f"duplicate menu id: {entry.id}")
            seen.add(entry.id)
        with self._lock:
            for entry in items:
                self._entries[entry.id] = entry

    # ------------------------------------------------------------------
    def list(self) -> List[MenuEntry]:
        with self._lock:
            return list(self._entries.values())

    def get(self, entry_id: str) -> Optional[MenuEntry]:
        with self._lock:
            return self._entries.get(entry_id)

    def find_by_category(self, category: str) -> List[MenuEntry]:
        return [entry for entry in self.list() if entry.category == category]

    def keyword_languages(self) -> List[Language]:
        langs: List[Language] = []
        for entry in self.list():
            for lang, words in entry.keywords.items():
                if words and lang not in langs:
                    langs.append(lang)
        return langs

    def supports(self, language: Union[str, Language]) -> bool:
        """An empty catalog supports every language; otherwise some entry needs keywords."""
        return not len(self) or resolve_language(language) in self.keyword_languages()

    def resolve_name(self, name: str, language: Union[str, Language]) -> Optional[MenuEntry]:
        lang = resolve_language(language)
        needle = (name or "").strip().lower()
        if not needle:
            return None
        for entry in self.list():
            if not entry.available:
                continue
            candidates = [entry.name(lang), *entry.keywords_for(lang)]
            for text in candidates:
                hay = text.strip().lower()
                if hay and (needle in hay or hay in needle):
                    return entry
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["MenuCatalog", "MenuEntry"]
