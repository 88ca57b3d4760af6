from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .history import OrderHistoryStore
from .languages import Language
from .menus import MenuCatalog, MenuEntry
from .order import OrderSummary

_TITLES: Dict[Language, Dict[str, str]] = {
    Language.KO: {
        "popular": "인기 메뉴",
        "personalized": "맞춤 추천",
        "satisfaction": "% 고객 만족도",
        "frequent_category": "자주 주문하시는 카테고리입니다",
        "price_match": "평소 주문 가격대와 비슷합니다",
    },
    Language.EN: {
        "popular": "Popular Menu",
        "personalized": "Recommended for You",
        "satisfaction": "% Customer Satisfaction",
        "frequent_category": "From your favorite category",
        "price_match": "Matches your usual price range",
    },
    Language.ZH: {
        "popular": "热门菜单",
        "personalized": "为您推荐",
        "satisfaction": "% 客户满意度",
        "frequent_category": "您经常点的菜系",
        "price_match": "符合您的价格范围",
    },
    Language.JA: {
        "popular": "人気メニュー",
        "personalized": "おすすめ",
        "satisfaction": "% 顧客満足度",
        "frequent_category": "よく注文されるカテゴリ",
        "price_match": "普段の価格帯に近い",
    },
}

DEFAULT_AVERAGE_PRICE = 10000


@dataclass
class Recommendation:
    id: str
    kind: str
    title: str
    description: str
    entries: List[MenuEntry] = field(default_factory=list)
    popularity: int = 50

    @property
    def total_price(self) -> int:
        return sum(entry.price for entry in self.entries)

    def to_api(self, language: Language) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": self.kind,
            "title": self.title,
            "description": self.description,
            "items": [entry.to_api(language) for entry in self.entries],
            "totalPrice": self.total_price,
            "popularity": self.popularity,
        }


@dataclass
class Preferences:
    favorite_categories: List[str]
    frequent_items: List[str]
    average_price: float


def analyze_preferences(orders: Iterable[OrderSummary]) -> Preferences:
    categories: Counter = Counter()
    items: Counter = Counter()
    spent = 0
    count = 0
    for order in orders:
        for item in order.items:
            qty = int(item.get("quantity", 1) or 1)
            categories[str(item.get("category") or "others")] += qty
            items[str(item.get("id"))] += qty
            spent += int(item.get("price", 0) or 0) * qty
            count += qty
    return Preferences(
        favorite_categories=[cat for cat, _ in categories.most_common(3)],
        frequent_items=[item_id for item_id, n in items.items() if n >= 2],
        average_price=spent / count if count else DEFAULT_AVERAGE_PRICE,
    )


class RecommendationEngine:
    """Popular and history-based suggestions over the kiosk catalog."""

    def __init__(self, menus: MenuCatalog, history: Optional[OrderHistoryStore] = None) -> None:
        self._menus = menus
        self._history = history

    def _available(self) -> List[MenuEntry]:
        return [entry for entry in self._menus.list() if entry.available]

    def popular(self, language: Language, limit: int = 6) -> List[Recommendation]:
        titles = _TITLES[language]
        ranked = sorted(self._available(), key=lambda entry: entry.popularity, reverse=True)
        return [
            Recommendation(
                id=f"popular-{entry.id}",
                kind="popular",
                title=f"{titles['popular']}: {entry.name(language)}",
                description=f"{entry.popularity}{titles['satisfaction']}",
                entries=[entry],
                popularity=entry.popularity,
            )
            for entry in ranked[:limit]
        ]

    def personalized(
        self,
        language: Language,
        limit: int = 4,
        orders: Optional[Iterable[OrderSummary]] = None,
    ) -> List[Recommendation]:
        if orders is None:
            orders = self._history.all() if self._history is not None else []
        prefs = analyze_preferences(orders)
        titles = _TITLES[language]
        menu = self._available()
        picked: List[str] = []
        out: List[Recommendation] = []

        for category in prefs.favorite_categories[:2]:
            candidates = [
                entry for entry in menu
                if entry.category == category and entry.id not in prefs.frequent_items
            ]
            candidates.sort(key=lambda entry: entry.popularity, reverse=True)
            for entry in candidates[:2]:
                if entry.id in picked:
                    continue
                picked.append(entry.id)
                out.append(Recommendation(
                    id=f"personalized-{entry.id}",
                    kind="personalized",
                    title=f"{titles['personalized']}: {entry.name(language)}",
                    description=titles["frequent_category"],
                    entries=[entry],
                    popularity=entry.popularity,
                ))

        near_price = [
            entry for entry in menu
            if entry.id not in picked and abs(entry.price - prefs.average_price) <= prefs.average_price * 0.3
        ]
        near_price.sort(key=lambda entry: entry.popularity, reverse=True)
        for entry in near_price[:1]:
            out.append(Recommendation(
                id=f"price-match-{entry.id}",
                kind="personalized",
                title=f"{titles['personalized']}: {entry.name(language)}",
                description=titles["price_match"],
                entries=[entry],
                popularity=entry.popularity,
            ))
        return out[:limit]


__all__ = ["Recommendation", "RecommendationEngine", "Preferences", "analyze_preferences"]
