from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from uuid import uuid4

from .languages import Language, format_count, format_total, list_separator
from .menus import MenuEntry


@dataclass
class OrderLine:
    """One row of the running order, keyed by ``menu_entry.id``."""

    menu_entry: MenuEntry
    quantity: int = 1
    options: List[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.menu_entry.id

    @property
    def line_total(self) -> int:
        return self.menu_entry.price * self.quantity

    def copy(self) -> "OrderLine":
        return replace(self, options=list(self.options))

    def to_api(self, language: Optional[Language] = None) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.menu_entry.name(language) if language else self.id,
            "price": self.menu_entry.price,
            "quantity": self.quantity,
            "category": self.menu_entry.category,
            "options": list(self.options),
            "lineTotal": self.line_total,
        }


def merge_into_order(candidates: Iterable[OrderLine], current_order: Iterable[OrderLine]) -> List[OrderLine]:
    """Fold candidates into a copy of the order, one line per id.

    Existing lines keep their position; new ids are appended in discovery order.
    Neither input is modified.
    """
    merged = [line.copy() for line in current_order]
    index = {line.id: line for line in merged}
    for candidate in candidates:
        existing = index.get(candidate.id)
        if existing is not None:
            existing.quantity += candidate.quantity
        else:
            line = candidate.copy()
            merged.append(line)
            index[line.id] = line
    return merged


def remove_line(order: Iterable[OrderLine], entry_id: str) -> List[OrderLine]:
    return [line.copy() for line in order if line.id != entry_id]


def set_quantity(order: Iterable[OrderLine], entry_id: str, quantity: int) -> List[OrderLine]:
    if quantity <= 0:
        return remove_line(order, entry_id)
    updated = []
    for line in order:
        line = line.copy()
        if line.id == entry_id:
            line.quantity = int(quantity)
        updated.append(line)
    return updated


def total_price(order: Iterable[OrderLine]) -> int:
    return sum(line.menu_entry.price * line.quantity for line in order)


@dataclass
class OrderSummary:
    order_id: str
    language: Language
    items: List[Dict[str, object]]
    total: int
    timestamp: str
    text: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "orderId": self.order_id,
            "language": self.language.value,
            "items": self.items,
            "total": self.total,
            "timestamp": self.timestamp,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "OrderSummary":
        return cls(
            order_id=str(data.get("orderId") or ""),
            language=Language(str(data.get("language") or Language.KO.value)),
            items=[dict(it) for it in data.get("items") or []],
            total=int(data.get("total", 0) or 0),
            timestamp=str(data.get("timestamp") or ""),
            text=str(data.get("text") or ""),
        )


def describe_order(order: Iterable[OrderLine], language: Language) -> str:
    """Readback sentence such as ``비빔밥 2개, 공기밥 1개 - 총 26,000원``."""
    lines = list(order)
    items = list_separator(language).join(
        format_count(language, line.menu_entry.name(language), line.quantity) for line in lines
    )
    return f"{items} - {format_total(language, total_price(lines))}"


def summarize_order(order: Iterable[OrderLine], language: Language) -> OrderSummary:
    lines = list(order)
    if not lines:
        raise ValueError("cannot confirm an empty order")
    return OrderSummary(
        order_id=str(uuid4()),
        language=language,
        items=[line.to_api(language) for line in lines],
        total=total_price(lines),
        timestamp=datetime.now(timezone.utc).isoformat(),
        text=describe_order(lines, language),
    )


__all__ = [
    "OrderLine",
    "OrderSummary",
    "merge_into_order",
    "remove_line",
    "set_quantity",
    "total_price",
    "describe_order",
    "summarize_order",
]
