from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional

from .order import OrderSummary

logger = logging.getLogger(__name__)


class OrderHistoryStore:
    """JSON-backed log of confirmed orders.

    Without a path the history only lives in memory.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._lock = RLock()
        self._orders: List[Dict[str, Any]] = []
        self._load()

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Order history at %s is unreadable; starting empty", self._path)
            raw = {}
        if not isinstance(raw, dict):
            raw = {}
        self._orders = [dict(o) for o in (raw.get("orders") or []) if isinstance(o, dict)]

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps({"orders": self._orders}, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)

    def add(self, summary: OrderSummary) -> None:
        with self._lock:
            self._orders.append(summary.to_dict())
            self._save()

    def recent(self, limit: int = 10) -> List[OrderSummary]:
        with self._lock:
            rows = self._orders[-limit:] if limit > 0 else []
        return [OrderSummary.from_dict(row) for row in reversed(rows)]

    def all(self) -> List[OrderSummary]:
        with self._lock:
            return [OrderSummary.from_dict(row) for row in self._orders]

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)


__all__ = ["OrderHistoryStore"]
