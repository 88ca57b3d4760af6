from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .languages import Language
from .order import OrderLine, merge_into_order, remove_line, set_quantity, total_price


@dataclass
class OrderSession:
    """Running order for one kiosk session; discarded on reset or confirmation."""

    session_id: str
    language: Language = Language.KO
    order: List[OrderLine] = field(default_factory=list)
    transcripts: List[str] = field(default_factory=list)
    last_prompt: str = ""

    def remember_transcript(self, transcript: str) -> None:
        self.transcripts.append(transcript)

    def add(self, candidates: Iterable[OrderLine]) -> None:
        self.order = merge_into_order(candidates, self.order)

    def remove(self, entry_id: str) -> None:
        self.order = remove_line(self.order, entry_id)

    def set_quantity(self, entry_id: str, quantity: int) -> None:
        self.order = set_quantity(self.order, entry_id, quantity)

    def line(self, entry_id: str) -> Optional[OrderLine]:
        return next((line for line in self.order if line.id == entry_id), None)

    @property
    def total(self) -> int:
        return total_price(self.order)

    def reset(self) -> None:
        self.order = []
        self.transcripts = []
        self.last_prompt = ""

    def as_state(self) -> Dict[str, object]:
        return {
            "sessionId": self.session_id,
            "language": self.language.value,
            "items": [line.to_api(self.language) for line in self.order],
            "total": self.total,
            "transcripts": list(self.transcripts),
        }


__all__ = ["OrderSession"]
