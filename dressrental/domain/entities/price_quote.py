from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PriceQuote:
    """Result of the pricing-rules service for one dress over one range."""

    final_price_ht: float
    final_price_ttc: float
    duration_days: int
    # inputs the quote was computed for, checked before applying it to a draft
    dress_id: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    def matches(self, dress_id: str | None, start: datetime | None, end: datetime | None) -> bool:
        return self.dress_id == dress_id and self.start == start and self.end == end
