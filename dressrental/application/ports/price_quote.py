from __future__ import annotations

from abc import ABC, abstractmethod

from dressrental.domain.entities.price_quote import PriceQuote


class PriceQuotePort(ABC):
    @abstractmethod
    def quote_price(self, dress_id: str, start_iso: str, end_iso: str) -> PriceQuote | None:
        """Quote a dress over a range. Returns None when no quote is available."""
        raise NotImplementedError
