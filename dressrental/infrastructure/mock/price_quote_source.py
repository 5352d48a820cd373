from __future__ import annotations

from datetime import datetime

from dressrental.application.exceptions import PriceQuoteError
from dressrental.application.ports.price_quote import PriceQuotePort
from dressrental.application.utils.rental_period import rental_days
from dressrental.domain.entities.price_quote import PriceQuote


class MockPriceQuoteSource(PriceQuotePort):
    """Quotes a flat per-day (HT, TTC) rate for the dresses it knows about."""

    def __init__(self, rates: dict[str, tuple[float, float]] | None = None, fail: bool = False) -> None:
        self._rates = dict(rates or {})
        self.fail = fail

    def set_rate(self, dress_id: str, per_day_ht: float, per_day_ttc: float) -> None:
        self._rates[dress_id] = (per_day_ht, per_day_ttc)

    def quote_price(self, dress_id: str, start_iso: str, end_iso: str) -> PriceQuote | None:
        if self.fail:
            raise PriceQuoteError("Mock pricing rules are down")
        rate = self._rates.get(dress_id)
        if rate is None:
            return None
        days = rental_days(datetime.fromisoformat(start_iso), datetime.fromisoformat(end_iso))
        return PriceQuote(final_price_ht=rate[0] * days, final_price_ttc=rate[1] * days, duration_days=days)
