from __future__ import annotations

import logging
from datetime import datetime

from dressrental.application.exceptions import PriceQuoteError
from dressrental.application.ports.price_quote import PriceQuotePort
from dressrental.domain.entities.price_quote import PriceQuote
from dressrental.infrastructure.backend.client import BackendClient, extract_object
from dressrental.infrastructure.backend.mappers import price_quote_from_json


def _day(iso: str) -> str:
    """The pricing-rules service takes calendar days, YYYY-MM-DD."""
    return datetime.fromisoformat(iso.replace("Z", "+00:00")).date().isoformat()


class HttpPriceQuoteSource(PriceQuotePort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def quote_price(self, dress_id: str, start_iso: str, end_iso: str) -> PriceQuote | None:
        params = {"dress_id": dress_id, "start_date": _day(start_iso), "end_date": _day(end_iso)}
        body = self._client.get_json(
            "/pricing-rules/calculate",
            params=params,
            error_cls=PriceQuoteError,
            not_found_ok=True,
        )
        data = extract_object(body)
        quote = price_quote_from_json(data) if data is not None else None
        if quote is None:
            self._logger.info("No pricing rule for dress", extra={"dress_id": dress_id})
        return quote
