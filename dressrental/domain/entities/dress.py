from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Dress:
    id: str
    name: str | None = None
    reference: str | None = None
    # sale price, used as the security-deposit basis
    price_ht: float | None = None
    price_ttc: float | None = None
    price_per_day_ht: float | None = None
    price_per_day_ttc: float | None = None

    @property
    def has_daily_rate(self) -> bool:
        return bool((self.price_per_day_ht or 0) > 0 or (self.price_per_day_ttc or 0) > 0)
