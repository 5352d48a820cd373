from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContractAddon:
    id: str
    name: str
    price_ht: float | None = None
    price_ttc: float | None = None
    included: bool = False  # pre-selected unless explicitly removed
    description: str | None = None
