from __future__ import annotations

import random
from datetime import datetime

from dressrental.domain.entities.contract_type import ContractMode, ContractType

_MODE_KEYWORDS: dict[ContractMode, tuple[str, ...]] = {
    ContractMode.daily: ("journal", "jour", "daily"),
    ContractMode.package: ("forfait", "package", "forfaitaire"),
}


def generate_contract_number(
    prefix: str = "CTR",
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """Human-readable number, e.g. CTR-25-1234567."""
    year = (now or datetime.now()).strftime("%y")
    digits = (rng or random).randint(1_000_000, 9_999_999)
    return f"{prefix}-{year}-{digits}"


def resolve_contract_type_id(
    types: list[ContractType],
    mode: ContractMode,
    daily_fallback_id: str,
) -> str | None:
    if mode == ContractMode.daily and any(t.id == daily_fallback_id for t in types):
        return daily_fallback_id
    if not types:
        return daily_fallback_id if mode == ContractMode.daily else None

    keywords = _MODE_KEYWORDS[mode]
    for contract_type in types:
        name = (contract_type.name or "").lower()
        if any(keyword in name for keyword in keywords):
            return contract_type.id

    if mode == ContractMode.daily:
        return daily_fallback_id
    return types[0].id
