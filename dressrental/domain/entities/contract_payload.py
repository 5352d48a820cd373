from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class ContractCreatePayload:
    contract_number: str
    customer_id: str
    contract_type_id: str | None
    start_datetime: str
    end_datetime: str
    deposit_payment_method: str
    account_ht: float
    account_ttc: float
    account_paid_ht: float
    account_paid_ttc: float
    caution_ht: float
    caution_ttc: float
    caution_paid_ht: float
    caution_paid_ttc: float
    total_price_ht: float
    total_price_ttc: float
    package_id: str | None
    addon_ids: tuple[str, ...] = ()
    dress_ids: tuple[str, ...] = ()
    status: str = "DRAFT"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        addon_ids = data.pop("addon_ids")
        dress_ids = data.pop("dress_ids")
        data["addons"] = [{"addon_id": addon_id} for addon_id in addon_ids]
        data["dresses"] = [{"dress_id": dress_id} for dress_id in dress_ids]
        return data


@dataclass(frozen=True)
class ContractRecord:
    id: str
    contract_number: str
    status: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)
