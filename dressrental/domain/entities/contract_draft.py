from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from dressrental.domain.entities.availability import AvailabilityStatus
from dressrental.domain.entities.contract_totals import ContractTotals
from dressrental.domain.entities.contract_type import ContractMode
from dressrental.domain.entities.customer import Customer
from dressrental.domain.entities.price_quote import PriceQuote


class DraftStatus(str, Enum):
    selecting = "selecting"
    configuring = "configuring"
    ready = "ready"
    submitting = "submitting"
    submitted = "submitted"
    cancelled = "cancelled"


@dataclass(frozen=True)
class ContractDraft:
    status: DraftStatus = DraftStatus.selecting
    mode: ContractMode = ContractMode.daily
    base_dress_id: str | None = None
    # package mode: base dress first, then the extra dresses picked for the package
    dress_ids: tuple[str, ...] = ()
    start: datetime | None = None
    end: datetime | None = None
    contract_number: str | None = None
    contract_type_id: str | None = None
    package_id: str | None = None
    # two provenance sets: user toggles vs. defaults forced by the active package
    manual_addon_ids: frozenset[str] = field(default_factory=frozenset)
    package_addon_ids: frozenset[str] = field(default_factory=frozenset)
    customer: Customer | None = None
    payment_method: str = "card"
    # terminal user inputs, None until edited
    deposit_paid_ttc: float | None = None
    caution_paid_ttc: float | None = None
    price_quote: PriceQuote | None = None
    totals: ContractTotals = field(default_factory=ContractTotals)
    availability_status: AvailabilityStatus = AvailabilityStatus.idle
    availability_warning: str | None = None

    @property
    def selected_addon_ids(self) -> frozenset[str]:
        return self.manual_addon_ids | self.package_addon_ids

    @property
    def package_dress_ids(self) -> tuple[str, ...]:
        return self.dress_ids if self.mode == ContractMode.package else ()

    @property
    def has_complete_range(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def is_open(self) -> bool:
        return self.status not in {DraftStatus.submitted, DraftStatus.cancelled}
