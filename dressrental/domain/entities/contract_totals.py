from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContractTotals:
    days: int = 1
    base_ht: float = 0.0
    base_ttc: float = 0.0
    addons_chargeable_ht: float = 0.0
    addons_chargeable_ttc: float = 0.0
    addons_included_ht: float = 0.0
    addons_included_ttc: float = 0.0
    total_ht: float = 0.0
    total_ttc: float = 0.0
    deposit_due_ht: float = 0.0
    deposit_due_ttc: float = 0.0
    deposit_paid_ht: float = 0.0
    deposit_paid_ttc: float = 0.0
    caution_due_ht: float = 0.0
    caution_due_ttc: float = 0.0
    caution_paid_ht: float = 0.0
    caution_paid_ttc: float = 0.0


@dataclass(frozen=True)
class RemainingBalances:
    deposit_ht: float
    deposit_ttc: float
    caution_ht: float
    caution_ttc: float

    @property
    def total_ht(self) -> float:
        return self.deposit_ht + self.caution_ht

    @property
    def total_ttc(self) -> float:
        return self.deposit_ttc + self.caution_ttc

    @property
    def is_fully_paid(self) -> bool:
        return self.deposit_ttc == 0 and self.caution_ttc == 0
