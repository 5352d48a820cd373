"""
Contract pricing.

compute_totals is a pure function of a draft and the reference data: it can be
re-run on every edit and always yields the same figures for the same inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from dressrental.application.use_cases.reference_data import ReferenceData
from dressrental.application.utils.money import DEFAULT_VAT_RATIO, price_pair, round_money, vat_ratio
from dressrental.application.utils.rental_period import rental_days
from dressrental.core.config import Settings, settings as default_settings
from dressrental.domain.entities.contract_addon import ContractAddon
from dressrental.domain.entities.contract_draft import ContractDraft
from dressrental.domain.entities.contract_totals import ContractTotals, RemainingBalances
from dressrental.domain.entities.contract_type import ContractMode
from dressrental.domain.entities.dress import Dress
from dressrental.domain.entities.price_quote import PriceQuote


@dataclass(frozen=True)
class PricingConfig:
    fallback_vat_ratio: float = DEFAULT_VAT_RATIO
    deposit_paid_default_ratio: float = 0.5
    package_deposit_floor_ratio: float = 0.5
    default_caution_ttc: float = 0.0

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> PricingConfig:
        source = source or default_settings
        return cls(
            fallback_vat_ratio=source.DEFAULT_VAT_RATIO,
            deposit_paid_default_ratio=source.DEPOSIT_PAID_DEFAULT_RATIO,
            package_deposit_floor_ratio=source.PACKAGE_DEPOSIT_FLOOR_RATIO,
            default_caution_ttc=source.DEFAULT_CAUTION_TTC,
        )


@dataclass(frozen=True)
class AddonSplit:
    chargeable_ht: float = 0.0
    chargeable_ttc: float = 0.0
    included_ht: float = 0.0
    included_ttc: float = 0.0
    chargeable_ids: tuple[str, ...] = ()
    included_ids: tuple[str, ...] = ()


def split_addons(
    addons: Iterable[ContractAddon],
    selected_ids: frozenset[str],
    package_included_ids: frozenset[str],
    fallback: float = DEFAULT_VAT_RATIO,
) -> AddonSplit:
    """Only add-ons bundled in the active package are "included"; every other selection is charged."""
    chargeable_ht = chargeable_ttc = included_ht = included_ttc = 0.0
    chargeable_ids: list[str] = []
    included_ids: list[str] = []
    for addon in addons:
        if addon.id not in selected_ids:
            continue
        ht, ttc = price_pair(addon.price_ht, addon.price_ttc, fallback)
        if addon.id in package_included_ids:
            included_ht += ht
            included_ttc += ttc
            included_ids.append(addon.id)
        else:
            chargeable_ht += ht
            chargeable_ttc += ttc
            chargeable_ids.append(addon.id)
    return AddonSplit(
        chargeable_ht=chargeable_ht,
        chargeable_ttc=chargeable_ttc,
        included_ht=included_ht,
        included_ttc=included_ttc,
        chargeable_ids=tuple(chargeable_ids),
        included_ids=tuple(included_ids),
    )


def daily_rate(dress: Dress | None, quote: PriceQuote | None, fallback: float = DEFAULT_VAT_RATIO) -> tuple[float, float]:
    """
    Per-day (HT, TTC) for a dress.
    Priority: pricing-rules quote, then the dress daily rate, then the dress sale price.
    """
    if quote is not None and quote.duration_days > 0 and (quote.final_price_ht > 0 or quote.final_price_ttc > 0):
        return price_pair(
            quote.final_price_ht / quote.duration_days,
            quote.final_price_ttc / quote.duration_days,
            fallback,
        )
    if dress is None:
        return 0.0, 0.0
    dress_ratio = vat_ratio(dress.price_ht, dress.price_ttc, fallback)
    if dress.has_daily_rate:
        return price_pair(dress.price_per_day_ht, dress.price_per_day_ttc, dress_ratio)
    return price_pair(dress.price_ht, dress.price_ttc, fallback)


def compute_totals(draft: ContractDraft, reference: ReferenceData, config: PricingConfig | None = None) -> ContractTotals:
    config = config or PricingConfig()
    fallback = config.fallback_vat_ratio

    days = rental_days(draft.start, draft.end) if draft.has_complete_range else 1
    dress = reference.dress(draft.base_dress_id)
    package = reference.package(draft.package_id) if draft.mode == ContractMode.package else None

    if package is not None:
        base_ht, base_ttc = price_pair(package.price_ht, package.price_ttc, fallback)
        package_included_ids = frozenset(package.addon_ids)
    else:
        quote = draft.price_quote
        if quote is not None and (
            draft.mode != ContractMode.daily or not quote.matches(draft.base_dress_id, draft.start, draft.end)
        ):
            quote = None
        per_day_ht, per_day_ttc = daily_rate(dress, quote, fallback)
        base_ht, base_ttc = per_day_ht * days, per_day_ttc * days
        package_included_ids = frozenset()

    split = split_addons(reference.addons, draft.selected_addon_ids, package_included_ids, fallback)
    total_ht = base_ht + split.chargeable_ht
    total_ttc = base_ttc + split.chargeable_ttc

    ratio = vat_ratio(base_ht, base_ttc, fallback)
    deposit_due_ttc = total_ttc
    deposit_due_ht = deposit_due_ttc * ratio

    if draft.mode == ContractMode.package:
        floor = deposit_due_ttc * config.package_deposit_floor_ratio
        current = draft.deposit_paid_ttc if draft.deposit_paid_ttc is not None else floor
        deposit_paid_ttc = max(current, floor)
    else:
        current = (
            draft.deposit_paid_ttc
            if draft.deposit_paid_ttc is not None
            else deposit_due_ttc * config.deposit_paid_default_ratio
        )
        deposit_paid_ttc = max(current, 0.0)

    if package is not None:
        caution_ht, caution_ttc = base_ht, base_ttc
    elif dress is not None:
        caution_ht, caution_ttc = price_pair(dress.price_ht, dress.price_ttc, fallback)
    else:
        caution_ht = caution_ttc = 0.0
    if caution_ttc <= 0 and config.default_caution_ttc > 0:
        caution_ttc = config.default_caution_ttc
        caution_ht = caution_ttc * fallback

    caution_paid_ttc = min(max(draft.caution_paid_ttc or 0.0, 0.0), caution_ttc)

    return ContractTotals(
        days=days,
        base_ht=base_ht,
        base_ttc=base_ttc,
        addons_chargeable_ht=split.chargeable_ht,
        addons_chargeable_ttc=split.chargeable_ttc,
        addons_included_ht=split.included_ht,
        addons_included_ttc=split.included_ttc,
        total_ht=total_ht,
        total_ttc=total_ttc,
        deposit_due_ht=deposit_due_ht,
        deposit_due_ttc=deposit_due_ttc,
        deposit_paid_ht=deposit_paid_ttc * ratio,
        deposit_paid_ttc=deposit_paid_ttc,
        caution_due_ht=caution_ht,
        caution_due_ttc=caution_ttc,
        caution_paid_ht=caution_paid_ttc * ratio,
        caution_paid_ttc=caution_paid_ttc,
    )


def refresh_totals(previous: ContractTotals | None, computed: ContractTotals) -> tuple[ContractTotals, bool]:
    """Keep the previous object when nothing changed so observers are not notified again."""
    if previous is not None and previous == computed:
        return previous, False
    return computed, True


def clamp_deposit_paid(value: float, mode: ContractMode, totals: ContractTotals, config: PricingConfig | None = None) -> float:
    config = config or PricingConfig()
    floor = totals.total_ttc * config.package_deposit_floor_ratio if mode == ContractMode.package else 0.0
    return round_money(max(value, floor))


def clamp_caution_paid(value: float, totals: ContractTotals) -> float:
    return round_money(min(max(value, 0.0), totals.caution_due_ttc))


def remaining_balances(totals: ContractTotals) -> RemainingBalances:
    return RemainingBalances(
        deposit_ht=max(totals.deposit_due_ht - totals.deposit_paid_ht, 0.0),
        deposit_ttc=max(totals.deposit_due_ttc - totals.deposit_paid_ttc, 0.0),
        caution_ht=max(totals.caution_due_ht - totals.caution_paid_ht, 0.0),
        caution_ttc=max(totals.caution_due_ttc - totals.caution_paid_ttc, 0.0),
    )
