from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from typing import Any, Callable
from zoneinfo import ZoneInfo

from dressrental.application.exceptions import BackendUpstreamError, InvalidTransitionError
from dressrental.application.ports.catalog import CatalogPort
from dressrental.application.ports.contract_gateway import ContractGatewayPort
from dressrental.application.ports.price_quote import PriceQuotePort
from dressrental.application.use_cases.availability import AvailabilityResolver, status_for
from dressrental.application.use_cases.pricing import (
    PricingConfig,
    clamp_caution_paid,
    clamp_deposit_paid,
    compute_totals,
    refresh_totals,
)
from dressrental.application.use_cases.reference_data import ReferenceData, load_reference_data
from dressrental.application.utils.contract_identity import generate_contract_number, resolve_contract_type_id
from dressrental.application.utils.money import parse_amount, round_money
from dressrental.application.utils.rental_period import daily_window, normalize_range, package_window, to_iso
from dressrental.core.config import Settings, settings as default_settings
from dressrental.domain.entities.availability import AvailabilityResult, AvailabilityStatus
from dressrental.domain.entities.contract_draft import ContractDraft, DraftStatus
from dressrental.domain.entities.contract_payload import ContractCreatePayload, ContractRecord
from dressrental.domain.entities.contract_type import ContractMode
from dressrental.domain.entities.customer import Customer
from dressrental.domain.entities.price_quote import PriceQuote

PAYMENT_METHODS = ("card", "cash")

DraftListener = Callable[[ContractDraft], None]


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]


@dataclass(frozen=True)
class SubmissionResult:
    ok: bool
    record: ContractRecord | None = None
    validation: ValidationResult | None = None
    error: str | None = None


@dataclass(frozen=True)
class AvailabilityTicket:
    token: int
    dress_ids: tuple[str, ...]
    start: datetime
    end: datetime


@dataclass(frozen=True)
class QuoteTicket:
    dress_id: str
    start: datetime
    end: datetime


class ContractDraftUseCase:
    """
    In-progress rental contract: selecting -> configuring -> ready -> submitting -> submitted.

    Every edit produces a new immutable ContractDraft with recomputed totals.
    Listeners are notified only when the draft actually changed. Async lookups
    (availability, price quote) snapshot their inputs and their results are
    dropped if the draft moved on in the meantime.
    """

    def __init__(
        self,
        catalog: CatalogPort,
        gateway: ContractGatewayPort,
        resolver: AvailabilityResolver,
        quotes: PriceQuotePort | None = None,
        reference: ReferenceData | None = None,
        config: PricingConfig | None = None,
        app_settings: Settings | None = None,
        timezone: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._catalog = catalog
        self._gateway = gateway
        self._resolver = resolver
        self._quotes = quotes
        self._reference = reference
        self._settings = app_settings or default_settings
        self._config = config or PricingConfig.from_settings(self._settings)
        self._timezone = timezone or ZoneInfo(self._settings.BUSINESS_TIMEZONE)
        self._clock = clock or (lambda: datetime.now(self._timezone))
        self._draft: ContractDraft | None = None
        self._availability_token = 0
        self._listeners: list[DraftListener] = []
        self._logger = logging.getLogger(__name__)

    @property
    def draft(self) -> ContractDraft | None:
        return self._draft

    @property
    def reference(self) -> ReferenceData:
        if self._reference is None:
            self._reference = load_reference_data(self._catalog)
        return self._reference

    def subscribe(self, listener: DraftListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # selection

    def open(
        self,
        mode: ContractMode = ContractMode.daily,
        dress_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> ContractDraft:
        """Start a new draft. With a dress it goes straight to configuring; without one it waits in selecting."""
        self._availability_token += 1
        if start is not None:
            start, end = normalize_range(start, end)
        self._draft = None
        self._commit(ContractDraft(status=DraftStatus.selecting, mode=ContractMode(mode), start=start, end=end))
        if dress_id:
            self.choose_dress(dress_id)
            self.configure()
        return self._draft

    def choose_dress(self, dress_id: str) -> ContractDraft:
        draft = self._require(DraftStatus.selecting)
        self._load_dress(dress_id)
        return self._commit(replace(draft, base_dress_id=dress_id, dress_ids=(dress_id,)))

    def set_mode(self, mode: ContractMode) -> ValidationResult:
        """
        In configuring, a mode switch goes back through selecting and re-initializes the configuration.
        If the new mode cannot be configured the draft stays in selecting and the issues are returned.
        """
        mode = ContractMode(mode)
        draft = self._require(DraftStatus.selecting, DraftStatus.configuring, DraftStatus.ready)
        if draft.mode == mode:
            return ValidationResult()
        if draft.status == DraftStatus.selecting:
            self._commit(replace(draft, mode=mode))
            return ValidationResult()
        self._logger.info(
            "Contract mode switched",
            extra={"contract_number": draft.contract_number, "mode": mode.value},
        )
        self.back_to_selection()
        self._commit(replace(self._draft, mode=mode))
        result = self.configure()
        if not result.ok:
            self._logger.warning(
                "Contract mode switch left draft in selection",
                extra={"contract_number": draft.contract_number, "reason": ",".join(result.codes)},
            )
        return result

    def back_to_selection(self) -> ContractDraft:
        draft = self._require(DraftStatus.configuring, DraftStatus.ready)
        self._availability_token += 1
        return self._commit(replace(draft, status=DraftStatus.selecting, availability_status=AvailabilityStatus.idle))

    def configure(self) -> ValidationResult:
        draft = self._require(DraftStatus.selecting)
        issues: list[ValidationIssue] = []
        if not draft.base_dress_id:
            issues.append(ValidationIssue("missing_dress", "Select a dress to continue."))
        if draft.mode == ContractMode.package and not self.reference.packages:
            issues.append(ValidationIssue("no_package_available", "No package exists yet. Create one first."))
        if issues:
            return ValidationResult(tuple(issues))

        if draft.start is None:
            start, end = self._default_window(draft.mode)
        else:
            start, end = normalize_range(draft.start, draft.end)

        reference = self.reference
        configured = replace(
            draft,
            status=DraftStatus.configuring,
            start=start,
            end=end,
            contract_number=draft.contract_number
            or generate_contract_number(self._settings.CONTRACT_NUMBER_PREFIX, now=self._clock()),
            contract_type_id=resolve_contract_type_id(
                list(reference.contract_types), draft.mode, self._settings.DAILY_CONTRACT_TYPE_ID
            ),
            dress_ids=(draft.base_dress_id,),
            package_id=None,
            manual_addon_ids=reference.default_addon_ids,
            package_addon_ids=frozenset(),
            deposit_paid_ttc=None,
            caution_paid_ttc=None,
            price_quote=None,
            availability_status=AvailabilityStatus.idle,
            availability_warning=None,
        )
        self._commit(configured)
        self._logger.info(
            "Contract draft configured",
            extra={
                "contract_number": configured.contract_number,
                "dress_id": configured.base_dress_id,
                "mode": configured.mode.value,
            },
        )
        return ValidationResult()

    # configuration

    def select_package(self, package_id: str | None) -> ContractDraft:
        draft = self._require_package_mode()
        if package_id is None:
            return self._edit(package_id=None, package_addon_ids=frozenset())
        package = self.reference.package(package_id)
        if package is None:
            raise ValueError(f"Unknown package: {package_id}")
        dress_ids = tuple(dict.fromkeys((draft.base_dress_id, *draft.dress_ids)))[: max(package.num_dresses, 1)]
        return self._edit(
            package_id=package.id,
            package_addon_ids=frozenset(package.addon_ids),
            dress_ids=dress_ids,
        )

    def add_package_dress(self, dress_id: str) -> ContractDraft:
        draft = self._require_package_mode()
        if dress_id in draft.dress_ids:
            return draft
        self._load_dress(dress_id)
        return self._edit(dress_ids=(*draft.dress_ids, dress_id))

    def remove_package_dress(self, dress_id: str) -> ContractDraft:
        draft = self._require_package_mode()
        if dress_id == draft.base_dress_id or dress_id not in draft.dress_ids:
            return draft
        return self._edit(dress_ids=tuple(i for i in draft.dress_ids if i != dress_id))

    def set_package_dresses(self, dress_ids: list[str]) -> ContractDraft:
        """Replace the package selection. The base dress always stays first."""
        draft = self._require_package_mode()
        for dress_id in dress_ids:
            if dress_id != draft.base_dress_id:
                self._load_dress(dress_id)
        return self._edit(dress_ids=tuple(dict.fromkeys((draft.base_dress_id, *dress_ids))))

    def toggle_addon(self, addon_id: str, selected: bool | None = None) -> ContractDraft:
        draft = self._require(DraftStatus.configuring, DraftStatus.ready)
        if self.reference.addon(addon_id) is None:
            raise ValueError(f"Unknown add-on: {addon_id}")
        if draft.mode == ContractMode.package and addon_id in draft.package_addon_ids:
            # forced by the package
            return draft
        should_select = (addon_id not in draft.manual_addon_ids) if selected is None else selected
        if should_select:
            manual = draft.manual_addon_ids | {addon_id}
        else:
            manual = draft.manual_addon_ids - {addon_id}
        return self._edit(manual_addon_ids=manual)

    def select_customer(self, customer: Customer) -> ContractDraft:
        self._require(DraftStatus.configuring, DraftStatus.ready)
        return self._edit(customer=customer)

    def clear_customer(self) -> ContractDraft:
        self._require(DraftStatus.configuring, DraftStatus.ready)
        return self._edit(customer=None)

    def set_dates(self, start: datetime, end: datetime | None) -> ContractDraft:
        self._require(DraftStatus.configuring, DraftStatus.ready)
        start, end = normalize_range(start, end)
        return self._edit(start=start, end=end, availability_status=AvailabilityStatus.idle, availability_warning=None)

    def set_rental_days(self, first_day: date, last_day: date | None = None) -> ContractDraft:
        """Day-picker input: daily rentals run opening to closing hour, packages get a 24-hour window."""
        draft = self._require(DraftStatus.configuring, DraftStatus.ready)
        if draft.mode == ContractMode.package:
            start, end = package_window(first_day, self._timezone, self._settings.PACKAGE_START_HOUR)
        else:
            start, end = daily_window(
                first_day,
                last_day,
                self._timezone,
                self._settings.DAILY_START_HOUR,
                self._settings.DAILY_END_HOUR,
            )
        return self.set_dates(start, end)

    def set_payment_method(self, method: str) -> ContractDraft:
        self._require(DraftStatus.configuring, DraftStatus.ready)
        if method not in PAYMENT_METHODS:
            raise ValueError(f"Unsupported payment method: {method}")
        return self._edit(payment_method=method)

    def set_deposit_paid(self, value: Any) -> ContractDraft:
        """Blur of the deposit-paid field: parse, clamp to the mode's floor, round to cents."""
        draft = self._require(DraftStatus.configuring, DraftStatus.ready)
        amount = parse_amount(value)
        if amount is None:
            return self._edit(deposit_paid_ttc=None)
        return self._edit(deposit_paid_ttc=clamp_deposit_paid(amount, draft.mode, draft.totals, self._config))

    def set_caution_paid(self, value: Any) -> ContractDraft:
        draft = self._require(DraftStatus.configuring, DraftStatus.ready)
        amount = parse_amount(value)
        if amount is None:
            return self._edit(caution_paid_ttc=None)
        return self._edit(caution_paid_ttc=clamp_caution_paid(amount, draft.totals))

    # validation and submission

    def validate(self, draft: ContractDraft | None = None) -> ValidationResult:
        draft = draft or self._draft
        if draft is None:
            return ValidationResult((ValidationIssue("missing_dress", "No contract draft is open."),))
        issues: list[ValidationIssue] = []
        if not draft.base_dress_id:
            issues.append(ValidationIssue("missing_dress", "Select a dress to continue."))
        if draft.customer is None:
            issues.append(ValidationIssue("missing_customer", "Select or create a customer before continuing."))
        if not draft.contract_type_id:
            issues.append(ValidationIssue("missing_contract_type", "No contract type is available for this rental."))
        if not draft.has_complete_range or draft.end <= draft.start:
            issues.append(ValidationIssue("invalid_date_range", "The rental period is invalid."))
        if draft.mode == ContractMode.package:
            package = self.reference.package(draft.package_id)
            if package is None:
                issues.append(ValidationIssue("missing_package", "Select a package for this rental."))
            elif len(draft.dress_ids) != package.num_dresses:
                issues.append(
                    ValidationIssue(
                        "package_capacity_mismatch",
                        f"Select {package.num_dresses} dress(es) for this package, {len(draft.dress_ids)} selected.",
                    )
                )
        return ValidationResult(tuple(issues))

    def mark_ready(self) -> ValidationResult:
        draft = self._require(DraftStatus.configuring, DraftStatus.ready)
        result = self.validate(draft)
        status = DraftStatus.ready if result.ok else DraftStatus.configuring
        self._commit(replace(draft, status=status))
        return result

    def build_payload(self) -> ContractCreatePayload:
        draft = self._require(DraftStatus.ready, DraftStatus.submitting)
        totals = draft.totals
        if draft.mode == ContractMode.package:
            dress_ids = tuple(dict.fromkeys(draft.dress_ids or (draft.base_dress_id,)))
        else:
            dress_ids = (draft.base_dress_id,)
        selected = draft.selected_addon_ids
        addon_ids = tuple(addon.id for addon in self.reference.addons if addon.id in selected)
        return ContractCreatePayload(
            contract_number=draft.contract_number,
            customer_id=draft.customer.id,
            contract_type_id=draft.contract_type_id,
            start_datetime=to_iso(draft.start),
            end_datetime=to_iso(draft.end),
            deposit_payment_method=draft.payment_method,
            account_ht=round_money(totals.deposit_due_ht),
            account_ttc=round_money(totals.deposit_due_ttc),
            account_paid_ht=round_money(totals.deposit_paid_ht),
            account_paid_ttc=round_money(totals.deposit_paid_ttc),
            caution_ht=round_money(totals.caution_due_ht),
            caution_ttc=round_money(totals.caution_due_ttc),
            caution_paid_ht=round_money(totals.caution_paid_ht),
            caution_paid_ttc=round_money(totals.caution_paid_ttc),
            total_price_ht=round_money(totals.total_ht),
            total_price_ttc=round_money(totals.total_ttc),
            package_id=draft.package_id if draft.mode == ContractMode.package else None,
            addon_ids=addon_ids,
            dress_ids=dress_ids,
        )

    def submit(self) -> SubmissionResult:
        self._require(DraftStatus.configuring, DraftStatus.ready)
        validation = self.mark_ready()
        if not validation.ok:
            self._logger.info(
                "Contract draft not ready",
                extra={"contract_number": self._draft.contract_number, "reason": ",".join(validation.codes)},
            )
            return SubmissionResult(ok=False, validation=validation)

        payload = self.build_payload()
        self._commit(replace(self._draft, status=DraftStatus.submitting))
        try:
            record = self._gateway.create_contract(payload)
        except BackendUpstreamError as e:
            self._logger.error(
                "Contract creation failed",
                extra={"contract_number": payload.contract_number, "error": str(e)},
            )
            self._commit(replace(self._draft, status=DraftStatus.ready))
            return SubmissionResult(ok=False, validation=validation, error=str(e))

        self._availability_token += 1
        self._commit(replace(self._draft, status=DraftStatus.submitted))
        self._logger.info(
            "Contract created",
            extra={"contract_number": record.contract_number, "status": record.status},
        )
        return SubmissionResult(ok=True, record=record, validation=validation)

    def cancel(self) -> ContractDraft | None:
        if self._draft is None or not self._draft.is_open:
            return self._draft
        self._availability_token += 1
        return self._commit(replace(self._draft, status=DraftStatus.cancelled))

    # availability

    def begin_availability_check(self) -> AvailabilityTicket | None:
        """Snapshot the inputs of a check. Starting a new check supersedes any check still in flight."""
        draft = self._draft
        if draft is None or not draft.is_open:
            return None
        self._availability_token += 1
        if not draft.has_complete_range or draft.end <= draft.start or not draft.base_dress_id:
            self._commit(replace(draft, availability_status=AvailabilityStatus.idle))
            return None
        if draft.mode == ContractMode.package:
            required = tuple(dict.fromkeys(draft.dress_ids or (draft.base_dress_id,)))
        else:
            required = (draft.base_dress_id,)
        self._commit(replace(draft, availability_status=AvailabilityStatus.checking, availability_warning=None))
        return AvailabilityTicket(token=self._availability_token, dress_ids=required, start=draft.start, end=draft.end)

    def complete_availability_check(
        self,
        ticket: AvailabilityTicket,
        result: AvailabilityResult | None = None,
        error: Exception | None = None,
    ) -> bool:
        draft = self._draft
        if draft is None or not draft.is_open or ticket.token != self._availability_token:
            self._logger.debug("Stale availability result dropped", extra={"reason": "superseded"})
            return False
        if error is not None or result is None:
            self._logger.warning(
                "Availability check failed",
                extra={"contract_number": draft.contract_number, "error": str(error)},
            )
            self._commit(replace(draft, availability_status=AvailabilityStatus.error, availability_warning=None))
            return True
        self._commit(
            replace(
                draft,
                availability_status=status_for(result, ticket.dress_ids),
                availability_warning=result.warning,
            )
        )
        return True

    async def refresh_availability(self) -> AvailabilityStatus:
        ticket = self.begin_availability_check()
        if ticket is None:
            return AvailabilityStatus.idle
        try:
            result = await asyncio.to_thread(
                self._resolver.check_availability, ticket.dress_ids, ticket.start, ticket.end
            )
        except Exception as e:
            self.complete_availability_check(ticket, error=e)
        else:
            self.complete_availability_check(ticket, result=result)
        return self._draft.availability_status if self._draft else AvailabilityStatus.idle

    def reserved_today(self, dress_ids: list[str], now: datetime | None = None) -> dict[str, bool]:
        return self._resolver.reserved_today(dress_ids, now or self._clock())

    # price quote

    def begin_price_quote(self) -> QuoteTicket | None:
        draft = self._draft
        if self._quotes is None or draft is None or not draft.is_open:
            return None
        if draft.mode != ContractMode.daily or not draft.base_dress_id or not draft.has_complete_range:
            return None
        return QuoteTicket(dress_id=draft.base_dress_id, start=draft.start, end=draft.end)

    def complete_price_quote(
        self,
        ticket: QuoteTicket,
        quote: PriceQuote | None = None,
        error: Exception | None = None,
    ) -> bool:
        """Apply a quote only if the draft is still daily and still about the same dress and dates."""
        draft = self._draft
        if (
            draft is None
            or not draft.is_open
            or draft.mode != ContractMode.daily
            or draft.base_dress_id != ticket.dress_id
            or draft.start != ticket.start
            or draft.end != ticket.end
        ):
            self._logger.debug("Stale price quote dropped", extra={"dress_id": ticket.dress_id})
            return False
        if error is not None:
            self._logger.warning(
                "Price quote failed, using static daily rate",
                extra={"dress_id": ticket.dress_id, "error": str(error)},
            )
            quote = None
        if quote is not None:
            quote = replace(quote, dress_id=ticket.dress_id, start=ticket.start, end=ticket.end)
        if draft.status in {DraftStatus.configuring, DraftStatus.ready}:
            self._edit(price_quote=quote)
        else:
            self._commit(replace(draft, price_quote=quote))
        return True

    async def refresh_price_quote(self) -> PriceQuote | None:
        ticket = self.begin_price_quote()
        if ticket is None:
            return None
        try:
            quote = await asyncio.to_thread(
                self._quotes.quote_price, ticket.dress_id, to_iso(ticket.start), to_iso(ticket.end)
            )
        except Exception as e:
            self.complete_price_quote(ticket, error=e)
        else:
            self.complete_price_quote(ticket, quote=quote)
        return self._draft.price_quote if self._draft else None

    # internals

    def _require(self, *statuses: DraftStatus) -> ContractDraft:
        if self._draft is None:
            raise InvalidTransitionError("No contract draft is open")
        if self._draft.status not in statuses:
            allowed = ", ".join(status.value for status in statuses)
            raise InvalidTransitionError(f"Draft is {self._draft.status.value}, expected one of: {allowed}")
        return self._draft

    def _require_package_mode(self) -> ContractDraft:
        draft = self._require(DraftStatus.configuring, DraftStatus.ready)
        if draft.mode != ContractMode.package:
            raise InvalidTransitionError("Package operations need a draft in package mode")
        return draft

    def _load_dress(self, dress_id: str) -> None:
        if self.reference.dress(dress_id) is not None:
            return
        dress = self._catalog.get_dress(dress_id)
        if dress is None:
            raise ValueError(f"Unknown dress: {dress_id}")
        self._reference = self.reference.with_dress(dress)

    def _default_window(self, mode: ContractMode) -> tuple[datetime, datetime]:
        today = self._clock().date()
        if mode == ContractMode.package:
            return package_window(today, self._timezone, self._settings.PACKAGE_START_HOUR)
        start, end = daily_window(
            today, today, self._timezone, self._settings.DAILY_START_HOUR, self._settings.DAILY_END_HOUR
        )
        return normalize_range(start, end)

    def _edit(self, **changes: Any) -> ContractDraft:
        """Apply a configuration edit. A ready draft that stops validating falls back to configuring."""
        updated = replace(self._draft, **changes)
        if updated.status == DraftStatus.ready and not self.validate(updated).ok:
            updated = replace(updated, status=DraftStatus.configuring)
        return self._commit(updated)

    def _commit(self, draft: ContractDraft) -> ContractDraft:
        previous = self._draft
        if previous is not None and _availability_inputs(previous) != _availability_inputs(draft):
            # a check started for the old dates or dresses no longer applies
            self._availability_token += 1
            draft = replace(draft, availability_status=AvailabilityStatus.idle, availability_warning=None)
        computed = compute_totals(draft, self.reference, self._config)
        if draft.mode == ContractMode.package and draft.deposit_paid_ttc != computed.deposit_paid_ttc:
            # the package floor only ever raises the paid deposit, keep the effective value
            draft = replace(draft, deposit_paid_ttc=computed.deposit_paid_ttc)
        totals, _ = refresh_totals(previous.totals if previous else None, computed)
        draft = replace(draft, totals=totals)
        if previous == draft:
            return previous
        self._draft = draft
        for listener in list(self._listeners):
            listener(draft)
        return draft


def _availability_inputs(draft: ContractDraft) -> tuple:
    return draft.mode, draft.start, draft.end, draft.dress_ids
