"""
Tests for the contract draft lifecycle.
"""

from __future__ import annotations

import asyncio
import re
from datetime import date, datetime, timedelta

import pytest

from conftest import DAILY_TYPE_ID, PARIS, build_catalog
from dressrental.application.exceptions import InvalidTransitionError
from dressrental.application.use_cases.availability import AvailabilityResolver
from dressrental.application.use_cases.contract_draft import ContractDraftUseCase
from dressrental.core.config import Settings
from dressrental.domain.entities.availability import AvailabilityResult, AvailabilityStatus
from dressrental.domain.entities.contract_draft import DraftStatus
from dressrental.domain.entities.contract_type import ContractMode
from dressrental.domain.entities.customer import Customer
from dressrental.domain.entities.price_quote import PriceQuote

ALICE = Customer(id="cus-1", firstname="Alice", lastname="Martin", email="alice@example.com")


def open_package_draft(use_case: ContractDraftUseCase):
    use_case.open(mode=ContractMode.package, dress_id="d1")
    use_case.select_package("duo")
    return use_case.draft


def test_open_daily_draft_initializes_configuration(use_case):
    draft = use_case.open(mode=ContractMode.daily, dress_id="d1")

    assert draft.status == DraftStatus.configuring
    assert re.fullmatch(r"CTR-26-\d{7}", draft.contract_number)
    assert draft.contract_type_id == DAILY_TYPE_ID
    assert draft.manual_addon_ids == frozenset({"ins"})
    assert draft.start == datetime(2026, 5, 1, 9, 0, tzinfo=PARIS)
    assert draft.end == datetime(2026, 5, 1, 18, 0, tzinfo=PARIS)
    assert draft.totals.days == 1
    assert draft.totals.base_ttc == 100.0
    assert draft.totals.total_ttc == 112.0


def test_open_package_draft_uses_package_window_and_type(use_case):
    draft = use_case.open(mode=ContractMode.package, dress_id="d1")

    assert draft.contract_type_id == "type-pkg"
    assert draft.start == datetime(2026, 5, 1, 12, 0, tzinfo=PARIS)
    assert draft.end == datetime(2026, 5, 2, 12, 0, tzinfo=PARIS)
    assert draft.package_id is None


def test_configure_without_dress_reports_missing_dress(use_case):
    use_case.open(mode=ContractMode.daily)
    result = use_case.configure()

    assert not result.ok
    assert result.codes == ["missing_dress"]
    assert use_case.draft.status == DraftStatus.selecting


def test_package_mode_without_packages_cannot_configure(gateway, availability_source, now):
    use_case = ContractDraftUseCase(
        catalog=build_catalog(packages=[]),
        gateway=gateway,
        resolver=AvailabilityResolver(availability_source),
        app_settings=Settings(_env_file=None),
        timezone=PARIS,
        clock=lambda: now,
    )
    use_case.open(mode=ContractMode.package)
    use_case.choose_dress("d1")
    result = use_case.configure()

    assert result.codes == ["no_package_available"]
    assert use_case.draft.status == DraftStatus.selecting


def test_unknown_dress_is_rejected(use_case):
    use_case.open(mode=ContractMode.daily)
    with pytest.raises(ValueError):
        use_case.choose_dress("nope")


def test_package_capacity_gates_ready(use_case):
    """A two-dress package cannot be ready with one or three dresses."""
    open_package_draft(use_case)
    use_case.select_customer(ALICE)

    result = use_case.mark_ready()
    assert result.codes == ["package_capacity_mismatch"]
    assert use_case.draft.status == DraftStatus.configuring

    use_case.add_package_dress("d2")
    assert use_case.mark_ready().ok
    assert use_case.draft.status == DraftStatus.ready

    use_case.add_package_dress("d3")
    assert use_case.draft.dress_ids == ("d1", "d2", "d3")
    assert use_case.draft.status == DraftStatus.configuring
    assert use_case.validate().codes == ["package_capacity_mismatch"]


def test_base_dress_stays_first_and_cannot_be_removed(use_case):
    open_package_draft(use_case)
    use_case.set_package_dresses(["d2", "d1"])
    assert use_case.draft.dress_ids == ("d1", "d2")

    use_case.remove_package_dress("d1")
    assert use_case.draft.dress_ids == ("d1", "d2")

    use_case.remove_package_dress("d2")
    assert use_case.draft.dress_ids == ("d1",)


def test_selecting_package_trims_dresses_to_capacity(catalog, use_case):
    use_case.open(mode=ContractMode.package, dress_id="d1")
    use_case.set_package_dresses(["d2", "d3"])
    assert use_case.draft.dress_ids == ("d1", "d2", "d3")

    use_case.select_package("duo")
    assert use_case.draft.dress_ids == ("d1", "d2")


def test_mode_switch_keeps_customer_and_clears_package(use_case):
    open_package_draft(use_case)
    use_case.add_package_dress("d2")
    use_case.select_customer(ALICE)
    number = use_case.draft.contract_number

    result = use_case.set_mode(ContractMode.daily)

    assert result.ok
    draft = use_case.draft
    assert draft.status == DraftStatus.configuring
    assert draft.mode == ContractMode.daily
    assert draft.package_id is None
    assert draft.package_dress_ids == ()
    assert draft.dress_ids == ("d1",)
    assert draft.package_addon_ids == frozenset()
    assert draft.manual_addon_ids == frozenset({"ins"})
    assert draft.customer == ALICE
    assert draft.contract_number == number
    assert draft.contract_type_id == DAILY_TYPE_ID


def test_package_addons_tracked_apart_from_manual_toggles(use_case):
    open_package_draft(use_case)
    draft = use_case.draft
    assert draft.package_addon_ids == frozenset({"inc"})
    assert draft.selected_addon_ids == frozenset({"inc", "ins"})
    assert draft.totals.addons_included_ttc == 30.0
    assert draft.totals.addons_chargeable_ttc == 12.0
    assert draft.totals.total_ttc == 512.0

    # forced add-ons cannot be toggled off while the package is active
    use_case.toggle_addon("inc")
    assert "inc" in use_case.draft.selected_addon_ids

    use_case.select_package(None)
    assert use_case.draft.selected_addon_ids == frozenset({"ins"})


def test_manual_selection_survives_package_removal(use_case):
    use_case.open(mode=ContractMode.package, dress_id="d1")
    use_case.toggle_addon("inc", selected=True)
    use_case.select_package("duo")
    use_case.select_package(None)

    assert "inc" in use_case.draft.selected_addon_ids


def test_toggle_addon_in_daily_mode(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    use_case.toggle_addon("chg")
    assert use_case.draft.totals.addons_chargeable_ttc == 62.0

    use_case.toggle_addon("ins", selected=False)
    use_case.toggle_addon("chg")
    assert use_case.draft.selected_addon_ids == frozenset()
    assert use_case.draft.totals.total_ttc == 100.0

    with pytest.raises(ValueError):
        use_case.toggle_addon("missing")


def test_deposit_paid_floor_in_package_mode(use_case):
    open_package_draft(use_case)
    use_case.set_deposit_paid("200")

    assert use_case.draft.deposit_paid_ttc == 256.0
    assert use_case.draft.totals.deposit_paid_ttc == 256.0


def test_deposit_and_caution_paid_parsing(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")

    use_case.set_deposit_paid("1 000,456")
    assert use_case.draft.deposit_paid_ttc == 1000.46

    use_case.set_caution_paid(5000)
    assert use_case.draft.caution_paid_ttc == 1200.0

    use_case.set_deposit_paid("")
    assert use_case.draft.deposit_paid_ttc is None
    assert use_case.draft.totals.deposit_paid_ttc == 56.0


def test_set_dates_normalizes_inverted_range(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    start = datetime(2026, 5, 10, 9, 0, tzinfo=PARIS)
    use_case.set_dates(start, start - timedelta(hours=2))

    assert use_case.draft.end == start + timedelta(days=1)
    assert use_case.draft.availability_status == AvailabilityStatus.idle


def test_set_rental_days(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    use_case.set_rental_days(date(2026, 5, 2), date(2026, 5, 4))
    assert use_case.draft.start == datetime(2026, 5, 2, 9, 0, tzinfo=PARIS)
    assert use_case.draft.end == datetime(2026, 5, 4, 18, 0, tzinfo=PARIS)
    assert use_case.draft.totals.days == 3
    assert use_case.draft.totals.base_ttc == 300.0

    use_case.set_mode(ContractMode.package)
    use_case.set_rental_days(date(2026, 5, 2), date(2026, 5, 4))
    assert use_case.draft.start == datetime(2026, 5, 2, 12, 0, tzinfo=PARIS)
    assert use_case.draft.end == datetime(2026, 5, 3, 12, 0, tzinfo=PARIS)


def test_payment_method_must_be_card_or_cash(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    use_case.set_payment_method("cash")
    assert use_case.draft.payment_method == "cash"
    with pytest.raises(ValueError):
        use_case.set_payment_method("cheque")


def test_operations_outside_their_state_raise(use_case):
    with pytest.raises(InvalidTransitionError):
        use_case.select_customer(ALICE)

    use_case.open(mode=ContractMode.daily)
    with pytest.raises(InvalidTransitionError):
        use_case.select_customer(ALICE)

    use_case.choose_dress("d1")
    use_case.configure()
    with pytest.raises(InvalidTransitionError):
        use_case.select_package("duo")


def test_submit_daily_contract(use_case, gateway):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    use_case.select_customer(ALICE)

    result = use_case.submit()

    assert result.ok
    assert result.record.id == "mock_contract_1"
    assert use_case.draft.status == DraftStatus.submitted

    payload = gateway.payloads[0]
    assert payload.customer_id == "cus-1"
    assert payload.contract_type_id == DAILY_TYPE_ID
    assert payload.status == "DRAFT"
    assert payload.deposit_payment_method == "card"
    assert payload.package_id is None
    assert payload.dress_ids == ("d1",)
    assert payload.addon_ids == ("ins",)
    assert payload.total_price_ttc == 112.0
    assert payload.account_ttc == 112.0
    assert payload.account_paid_ttc == 56.0
    assert payload.caution_ttc == 1200.0
    assert payload.caution_ht == 1000.0
    assert payload.start_datetime == "2026-05-01T09:00:00+02:00"

    body = payload.to_dict()
    assert body["dresses"] == [{"dress_id": "d1"}]
    assert body["addons"] == [{"addon_id": "ins"}]
    assert "dress_ids" not in body


def test_submit_package_contract_lists_every_dress(use_case, gateway):
    open_package_draft(use_case)
    use_case.add_package_dress("d2")
    use_case.toggle_addon("chg")
    use_case.select_customer(ALICE)

    result = use_case.submit()

    assert result.ok
    payload = gateway.payloads[0]
    assert payload.package_id == "duo"
    assert payload.dress_ids == ("d1", "d2")
    assert payload.addon_ids == ("chg", "inc", "ins")
    assert payload.total_price_ttc == 562.0
    assert payload.caution_ttc == 500.0


def test_submit_without_customer_is_blocked_locally(use_case, gateway):
    use_case.open(mode=ContractMode.daily, dress_id="d1")

    result = use_case.submit()

    assert not result.ok
    assert result.validation.codes == ["missing_customer"]
    assert result.error is None
    assert use_case.draft.status == DraftStatus.configuring
    assert gateway.payloads == []


def test_submit_failure_keeps_draft_ready(use_case, gateway):
    """A rejected submission leaves the draft intact for a retry."""
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    use_case.select_customer(ALICE)
    gateway.fail = True

    result = use_case.submit()

    assert not result.ok
    assert result.error
    assert use_case.draft.status == DraftStatus.ready
    assert use_case.draft.customer == ALICE

    gateway.fail = False
    assert use_case.submit().ok
    assert use_case.draft.status == DraftStatus.submitted


def test_cancel_closes_the_draft(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    use_case.cancel()

    assert use_case.draft.status == DraftStatus.cancelled
    assert use_case.begin_availability_check() is None
    with pytest.raises(InvalidTransitionError):
        use_case.select_customer(ALICE)


def test_listeners_notified_only_on_change(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    seen = []
    unsubscribe = use_case.subscribe(seen.append)

    use_case.set_payment_method("card")
    assert seen == []

    use_case.set_payment_method("cash")
    assert len(seen) == 1
    assert seen[0].payment_method == "cash"

    unsubscribe()
    use_case.set_payment_method("card")
    assert len(seen) == 1


def test_newer_availability_check_supersedes_older(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    first = use_case.begin_availability_check()
    second = use_case.begin_availability_check()
    assert use_case.draft.availability_status == AvailabilityStatus.checking

    stale = AvailabilityResult(available={"d1": False})
    assert use_case.complete_availability_check(first, result=stale) is False
    assert use_case.draft.availability_status == AvailabilityStatus.checking

    fresh = AvailabilityResult(available={"d1": True})
    assert use_case.complete_availability_check(second, result=fresh) is True
    assert use_case.draft.availability_status == AvailabilityStatus.available


def test_date_change_invalidates_in_flight_check(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    ticket = use_case.begin_availability_check()
    use_case.set_dates(datetime(2026, 6, 1, 9, 0, tzinfo=PARIS), datetime(2026, 6, 2, 9, 0, tzinfo=PARIS))

    assert use_case.complete_availability_check(ticket, result=AvailabilityResult(available={"d1": False})) is False
    assert use_case.draft.availability_status == AvailabilityStatus.idle


def test_availability_error_state(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    ticket = use_case.begin_availability_check()
    use_case.complete_availability_check(ticket, error=RuntimeError("boom"))

    assert use_case.draft.availability_status == AvailabilityStatus.error


def test_refresh_availability_checks_every_package_dress(use_case, availability_source):
    open_package_draft(use_case)
    use_case.add_package_dress("d2")
    draft = use_case.draft
    availability_source.book("d2", draft.start, draft.start + timedelta(hours=2))

    status = asyncio.run(use_case.refresh_availability())

    assert status == AvailabilityStatus.unavailable


def test_refresh_availability_fail_open(use_case, availability_source):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    availability_source.fail = True

    status = asyncio.run(use_case.refresh_availability())

    assert status == AvailabilityStatus.available
    assert use_case.draft.availability_warning == "availability_source_unreachable"


def test_reserved_today_badges(use_case, availability_source):
    availability_source.book(
        "d2",
        datetime(2026, 5, 1, 14, 0, tzinfo=PARIS),
        datetime(2026, 5, 1, 17, 0, tzinfo=PARIS),
    )
    assert use_case.reserved_today(["d1", "d2"]) == {"d1": False, "d2": True}


def test_price_quote_applied_when_inputs_match(use_case, quotes):
    quotes.set_rate("d1", 72.0, 90.0)
    use_case.open(mode=ContractMode.daily, dress_id="d1")

    quote = asyncio.run(use_case.refresh_price_quote())

    assert quote is not None
    assert quote.dress_id == "d1"
    assert use_case.draft.totals.base_ttc == 90.0
    assert use_case.draft.totals.total_ttc == 102.0


def test_stale_price_quote_is_dropped(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    ticket = use_case.begin_price_quote()
    use_case.set_dates(datetime(2026, 6, 1, 9, 0, tzinfo=PARIS), datetime(2026, 6, 3, 9, 0, tzinfo=PARIS))

    quote = PriceQuote(final_price_ht=72.0, final_price_ttc=90.0, duration_days=1)
    assert use_case.complete_price_quote(ticket, quote) is False
    assert use_case.draft.price_quote is None
    assert use_case.draft.totals.base_ttc == 200.0


def test_price_quote_dropped_after_switch_to_package(use_case):
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    ticket = use_case.begin_price_quote()
    use_case.set_mode(ContractMode.package)

    quote = PriceQuote(final_price_ht=72.0, final_price_ttc=90.0, duration_days=1)
    assert use_case.complete_price_quote(ticket, quote) is False
    assert use_case.begin_price_quote() is None


def test_price_quote_failure_falls_back_to_daily_rate(use_case, quotes):
    quotes.fail = True
    use_case.open(mode=ContractMode.daily, dress_id="d1")

    assert asyncio.run(use_case.refresh_price_quote()) is None
    assert use_case.draft.totals.base_ttc == 100.0


def test_package_deposit_paid_not_lowered_when_total_drops(use_case):
    open_package_draft(use_case)
    use_case.toggle_addon("chg")
    before = use_case.draft.totals.deposit_paid_ttc
    assert before == 281.0

    use_case.toggle_addon("chg")

    assert use_case.draft.totals.total_ttc == 512.0
    assert use_case.draft.totals.deposit_paid_ttc == before


def test_package_deposit_paid_follows_floor_upwards(use_case):
    open_package_draft(use_case)
    assert use_case.draft.totals.deposit_paid_ttc == 256.0

    use_case.toggle_addon("chg")

    assert use_case.draft.totals.deposit_paid_ttc == 281.0


def test_dress_change_resets_availability_status(use_case):
    open_package_draft(use_case)
    ticket = use_case.begin_availability_check()
    use_case.complete_availability_check(ticket, result=AvailabilityResult(available={"d1": True}))
    assert use_case.draft.availability_status == AvailabilityStatus.available

    use_case.add_package_dress("d2")

    assert use_case.draft.availability_status == AvailabilityStatus.idle
    assert use_case.complete_availability_check(ticket, result=AvailabilityResult(available={"d1": True})) is False


def test_mode_switch_reports_why_it_could_not_configure(gateway, availability_source, now):
    use_case = ContractDraftUseCase(
        catalog=build_catalog(packages=[]),
        gateway=gateway,
        resolver=AvailabilityResolver(availability_source),
        app_settings=Settings(_env_file=None),
        timezone=PARIS,
        clock=lambda: now,
    )
    use_case.open(mode=ContractMode.daily, dress_id="d1")
    use_case.select_customer(ALICE)

    result = use_case.set_mode(ContractMode.package)

    assert result.codes == ["no_package_available"]
    assert use_case.draft.status == DraftStatus.selecting
    assert use_case.draft.mode == ContractMode.package
    assert use_case.draft.customer == ALICE
