from __future__ import annotations

from datetime import datetime
from typing import Any

from dressrental.application.utils.money import parse_amount, to_numeric
from dressrental.domain.entities.availability import AvailabilityEntry, BookingWindow
from dressrental.domain.entities.contract_addon import ContractAddon
from dressrental.domain.entities.contract_package import ContractPackage
from dressrental.domain.entities.contract_payload import ContractRecord
from dressrental.domain.entities.contract_type import ContractType
from dressrental.domain.entities.dress import Dress
from dressrental.domain.entities.price_quote import PriceQuote


def parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def dress_from_json(data: dict[str, Any]) -> Dress:
    return Dress(
        id=str(data["id"]),
        name=data.get("name"),
        reference=data.get("reference"),
        price_ht=parse_amount(data.get("price_ht")),
        price_ttc=parse_amount(data.get("price_ttc")),
        price_per_day_ht=parse_amount(data.get("price_per_day_ht")),
        price_per_day_ttc=parse_amount(data.get("price_per_day_ttc")),
    )


def package_addon_ids(data: dict[str, Any]) -> tuple[str, ...]:
    """Packages link their included add-ons either as `addons: [{addon_id}]` or as `addon_ids`."""
    ids: list[str] = []
    for link in data.get("addons") or []:
        if isinstance(link, dict):
            addon_id = link.get("addon_id") or link.get("id") or (link.get("addon") or {}).get("id")
        else:
            addon_id = link
        if addon_id:
            ids.append(str(addon_id))
    for addon_id in data.get("addon_ids") or []:
        if addon_id:
            ids.append(str(addon_id))
    return tuple(dict.fromkeys(ids))


def package_from_json(data: dict[str, Any]) -> ContractPackage:
    num_dresses = int(to_numeric(data.get("num_dresses"))) or 1
    return ContractPackage(
        id=str(data["id"]),
        name=data.get("name") or "",
        price_ht=to_numeric(data.get("price_ht")),
        price_ttc=to_numeric(data.get("price_ttc")),
        num_dresses=max(num_dresses, 1),
        addon_ids=package_addon_ids(data),
    )


def addon_from_json(data: dict[str, Any]) -> ContractAddon:
    return ContractAddon(
        id=str(data["id"]),
        name=data.get("name") or "",
        price_ht=parse_amount(data.get("price_ht")),
        price_ttc=parse_amount(data.get("price_ttc")),
        included=_as_bool(data.get("included")),
        description=data.get("description"),
    )


def contract_type_from_json(data: dict[str, Any]) -> ContractType:
    return ContractType(id=str(data["id"]), name=data.get("name") or "")


def availability_from_json(data: dict[str, Any]) -> AvailabilityEntry | None:
    dress_id = data.get("id") or data.get("dress_id")
    if not dress_id:
        return None
    flag = data.get("isAvailable", data.get("is_available", True))
    booking = None
    current = data.get("current_contract")
    if isinstance(current, dict):
        start = parse_datetime(current.get("start_datetime"))
        end = parse_datetime(current.get("end_datetime"))
        if start and end:
            booking = BookingWindow(
                start=start,
                end=end,
                contract_id=current.get("id"),
                status=current.get("status"),
            )
    return AvailabilityEntry(dress_id=str(dress_id), is_available=_as_bool(flag), current_booking=booking)


def price_quote_from_json(data: dict[str, Any]) -> PriceQuote | None:
    ht = parse_amount(data.get("final_price_ht"))
    ttc = parse_amount(data.get("final_price_ttc"))
    if ht is None and ttc is None:
        return None
    days = int(to_numeric(data.get("duration_days", data.get("days"))))
    if days < 1:
        # without a day count the price cannot be spread per day
        return None
    return PriceQuote(final_price_ht=ht or 0.0, final_price_ttc=ttc or 0.0, duration_days=days)


def contract_record_from_json(data: dict[str, Any], fallback_number: str) -> ContractRecord:
    return ContractRecord(
        id=str(data.get("id") or ""),
        contract_number=data.get("contract_number") or fallback_number,
        status=data.get("status"),
        raw=data,
    )
