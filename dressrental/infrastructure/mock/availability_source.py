from __future__ import annotations

import logging
from datetime import datetime

from dressrental.application.exceptions import AvailabilitySourceError
from dressrental.application.ports.availability import AvailabilityPort
from dressrental.domain.entities.availability import AvailabilityEntry, BookingWindow

CANCELLED_STATUSES = {"CANCELLED", "CANCELED"}


class MockAvailabilitySource(AvailabilityPort):
    def __init__(self, fail: bool = False) -> None:
        self._bookings: dict[str, list[BookingWindow]] = {}
        self.fail = fail
        self.calls: list[tuple[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def book(
        self,
        dress_id: str,
        start: datetime,
        end: datetime,
        contract_id: str | None = None,
        status: str | None = "CONFIRMED",
    ) -> BookingWindow:
        window = BookingWindow(start=start, end=end, contract_id=contract_id, status=status)
        self._bookings.setdefault(dress_id, []).append(window)
        return window

    def list_availability(self, start_iso: str, end_iso: str) -> dict[str, AvailabilityEntry]:
        self.calls.append((start_iso, end_iso))
        if self.fail:
            raise AvailabilitySourceError("Mock availability source is down")
        start = datetime.fromisoformat(start_iso)
        end = datetime.fromisoformat(end_iso)
        entries: dict[str, AvailabilityEntry] = {}
        for dress_id, windows in self._bookings.items():
            clash = next(
                (
                    w
                    for w in windows
                    if (w.status or "").upper() not in CANCELLED_STATUSES and w.overlaps(start, end)
                ),
                None,
            )
            entries[dress_id] = AvailabilityEntry(dress_id=dress_id, is_available=clash is None, current_booking=clash)
        return entries
