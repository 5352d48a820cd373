from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from dressrental.application.ports.availability import AvailabilityPort
from dressrental.application.utils.rental_period import to_iso, today_range
from dressrental.domain.entities.availability import AvailabilityResult, AvailabilityStatus

FAIL_OPEN_WARNING = "availability_source_unreachable"


class AvailabilityResolver:
    def __init__(self, source: AvailabilityPort, fail_open: bool = True) -> None:
        self._source = source
        self._fail_open = fail_open
        self._logger = logging.getLogger(__name__)

    def check_availability(self, dress_ids: Iterable[str], start: datetime, end: datetime) -> AvailabilityResult:
        """
        Per-dress availability for [start, end).
        Dresses the source does not mention are treated as available. When the
        source fails, every requested dress is reported available with a warning.
        """
        requested = list(dict.fromkeys(dress_ids))
        try:
            entries = self._source.list_availability(to_iso(start), to_iso(end))
        except Exception as e:
            if not self._fail_open:
                raise
            self._logger.warning(
                "Availability source failed, treating dresses as available",
                extra={"error": str(e), "reason": FAIL_OPEN_WARNING},
            )
            return AvailabilityResult(
                available={dress_id: True for dress_id in requested},
                bookings={dress_id: None for dress_id in requested},
                warning=FAIL_OPEN_WARNING,
            )

        available: dict[str, bool] = {}
        bookings = {}
        for dress_id in requested:
            entry = entries.get(dress_id)
            available[dress_id] = entry.is_available if entry is not None else True
            bookings[dress_id] = entry.current_booking if entry is not None else None
        return AvailabilityResult(available=available, bookings=bookings)

    def reserved_today(self, dress_ids: Iterable[str], now: datetime) -> dict[str, bool]:
        """Badge data only: whether each dress is booked at some point today. Never gates submission."""
        start, end = today_range(now)
        result = self.check_availability(dress_ids, start, end)
        return {dress_id: not ok for dress_id, ok in result.available.items()}


def status_for(result: AvailabilityResult, required_ids: Iterable[str]) -> AvailabilityStatus:
    """A draft is available only if every required dress is."""
    if any(result.available.get(dress_id) is False for dress_id in required_ids):
        return AvailabilityStatus.unavailable
    return AvailabilityStatus.available
