from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AvailabilityStatus(str, Enum):
    idle = "idle"
    checking = "checking"
    available = "available"
    unavailable = "unavailable"
    error = "error"


@dataclass(frozen=True)
class BookingWindow:
    start: datetime
    end: datetime
    contract_id: str | None = None
    status: str | None = None

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return not (end <= self.start or start >= self.end)


@dataclass(frozen=True)
class AvailabilityEntry:
    dress_id: str
    is_available: bool
    current_booking: BookingWindow | None = None


@dataclass(frozen=True)
class AvailabilityResult:
    available: dict[str, bool] = field(default_factory=dict)
    bookings: dict[str, BookingWindow | None] = field(default_factory=dict)
    warning: str | None = None  # set when the source failed and the result is fail-open

    @property
    def degraded(self) -> bool:
        return self.warning is not None

    @property
    def unavailable_ids(self) -> list[str]:
        return [dress_id for dress_id, ok in self.available.items() if not ok]

    @property
    def all_available(self) -> bool:
        return all(self.available.values())
