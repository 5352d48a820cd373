from __future__ import annotations

from abc import ABC, abstractmethod

from dressrental.domain.entities.availability import AvailabilityEntry


class AvailabilityPort(ABC):
    @abstractmethod
    def list_availability(self, start_iso: str, end_iso: str) -> dict[str, AvailabilityEntry]:
        """Range-overlap query over non-cancelled bookings. Keyed by dress id."""
        raise NotImplementedError
