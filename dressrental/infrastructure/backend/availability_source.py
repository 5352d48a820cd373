from __future__ import annotations

import logging

from dressrental.application.exceptions import AvailabilitySourceError
from dressrental.application.ports.availability import AvailabilityPort
from dressrental.domain.entities.availability import AvailabilityEntry
from dressrental.infrastructure.backend.client import BackendClient, extract_array
from dressrental.infrastructure.backend.mappers import availability_from_json


class HttpAvailabilitySource(AvailabilityPort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def list_availability(self, start_iso: str, end_iso: str) -> dict[str, AvailabilityEntry]:
        body = self._client.get_json(
            "/dresses/availability",
            params={"start": start_iso, "end": end_iso},
            error_cls=AvailabilitySourceError,
        )
        entries: dict[str, AvailabilityEntry] = {}
        for item in extract_array(body):
            if not isinstance(item, dict):
                continue
            entry = availability_from_json(item)
            if entry is not None:
                entries[entry.dress_id] = entry
        self._logger.debug("Availability fetched", extra={"reason": f"{len(entries)} dresses"})
        return entries
