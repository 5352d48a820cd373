from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from dressrental.application.exceptions import ReferenceDataError
from dressrental.application.ports.catalog import CatalogPort
from dressrental.domain.entities.contract_addon import ContractAddon
from dressrental.domain.entities.contract_package import ContractPackage
from dressrental.domain.entities.contract_type import ContractType
from dressrental.domain.entities.dress import Dress
from dressrental.infrastructure.backend.client import BackendClient, extract_array, extract_object
from dressrental.infrastructure.backend.mappers import (
    addon_from_json,
    contract_type_from_json,
    dress_from_json,
    package_from_json,
)

T = TypeVar("T")


class HttpCatalog(CatalogPort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def _list(self, path: str, mapper: Callable[[dict[str, Any]], T]) -> list[T]:
        body = self._client.get_json(path, error_cls=ReferenceDataError)
        items: list[T] = []
        for raw in extract_array(body):
            if not isinstance(raw, dict) or not raw.get("id"):
                continue
            try:
                items.append(mapper(raw))
            except (KeyError, TypeError, ValueError) as e:
                self._logger.warning("Skipping malformed record", extra={"reason": path, "error": str(e)})
        return items

    def list_packages(self) -> list[ContractPackage]:
        return self._list("/contract-packages", package_from_json)

    def list_addons(self) -> list[ContractAddon]:
        return self._list("/contract-addons", addon_from_json)

    def list_contract_types(self) -> list[ContractType]:
        return self._list("/contract-types", contract_type_from_json)

    def get_dress(self, dress_id: str) -> Dress | None:
        body = self._client.get_json(f"/dresses/{dress_id}", error_cls=ReferenceDataError, not_found_ok=True)
        data = extract_object(body)
        if not data or not data.get("id"):
            return None
        return dress_from_json(data)
