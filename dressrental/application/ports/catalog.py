from __future__ import annotations

from abc import ABC, abstractmethod

from dressrental.domain.entities.contract_addon import ContractAddon
from dressrental.domain.entities.contract_package import ContractPackage
from dressrental.domain.entities.contract_type import ContractType
from dressrental.domain.entities.dress import Dress


class CatalogPort(ABC):
    @abstractmethod
    def list_packages(self) -> list[ContractPackage]:
        raise NotImplementedError

    @abstractmethod
    def list_addons(self) -> list[ContractAddon]:
        raise NotImplementedError

    @abstractmethod
    def list_contract_types(self) -> list[ContractType]:
        raise NotImplementedError

    @abstractmethod
    def get_dress(self, dress_id: str) -> Dress | None:
        """Get a dress by id. Returns None if it does not exist."""
        raise NotImplementedError
