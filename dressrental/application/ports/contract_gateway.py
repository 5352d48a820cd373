from __future__ import annotations

from abc import ABC, abstractmethod

from dressrental.domain.entities.contract_payload import ContractCreatePayload, ContractRecord


class ContractGatewayPort(ABC):
    @abstractmethod
    def create_contract(self, payload: ContractCreatePayload) -> ContractRecord:
        """Persist a contract. Raises ContractGatewayError on rejection or transport failure."""
        raise NotImplementedError
