from __future__ import annotations

import logging

from dressrental.application.exceptions import ContractGatewayError
from dressrental.application.ports.contract_gateway import ContractGatewayPort
from dressrental.domain.entities.contract_payload import ContractCreatePayload, ContractRecord


class MockContractGateway(ContractGatewayPort):
    def __init__(self, fail: bool = False) -> None:
        self.payloads: list[ContractCreatePayload] = []
        self.fail = fail
        self._logger = logging.getLogger(__name__)

    def create_contract(self, payload: ContractCreatePayload) -> ContractRecord:
        if self.fail:
            raise ContractGatewayError("Mock contract gateway rejected the contract")
        self.payloads.append(payload)
        record = ContractRecord(
            id=f"mock_contract_{len(self.payloads)}",
            contract_number=payload.contract_number,
            status=payload.status,
            raw=payload.to_dict(),
        )
        self._logger.info(
            "Mock contract created",
            extra={"contract_number": record.contract_number, "status": record.status},
        )
        return record
