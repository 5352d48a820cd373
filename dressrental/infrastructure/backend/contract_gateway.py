from __future__ import annotations

import logging

from dressrental.application.exceptions import ContractGatewayError
from dressrental.application.ports.contract_gateway import ContractGatewayPort
from dressrental.domain.entities.contract_payload import ContractCreatePayload, ContractRecord
from dressrental.infrastructure.backend.client import BackendClient, extract_object
from dressrental.infrastructure.backend.mappers import contract_record_from_json


class HttpContractGateway(ContractGatewayPort):
    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def create_contract(self, payload: ContractCreatePayload) -> ContractRecord:
        body = self._client.post_json("/contracts", payload.to_dict(), error_cls=ContractGatewayError)
        data = extract_object(body)
        if not data or not data.get("id"):
            raise ContractGatewayError("No contract id returned from the back-office API")
        record = contract_record_from_json(data, payload.contract_number)
        self._logger.info(
            "Contract persisted",
            extra={"contract_number": record.contract_number, "status": record.status},
        )
        return record
