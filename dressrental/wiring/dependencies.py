from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from dressrental.core.config import settings
from dressrental.application.ports.availability import AvailabilityPort
from dressrental.application.ports.catalog import CatalogPort
from dressrental.application.ports.contract_gateway import ContractGatewayPort
from dressrental.application.ports.price_quote import PriceQuotePort
from dressrental.application.use_cases.availability import AvailabilityResolver
from dressrental.application.use_cases.contract_draft import ContractDraftUseCase
from dressrental.application.use_cases.pricing import PricingConfig
from dressrental.infrastructure.backend.availability_source import HttpAvailabilitySource
from dressrental.infrastructure.backend.catalog import HttpCatalog
from dressrental.infrastructure.backend.client import BackendClient
from dressrental.infrastructure.backend.contract_gateway import HttpContractGateway
from dressrental.infrastructure.backend.price_quote_source import HttpPriceQuoteSource
from dressrental.infrastructure.mock.availability_source import MockAvailabilitySource
from dressrental.infrastructure.mock.catalog import build_demo_catalog
from dressrental.infrastructure.mock.contract_gateway import MockContractGateway
from dressrental.infrastructure.mock.price_quote_source import MockPriceQuoteSource


def _use_mocks() -> bool:
    return not settings.BACKEND_BASE_URL or settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_backend_client() -> BackendClient:
    return BackendClient()


@lru_cache
def get_catalog() -> CatalogPort:
    if _use_mocks():
        logging.getLogger(__name__).info("Using in-memory demo catalog", extra={"reason": f"ENV={settings.ENV}"})
        return build_demo_catalog()
    return HttpCatalog(get_backend_client())


@lru_cache
def get_availability_source() -> AvailabilityPort:
    if _use_mocks():
        return MockAvailabilitySource()
    return HttpAvailabilitySource(get_backend_client())


@lru_cache
def get_price_quote_source() -> PriceQuotePort:
    if _use_mocks():
        return MockPriceQuoteSource()
    return HttpPriceQuoteSource(get_backend_client())


@lru_cache
def get_contract_gateway() -> ContractGatewayPort:
    if _use_mocks():
        return MockContractGateway()
    return HttpContractGateway(get_backend_client())


def get_availability_resolver() -> AvailabilityResolver:
    return AvailabilityResolver(source=get_availability_source(), fail_open=settings.AVAILABILITY_FAIL_OPEN)


@lru_cache
def get_pricing_config() -> PricingConfig:
    return PricingConfig.from_settings(settings)


def get_contract_draft_use_case() -> ContractDraftUseCase:
    """Reference data is loaded on first use, so back-office failures surface inside the request handler."""
    return ContractDraftUseCase(
        catalog=get_catalog(),
        gateway=get_contract_gateway(),
        resolver=get_availability_resolver(),
        quotes=get_price_quote_source(),
        config=get_pricing_config(),
        app_settings=settings,
        timezone=ZoneInfo(settings.BUSINESS_TIMEZONE),
    )
