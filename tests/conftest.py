from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from dressrental.application.use_cases.availability import AvailabilityResolver
from dressrental.application.use_cases.contract_draft import ContractDraftUseCase
from dressrental.core.config import Settings
from dressrental.domain.entities.contract_addon import ContractAddon
from dressrental.domain.entities.contract_package import ContractPackage
from dressrental.domain.entities.contract_type import ContractType
from dressrental.domain.entities.dress import Dress
from dressrental.infrastructure.mock.availability_source import MockAvailabilitySource
from dressrental.infrastructure.mock.catalog import InMemoryCatalog
from dressrental.infrastructure.mock.contract_gateway import MockContractGateway
from dressrental.infrastructure.mock.price_quote_source import MockPriceQuoteSource

PARIS = ZoneInfo("Europe/Paris")
DAILY_TYPE_ID = "89f29652-c045-43ec-b4b2-ca32e913163d"


def build_catalog(packages: list[ContractPackage] | None = None) -> InMemoryCatalog:
    return InMemoryCatalog(
        packages=packages
        if packages is not None
        else [
            ContractPackage(
                id="duo",
                name="Forfait duo",
                price_ht=400.0,
                price_ttc=500.0,
                num_dresses=2,
                addon_ids=("inc",),
            )
        ],
        # reference order: chg, inc, ins
        addons=[
            ContractAddon(id="chg", name="Pressing", price_ttc=50.0),
            ContractAddon(id="inc", name="Voile", price_ttc=30.0),
            ContractAddon(id="ins", name="Assurance", price_ht=10.0, price_ttc=12.0, included=True),
        ],
        contract_types=[
            ContractType(id=DAILY_TYPE_ID, name="Location à la journée"),
            ContractType(id="type-pkg", name="Location forfaitaire"),
        ],
        dresses=[
            Dress(
                id="d1",
                name="Aurore",
                price_ht=1000.0,
                price_ttc=1200.0,
                price_per_day_ht=80.0,
                price_per_day_ttc=100.0,
            ),
            Dress(id="d2", name="Céleste", price_ht=750.0, price_ttc=900.0),
            Dress(id="d3", name="Iris", price_ht=500.0, price_ttc=600.0, price_per_day_ht=50.0, price_per_day_ttc=60.0),
        ],
    )


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return build_catalog()


@pytest.fixture
def gateway() -> MockContractGateway:
    return MockContractGateway()


@pytest.fixture
def availability_source() -> MockAvailabilitySource:
    return MockAvailabilitySource()


@pytest.fixture
def quotes() -> MockPriceQuoteSource:
    return MockPriceQuoteSource()


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 5, 1, 8, 0, tzinfo=PARIS)


@pytest.fixture
def use_case(catalog, gateway, availability_source, quotes, now) -> ContractDraftUseCase:
    return ContractDraftUseCase(
        catalog=catalog,
        gateway=gateway,
        resolver=AvailabilityResolver(availability_source),
        quotes=quotes,
        app_settings=Settings(_env_file=None),
        timezone=PARIS,
        clock=lambda: now,
    )
