from __future__ import annotations

from dressrental.application.exceptions import ReferenceDataError
from dressrental.application.ports.catalog import CatalogPort
from dressrental.domain.entities.contract_addon import ContractAddon
from dressrental.domain.entities.contract_package import ContractPackage
from dressrental.domain.entities.contract_type import ContractType
from dressrental.domain.entities.dress import Dress


class InMemoryCatalog(CatalogPort):
    def __init__(
        self,
        packages: list[ContractPackage] | None = None,
        addons: list[ContractAddon] | None = None,
        contract_types: list[ContractType] | None = None,
        dresses: list[Dress] | None = None,
        fail: bool = False,
    ) -> None:
        self._packages = list(packages or [])
        self._addons = list(addons or [])
        self._contract_types = list(contract_types or [])
        self._dresses = {dress.id: dress for dress in dresses or []}
        self.fail = fail

    def _check(self) -> None:
        if self.fail:
            raise ReferenceDataError("Mock catalog is down")

    def list_packages(self) -> list[ContractPackage]:
        self._check()
        return list(self._packages)

    def list_addons(self) -> list[ContractAddon]:
        self._check()
        return list(self._addons)

    def list_contract_types(self) -> list[ContractType]:
        self._check()
        return list(self._contract_types)

    def get_dress(self, dress_id: str) -> Dress | None:
        self._check()
        return self._dresses.get(dress_id)


def build_demo_catalog() -> InMemoryCatalog:
    """Small catalog used in dev/local runs."""
    return InMemoryCatalog(
        packages=[
            ContractPackage(
                id="pkg-duo",
                name="Forfait duo",
                price_ht=400.0,
                price_ttc=500.0,
                num_dresses=2,
                addon_ids=("addon-veil",),
            ),
            ContractPackage(id="pkg-solo", name="Forfait solo", price_ht=200.0, price_ttc=240.0, num_dresses=1),
        ],
        addons=[
            ContractAddon(id="addon-veil", name="Voile", price_ht=25.0, price_ttc=30.0),
            ContractAddon(id="addon-cleaning", name="Pressing", price_ht=40.0, price_ttc=50.0),
            ContractAddon(id="addon-insurance", name="Assurance", price_ht=10.0, price_ttc=12.0, included=True),
        ],
        contract_types=[
            ContractType(id="89f29652-c045-43ec-b4b2-ca32e913163d", name="Location à la journée"),
            ContractType(id="type-package", name="Location forfaitaire"),
        ],
        dresses=[
            Dress(
                id="dress-aurore",
                name="Aurore",
                reference="AUR-01",
                price_ht=1000.0,
                price_ttc=1200.0,
                price_per_day_ht=80.0,
                price_per_day_ttc=100.0,
            ),
            Dress(id="dress-celeste", name="Céleste", reference="CEL-02", price_ht=750.0, price_ttc=900.0),
            Dress(
                id="dress-iris",
                name="Iris",
                reference="IRI-03",
                price_ht=500.0,
                price_ttc=600.0,
                price_per_day_ht=50.0,
                price_per_day_ttc=60.0,
            ),
        ],
    )
