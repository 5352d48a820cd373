from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from dressrental.application.ports.catalog import CatalogPort
from dressrental.domain.entities.contract_addon import ContractAddon
from dressrental.domain.entities.contract_package import ContractPackage
from dressrental.domain.entities.contract_type import ContractType
from dressrental.domain.entities.dress import Dress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceData:
    packages: tuple[ContractPackage, ...] = ()
    addons: tuple[ContractAddon, ...] = ()
    contract_types: tuple[ContractType, ...] = ()
    dresses: dict[str, Dress] = field(default_factory=dict)

    def package(self, package_id: str | None) -> ContractPackage | None:
        if not package_id:
            return None
        return next((pkg for pkg in self.packages if pkg.id == package_id), None)

    def addon(self, addon_id: str) -> ContractAddon | None:
        return next((addon for addon in self.addons if addon.id == addon_id), None)

    def dress(self, dress_id: str | None) -> Dress | None:
        if not dress_id:
            return None
        return self.dresses.get(dress_id)

    def with_dress(self, dress: Dress) -> ReferenceData:
        return replace(self, dresses={**self.dresses, dress.id: dress})

    @property
    def default_addon_ids(self) -> frozenset[str]:
        """Add-ons flagged as included globally are pre-selected on every new draft."""
        return frozenset(addon.id for addon in self.addons if addon.included)


def load_reference_data(catalog: CatalogPort) -> ReferenceData:
    """Load packages, add-ons and contract types. Raises ReferenceDataError on failure."""
    packages = tuple(catalog.list_packages())
    addons = tuple(catalog.list_addons())
    contract_types = tuple(catalog.list_contract_types())
    logger.info(
        "Reference data loaded",
        extra={"packages": len(packages), "addons": len(addons), "contract_types": len(contract_types)},
    )
    return ReferenceData(packages=packages, addons=addons, contract_types=contract_types)
