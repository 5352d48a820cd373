from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ContractPackage:
    id: str
    name: str
    price_ht: float
    price_ttc: float
    num_dresses: int = 1
    addon_ids: tuple[str, ...] = field(default_factory=tuple)  # add-ons bundled as "included"
