from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ContractMode(str, Enum):
    daily = "daily"
    package = "package"


@dataclass(frozen=True)
class ContractType:
    id: str
    name: str
