from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Customer:
    id: str
    firstname: str = ""
    lastname: str = ""
    email: str | None = None
    phone: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()
