"""Client aggregate: the person who owns pets and books services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from intakesync.domain.model.base import Entity
from intakesync.domain.model.enums import EntityType

ADDRESS_FIELDS = ("street_address", "city", "state", "postcode")


@dataclass(eq=False, kw_only=True)
class Client(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CLIENT

    first_name: str
    last_name: str = ""
    email: str = ""
    mobile: str = ""
    street_address: str | None = None
    city: str | None = None
    state: str | None = None
    postcode: str | None = None
    notes: str | None = None
    stripe_customer_id: str | None = None
    folder_path: str | None = None

    def __post_init__(self) -> None:
        self.first_name = self.first_name.strip()
        self.last_name = self.last_name.strip()
        if not self.first_name:
            raise ValueError("Client first name is required")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_blank(self, field_name: str) -> bool:
        value = getattr(self, field_name)
        return value is None or (isinstance(value, str) and not value.strip())
