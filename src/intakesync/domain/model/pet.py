"""Pet entity, owned by exactly one client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from intakesync.domain.model.base import Entity
from intakesync.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import date


@dataclass(eq=False, kw_only=True)
class Pet(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PET

    client_id: int
    name: str
    species: str = ""
    breed: str | None = None
    sex: str | None = None
    date_of_birth: date | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        self.name = self.name.strip()
        if not self.name:
            raise ValueError("Pet name is required")

    def is_blank(self, field_name: str) -> bool:
        value = getattr(self, field_name)
        return value is None or (isinstance(value, str) and not value.strip())

    def append_note(self, text: str) -> None:
        """Append a line to the notes without touching existing content."""

        line = text.strip()
        if not line:
            return
        self.notes = f"{self.notes.rstrip()}\n\n{line}" if self.notes else line
