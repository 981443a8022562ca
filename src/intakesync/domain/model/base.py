"""
Base building blocks:
identity, audit timestamps and the entity_type contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, ClassVar, Protocol

if TYPE_CHECKING:
    from intakesync.domain.model.enums import EntityType


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class HasEntityType(Protocol):
    """Structural contract for trigger dispatch."""

    ENTITY_TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType: ...


@dataclass(eq=False, kw_only=True)
class Entity:
    """Identity is assigned by the record store on first flush."""

    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # class-level discriminator; subclasses must override
    ENTITY_TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE

    def touch(self, at: datetime | None = None) -> None:
        moment = at or utcnow()
        if self.created_at is None:
            self.created_at = moment
        self.updated_at = moment
