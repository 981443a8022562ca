"""SQLAlchemy mapping metadata for the intake domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    orm,
)
from sqlalchemy.orm import configure_mappers

from intakesync.domain.model import Client, Event, EventType, Pet, Task, TaskStatus

if TYPE_CHECKING:
    from enum import StrEnum

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _audit_columns() -> tuple[Column[datetime], Column[datetime]]:
    return (
        Column("created_at", UTCDateTime, nullable=False),
        Column("updated_at", UTCDateTime, nullable=False),
    )


client_table = Table(
    "client",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
    Column("email", String, nullable=False),
    Column("mobile", String, nullable=False),
    Column("street_address", String, nullable=True),
    Column("city", String, nullable=True),
    Column("state", String, nullable=True),
    Column("postcode", String, nullable=True),
    Column("notes", Text, nullable=True),
    Column("stripe_customer_id", String, nullable=True),
    Column("folder_path", String, nullable=True),
    *_audit_columns(),
    Index("ix_client_email", "email"),
    Index("ix_client_mobile", "mobile"),
    Index("ix_client_name", "last_name", "first_name"),
    Index("ix_client_location", "city", "state"),
)

pet_table = Table(
    "pet",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("client_id", Integer, ForeignKey("client.id", ondelete="CASCADE"), nullable=False),
    Column("name", String, nullable=False),
    Column("species", String, nullable=False),
    Column("breed", String, nullable=True),
    Column("sex", String, nullable=True),
    Column("date_of_birth", Date, nullable=True),
    Column("notes", Text, nullable=True),
    *_audit_columns(),
    Index("ix_pet_client_id", "client_id"),
)

event_table = Table(
    "event",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("client_id", Integer, ForeignKey("client.id", ondelete="CASCADE"), nullable=False),
    Column(
        "event_type",
        Enum(EventType, native_enum=False, values_callable=_enum_values, length=32),
        nullable=False,
    ),
    Column("date", UTCDateTime, nullable=False),
    Column("notes", Text, nullable=False, default=""),
    Column("status", String, nullable=True),
    Column("hosted_invoice_url", String, nullable=True),
    Column(
        "parent_event_id",
        Integer,
        ForeignKey("event.id", ondelete="SET NULL"),
        nullable=True,
    ),
    *_audit_columns(),
    Index("ix_event_client_type", "client_id", "event_type"),
    Index("ix_event_date", "date"),
)

task_table = Table(
    "task",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("client_id", Integer, ForeignKey("client.id", ondelete="SET NULL"), nullable=True),
    Column("event_id", Integer, ForeignKey("event.id", ondelete="SET NULL"), nullable=True),
    Column("description", Text, nullable=False),
    Column("due_date", UTCDateTime, nullable=True),
    Column(
        "status",
        Enum(TaskStatus, native_enum=False, values_callable=_enum_values, length=32),
        nullable=False,
    ),
    Column("priority", Integer, nullable=False),
    Column("automated_action", String, nullable=True),
    Column("triggered_by", String, nullable=True),
    Column("completed_on", UTCDateTime, nullable=True),
    *_audit_columns(),
    Index("ix_task_event_id", "event_id"),
    Index("ix_task_status_due", "status", "due_date"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Client, client_table)
    mapper_registry.map_imperatively(Pet, pet_table)
    mapper_registry.map_imperatively(Event, event_table)
    mapper_registry.map_imperatively(Task, task_table)

    configure_mappers()
    return mapper_registry

