"""SQLAlchemy adapter package for the intake record store."""

from __future__ import annotations

from .mappings import (
    client_table,
    event_table,
    mapper_registry,
    pet_table,
    start_mappers,
    task_table,
)
from .repositories import (
    SqlAlchemyClientRepository,
    SqlAlchemyEventRepository,
    SqlAlchemyPetRepository,
    SqlAlchemyTaskRepository,
)
from .unit_of_work import (
    Database,
    SqlAlchemyUnitOfWork,
    StartupError,
    create_store_engine,
    startup,
)

__all__ = [
    "Database",
    "SqlAlchemyClientRepository",
    "SqlAlchemyEventRepository",
    "SqlAlchemyPetRepository",
    "SqlAlchemyTaskRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "client_table",
    "create_store_engine",
    "event_table",
    "mapper_registry",
    "pet_table",
    "start_mappers",
    "startup",
    "task_table",
]
