"""Seed helpers that write records through a unit of work."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from intakesync.adapters.sqlalchemy import client_table
from intakesync.domain.model import Client, Event, EventType, Pet

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from intakesync.adapters.sqlalchemy import SqlAlchemyUnitOfWork


def seed_client(uow_factory: Callable[[], SqlAlchemyUnitOfWork], **fields: Any) -> Client:
    values: dict[str, Any] = {
        "first_name": "Jane",
        "last_name": "Smith",
        "email": "jane@example.com",
        "mobile": "0412345678",
    }
    values.update(fields)
    with uow_factory() as uow:
        client = uow.repositories.clients.add(Client(**values))
        uow.commit()
    return client


def seed_pet(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    client_id: int,
    **fields: Any,
) -> Pet:
    values: dict[str, Any] = {"client_id": client_id, "name": "Rex", "species": "Dog"}
    values.update(fields)
    with uow_factory() as uow:
        pet = uow.repositories.pets.add(Pet(**values))
        uow.commit()
    return pet


def seed_event(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    client_id: int,
    event_type: EventType,
    date: datetime,
    notes: str = "",
) -> Event:
    with uow_factory() as uow:
        event = uow.repositories.events.add(
            Event(client_id=client_id, event_type=event_type, date=date, notes=notes)
        )
        uow.commit()
    return event


def all_events(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    client_id: int,
    event_type: EventType | None = None,
) -> list[Event]:
    with uow_factory() as uow:
        return list(uow.repositories.events.list_for_client(client_id, event_type))


def count_clients(uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> int:
    with uow_factory() as uow:
        return uow.session.execute(select(func.count()).select_from(client_table)).scalar_one()
