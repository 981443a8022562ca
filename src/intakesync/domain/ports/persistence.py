"""Ports for persisting clients, pets, events and tasks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from intakesync.domain.model import Client, Event, Pet, Task

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from intakesync.domain.model import EventType, TaskStatus


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract: insert returns the entity with its id assigned."""

    def get(self, entity_id: int) -> TEntity | None: ...

    def add(self, entity: TEntity) -> TEntity: ...


@runtime_checkable
class ClientRepository(Repository[Client], Protocol):
    def find_by_email_or_mobile(self, email: str | None, mobile: str | None) -> Client | None:
        """Email match (case-insensitive) wins over a normalized mobile match."""
        ...

    def update(self, client: Client, **changes: object) -> Client: ...


@runtime_checkable
class PetRepository(Repository[Pet], Protocol):
    def find_by_name(self, client_id: int, name: str) -> Pet | None: ...

    def list_for_client(self, client_id: int) -> Sequence[Pet]: ...

    def update(self, pet: Pet, **changes: object) -> Pet: ...


@runtime_checkable
class EventRepository(Repository[Event], Protocol):
    def update(self, event: Event, **changes: object) -> Event: ...

    def find_by_marker(
        self,
        client_id: int,
        event_type: EventType,
        label: str,
        value: str,
    ) -> Event | None: ...

    def list_for_client(
        self,
        client_id: int,
        event_type: EventType | None = None,
    ) -> Sequence[Event]: ...


@runtime_checkable
class TaskRepository(Repository[Task], Protocol):
    def list_for_event(self, event_id: int) -> Sequence[Task]: ...

    def update_status(
        self,
        task: Task,
        status: TaskStatus,
        *,
        at: datetime | None = None,
    ) -> Task: ...
