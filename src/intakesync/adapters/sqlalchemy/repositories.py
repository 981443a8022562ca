"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from intakesync.adapters.sqlalchemy.mappings import (
    client_table,
    event_table,
    pet_table,
    task_table,
)
from intakesync.domain.model import Client, Entity, Event, Pet, Task
from intakesync.domain.reconciliation.normalize import normalize_email, normalize_mobile

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy import Table
    from sqlalchemy.orm import Session

    from intakesync.domain.model import EventType, TaskStatus

_READ_ONLY_COLUMNS = frozenset({"id", "created_at", "updated_at"})


class SqlAlchemyRepository[TEntity: Entity]:
    """Shared insert/update plumbing; every write flushes so ids are assigned at once."""

    def __init__(self, session: Session, entity_cls: type[TEntity], table: Table) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._updatable = frozenset(column.key for column in table.columns) - _READ_ONLY_COLUMNS

    def get(self, entity_id: int) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)

    def add(self, entity: TEntity) -> TEntity:
        self._prepare(entity)
        entity.touch()
        self.session.add(entity)
        self.session.flush()
        return entity

    def update(self, entity: TEntity, **changes: object) -> TEntity:
        unknown = set(changes) - self._updatable
        if unknown:
            raise ValueError(
                f"Cannot update {', '.join(sorted(unknown))} on {self._entity_cls.__name__}"
            )
        for name, value in changes.items():
            setattr(entity, name, value)
        self._prepare(entity)
        entity.touch()
        self.session.flush()
        return entity

    def _prepare(self, entity: TEntity) -> None:
        _ = entity


class SqlAlchemyClientRepository(SqlAlchemyRepository[Client]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Client, client_table)

    def find_by_email_or_mobile(self, email: str | None, mobile: str | None) -> Client | None:
        normalized_email = normalize_email(email)
        if normalized_email:
            stmt = (
                select(Client)
                .where(client_table.c.email == normalized_email)
                .order_by(client_table.c.id)
                .limit(1)
            )
            found = self.session.execute(stmt).scalar_one_or_none()
            if found is not None:
                return found

        normalized_mobile = normalize_mobile(mobile)
        if not normalized_mobile:
            return None
        stmt = (
            select(Client)
            .where(client_table.c.mobile == normalized_mobile)
            .order_by(client_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def _prepare(self, entity: Client) -> None:
        entity.email = normalize_email(entity.email)
        entity.mobile = normalize_mobile(entity.mobile)


class SqlAlchemyPetRepository(SqlAlchemyRepository[Pet]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Pet, pet_table)

    def find_by_name(self, client_id: int, name: str) -> Pet | None:
        stmt = (
            select(Pet)
            .where(pet_table.c.client_id == client_id)
            .where(func.lower(pet_table.c.name) == name.strip().lower())
            .order_by(pet_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_client(self, client_id: int) -> Sequence[Pet]:
        stmt = select(Pet).where(pet_table.c.client_id == client_id).order_by(pet_table.c.id)
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyEventRepository(SqlAlchemyRepository[Event]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Event, event_table)

    def find_by_marker(
        self,
        client_id: int,
        event_type: EventType,
        label: str,
        value: str,
    ) -> Event | None:
        # narrow by label in SQL; the exact token compare keeps PBS-1 from matching PBS-10
        stmt = (
            select(Event)
            .where(event_table.c.client_id == client_id)
            .where(event_table.c.event_type == event_type)
            .where(event_table.c.notes.contains(f"{label}:", autoescape=True))
            .order_by(event_table.c.id)
        )
        for event in self.session.execute(stmt).scalars():
            if event.labelled_value(label) == value:
                return event
        return None

    def list_for_client(
        self,
        client_id: int,
        event_type: EventType | None = None,
    ) -> Sequence[Event]:
        stmt = select(Event).where(event_table.c.client_id == client_id)
        if event_type is not None:
            stmt = stmt.where(event_table.c.event_type == event_type)
        stmt = stmt.order_by(event_table.c.date, event_table.c.id)
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyTaskRepository(SqlAlchemyRepository[Task]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Task, task_table)

    def list_for_event(self, event_id: int) -> Sequence[Task]:
        stmt = select(Task).where(task_table.c.event_id == event_id).order_by(task_table.c.id)
        return self.session.execute(stmt).scalars().all()

    def update_status(
        self,
        task: Task,
        status: TaskStatus,
        *,
        at: datetime | None = None,
    ) -> Task:
        task.transition_to(status, at=at)
        task.touch(at)
        self.session.flush()
        return task


if TYPE_CHECKING:
    from intakesync.domain.ports import (
        ClientRepository,
        EventRepository,
        PetRepository,
        TaskRepository,
    )

    def _repository_checks(session: Session) -> tuple[
        ClientRepository, PetRepository, EventRepository, TaskRepository
    ]:
        return (
            SqlAlchemyClientRepository(session),
            SqlAlchemyPetRepository(session),
            SqlAlchemyEventRepository(session),
            SqlAlchemyTaskRepository(session),
        )
