"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from intakesync.domain.ports.persistence import (
        ClientRepository,
        EventRepository,
        PetRepository,
        TaskRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """One transaction around a repository collection; exiting on error rolls back."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class IntakeRepositories(RepositoryCollection):
    """Repositories shared by the import pipelines, automation and review surface."""

    clients: ClientRepository
    pets: PetRepository
    events: EventRepository
    tasks: TaskRepository


type IntakeUnitOfWork = UnitOfWork[IntakeRepositories]
type IntakeUnitOfWorkFactory = Callable[[], IntakeUnitOfWork]
