"""Tasks scheduled by automation and worked by a human."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from intakesync.domain.model.base import Entity, utcnow
from intakesync.domain.model.enums import EntityType, TaskStatus

if TYPE_CHECKING:
    from datetime import datetime

MIN_PRIORITY: Final[int] = 1
MAX_PRIORITY: Final[int] = 5

ALLOWED_TRANSITIONS: Final[dict[TaskStatus, frozenset[TaskStatus]]] = {
    TaskStatus.PENDING: frozenset(
        {TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED, TaskStatus.DONE, TaskStatus.CANCELED}
    ),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.PENDING, TaskStatus.BLOCKED, TaskStatus.DONE, TaskStatus.CANCELED}
    ),
    TaskStatus.BLOCKED: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.CANCELED}),
    TaskStatus.DONE: frozenset(),
    TaskStatus.CANCELED: frozenset(),
}


class InvalidTaskTransitionError(ValueError):
    """Raised when a task is moved to a status its current status does not allow."""

    def __init__(self, current: TaskStatus, target: TaskStatus) -> None:
        super().__init__(f"Cannot move task from {current} to {target}")
        self.current = current
        self.target = target


@dataclass(eq=False, kw_only=True)
class Task(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.TASK

    description: str
    due_date: datetime | None = None
    status: TaskStatus = TaskStatus.PENDING
    priority: int = 3
    client_id: int | None = None
    event_id: int | None = None
    automated_action: str | None = None
    triggered_by: str | None = None
    completed_on: datetime | None = None

    def __post_init__(self) -> None:
        if not MIN_PRIORITY <= self.priority <= MAX_PRIORITY:
            raise ValueError(
                f"Task priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}, "
                f"got {self.priority}"
            )

    @property
    def is_closed(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, status: TaskStatus | str, *, at: datetime | None = None) -> None:
        status = TaskStatus(status)
        if status == self.status:
            return
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTaskTransitionError(self.status, status)
        self.status = status
        if status is TaskStatus.DONE:
            self.completed_on = at or utcnow()
