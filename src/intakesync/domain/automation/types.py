"""Declarative automation rules: trigger, condition and ordered actions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from intakesync.domain.model import AutomatedAction, Client, Event, EventType, Task

if TYPE_CHECKING:
    from datetime import datetime

    from intakesync.domain.automation.offsets import DueDateOffset


class TriggerType(StrEnum):
    EVENT_CREATED = "event.created"
    EVENT_UPDATED = "event.updated"
    TASK_CREATED = "task.created"
    TASK_UPDATED = "task.updated"
    CLIENT_CREATED = "client.created"


@dataclass(slots=True, kw_only=True)
class AutomationContext:
    """The triggering entity plus whatever related records the trigger carries."""

    trigger: TriggerType
    at: datetime
    client: Client | None = None
    event: Event | None = None
    task: Task | None = None

    @property
    def client_id(self) -> int | None:
        if self.client is not None and self.client.id is not None:
            return self.client.id
        if self.event is not None:
            return self.event.client_id
        if self.task is not None:
            return self.task.client_id
        return None

    @property
    def reference_date(self) -> datetime:
        """Date that due-date offsets are applied to."""

        if self.event is not None:
            return self.event.date
        if self.task is not None and self.task.due_date is not None:
            return self.task.due_date
        return self.at


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateTaskAction:
    description: str
    automated_action: AutomatedAction
    priority: int = 3
    triggered_by: str | None = None
    # falls back to the named offset for ``automated_action``
    offset: DueDateOffset | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateEventAction:
    event_type: EventType
    notes: str
    client_id: int | None = None
    date: datetime | None = None
    parent_event_id: int | None = None


type Action = CreateTaskAction | CreateEventAction
type Condition = Callable[[AutomationContext], bool]


@dataclass(frozen=True, slots=True, kw_only=True)
class AutomationRule:
    rule_id: str
    name: str
    trigger: TriggerType
    condition: Condition
    actions: tuple[Action, ...]
    enabled: bool = True


@dataclass(slots=True, kw_only=True)
class RuleResult:
    rule_id: str
    success: bool = True
    actions_executed: int = 0
    errors: list[str] = field(default_factory=list[str])
    created: list[Task | Event] = field(default_factory=list["Task | Event"])
