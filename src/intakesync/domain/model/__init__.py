"""Domain model package."""

from __future__ import annotations

from .annotated_text import AnnotatedText, LogEntry, labelled_line
from .base import Entity, HasEntityType, utcnow
from .client import ADDRESS_FIELDS, Client
from .enums import (
    AutomatedAction,
    EntityType,
    EventType,
    PetSex,
    SubmissionSource,
    TaskStatus,
)
from .event import Event
from .pet import Pet
from .task import ALLOWED_TRANSITIONS, InvalidTaskTransitionError, Task

__all__ = [
    "ADDRESS_FIELDS",
    "ALLOWED_TRANSITIONS",
    "AnnotatedText",
    "AutomatedAction",
    "Client",
    "Entity",
    "EntityType",
    "Event",
    "EventType",
    "HasEntityType",
    "InvalidTaskTransitionError",
    "LogEntry",
    "Pet",
    "PetSex",
    "SubmissionSource",
    "Task",
    "TaskStatus",
    "labelled_line",
    "utcnow",
]
