"""Events: dated records in a client's history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from intakesync.domain.model.annotated_text import AnnotatedText, LogEntry
from intakesync.domain.model.base import Entity
from intakesync.domain.model.enums import EntityType, EventType

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class Event(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.EVENT

    client_id: int
    event_type: EventType
    date: datetime
    notes: str = ""
    status: str | None = None
    hosted_invoice_url: str | None = None
    parent_event_id: int | None = None

    @property
    def annotated_notes(self) -> AnnotatedText:
        return AnnotatedText.parse(self.notes)

    def labelled_value(self, label: str) -> str | None:
        return self.annotated_notes.labelled_value(label)

    def append_log(self, entry: LogEntry) -> None:
        """Append to the embedded log; the HTML body is never rewritten."""

        self.notes = self.annotated_notes.append(entry).serialize()
