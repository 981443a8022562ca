"""Human-readable notes carrying machine-readable markers.

Event notes are HTML written for people, but two things inside them are read
back by code:

* labelled values such as ``<strong>Booking Reference:</strong> PBS-104``
  used to re-discover the event that documents a submission, and
* an append-only log stored as a JSON array inside a trailing HTML comment.

``AnnotatedText`` owns both so that nothing else does string surgery on notes.
``AnnotatedText.parse(text.serialize()) == text`` holds for every value.
"""

from __future__ import annotations

import html
import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import Any, Final, cast

log = getLogger(__name__)

LOG_MARKER: Final[str] = "INTAKE_LOG"
_BLOCK_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^(?:(?P<body>.*)\n)?<!--{LOG_MARKER}:(?P<payload>.*)-->$", re.DOTALL
)


@dataclass(frozen=True, slots=True)
class LogEntry:
    kind: str
    recorded_at: datetime
    details: dict[str, str] = field(default_factory=dict[str, str])

    def to_json(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "at": self.recorded_at.isoformat(),
            "details": dict(self.details),
        }

    @classmethod
    def from_json(cls, payload: object) -> LogEntry:
        if not isinstance(payload, dict):
            raise ValueError("log entry must be an object")
        data = cast(dict[str, Any], payload)
        kind = data.get("kind")
        recorded_at = data.get("at")
        details = data.get("details", {})
        if not isinstance(kind, str) or not isinstance(recorded_at, str):
            raise ValueError("log entry requires string 'kind' and 'at'")
        if not isinstance(details, dict):
            raise ValueError("log entry 'details' must be an object")
        return cls(
            kind=kind,
            recorded_at=datetime.fromisoformat(recorded_at),
            details={str(k): str(v) for k, v in cast(dict[str, Any], details).items()},
        )


@dataclass(frozen=True, slots=True)
class AnnotatedText:
    body: str = ""
    entries: tuple[LogEntry, ...] = ()

    @classmethod
    def parse(cls, text: str | None) -> AnnotatedText:
        if not text:
            return cls()
        match = _BLOCK_PATTERN.match(text)
        if match is None:
            return cls(body=text)
        try:
            raw = json.loads(match.group("payload"))
            if not isinstance(raw, list):
                raise ValueError("log block must be a JSON array")  # noqa: TRY004, TRY301
            entries = tuple(LogEntry.from_json(item) for item in cast(list[object], raw))
        except ValueError:
            # json.JSONDecodeError is a ValueError
            log.warning("Ignoring malformed %s block in notes", LOG_MARKER)
            return cls(body=text)
        return cls(body=match.group("body") or "", entries=entries)

    def serialize(self) -> str:
        if not self.entries:
            return self.body
        payload = json.dumps([entry.to_json() for entry in self.entries], sort_keys=True)
        # keep the comment well-formed whatever the details contain
        payload = payload.replace("<", "\\u003c").replace(">", "\\u003e")
        block = f"<!--{LOG_MARKER}:{payload}-->"
        return f"{self.body}\n{block}" if self.body else block

    def append(self, entry: LogEntry) -> AnnotatedText:
        return AnnotatedText(body=self.body, entries=(*self.entries, entry))

    def labelled_value(self, label: str) -> str | None:
        """Return the token following ``<strong>{label}:</strong>`` in the body."""

        pattern = re.compile(
            rf"<strong>\s*{re.escape(label)}\s*:\s*</strong>\s*([^<\s]+)", re.IGNORECASE
        )
        match = pattern.search(self.body)
        if match is None:
            return None
        return html.unescape(match.group(1))


def labelled_line(label: str, value: object) -> str:
    return f"<p><strong>{html.escape(label)}:</strong> {html.escape(str(value))}</p>"
