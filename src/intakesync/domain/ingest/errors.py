"""Failure taxonomy for importing one remote submission."""

from __future__ import annotations

from typing import ClassVar


class IngestError(RuntimeError):
    """Base class; ``kind`` is reported in per-submission results."""

    kind: ClassVar[str] = "ingest"


class ParseError(IngestError):
    """A required remote field is missing. Nothing was written."""

    kind = "parse"


class MatchError(IngestError):
    """The submission cannot be tied to a local client. Nothing was written."""

    kind = "match"


class TransactionError(IngestError):
    """The atomic write sequence failed and was rolled back."""

    kind = "transaction"


class PostCommitError(IngestError):
    """A best-effort step after commit failed; the import itself stands."""

    kind = "post_commit"

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step


class MarkerError(IngestError):
    """The processed mark could not be recorded."""

    kind = "marker"
