"""Result records returned by import pipelines and sync runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from intakesync.domain.ingest.errors import IngestError
    from intakesync.domain.model import SubmissionSource

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class SubmissionResult:
    """Outcome of importing one submission; failures are data, not exceptions."""

    source: SubmissionSource
    submission_id: str
    reference: str | None = None
    success: bool = False
    client_id: int | None = None
    client_name: str | None = None
    pet_id: int | None = None
    pet_name: str | None = None
    primary_event_id: int | None = None
    note_event_id: int | None = None
    is_new_client: bool = False
    created_primary_event: bool = False
    error: str | None = None
    error_kind: str | None = None
    warnings: list[str] = field(default_factory=list[str])
    attachments: list[Path] = field(default_factory=list["Path"])

    def fail(self, error: IngestError | Exception) -> SubmissionResult:
        self.success = False
        self.error = str(error) or type(error).__name__
        self.error_kind = getattr(error, "kind", "unexpected")
        return self

    def warn(self, warning: Exception) -> None:
        """Record a soft failure that does not undo the import."""

        log.warning("Submission %s: %s", self.submission_id, warning)
        self.warnings.append(str(warning))


@dataclass(slots=True)
class SyncRunResult:
    results: list[SubmissionResult] = field(default_factory=list[SubmissionResult])
    skipped: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful
