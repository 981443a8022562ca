"""Ports for idempotency tracking and persisted submission payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from intakesync.domain.ingest.submissions import QuestionnaireSubmission


@runtime_checkable
class SubmissionTracker(Protocol):
    """Records which remote submissions have been imported.

    ``mark_processed`` raises ``MarkerError`` when the mark cannot be recorded.
    """

    def is_processed(self, submission_id: str) -> bool: ...

    def mark_processed(self, submission_id: str) -> None: ...


@runtime_checkable
class SubmissionArchive(Protocol):
    """Durable per-submission payload files inside a client's folder."""

    def save_questionnaire(self, submission: QuestionnaireSubmission, folder: Path) -> Path: ...

    def find_questionnaire(self, submission_id: str, folder: Path) -> Path | None: ...

    def load_questionnaire(self, path: Path) -> QuestionnaireSubmission: ...
