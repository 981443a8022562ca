"""Submission trackers: the idempotency token for each remote source."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from intakesync.domain.ingest.errors import MarkerError

if TYPE_CHECKING:
    from intakesync.domain.ports import BookingSource, SubmissionTracker

log = getLogger(__name__)


@dataclass(slots=True)
class RemoteFlagTracker:
    """Uses the booking source's own processed flag.

    Unsynced filtering already happens server-side, so nothing fetched counts as
    processed locally; re-delivery is absorbed by natural-key matching.
    """

    source: BookingSource

    def is_processed(self, submission_id: str) -> bool:  # noqa: ARG002
        return False

    def mark_processed(self, submission_id: str) -> None:
        try:
            self.source.mark_synced(submission_id)
        except Exception as exc:
            raise MarkerError(f"Could not flag booking {submission_id} as synced: {exc}") from exc


if TYPE_CHECKING:

    def _tracker_check(source: BookingSource) -> SubmissionTracker:
        return RemoteFlagTracker(source)
