"""Ports for the remote submission sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from intakesync.domain.ingest.submissions import BookingSubmission, QuestionnaireSubmission


@runtime_checkable
class ReferralDownloader(Protocol):
    def download_referral(self, booking: BookingSubmission, destination_dir: Path) -> Path: ...


@runtime_checkable
class BookingSource(ReferralDownloader, Protocol):
    """Hosted booking database that exposes a per-row processed flag."""

    def fetch_unsynced(self) -> list[BookingSubmission]:
        """Confirmed bookings not yet flagged; all confirmed ones if the flag is unavailable."""
        ...

    def mark_synced(self, booking_id: str) -> None: ...

    def find_by_reference(self, reference: str) -> BookingSubmission | None: ...

    def update_status(self, booking_id: str, status: str) -> None: ...


@runtime_checkable
class QuestionnaireDocumentSource(Protocol):
    def download_pdf(self, submission: QuestionnaireSubmission, destination_dir: Path) -> Path: ...


@runtime_checkable
class QuestionnaireSource(QuestionnaireDocumentSource, Protocol):
    """Hosted form service with no writable processed flag."""

    def fetch_submissions(self, *, since: datetime) -> list[QuestionnaireSubmission]: ...


__all__ = [
    "BookingSource",
    "QuestionnaireDocumentSource",
    "QuestionnaireSource",
    "ReferralDownloader",
]
