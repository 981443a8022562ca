"""In-memory implementations of the remote source, tracker and archive ports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from intakesync.domain.ingest import MarkerError
from intakesync.domain.ports import (
    BookingSource,
    QuestionnaireSource,
    SubmissionArchive,
    SubmissionTracker,
)

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from intakesync.domain.automation import RuleResult
    from intakesync.domain.ingest import BookingSubmission, QuestionnaireSubmission
    from intakesync.domain.model import Entity


@dataclass
class FakeBookingSource(BookingSource):
    bookings: list[BookingSubmission] = field(default_factory=list["BookingSubmission"])
    synced: list[str] = field(default_factory=list[str])
    statuses: dict[str, str] = field(default_factory=dict[str, str])
    downloads: list[Path] = field(default_factory=list["Path"])
    fail_mark: bool = False
    fail_download: bool = False

    def fetch_unsynced(self) -> list[BookingSubmission]:
        return [booking for booking in self.bookings if booking.booking_id not in self.synced]

    def mark_synced(self, booking_id: str) -> None:
        if self.fail_mark:
            raise RuntimeError("bookings API unavailable")
        self.synced.append(booking_id)

    def find_by_reference(self, reference: str) -> BookingSubmission | None:
        return next((b for b in self.bookings if b.reference == reference), None)

    def update_status(self, booking_id: str, status: str) -> None:
        self.statuses[booking_id] = status

    def download_referral(self, booking: BookingSubmission, destination_dir: Path) -> Path:
        if self.fail_download:
            raise RuntimeError("storage unavailable")
        target = destination_dir / f"referral_{booking.reference}.pdf"
        target.write_bytes(b"%PDF-1.4")
        self.downloads.append(target)
        return target


@dataclass
class FakeQuestionnaireSource(QuestionnaireSource):
    submissions: list[QuestionnaireSubmission] = field(
        default_factory=list["QuestionnaireSubmission"]
    )
    requested_since: list[datetime] = field(default_factory=list["datetime"])
    fail_pdf: bool = False

    def fetch_submissions(self, *, since: datetime) -> list[QuestionnaireSubmission]:
        self.requested_since.append(since)
        return [s for s in self.submissions if s.submitted_at >= since]

    def download_pdf(self, submission: QuestionnaireSubmission, destination_dir: Path) -> Path:
        if self.fail_pdf:
            raise RuntimeError("PDF generation failed")
        target = destination_dir / f"questionnaire_{submission.submission_id}.pdf"
        target.write_bytes(b"%PDF-1.4")
        return target


@dataclass
class FakeTracker(SubmissionTracker):
    processed: set[str] = field(default_factory=set[str])
    fail_mark: bool = False

    def is_processed(self, submission_id: str) -> bool:
        return submission_id in self.processed

    def mark_processed(self, submission_id: str) -> None:
        if self.fail_mark:
            raise MarkerError(f"cannot record {submission_id}")
        self.processed.add(submission_id)


@dataclass
class FakeArchive(SubmissionArchive):
    saved: dict[str, QuestionnaireSubmission] = field(
        default_factory=dict[str, "QuestionnaireSubmission"]
    )

    def save_questionnaire(self, submission: QuestionnaireSubmission, folder: Path) -> Path:
        path = folder / f"questionnaire_{submission.submission_id}_fake.json"
        self.saved[str(path)] = submission
        return path

    def find_questionnaire(self, submission_id: str, folder: Path) -> Path | None:
        path = folder / f"questionnaire_{submission_id}_fake.json"
        return path if str(path) in self.saved else None

    def load_questionnaire(self, path: Path) -> QuestionnaireSubmission:
        try:
            return self.saved[str(path)]
        except KeyError:
            raise FileNotFoundError(path) from None


@dataclass
class RecordingAutomation:
    created: list[Entity] = field(default_factory=list["Entity"])
    fail: bool = False

    def on_entity_created(self, entity: Entity) -> list[RuleResult]:
        if self.fail:
            raise RuntimeError("automation exploded")
        self.created.append(entity)
        return []

    def on_entity_updated(self, entity: Entity) -> list[RuleResult]:  # noqa: ARG002
        return []
