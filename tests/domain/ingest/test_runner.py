from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from intakesync.domain.ingest import (
    MarkerError,
    ParseError,
    RemoteFlagTracker,
    SubmissionResult,
    run_sync,
)
from intakesync.domain.model import SubmissionSource
from tests.helpers.fakes import FakeBookingSource, FakeTracker
from tests.helpers.submissions import make_booking

if TYPE_CHECKING:
    from intakesync.domain.ingest import BookingSubmission


def _succeed(booking: BookingSubmission) -> SubmissionResult:
    return SubmissionResult(
        source=SubmissionSource.BOOKING,
        submission_id=booking.booking_id,
        success=True,
    )


def test_processed_submissions_are_skipped() -> None:
    tracker = FakeTracker(processed={"id-PBS-1"})
    seen: list[str] = []

    def importer(booking: BookingSubmission) -> SubmissionResult:
        seen.append(booking.reference)
        return _succeed(booking)

    run = run_sync(
        [make_booking("PBS-1"), make_booking("PBS-2")],
        source=SubmissionSource.BOOKING,
        tracker=tracker,
        importer=importer,
    )

    assert seen == ["PBS-2"]
    assert run.skipped == 1
    assert (run.total, run.successful, run.failed) == (1, 1, 0)
    assert tracker.processed == {"id-PBS-1", "id-PBS-2"}


def test_only_successful_imports_are_marked() -> None:
    tracker = FakeTracker()

    def importer(booking: BookingSubmission) -> SubmissionResult:
        if booking.reference == "PBS-2":
            return SubmissionResult(
                source=SubmissionSource.BOOKING, submission_id=booking.booking_id
            ).fail(ParseError("nope"))
        return _succeed(booking)

    run = run_sync(
        [make_booking("PBS-1"), make_booking("PBS-2"), make_booking("PBS-3")],
        source=SubmissionSource.BOOKING,
        tracker=tracker,
        importer=importer,
    )

    assert tracker.processed == {"id-PBS-1", "id-PBS-3"}
    assert (run.total, run.successful, run.failed) == (3, 2, 1)


def test_unexpected_exceptions_do_not_stop_the_batch() -> None:
    tracker = FakeTracker()

    def importer(booking: BookingSubmission) -> SubmissionResult:
        if booking.reference == "PBS-1":
            raise KeyError("surprise")
        return _succeed(booking)

    run = run_sync(
        [make_booking("PBS-1"), make_booking("PBS-2")],
        source=SubmissionSource.BOOKING,
        tracker=tracker,
        importer=importer,
    )

    failed, succeeded = run.results
    assert failed.error_kind == "unexpected"
    assert failed.error is not None
    assert "surprise" in failed.error
    assert succeeded.success
    assert tracker.processed == {"id-PBS-2"}


def test_marker_failure_becomes_a_warning() -> None:
    run = run_sync(
        [make_booking("PBS-1")],
        source=SubmissionSource.BOOKING,
        tracker=FakeTracker(fail_mark=True),
        importer=_succeed,
    )

    (result,) = run.results
    assert result.success
    assert result.warnings == ["cannot record id-PBS-1"]


def test_remote_flag_tracker_marks_the_source() -> None:
    source = FakeBookingSource()
    tracker = RemoteFlagTracker(source)

    assert not tracker.is_processed("id-PBS-1")
    tracker.mark_processed("id-PBS-1")

    assert source.synced == ["id-PBS-1"]


def test_remote_flag_tracker_wraps_source_failures() -> None:
    tracker = RemoteFlagTracker(FakeBookingSource(fail_mark=True))

    with pytest.raises(MarkerError, match="id-PBS-1"):
        tracker.mark_processed("id-PBS-1")
