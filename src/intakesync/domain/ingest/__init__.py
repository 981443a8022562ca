"""Import pipelines for remote booking and questionnaire submissions."""

from __future__ import annotations

from .bookings import BOOKING_REFERENCE_LABEL, BookingImporter, render_booking_notes
from .errors import (
    IngestError,
    MarkerError,
    MatchError,
    ParseError,
    PostCommitError,
    TransactionError,
)
from .questionnaires import SUBMISSION_ID_LABEL, QuestionnaireImporter
from .results import SubmissionResult, SyncRunResult
from .runner import run_sync
from .submissions import CAT, DOG, BookingSubmission, QuestionnaireSubmission
from .tracking import RemoteFlagTracker

__all__ = [
    "BOOKING_REFERENCE_LABEL",
    "CAT",
    "DOG",
    "SUBMISSION_ID_LABEL",
    "BookingImporter",
    "BookingSubmission",
    "IngestError",
    "MarkerError",
    "MatchError",
    "ParseError",
    "PostCommitError",
    "QuestionnaireImporter",
    "QuestionnaireSubmission",
    "RemoteFlagTracker",
    "SubmissionResult",
    "SyncRunResult",
    "TransactionError",
    "render_booking_notes",
    "run_sync",
]
