"""Application orchestration entry points."""

from __future__ import annotations

from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from intakesync.adapters.bookings import SupabaseBookingSource
from intakesync.adapters.files import JsonQuestionnaireArchive, LocalSeenIdTracker
from intakesync.adapters.jotform import JotformSource
from intakesync.adapters.sqlalchemy import Database, startup
from intakesync.config import get_storage_config, get_sync_config
from intakesync.domain.automation import AutomationEngine, Direction, DueDateOffset
from intakesync.domain.ingest import (
    BOOKING_REFERENCE_LABEL,
    BookingImporter,
    QuestionnaireImporter,
    RemoteFlagTracker,
    run_sync,
)
from intakesync.domain.model import AutomatedAction, EventType, SubmissionSource, utcnow
from intakesync.domain.reconciliation import QuestionnaireReview

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from intakesync.config import SyncConfig
    from intakesync.domain.ingest import BookingSubmission, SyncRunResult
    from intakesync.domain.model import Client, Pet
    from intakesync.domain.ports import (
        AutomationHooks,
        BookingSource,
        IntakeUnitOfWorkFactory,
        QuestionnaireSource,
        SubmissionArchive,
        SubmissionTracker,
    )
    from intakesync.domain.reconciliation import ReconciliationResult

log = getLogger(__name__)

COMPLETED_STATUS = "completed"
CANCELLED_STATUS = "cancelled"


class ConsultationLookupError(LookupError):
    """No booking could be traced from a client's history to the remote booking."""


def open_database(database_uri: str | None = None) -> Database:
    """Open the configured record store; the caller disposes it."""

    return startup(database_uri=database_uri)


def build_automation(
    unit_of_work_factory: IntakeUnitOfWorkFactory,
    *,
    sync_config: SyncConfig | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> AutomationEngine:
    config = sync_config or get_sync_config()
    offsets = {
        AutomatedAction.CHECK_QUESTIONNAIRE_RETURNED: DueDateOffset(
            config.questionnaire_check_hours, "hours", Direction.BEFORE
        )
    }
    return AutomationEngine(unit_of_work_factory, offsets=offsets, clock=clock)


def sync_website_bookings(
    *,
    unit_of_work_factory: IntakeUnitOfWorkFactory,
    source: BookingSource | None = None,
    automation: AutomationHooks | None = None,
    sync_config: SyncConfig | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> SyncRunResult:
    """Import confirmed website bookings that are not flagged as synced yet."""

    config = sync_config or get_sync_config()
    effective_source = source or SupabaseBookingSource()
    hooks = automation or build_automation(unit_of_work_factory, sync_config=config, clock=clock)
    importer = BookingImporter(
        unit_of_work_factory,
        automation=hooks,
        referrals=effective_source,
        config=config,
        clock=clock,
    )

    log.info("Starting website booking sync")
    bookings = effective_source.fetch_unsynced()
    return run_sync(
        bookings,
        source=SubmissionSource.BOOKING,
        tracker=RemoteFlagTracker(effective_source),
        importer=importer,
    )


def sync_questionnaires(
    *,
    unit_of_work_factory: IntakeUnitOfWorkFactory,
    source: QuestionnaireSource | None = None,
    tracker: SubmissionTracker | None = None,
    archive: SubmissionArchive | None = None,
    automation: AutomationHooks | None = None,
    sync_config: SyncConfig | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> SyncRunResult:
    """Import questionnaires submitted within the lookback window."""

    config = sync_config or get_sync_config()
    effective_source = source or JotformSource(zone=config.zone)
    effective_tracker = tracker or LocalSeenIdTracker(
        get_storage_config().processed_questionnaires_path()
    )
    hooks = automation or build_automation(unit_of_work_factory, sync_config=config, clock=clock)
    importer = QuestionnaireImporter(
        unit_of_work_factory,
        archive=archive or JsonQuestionnaireArchive(clock=clock),
        documents=effective_source,
        automation=hooks,
        config=config,
        clock=clock,
    )

    since = clock() - timedelta(days=config.questionnaire_lookback_days)
    log.info("Starting questionnaire sync for submissions since %s", since)
    submissions = effective_source.fetch_submissions(since=since)
    return run_sync(
        submissions,
        source=SubmissionSource.QUESTIONNAIRE,
        tracker=effective_tracker,
        importer=importer,
    )


def reconcile_questionnaire(
    client_id: int,
    submission_id: str,
    *,
    unit_of_work_factory: IntakeUnitOfWorkFactory,
    archive: SubmissionArchive | None = None,
) -> ReconciliationResult:
    review = QuestionnaireReview(unit_of_work_factory, archive or JsonQuestionnaireArchive())
    payload_path = review.find_submission_file(client_id, submission_id)
    return review.reconcile(client_id, payload_path)


def apply_reconciliation(
    client_id: int,
    submission_id: str,
    fields: Iterable[str],
    *,
    unit_of_work_factory: IntakeUnitOfWorkFactory,
    pet: bool = False,
    archive: SubmissionArchive | None = None,
) -> Client | Pet:
    """Write the reviewer's selected fields from a saved questionnaire."""

    review = QuestionnaireReview(unit_of_work_factory, archive or JsonQuestionnaireArchive())
    payload_path = review.find_submission_file(client_id, submission_id)
    if pet:
        return review.apply_pet_updates(client_id, payload_path, fields)
    return review.apply_client_updates(client_id, payload_path, fields)


def complete_consultation(
    client_id: int,
    *,
    unit_of_work_factory: IntakeUnitOfWorkFactory,
    on_date: datetime | None = None,
    cancelled: bool = False,
    source: BookingSource | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> BookingSubmission:
    """Mark the remote booking behind the client's nearest Booking event."""

    with unit_of_work_factory() as uow:
        bookings = list(uow.repositories.events.list_for_client(client_id, EventType.BOOKING))
    if not bookings:
        raise ConsultationLookupError(f"Client {client_id} has no booking events")

    target = on_date or clock()
    event = min(bookings, key=lambda candidate: abs(candidate.date - target))
    reference = event.labelled_value(BOOKING_REFERENCE_LABEL)
    if not reference:
        raise ConsultationLookupError(f"Booking event {event.id} carries no booking reference")

    effective_source = source or SupabaseBookingSource()
    booking = effective_source.find_by_reference(reference)
    if booking is None:
        raise ConsultationLookupError(f"Booking {reference} not found at the booking source")

    status = CANCELLED_STATUS if cancelled else COMPLETED_STATUS
    effective_source.update_status(booking.booking_id, status)
    log.info("Booking %s for client %s marked %s", reference, client_id, status)
    return booking
