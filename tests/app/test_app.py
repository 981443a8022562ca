from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from intakesync.adapters.files import JsonQuestionnaireArchive
from intakesync.app import (
    ConsultationLookupError,
    apply_reconciliation,
    complete_consultation,
    reconcile_questionnaire,
    sync_questionnaires,
    sync_website_bookings,
)
from intakesync.config import SyncConfig
from intakesync.domain.ingest import render_booking_notes
from intakesync.domain.model import AutomatedAction, EventType, Pet
from tests.helpers.fakes import FakeBookingSource, FakeQuestionnaireSource, FakeTracker
from tests.helpers.records import all_events, seed_client, seed_event, seed_pet
from tests.helpers.submissions import make_booking, make_questionnaire

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from intakesync.adapters.sqlalchemy import SqlAlchemyUnitOfWork
    from intakesync.domain.ingest import BookingSubmission

CONSULTATION_UTC = datetime(2025, 11, 1, 23, 0, tzinfo=UTC)


def _second_booking() -> BookingSubmission:
    return make_booking(
        "PBS-105",
        customer_name="Ann Lee",
        email="ann@example.com",
        phone="0400 000 000",
        pet_name="Milo",
    )


def test_sync_website_bookings_imports_flags_and_schedules(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> None:
    source = FakeBookingSource(bookings=[make_booking("PBS-104"), _second_booking()])

    run = sync_website_bookings(
        unit_of_work_factory=uow_factory,
        source=source,
        sync_config=SyncConfig(),
        clock=clock,
    )

    assert (run.total, run.successful, run.failed) == (2, 2, 0)
    assert source.synced == ["id-PBS-104", "id-PBS-105"]
    first = run.results[0]
    assert first.primary_event_id is not None
    with uow_factory() as uow:
        (task,) = uow.repositories.tasks.list_for_event(first.primary_event_id)
    assert task.automated_action == AutomatedAction.CHECK_QUESTIONNAIRE_RETURNED.value
    assert task.due_date == CONSULTATION_UTC - timedelta(hours=48)

    again = sync_website_bookings(
        unit_of_work_factory=uow_factory,
        source=source,
        sync_config=SyncConfig(),
        clock=clock,
    )
    assert again.total == 0


def test_questionnaire_check_window_is_configurable(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> None:
    run = sync_website_bookings(
        unit_of_work_factory=uow_factory,
        source=FakeBookingSource(bookings=[make_booking()]),
        sync_config=SyncConfig(questionnaire_check_hours=72),
        clock=clock,
    )

    event_id = run.results[0].primary_event_id
    assert event_id is not None
    with uow_factory() as uow:
        (task,) = uow.repositories.tasks.list_for_event(event_id)
    assert task.due_date == CONSULTATION_UTC - timedelta(hours=72)


def test_booking_flag_failure_is_reported_as_warning(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> None:
    run = sync_website_bookings(
        unit_of_work_factory=uow_factory,
        source=FakeBookingSource(bookings=[make_booking()], fail_mark=True),
        sync_config=SyncConfig(),
        clock=clock,
    )

    (result,) = run.results
    assert result.success
    assert any("Could not flag booking" in warning for warning in result.warnings)


def test_sync_questionnaires_uses_lookback_and_tracker(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
    client_folder: Path,
) -> None:
    client = seed_client(uow_factory, folder_path=str(client_folder))
    assert client.id is not None
    source = FakeQuestionnaireSource(
        submissions=[
            make_questionnaire("1"),
            make_questionnaire("old", submitted_at=datetime(2025, 8, 1, tzinfo=UTC)),
            make_questionnaire("2", email="stranger@example.com", phone=None),
        ]
    )
    tracker = FakeTracker()

    run = sync_questionnaires(
        unit_of_work_factory=uow_factory,
        source=source,
        tracker=tracker,
        archive=JsonQuestionnaireArchive(clock=clock),
        sync_config=SyncConfig(questionnaire_lookback_days=30),
        clock=clock,
    )

    assert source.requested_since == [clock() - timedelta(days=30)]
    assert (run.total, run.successful, run.failed) == (2, 1, 1)
    assert run.results[1].error_kind == "match"
    assert tracker.processed == {"1"}
    (received,) = all_events(uow_factory, client.id, EventType.QUESTIONNAIRE_RECEIVED)
    with uow_factory() as uow:
        (task,) = uow.repositories.tasks.list_for_event(received.id or 0)
    assert task.automated_action == AutomatedAction.REVIEW_QUESTIONNAIRE.value
    assert task.due_date == received.date


def test_reconcile_and_apply_through_saved_payload(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
    client_folder: Path,
) -> None:
    client = seed_client(uow_factory, folder_path=str(client_folder))
    assert client.id is not None
    seed_pet(uow_factory, client.id)
    archive = JsonQuestionnaireArchive(clock=clock)
    archive.save_questionnaire(make_questionnaire(), client_folder)

    result = reconcile_questionnaire(
        client.id, "5981234567", unit_of_work_factory=uow_factory, archive=archive
    )
    assert result.pet is not None
    assert result.pet_has_changes

    updated = apply_reconciliation(
        client.id,
        "5981234567",
        ["breed", "sex"],
        unit_of_work_factory=uow_factory,
        pet=True,
        archive=archive,
    )
    assert isinstance(updated, Pet)
    assert (updated.breed, updated.sex) == ("Labrador", "Neutered")

    again = reconcile_questionnaire(
        client.id, "5981234567", unit_of_work_factory=uow_factory, archive=archive
    )
    assert not again.pet_has_changes


def _seed_booking_event(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    client_id: int,
    reference: str,
    date: datetime,
) -> None:
    booking = make_booking(reference)
    seed_event(
        uow_factory,
        client_id,
        EventType.BOOKING,
        date,
        notes=render_booking_notes(booking, recorded_at=date),
    )


@pytest.mark.parametrize(("cancelled", "expected"), [(False, "completed"), (True, "cancelled")])
def test_complete_consultation_updates_nearest_booking(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
    cancelled: bool,
    expected: str,
) -> None:
    client = seed_client(uow_factory)
    assert client.id is not None
    _seed_booking_event(uow_factory, client.id, "PBS-104", CONSULTATION_UTC)
    _seed_booking_event(uow_factory, client.id, "PBS-200", CONSULTATION_UTC + timedelta(days=28))
    source = FakeBookingSource(bookings=[make_booking("PBS-104"), make_booking("PBS-200")])

    booking = complete_consultation(
        client.id,
        unit_of_work_factory=uow_factory,
        on_date=CONSULTATION_UTC + timedelta(days=25),
        cancelled=cancelled,
        source=source,
        clock=clock,
    )

    assert booking.reference == "PBS-200"
    assert source.statuses == {"id-PBS-200": expected}


def test_complete_consultation_defaults_to_now(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> None:
    client = seed_client(uow_factory)
    assert client.id is not None
    _seed_booking_event(uow_factory, client.id, "PBS-104", CONSULTATION_UTC)
    _seed_booking_event(uow_factory, client.id, "PBS-200", CONSULTATION_UTC + timedelta(days=28))
    source = FakeBookingSource(bookings=[make_booking("PBS-104"), make_booking("PBS-200")])

    booking = complete_consultation(
        client.id, unit_of_work_factory=uow_factory, source=source, clock=clock
    )

    assert booking.reference == "PBS-104"


def test_complete_consultation_lookup_failures(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> None:
    client = seed_client(uow_factory)
    assert client.id is not None
    source = FakeBookingSource()

    with pytest.raises(ConsultationLookupError, match="no booking events"):
        complete_consultation(
            client.id, unit_of_work_factory=uow_factory, source=source, clock=clock
        )

    _seed_booking_event(uow_factory, client.id, "PBS-104", CONSULTATION_UTC)
    with pytest.raises(ConsultationLookupError, match="PBS-104 not found"):
        complete_consultation(
            client.id, unit_of_work_factory=uow_factory, source=source, clock=clock
        )
    assert source.statuses == {}
