from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from intakesync.adapters.sqlalchemy import SqlAlchemyPetRepository
from intakesync.domain.automation import AutomationEngine
from intakesync.domain.ingest import BOOKING_REFERENCE_LABEL, BookingImporter, render_booking_notes
from intakesync.domain.ingest.bookings import referral_filename
from intakesync.domain.model import AnnotatedText, EventType, TaskStatus
from tests.helpers.fakes import FakeBookingSource, RecordingAutomation
from tests.helpers.records import all_events, count_clients, seed_client
from tests.helpers.submissions import make_booking

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from intakesync.adapters.sqlalchemy import SqlAlchemyUnitOfWork
    from intakesync.domain.model import Pet

CONSULTATION_UTC = datetime(2025, 11, 1, 23, 0, tzinfo=UTC)


@pytest.fixture
def importer(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> BookingImporter:
    return BookingImporter(uow_factory, clock=clock)


def test_new_booking_creates_client_pet_booking_and_note(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    result = importer(make_booking(problem_description="Reactive on lead"))

    assert result.success
    assert result.is_new_client
    assert result.created_primary_event
    assert result.client_id is not None

    with uow_factory() as uow:
        client = uow.repositories.clients.get(result.client_id)
        assert client is not None
        assert (client.first_name, client.last_name) == ("Jane", "Smith")
        assert client.email == "jane@example.com"
        assert client.mobile == "0412345678"
        assert client.postcode == "3000"
        assert client.state == "VIC"
        assert client.notes is not None
        assert "PBS-104" in client.notes
        assert "Reactive on lead" in client.notes
        (pet,) = uow.repositories.pets.list_for_client(result.client_id)
        assert (pet.name, pet.species) == ("Rex", "Dog")

    (booking,) = all_events(uow_factory, result.client_id, EventType.BOOKING)
    assert booking.id == result.primary_event_id
    assert booking.date == CONSULTATION_UTC
    assert booking.labelled_value(BOOKING_REFERENCE_LABEL) == "PBS-104"
    assert [entry.kind for entry in booking.annotated_notes.entries] == ["imported"]

    (note,) = all_events(uow_factory, result.client_id, EventType.NOTE)
    assert note.id == result.note_event_id
    assert note.parent_event_id == booking.id
    assert note.date == datetime(2025, 10, 18, 3, 0, tzinfo=UTC)


def test_reimporting_a_booking_is_a_no_op(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    first = importer(make_booking())
    second = importer(make_booking())

    assert second.success
    assert not second.is_new_client
    assert not second.created_primary_event
    assert second.note_event_id is None
    assert second.primary_event_id == first.primary_event_id
    assert first.client_id is not None
    assert count_clients(uow_factory) == 1
    assert len(all_events(uow_factory, first.client_id, EventType.BOOKING)) == 1
    assert len(all_events(uow_factory, first.client_id, EventType.NOTE)) == 1


def test_references_are_matched_exactly(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    importer(make_booking("PBS-10"))
    result = importer(make_booking("PBS-104"))

    assert result.created_primary_event
    assert result.client_id is not None
    assert len(all_events(uow_factory, result.client_id, EventType.BOOKING)) == 2


def test_email_match_is_case_insensitive(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    existing = seed_client(uow_factory)

    result = importer(make_booking(email="Jane@Example.COM", phone=None))

    assert result.client_id == existing.id
    assert not result.is_new_client
    assert result.note_event_id is None


def test_email_match_takes_precedence_over_mobile(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    seed_client(uow_factory, first_name="Other", email="other@example.com", mobile="0412345678")
    by_email = seed_client(uow_factory, email="jane@example.com", mobile="0499999999")

    result = importer(make_booking())

    assert result.client_id == by_email.id


def test_mobile_fallback_refreshes_email(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    existing = seed_client(uow_factory, email="old@example.com", mobile="0412345678")
    assert existing.id is not None

    result = importer(make_booking(email="jane@example.com", phone="+61 412 345 678"))

    assert result.client_id == existing.id
    with uow_factory() as uow:
        client = uow.repositories.clients.get(existing.id)
        assert client is not None
        assert client.email == "jane@example.com"


def test_existing_client_fields_are_only_filled_when_blank(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    existing = seed_client(uow_factory, postcode="3141", state=None)
    assert existing.id is not None

    importer(make_booking(stripe_customer_id="cus_1"))

    with uow_factory() as uow:
        client = uow.repositories.clients.get(existing.id)
        assert client is not None
        assert client.postcode == "3141"
        assert client.state == "VIC"
        assert client.stripe_customer_id == "cus_1"


def test_write_failure_rolls_back_everything(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_add(self: SqlAlchemyPetRepository, entity: Pet) -> Pet:
        raise RuntimeError("disk full")

    monkeypatch.setattr(SqlAlchemyPetRepository, "add", broken_add)

    result = importer(make_booking())

    assert not result.success
    assert result.error_kind == "transaction"
    assert result.error is not None
    assert "disk full" in result.error
    assert count_clients(uow_factory) == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"pet_name": None},
        {"email": None, "phone": "  "},
        {"customer_name": "   "},
    ],
)
def test_incomplete_bookings_are_parse_failures(
    importer: BookingImporter,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    overrides: dict[str, object],
) -> None:
    result = importer(make_booking(**overrides))

    assert not result.success
    assert result.error_kind == "parse"
    assert count_clients(uow_factory) == 0


def test_automation_runs_once_for_new_booking_event(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> None:
    automation = RecordingAutomation()
    importer = BookingImporter(uow_factory, automation=automation, clock=clock)

    importer(make_booking())
    importer(make_booking())

    assert len(automation.created) == 1
    assert getattr(automation.created[0], "event_type", None) is EventType.BOOKING


def test_automation_failure_is_a_warning(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> None:
    importer = BookingImporter(uow_factory, automation=RecordingAutomation(fail=True), clock=clock)

    result = importer(make_booking())

    assert result.success
    assert len(result.warnings) == 1
    assert "automation" in result.warnings[0]
    assert count_clients(uow_factory) == 1


def test_booking_schedules_questionnaire_check_task(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
) -> None:
    engine = AutomationEngine(uow_factory, clock=clock)
    importer = BookingImporter(uow_factory, automation=engine, clock=clock)

    result = importer(make_booking())

    assert result.primary_event_id is not None
    with uow_factory() as uow:
        (task,) = uow.repositories.tasks.list_for_event(result.primary_event_id)
    assert task.status is TaskStatus.PENDING
    assert task.due_date == CONSULTATION_UTC - timedelta(hours=48)


def test_referral_is_downloaded_into_client_folder(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
    client_folder: Path,
) -> None:
    seed_client(uow_factory, folder_path=str(client_folder))
    source = FakeBookingSource()
    importer = BookingImporter(uow_factory, referrals=source, clock=clock)

    result = importer(
        make_booking(
            referral_required=True,
            referral_file_path="referrals/PBS-104.pdf",
            referral_file_name="vet-referral.pdf",
        )
    )

    assert result.success
    assert result.attachments == [client_folder / "referral_PBS-104.pdf"]
    assert (client_folder / "referral_PBS-104.pdf").exists()


def test_referral_skipped_without_folder_and_failure_is_warning(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    clock: Callable[[], datetime],
    client_folder: Path,
) -> None:
    booking = make_booking(referral_required=True, referral_file_path="referrals/PBS-104.pdf")
    source = FakeBookingSource(fail_download=True)
    importer = BookingImporter(uow_factory, referrals=source, clock=clock)

    first = importer(booking)
    assert first.success
    assert first.warnings == []
    assert source.downloads == []

    with uow_factory() as uow:
        client = uow.repositories.clients.get(first.client_id or 0)
        assert client is not None
        uow.repositories.clients.update(client, folder_path=str(client_folder))
        uow.commit()

    second = importer(booking)
    assert second.success
    assert len(second.warnings) == 1
    assert "referral download" in second.warnings[0]


def test_render_booking_notes() -> None:
    booking = make_booking(
        travel_charge=50.0,
        total_price=435.0,
        referral_required=True,
        problem_description="Barks at <bikes> & cars",
        zoom_link="https://zoom.example/j/1",
    )

    notes = render_booking_notes(booking, recorded_at=datetime(2025, 10, 20, tzinfo=UTC))
    parsed = AnnotatedText.parse(notes)

    assert parsed.labelled_value(BOOKING_REFERENCE_LABEL) == "PBS-104"
    assert "<strong>Travel Charge:</strong> $50.00" in parsed.body
    assert "$435.00 AUD" in parsed.body
    assert "Pending - Client will submit later" in parsed.body
    assert "Barks at &lt;bikes&gt; &amp; cars" in parsed.body
    assert 'href="https://zoom.example/j/1"' in parsed.body
    assert parsed.entries[0].details["booking_id"] == "id-PBS-104"


@pytest.mark.parametrize(
    ("overrides", "expected"),
    [
        ({"referral_file_name": "vet-referral.PNG"}, "referral_PBS-104_20251102.PNG"),
        ({"referral_file_path": "referrals/x.jpg"}, "referral_PBS-104_20251102.jpg"),
        ({"consultation_date": None, "consultation_time": None}, "referral_PBS-104_20251018.pdf"),
    ],
)
def test_referral_filename_is_stamped_with_consultation_date(
    overrides: dict[str, object],
    expected: str,
) -> None:
    assert referral_filename(make_booking(**overrides)) == expected
