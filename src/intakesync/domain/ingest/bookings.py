"""Import pipeline for website bookings."""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from intakesync.config.sync import SyncConfig
from intakesync.domain.ingest.errors import IngestError, PostCommitError, TransactionError
from intakesync.domain.ingest.resolution import (
    blank_fill_changes,
    refresh_email,
    resolve_client,
    resolve_pet,
)
from intakesync.domain.ingest.results import SubmissionResult
from intakesync.domain.model import (
    AnnotatedText,
    Client,
    Event,
    EventType,
    LogEntry,
    Pet,
    SubmissionSource,
    labelled_line,
    utcnow,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from intakesync.domain.ingest.submissions import BookingSubmission
    from intakesync.domain.ports import (
        AutomationHooks,
        IntakeUnitOfWork,
        IntakeUnitOfWorkFactory,
        ReferralDownloader,
    )

log = getLogger(__name__)

BOOKING_REFERENCE_LABEL: Final[str] = "Booking Reference"
CLIENT_CREATED_NOTE: Final[str] = "<p>Client created via website booking</p>"
STRIPE_PAYMENT_URL: Final[str] = "https://dashboard.stripe.com/payments/{payment_intent}"


def _money(amount: float) -> str:
    return f"${amount:.2f}"


def render_booking_notes(booking: BookingSubmission, *, recorded_at: datetime) -> str:
    """HTML summary of a booking with a findable reference and an import log entry."""

    pet = booking.pet_name or ""
    if booking.pet_species:
        pet = f"{pet} ({booking.pet_species})"
    lines = [
        "<h2>Website Booking Details</h2>",
        labelled_line(BOOKING_REFERENCE_LABEL, booking.reference),
        labelled_line(
            "Service", f"{booking.service_type or ''} ({booking.service_delivery or ''})"
        ),
        labelled_line("Pet", pet),
    ]
    if booking.zoom_link:
        link = html.escape(booking.zoom_link)
        lines.append(
            f'<p><strong>Zoom Link:</strong> <a href="{link}" target="_blank">{link}</a></p>'
        )
    if booking.postcode:
        lines.append(labelled_line("Postcode", booking.postcode))

    lines += ["<h3>Pricing</h3>", labelled_line("Base Price", _money(booking.base_price))]
    if booking.travel_charge > 0:
        lines.append(labelled_line("Travel Charge", _money(booking.travel_charge)))
    lines += [
        labelled_line("Total", f"{_money(booking.total_price)} {booking.currency}"),
        labelled_line("Payment Status", booking.payment_status or "unknown"),
    ]

    if booking.referral_required:
        lines.append("<h3>Referral</h3>")
        if booking.referral_file_path:
            lines.append(labelled_line("Referral File", booking.referral_file_name or "Uploaded"))
        else:
            lines.append(labelled_line("Status", "Pending - Client will submit later"))
    if booking.problem_description:
        lines += ["<h3>Problem Description</h3>", f"<p>{html.escape(booking.problem_description)}</p>"]
    if booking.notes:
        lines += ["<h3>Additional Notes</h3>", f"<p>{html.escape(booking.notes)}</p>"]
    lines.append(f"<p><em>Stripe Session: {html.escape(booking.stripe_session_id or 'N/A')}</em></p>")

    entry = LogEntry(
        kind="imported",
        recorded_at=recorded_at,
        details={"source": SubmissionSource.BOOKING.value, "booking_id": booking.booking_id},
    )
    return AnnotatedText(body="\n".join(lines), entries=(entry,)).serialize()


def referral_filename(booking: BookingSubmission) -> str:
    source_name = booking.referral_file_name or booking.referral_file_path or ""
    suffix = Path(source_name).suffix or ".pdf"
    stamped_on = booking.consultation_date or (booking.submitted_at or utcnow()).date()
    stamp = stamped_on.strftime("%Y%m%d")
    return f"referral_{booking.reference}_{stamp}{suffix}"


@dataclass(slots=True)
class _Written:
    client: Client
    pet: Pet
    primary_event: Event
    note_event: Event | None
    is_new_client: bool
    created_primary_event: bool


@dataclass(slots=True)
class BookingImporter:
    """Turns one website booking into a client, pet and booking event, exactly once."""

    unit_of_work_factory: IntakeUnitOfWorkFactory
    automation: AutomationHooks | None = None
    referrals: ReferralDownloader | None = None
    config: SyncConfig = field(default_factory=SyncConfig)
    clock: Callable[[], datetime] = utcnow

    def __call__(self, booking: BookingSubmission) -> SubmissionResult:
        result = SubmissionResult(
            source=SubmissionSource.BOOKING,
            submission_id=booking.booking_id,
            reference=booking.reference,
            client_name=booking.customer_name,
            pet_name=booking.pet_name,
        )
        try:
            booking.validate()
            written = self._write(booking)
        except IngestError as error:
            log.warning("Booking %s not imported: %s", booking.reference, error)
            return result.fail(error)

        result.success = True
        result.client_id = written.client.id
        result.pet_id = written.pet.id
        result.primary_event_id = written.primary_event.id
        result.note_event_id = written.note_event.id if written.note_event else None
        result.is_new_client = written.is_new_client
        result.created_primary_event = written.created_primary_event
        log.info(
            "Imported booking %s: client=%s (new=%s), pet=%s, event=%s",
            booking.reference,
            result.client_id,
            result.is_new_client,
            result.pet_id,
            result.primary_event_id,
        )

        self._after_commit(booking, written, result)
        return result

    def _write(self, booking: BookingSubmission) -> _Written:
        try:
            with self.unit_of_work_factory() as uow:
                written = self._write_records(uow, booking)
                uow.commit()
        except IngestError:
            raise
        except Exception as exc:
            raise TransactionError(
                f"Booking {booking.reference} rolled back: {exc}"
            ) from exc
        return written

    def _write_records(self, uow: IntakeUnitOfWork, booking: BookingSubmission) -> _Written:
        repositories = uow.repositories
        now = self.clock()

        def build_client() -> Client:
            notes = f"Imported from website booking {booking.reference}"
            if booking.problem_description:
                notes = f"{notes}\n{booking.problem_description}"
            return Client(
                first_name=booking.first_name,
                last_name=booking.last_name,
                email=booking.email or "",
                mobile=booking.phone or "",
                postcode=booking.postcode,
                state=self.config.default_state,
                stripe_customer_id=booking.stripe_customer_id,
                notes=notes,
            )

        client, is_new_client = resolve_client(
            repositories.clients, email=booking.email, mobile=booking.phone, build=build_client
        )
        if not is_new_client:
            changes = refresh_email(client, booking.email)
            changes |= blank_fill_changes(
                client,
                {
                    "mobile": booking.phone,
                    "postcode": booking.postcode,
                    "state": self.config.default_state,
                    "stripe_customer_id": booking.stripe_customer_id,
                },
            )
            if changes:
                repositories.clients.update(client, **changes)
        client_id = _require_id(client.id)

        pet_name = booking.pet_name or ""
        pet, created_pet = resolve_pet(
            repositories.pets,
            client_id=client_id,
            name=pet_name,
            build=lambda: Pet(
                client_id=client_id,
                name=pet_name,
                species=booking.pet_species or "",
                breed=booking.pet_breed,
                notes=booking.problem_description,
            ),
        )
        if not created_pet:
            changes = blank_fill_changes(
                pet, {"species": booking.pet_species, "breed": booking.pet_breed}
            )
            if changes:
                repositories.pets.update(pet, **changes)

        existing = repositories.events.find_by_marker(
            client_id, EventType.BOOKING, BOOKING_REFERENCE_LABEL, booking.reference
        )
        if existing is not None:
            log.info(
                "Booking %s already recorded as event %s", booking.reference, existing.id
            )
            primary_event, created_primary = existing, False
        else:
            primary_event = repositories.events.add(
                Event(
                    client_id=client_id,
                    event_type=EventType.BOOKING,
                    date=booking.consultation_at(self.config.zone) or booking.submitted_at or now,
                    notes=render_booking_notes(booking, recorded_at=now),
                    hosted_invoice_url=(
                        STRIPE_PAYMENT_URL.format(
                            payment_intent=booking.stripe_payment_intent_id
                        )
                        if booking.stripe_payment_intent_id
                        else None
                    ),
                )
            )
            created_primary = True

        note_event: Event | None = None
        if is_new_client:
            note_event = repositories.events.add(
                Event(
                    client_id=client_id,
                    event_type=EventType.NOTE,
                    date=booking.submitted_at or now,
                    notes=CLIENT_CREATED_NOTE
                    + labelled_line(BOOKING_REFERENCE_LABEL, booking.reference),
                    parent_event_id=primary_event.id,
                )
            )

        return _Written(
            client=client,
            pet=pet,
            primary_event=primary_event,
            note_event=note_event,
            is_new_client=is_new_client,
            created_primary_event=created_primary,
        )

    def _after_commit(
        self,
        booking: BookingSubmission,
        written: _Written,
        result: SubmissionResult,
    ) -> None:
        if self.automation is not None and written.created_primary_event:
            try:
                rule_results = self.automation.on_entity_created(written.primary_event)
            except Exception as exc:  # noqa: BLE001
                result.warn(PostCommitError("automation", str(exc)))
            else:
                for rule_result in rule_results:
                    for error in rule_result.errors:
                        result.warn(PostCommitError(f"automation {rule_result.rule_id}", error))

        folder = written.client.folder_path
        if self.referrals is not None and booking.referral_file_path and folder:
            try:
                path = self.referrals.download_referral(booking, Path(folder))
            except Exception as exc:  # noqa: BLE001
                result.warn(PostCommitError("referral download", str(exc)))
            else:
                result.attachments.append(path)


def _require_id(entity_id: int | None) -> int:
    if entity_id is None:
        raise TransactionError("Record store did not assign an id")
    return entity_id
