"""Translate booking table rows into canonical booking submissions."""

from __future__ import annotations

from intakesync.domain.ingest.submissions import BookingSubmission

from .schema import BookingRow


def parse_booking(payload: object) -> BookingSubmission:
    """Validate a raw row and translate it; raises ``pydantic.ValidationError``."""

    return to_booking_submission(BookingRow.model_validate(payload))


def to_booking_submission(row: BookingRow) -> BookingSubmission:
    return BookingSubmission(
        booking_id=row.id,
        reference=row.booking_reference,
        customer_name=row.customer_name.strip(),
        email=row.customer_email,
        phone=row.customer_phone,
        postcode=row.customer_postcode,
        pet_name=row.pet_name,
        pet_species=row.pet_species,
        pet_breed=row.pet_breed,
        service_type=row.service_type,
        service_delivery=row.service_delivery,
        consultation_date=row.consultation_date,
        consultation_time=row.consultation_time,
        timezone=row.timezone,
        zoom_link=row.zoom_link,
        base_price=row.base_price,
        travel_charge=row.travel_charge,
        total_price=row.total_price,
        currency=row.currency,
        payment_status=row.payment_status,
        stripe_session_id=row.stripe_session_id,
        stripe_customer_id=row.stripe_customer_id,
        stripe_payment_intent_id=row.stripe_payment_intent_id,
        referral_required=row.referral_required,
        referral_file_path=row.referral_file_path,
        referral_file_name=row.referral_file_name,
        problem_description=row.problem_description,
        notes=row.notes,
        status=row.status,
        booked_at=row.booking_date,
        created_at=row.created_at,
        synced=row.synced_to_admin,
    )
