"""Canonical shapes of remote submissions, independent of any wire format."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Protocol, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from intakesync.domain.ingest.errors import ParseError
from intakesync.domain.reconciliation.normalize import format_address, parse_address

DOG = "Dog"
CAT = "Cat"


class Submission(Protocol):
    @property
    def submission_id(self) -> str: ...


def _present(value: str | None) -> bool:
    return bool(value and value.strip())


@dataclass(slots=True, kw_only=True)
class BookingSubmission:
    booking_id: str
    reference: str
    customer_name: str
    email: str | None = None
    phone: str | None = None
    postcode: str | None = None
    pet_name: str | None = None
    pet_species: str | None = None
    pet_breed: str | None = None
    service_type: str | None = None
    service_delivery: str | None = None
    consultation_date: date | None = None
    consultation_time: time | None = None
    timezone: str | None = None
    zoom_link: str | None = None
    base_price: float = 0.0
    travel_charge: float = 0.0
    total_price: float = 0.0
    currency: str = "AUD"
    payment_status: str | None = None
    stripe_session_id: str | None = None
    stripe_customer_id: str | None = None
    stripe_payment_intent_id: str | None = None
    referral_required: bool = False
    referral_file_path: str | None = None
    referral_file_name: str | None = None
    problem_description: str | None = None
    notes: str | None = None
    status: str | None = None
    booked_at: datetime | None = None
    created_at: datetime | None = None
    synced: bool | None = None

    @property
    def submission_id(self) -> str:
        return self.booking_id

    @property
    def first_name(self) -> str:
        parts = self.customer_name.split()
        return parts[0] if parts else ""

    @property
    def last_name(self) -> str:
        return " ".join(self.customer_name.split()[1:])

    def validate(self) -> None:
        missing: list[str] = []
        if not self.first_name:
            missing.append("customer name")
        if not _present(self.email) and not _present(self.phone):
            missing.append("email or phone")
        if not _present(self.pet_name):
            missing.append("pet name")
        if missing:
            raise ParseError(f"Booking {self.reference} is missing {', '.join(missing)}")

    def consultation_at(self, default_zone: ZoneInfo) -> datetime | None:
        """Consultation start as an aware datetime in the booking's own timezone."""

        if self.consultation_date is None:
            return None
        zone = default_zone
        if self.timezone:
            try:
                zone = ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError):
                zone = default_zone
        return datetime.combine(self.consultation_date, self.consultation_time or time(0), zone)

    @property
    def submitted_at(self) -> datetime | None:
        return self.booked_at or self.created_at


@dataclass(slots=True, kw_only=True)
class QuestionnaireSubmission:
    submission_id: str
    form_id: str
    species: str
    submitted_at: datetime
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str | None = None
    street_address: str | None = None
    city: str | None = None
    state: str | None = None
    postcode: str | None = None
    pet_name: str = ""
    breed: str | None = None
    age: str | None = None
    sex: str | None = None
    weight: str | None = None
    answers: dict[str, Any] = field(default_factory=dict[str, Any])

    @property
    def form_type(self) -> str:
        return self.species

    @property
    def address(self) -> str:
        return format_address(self.street_address, self.city, self.state, self.postcode)

    def validate(self) -> None:
        required = {
            "first name": self.first_name,
            "last name": self.last_name,
            "email": self.email,
            "pet name": self.pet_name,
        }
        missing = [label for label, value in required.items() if not _present(value)]
        if missing:
            raise ParseError(
                f"Questionnaire {self.submission_id} is missing {', '.join(missing)}"
            )

    def client_fields(self) -> dict[str, str | None]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "mobile": self.phone,
            "street_address": self.street_address,
            "city": self.city,
            "state": self.state,
            "postcode": self.postcode,
        }

    def pet_fields(self) -> dict[str, str | None]:
        return {
            "name": self.pet_name,
            "species": self.species,
            "breed": self.breed,
            "sex": self.sex,
            "age": self.age,
            "weight": self.weight,
        }

    def to_payload(self) -> dict[str, object]:
        """Serializable form written next to the client's documents."""

        return {
            "submissionId": self.submission_id,
            "formId": self.form_id,
            "formType": self.form_type,
            "submittedAt": self.submitted_at.isoformat(),
            "client": {
                "firstName": self.first_name,
                "lastName": self.last_name,
                "email": self.email,
                "phone": self.phone,
                "address": self.address,
            },
            "pet": {
                "name": self.pet_name,
                "breed": self.breed,
                "age": self.age,
                "sex": self.sex,
                "weight": self.weight,
            },
            "allAnswers": self.answers,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> QuestionnaireSubmission:
        """Inverse of ``to_payload``; raises ``KeyError``/``ValueError`` on malformed input."""

        client = cast(dict[str, Any], payload["client"])
        pet = cast(dict[str, Any], payload["pet"])
        address = parse_address(client.get("address"))
        return cls(
            submission_id=str(payload["submissionId"]),
            form_id=str(payload.get("formId", "")),
            species=str(payload["formType"]),
            submitted_at=datetime.fromisoformat(str(payload["submittedAt"])),
            first_name=client.get("firstName") or "",
            last_name=client.get("lastName") or "",
            email=client.get("email") or "",
            phone=client.get("phone"),
            street_address=address.street_address or None,
            city=address.city or None,
            state=address.state or None,
            postcode=address.postcode or None,
            pet_name=pet.get("name") or "",
            breed=pet.get("breed"),
            age=pet.get("age"),
            sex=pet.get("sex"),
            weight=pet.get("weight"),
            answers=cast(dict[str, Any], payload.get("allAnswers") or {}),
        )
