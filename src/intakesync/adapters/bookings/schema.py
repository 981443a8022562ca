"""Pydantic models describing rows of the hosted bookings table."""

from __future__ import annotations

from datetime import date, datetime, time

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class BookingsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class BookingRow(BookingsBaseModel):
    id: str
    booking_reference: str
    customer_name: str = ""
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_postcode: str | None = None
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
    booking_date: datetime | None = None
    created_at: datetime | None = None
    synced_to_admin: bool | None = None

    _normalize_blank = field_validator(
        "customer_email",
        "customer_phone",
        "customer_postcode",
        "pet_name",
        "pet_species",
        "pet_breed",
        "consultation_date",
        "consultation_time",
        "timezone",
        "zoom_link",
        "referral_file_path",
        "booking_date",
        mode="before",
    )(_blank_to_none)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value

    @field_validator("customer_name", "currency", mode="before")
    @classmethod
    def _coerce_missing_text(cls, value: object, info: ValidationInfo) -> object:
        if value is None:
            return "AUD" if info.field_name == "currency" else ""
        return value

    @field_validator("base_price", "travel_charge", "total_price", mode="before")
    @classmethod
    def _coerce_price(cls, value: object) -> object:
        return 0.0 if value is None or value == "" else value

    @field_validator("referral_required", mode="before")
    @classmethod
    def _coerce_flag(cls, value: object) -> object:
        return False if value is None else value


class PostgrestError(BookingsBaseModel):
    code: str | None = None
    message: str = ""
    details: str | None = None
    hint: str | None = None


class SignedUrlResponse(BookingsBaseModel):
    signed_url: str = Field(validation_alias=AliasChoices("signedURL", "signedUrl"))
