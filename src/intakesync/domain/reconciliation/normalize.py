"""Normalization helpers shared by matching, importing and reconciliation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from intakesync.domain.model import PetSex

_NON_DIGIT: Final = re.compile(r"\D")
_NON_DIALLABLE: Final = re.compile(r"[^\d+]")

# substring checks in order; "female" must be tested before "male"
_SEX_SYNONYMS: Final[tuple[tuple[str, PetSex], ...]] = (
    ("neutered", PetSex.NEUTERED),
    ("castrated", PetSex.NEUTERED),
    ("spayed", PetSex.SPAYED),
    ("female", PetSex.FEMALE),
    ("male", PetSex.MALE),
)


def normalize_text(value: str | None) -> str:
    return (value or "").strip().lower()


def digits_only(value: str | None) -> str:
    return _NON_DIGIT.sub("", value or "")


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def normalize_mobile(value: str | None) -> str:
    """Return an Australian mobile in local ``04xxxxxxxx`` form where recognisable."""

    cleaned = _NON_DIALLABLE.sub("", value or "")
    if cleaned.startswith("+61"):
        return "0" + cleaned[3:]
    if cleaned.startswith("61") and len(cleaned) == 11:  # noqa: PLR2004
        return "0" + cleaned[2:]
    return cleaned


def map_sex_value(value: str | None) -> str | None:
    """Map remote sex/neuter wording onto the stored vocabulary.

    Unrecognised wording is returned trimmed rather than dropped.
    """

    if value is None or not value.strip():
        return None
    lowered = value.strip().lower()
    for needle, sex in _SEX_SYNONYMS:
        if needle in lowered:
            return sex.value
    return value.strip()


@dataclass(frozen=True, slots=True)
class ParsedAddress:
    street_address: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""

    def as_fields(self) -> dict[str, str]:
        return {
            "street_address": self.street_address,
            "city": self.city,
            "state": self.state,
            "postcode": self.postcode,
        }


def parse_address(value: str | None) -> ParsedAddress:
    """Split ``"street, city, state, postcode"`` by position.

    Fewer parts leave the trailing fields empty; extra parts are ignored.
    """

    if not value:
        return ParsedAddress()
    parts = [part.strip() for part in value.split(",")]
    parts += [""] * (4 - len(parts))
    return ParsedAddress(
        street_address=parts[0],
        city=parts[1],
        state=parts[2],
        postcode=parts[3],
    )


def format_address(
    street_address: str | None,
    city: str | None,
    state: str | None,
    postcode: str | None,
) -> str:
    return ", ".join(part or "" for part in (street_address, city, state, postcode))
