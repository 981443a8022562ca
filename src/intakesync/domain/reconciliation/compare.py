"""Field-level comparison of a local entity against incoming submission data."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from intakesync.domain.reconciliation.normalize import digits_only, map_sex_value, normalize_text

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from intakesync.domain.model import Client, Pet


class FieldStatus(StrEnum):
    MATCH = "match"
    NEW = "new"
    MISSING = "missing"
    DIFFERENT = "different"


@dataclass(frozen=True, slots=True)
class FieldComparison:
    field: str
    label: str
    current_value: str | None
    incoming_value: str | None
    status: FieldStatus
    actionable: bool = True

    @property
    def is_change(self) -> bool:
        return self.actionable and self.status in {FieldStatus.NEW, FieldStatus.DIFFERENT}


@dataclass(frozen=True, slots=True)
class FieldSpec:
    field: str
    label: str
    phone: bool = False


CLIENT_FIELDS: Final[tuple[FieldSpec, ...]] = (
    FieldSpec("first_name", "First Name"),
    FieldSpec("last_name", "Last Name"),
    FieldSpec("email", "Email"),
    FieldSpec("mobile", "Mobile", phone=True),
    FieldSpec("street_address", "Street Address"),
    FieldSpec("city", "City"),
    FieldSpec("state", "State"),
    FieldSpec("postcode", "Postcode"),
)

PET_FIELDS: Final[tuple[FieldSpec, ...]] = (
    FieldSpec("name", "Pet Name"),
    FieldSpec("species", "Species"),
    FieldSpec("breed", "Breed"),
    FieldSpec("sex", "Sex"),
)

PET_INFO_FIELDS: Final[tuple[FieldSpec, ...]] = (
    FieldSpec("age", "Age (reported)"),
    FieldSpec("weight", "Weight"),
)


def compare_values(current: str | None, incoming: str | None, *, phone: bool = False) -> FieldStatus:
    """Classify a pair of values; total over all inputs."""

    normalize = digits_only if phone else normalize_text
    current_norm = normalize(current)
    incoming_norm = normalize(incoming)

    if not current_norm and not incoming_norm:
        return FieldStatus.MATCH
    if not current_norm:
        return FieldStatus.NEW
    if not incoming_norm:
        return FieldStatus.MISSING
    if current_norm == incoming_norm:
        return FieldStatus.MATCH
    return FieldStatus.DIFFERENT


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def _compare_fields(
    entity: object | None,
    incoming: Mapping[str, str | None],
    specs: Iterable[FieldSpec],
) -> list[FieldComparison]:
    comparisons: list[FieldComparison] = []
    for spec in specs:
        current = _as_text(getattr(entity, spec.field, None)) if entity is not None else None
        incoming_value = incoming.get(spec.field)
        comparisons.append(
            FieldComparison(
                field=spec.field,
                label=spec.label,
                current_value=current,
                incoming_value=incoming_value,
                status=compare_values(current, incoming_value, phone=spec.phone),
            )
        )
    return comparisons


def compare_client(client: Client, incoming: Mapping[str, str | None]) -> list[FieldComparison]:
    return _compare_fields(client, incoming, CLIENT_FIELDS)


def compare_pet(pet: Pet | None, incoming: Mapping[str, str | None]) -> list[FieldComparison]:
    """Compare pet fields; sex is mapped onto the stored vocabulary first.

    Age and weight have no stored counterpart and are listed for reference only.
    """

    mapped = dict(incoming)
    mapped["sex"] = map_sex_value(incoming.get("sex"))
    comparisons = _compare_fields(pet, mapped, PET_FIELDS)
    for spec in PET_INFO_FIELDS:
        value = incoming.get(spec.field)
        comparisons.append(
            FieldComparison(
                field=spec.field,
                label=spec.label,
                current_value=None,
                incoming_value=value,
                status=FieldStatus.NEW if value and value.strip() else FieldStatus.MATCH,
                actionable=False,
            )
        )
    return comparisons


def has_changes(comparisons: Iterable[FieldComparison]) -> bool:
    return any(comparison.is_change for comparison in comparisons)
