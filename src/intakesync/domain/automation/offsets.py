"""Named due-date offsets such as "2 days before" or "1 week after"."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Final, Literal

from intakesync.domain.age import shift_months
from intakesync.domain.model import AutomatedAction

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

OffsetUnit = Literal["hours", "days", "weeks", "months"]

_UNIT_ALIASES: Final[dict[str, OffsetUnit]] = {
    "h": "hours",
    "hr": "hours",
    "hour": "hours",
    "d": "days",
    "day": "days",
    "w": "weeks",
    "wk": "weeks",
    "week": "weeks",
    "mo": "months",
    "month": "months",
}
_OFFSET_PATTERN: Final = re.compile(
    r"^\s*(?P<amount>\d+)\s*(?P<unit>hours?|hrs?|h|days?|d|weeks?|wks?|w|months?|mos?)"
    r"(?:\s+(?P<direction>before|after|prior|later))?\s*$",
    re.IGNORECASE,
)
_SAME_DAY: Final = frozenset({"same day", "on the day", "0", "none"})


class Direction(StrEnum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True, slots=True)
class DueDateOffset:
    amount: int
    unit: OffsetUnit = "days"
    direction: Direction = Direction.AFTER

    @classmethod
    def parse(cls, text: str) -> DueDateOffset:
        """Parse an offset phrase; a phrase without direction means "after"."""

        cleaned = text.strip().lower()
        if cleaned in _SAME_DAY:
            return SAME_DAY
        match = _OFFSET_PATTERN.match(cleaned)
        if match is None:
            raise ValueError(f"Unrecognised due-date offset: {text!r}")
        unit_text = match.group("unit").rstrip("s")
        direction_text = match.group("direction")
        direction = (
            Direction.BEFORE if direction_text in {"before", "prior"} else Direction.AFTER
        )
        return cls(
            amount=int(match.group("amount")),
            unit=_UNIT_ALIASES[unit_text],
            direction=direction,
        )

    def apply(self, base: datetime) -> datetime:
        sign = -1 if self.direction is Direction.BEFORE else 1
        if self.unit == "months":
            return shift_months(base, sign * self.amount)
        return base + sign * timedelta(**{self.unit: self.amount})

    def __str__(self) -> str:
        if self.amount == 0:
            return "same day"
        unit = self.unit if self.amount != 1 else self.unit.removesuffix("s")
        return f"{self.amount} {unit} {self.direction}"


SAME_DAY: Final[DueDateOffset] = DueDateOffset(amount=0)

DEFAULT_OFFSETS: Final[dict[AutomatedAction, DueDateOffset]] = {
    AutomatedAction.CHECK_QUESTIONNAIRE_RETURNED: DueDateOffset(48, "hours", Direction.BEFORE),
    AutomatedAction.PREPARE_TRAINING_MATERIALS: DueDateOffset(2, "days", Direction.BEFORE),
    AutomatedAction.SEND_PROTOCOL: DueDateOffset(1, "days", Direction.AFTER),
    AutomatedAction.REVIEW_QUESTIONNAIRE: SAME_DAY,
}


def offset_for(
    action: AutomatedAction | str | None,
    overrides: Mapping[str, DueDateOffset] | None = None,
) -> DueDateOffset:
    if action is None:
        return SAME_DAY
    if overrides and action in overrides:
        return overrides[action]
    try:
        return DEFAULT_OFFSETS[AutomatedAction(action)]
    except ValueError:
        return SAME_DAY


def calculate_due_date(base: datetime, offset: DueDateOffset | str) -> datetime:
    resolved = offset if isinstance(offset, DueDateOffset) else DueDateOffset.parse(offset)
    return resolved.apply(base)
