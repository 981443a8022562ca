"""Back-compute a date of birth from a free-text age such as "two and a half years"."""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta
from typing import Final

_WORD_NUMBERS: Final[dict[str, int]] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
    "twenty": 20,
    "a": 1,
    "an": 1,
}
_AND_A_HALF: Final = re.compile(r"\s*\band\s+(?:a\s+)?(?:half|1/2)\b")
_HALF: Final = re.compile(r"(?:\ba\s+)?\b(?:half|1/2)\b(?:\s+an?\b)?")
_NUMBER: Final = r"(\d+(?:\.\d+)?)"
# checked in order; the first unit that matches wins
_UNIT_PATTERNS: Final[tuple[tuple[str, re.Pattern[str]], ...]] = (
    ("years", re.compile(rf"{_NUMBER}\s*(?:years?|yrs?|y)\b")),
    ("months", re.compile(rf"{_NUMBER}\s*(?:months?|mon|mos?|m)\b")),
    ("weeks", re.compile(rf"{_NUMBER}\s*(?:weeks?|wks?|w)\b")),
    ("days", re.compile(rf"{_NUMBER}\s*(?:days?|d)\b")),
    ("years", re.compile(rf"^{_NUMBER}$")),
)


def shift_months[TDate: date](value: TDate, months: int) -> TDate:
    """Move by whole calendar months, clamping the day to the target month."""

    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _normalise(text: str) -> str:
    processed = text.lower().strip()
    processed = _AND_A_HALF.sub(".5", processed)
    processed = _HALF.sub("0.5", processed)
    for word, number in _WORD_NUMBERS.items():
        processed = re.sub(rf"\b{word}\b", str(number), processed)
    return processed


def parse_age_to_date_of_birth(text: str | None, *, today: date | None = None) -> date | None:
    """Return an approximate date of birth, or ``None`` when the text is not an age."""

    if not text or not text.strip():
        return None
    reference = today or date.today()
    processed = _normalise(text)

    for unit, pattern in _UNIT_PATTERNS:
        match = pattern.search(processed)
        if match is None:
            continue
        value = float(match.group(1))
        whole = int(value)
        if unit == "years":
            return shift_months(reference, -(whole * 12 + round((value - whole) * 12)))
        if unit == "months":
            return shift_months(reference, -whole)
        if unit == "weeks":
            return reference - timedelta(days=round(value * 7))
        return reference - timedelta(days=round(value))
    return None
