from __future__ import annotations

from datetime import date

import pytest

from intakesync.domain.age import parse_age_to_date_of_birth, shift_months

TODAY = date(2025, 10, 20)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2 years", date(2023, 10, 20)),
        ("2 and a half years", date(2023, 4, 20)),
        ("two years old", date(2023, 10, 20)),
        ("half a year", date(2025, 4, 20)),
        ("a year", date(2024, 10, 20)),
        ("six months", date(2025, 4, 20)),
        ("3 weeks", date(2025, 9, 29)),
        ("10 days", date(2025, 10, 10)),
        ("4", date(2021, 10, 20)),
    ],
)
def test_parse_age_to_date_of_birth(text: str, expected: date) -> None:
    assert parse_age_to_date_of_birth(text, today=TODAY) == expected


@pytest.mark.parametrize("text", ["", "   ", "unknown", "not sure", None])
def test_parse_age_returns_none_for_non_ages(text: str | None) -> None:
    assert parse_age_to_date_of_birth(text, today=TODAY) is None


def test_shift_months_clamps_to_month_end() -> None:
    assert shift_months(date(2025, 3, 31), -1) == date(2025, 2, 28)
    assert shift_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert shift_months(date(2025, 1, 15), -13) == date(2023, 12, 15)
