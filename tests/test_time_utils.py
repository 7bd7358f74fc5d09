"""Time helper tests."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from contudo.utils.time import FixedClock, in_month, parse_iso_date, previous_month


def test_parse_iso_date_with_default() -> None:
    """Missing input should return default value when provided."""
    default = parse_iso_date("2026-02-01")
    assert parse_iso_date(None, default=default) == default


def test_parse_iso_date_valid_input() -> None:
    """ISO date parsing should return exact date."""
    result = parse_iso_date("2026-02-07")
    assert result.isoformat() == "2026-02-07"


def test_parse_iso_date_accepts_timestamp() -> None:
    """Timestamps should be cut down to their calendar date."""
    assert parse_iso_date("2025-08-20T14:03:00.000Z") == date(2025, 8, 20)


def test_parse_iso_date_requires_value_without_default() -> None:
    with pytest.raises(ValueError):
        parse_iso_date("")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (date(2025, 1, 10), (2024, 12)),
        (date(2025, 3, 31), (2025, 2)),
        (date(2024, 12, 1), (2024, 11)),
    ],
)
def test_previous_month(value: date, expected: tuple[int, int]) -> None:
    """The previous calendar month should wrap across years and month ends."""
    assert previous_month(value) == expected


def test_in_month() -> None:
    assert in_month(date(2025, 2, 28), 2025, 2)
    assert not in_month(date(2024, 2, 28), 2025, 2)


def test_fixed_clock_advance() -> None:
    """Fixed clock should only move when told to."""
    clock = FixedClock(datetime(2025, 1, 10, 23, 0))
    assert clock.now().tzinfo is UTC
    clock.advance(days=1, hours=2)
    assert clock.today() == date(2025, 1, 12)
