"""Time utility helpers and the clock used by the ledger."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta


def parse_iso_date(value: str | None, default: date | None = None) -> date:
    """Parse an ISO date string with an optional fallback default."""
    if not value:
        if default is None:
            raise ValueError("Missing required date value")
        return default
    return date.fromisoformat(value[:10])


def previous_month(value: date) -> tuple[int, int]:
    """Return (year, month) of the calendar month before ``value``."""
    shifted = value.replace(day=1) - relativedelta(months=1)
    return shifted.year, shifted.month


def in_month(value: date, year: int, month: int) -> bool:
    """Return True when ``value`` falls inside the given calendar month."""
    return value.year == year and value.month == month


class SystemClock:
    """Wall clock in the configured timezone."""

    def __init__(self, timezone: str = "UTC") -> None:
        self.tz = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(tz=self.tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given instant until moved explicitly.

    Used by tests and by the CLI ``--today`` override.
    """

    def __init__(self, current: datetime) -> None:
        if current.tzinfo is None:
            current = current.replace(tzinfo=UTC)
        self.current = current

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def advance(self, days: int = 0, **kwargs: float) -> None:
        """Move the clock forward by a ``timedelta``."""
        self.current = self.current + timedelta(days=days, **kwargs)


Clock = SystemClock | FixedClock
