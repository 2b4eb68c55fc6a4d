"""Time utilities for consistent timestamp and calendar-date handling."""

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return current UTC timestamp (timezone-aware)."""
    return datetime.now(timezone.utc)


def to_date_str(value: str | date | datetime) -> str:
    """Reduce a date, datetime or date-ish string to ``YYYY-MM-DD``.

    PMS payloads mix "2026-02-20", "2026-02-20 12:00:00" and ISO
    "2026-02-20T12:00:00Z"; only the calendar date is kept so that
    lexicographic comparison stays valid.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value.strip().split("T")[0].split(" ")[0]


def date_window(now: datetime, days: int) -> tuple[str, str]:
    """Inclusive ``(start, end)`` date strings spanning ``days`` either side of now."""
    start = now - timedelta(days=days)
    end = now + timedelta(days=days)
    return start.date().isoformat(), end.date().isoformat()
