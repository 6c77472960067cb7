"""Time utilities."""
from datetime import UTC, date, datetime, timedelta


def utcnow() -> datetime:
    """Return current UTC time with timezone awareness."""

    return datetime.now(tz=UTC)


def days_ago(days: int) -> datetime:
    """Return the UTC instant ``days`` days before now."""

    return utcnow() - timedelta(days=days)


def as_date(value: datetime | str) -> date:
    """Return the calendar date of a stored timestamp.

    SQLite hands back naive datetimes (or ISO strings from raw SQL); both are
    treated as UTC.
    """

    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.date()


__all__ = ["utcnow", "days_ago", "as_date"]
