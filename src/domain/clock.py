"""UTC time helpers used wherever "now" or "today" matters."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def utc_today() -> date:
    """Today's calendar date in UTC."""
    return utc_now().date()


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
