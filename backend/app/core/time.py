"""Time utilities for timezone-aware UTC datetimes and local calendar dates."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def local_today() -> date:
    """Return the system local calendar date used as the default rate date."""
    return date.today()
