"""Shared helper functions for domain entities."""

from datetime import UTC, datetime


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt
