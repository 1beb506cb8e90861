"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def coerce_datetime(value: object) -> datetime:
    """Stored timestamps may come back as datetime or ISO string; missing → now.

    Always returns an aware datetime: naive values are taken as UTC so
    timestamps from different writers stay comparable.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return utc_now()
    if not isinstance(value, datetime):
        return utc_now()
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
