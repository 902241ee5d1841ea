"""Display formatting for stored UTC timestamps."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

DISPLAY_TIMEZONE = timezone(timedelta(hours=7), "Asia/Bangkok")


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if not isinstance(value, datetime):
        raise TypeError(f"Expected a datetime, got {type(value).__name__}.")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render ``value`` in UTC+7 as ``D/M/YYYY HH:MM:SS``."""
    local = as_utc(value).astimezone(DISPLAY_TIMEZONE)
    return f"{local.day}/{local.month}/{local.year} {local:%H:%M:%S}"
