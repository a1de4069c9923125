"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "Europe/Paris"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone used to display dates to suppliers.

    The value comes from ``APP_TIMEZONE``. Unknown names and malformed offsets
    fall back to ``Europe/Paris``.
    """

    settings = get_settings()
    tz_name = (settings.app_timezone or "").strip() or _DEFAULT_TIMEZONE
    return _resolve_timezone(tz_name)


def utc_now() -> datetime:
    """Return the current aware UTC time."""

    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime.

    Naive values are assumed to already be expressed in UTC, which is how the
    store persists them.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage_datetime(value: datetime | None) -> datetime | None:
    """Return the naive UTC representation written to ``DateTime`` columns."""

    normalized = ensure_utc(value)
    if normalized is None:
        return None
    return normalized.replace(tzinfo=None)


def to_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the configured application timezone."""

    normalized = ensure_utc(value)
    if normalized is None:
        return None
    return normalized.astimezone(get_app_timezone())


def format_relative_time(created_at: datetime, now: datetime | None = None) -> str:
    """Return a short "time ago" label for ``created_at``."""

    reference = ensure_utc(now) or utc_now()
    moment = ensure_utc(created_at)
    minutes = int((reference - moment).total_seconds() // 60)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 1440:
        return f"{minutes // 60}h ago"
    if minutes < 10080:
        return f"{minutes // 1440}d ago"
    return to_app_timezone(moment).strftime("%d/%m/%Y")


def _resolve_timezone(tz_name: str) -> tzinfo:
    """Resolve ``tz_name`` into a ``timezone`` instance."""

    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            hours = int(match.group("hours"))
            minutes = int(match.group("minutes") or 0)
            offset = timedelta(hours=hours, minutes=minutes)
            return timezone(sign * offset)
    return ZoneInfo(_DEFAULT_TIMEZONE)
