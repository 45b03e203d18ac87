"""
Business time zone helpers.

Sessions are stored as UTC-aware timestamps and rendered in the business
time zone (Europe/Madrid by default) with an explicit offset.

Dependencies: zoneinfo (stdlib), training_erp.configs
System role: Timestamp normalization and rendering
"""

import re
from datetime import datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from training_erp.configs import get_settings

_EXTENDED_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}($|[T ])")


@lru_cache
def business_zone(name: str | None = None) -> ZoneInfo:
    """Return the configured business time zone."""
    return ZoneInfo(name or get_settings().planning.time_zone)


def ensure_aware(value: datetime) -> datetime:
    """
    Attach the business time zone to naive datetimes.

    SQLite drops tzinfo on round-trip, so values read back from it are
    treated as UTC; naive request input is treated as business-local time.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=business_zone())
    return value


def as_utc(value: datetime | None, naive_is_utc: bool = False) -> datetime | None:
    """Normalize a datetime to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc) if naive_is_utc else ensure_aware(value)
    return value.astimezone(timezone.utc)


def to_local_iso(value: datetime | None) -> str | None:
    """
    Render a stored timestamp as business-local ISO-8601 with offset.

    Example: 2025-03-10T09:00:00.000+01:00
    """
    if value is None:
        return None
    local = as_utc(value, naive_is_utc=True).astimezone(business_zone())
    return local.isoformat(timespec="milliseconds")


def format_local_range(start_iso: str | None, end_iso: str | None) -> str | None:
    """
    Format a pair of ISO timestamps as a short local range ("dd/mm/yy HH:MM").

    Returns:
        "start – end", a single side when only one parses, or None
    """

    def _fmt(iso: str | None) -> str | None:
        if not iso:
            return None
        try:
            parsed = datetime.fromisoformat(iso)
        except ValueError:
            return None
        local = as_utc(parsed, naive_is_utc=True).astimezone(business_zone())
        return local.strftime("%d/%m/%y %H:%M")

    start_text = _fmt(start_iso)
    end_text = _fmt(end_iso)
    if start_text and end_text:
        return f"{start_text} – {end_text}"
    return start_text or end_text


def parse_iso(text: str) -> datetime:
    """
    Parse an extended ISO-8601 timestamp ("YYYY-MM-DD[THH:MM...]").

    A trailing Z means UTC. Compact forms and bare numbers (epoch seconds)
    are refused.

    Raises:
        ValueError: If the text is not an extended ISO-8601 timestamp
    """
    text = text.strip()
    if not _EXTENDED_ISO_DATE.match(text):
        raise ValueError(f"not an ISO-8601 timestamp: {text!r}")
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    return datetime.fromisoformat(text)
