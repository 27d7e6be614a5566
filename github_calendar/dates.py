"""
Date helpers for GitHub Calendar

GitHub hands out ISO 8601 strings (date-only for project date fields,
timestamps elsewhere); issue bodies carry free-form dates. Everything is
turned into timezone-aware UTC datetimes so events compare against "now".
"""

from datetime import date, datetime, timezone
from typing import Optional

from dateutil import parser as dtparse


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO date or timestamp.

    Date-only values become midnight UTC. Returns None for empty or
    malformed input instead of raising.
    """
    if not value:
        return None
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return _as_utc(parsed)


def parse_loose_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a free-text date such as "2025-09-01" or "Sep 1, 2025"."""
    parsed = parse_datetime(value)
    if parsed is not None or not value:
        return parsed
    try:
        parsed = dtparse.parse(str(value).strip())
    except (ValueError, OverflowError):
        return None
    return _as_utc(parsed)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def day_key(value: date) -> str:
    """Calendar day key, yyyy-MM-dd."""
    return value.strftime("%Y-%m-%d")


def format_day(value: Optional[datetime], empty: str = "No end date") -> str:
    """Human format used in reports, e.g. "Sep 01, 2025"."""
    if value is None:
        return empty
    return value.strftime("%b %d, %Y")
