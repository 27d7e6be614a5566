"""
Calendar Grid Projection

Buckets calendar events onto the days of a month.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, Union

from .dates import day_key
from .events import CalendarEvent


def month_bounds(month: Union[date, datetime]) -> tuple[date, date]:
    """First and last day of the month containing the given date."""
    if isinstance(month, datetime):
        month = month.date()
    last = calendar.monthrange(month.year, month.month)[1]
    return month.replace(day=1), month.replace(day=last)


def month_days(month: Union[date, datetime]) -> list[date]:
    """Every day of the month, in order."""
    first, last = month_bounds(month)
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def event_days(event: CalendarEvent, month_start: date, month_end: date) -> list[date]:
    """Days within [month_start, month_end] on which the event shows."""
    start = event.start_date.date()

    if event.is_multi_day:
        clipped_start = max(start, month_start)
        clipped_end = min(event.end_date.date(), month_end)
        if clipped_start > clipped_end:
            return []
        return [clipped_start + timedelta(days=i) for i in range((clipped_end - clipped_start).days + 1)]

    if month_start <= start <= month_end:
        return [start]
    return []


def project_month(
    month: Union[date, datetime],
    events: Iterable[CalendarEvent]
) -> dict[str, list[CalendarEvent]]:
    """
    Map yyyy-MM-dd day keys to the events that fall on them.

    Multi-day events are clipped to the month and listed on every covered
    day; single-day events only on their start day. Per-day order follows
    the input order.
    """
    month_start, month_end = month_bounds(month)
    by_day: dict[str, list[CalendarEvent]] = {}

    for event in events:
        for day in event_days(event, month_start, month_end):
            by_day.setdefault(day_key(day), []).append(event)

    return by_day
