"""
Person Schedule

Selects the events a team member works on within the next N days.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .dates import utcnow
from .events import CalendarEvent


@dataclass
class ScheduleItem:
    event: CalendarEvent
    days_until_due: Optional[int] = None

    @property
    def due_note(self) -> str:
        """Short due-date annotation, empty when there is no end date."""
        if self.days_until_due is None:
            return ""
        if self.days_until_due < 0:
            return f"overdue by {abs(self.days_until_due)} days"
        if self.days_until_due == 0:
            return "due today"
        return f"due in {self.days_until_due} days"


@dataclass
class PersonSchedule:
    login: str
    days: int
    items: list[ScheduleItem] = field(default_factory=list)
    avatar_url: str = ""

    @property
    def events(self) -> list[CalendarEvent]:
        return [item.event for item in self.items]

    @property
    def open_count(self) -> int:
        return len([i for i in self.items if i.event.status == "open"])

    @property
    def overdue_count(self) -> int:
        return len([i for i in self.items if i.days_until_due is not None and i.days_until_due < 0])


def build_schedule(
    events: Iterable[CalendarEvent],
    login: str,
    days: int = 7,
    now: Optional[datetime] = None
) -> PersonSchedule:
    """
    Events assigned to login that start within the next `days` days,
    soonest start first.
    """
    now = now or utcnow()
    horizon = now + timedelta(days=days)

    selected = sorted(
        (e for e in events if e.is_assigned_to(login) and e.start_date <= horizon),
        key=lambda e: e.start_date
    )

    items = []
    avatar_url = ""
    for event in selected:
        days_until_due = (event.end_date - now).days if event.end_date else None
        items.append(ScheduleItem(event=event, days_until_due=days_until_due))
        if not avatar_url:
            avatar_url = next((a.avatar_url for a in event.assignees if a.login == login), "")

    return PersonSchedule(login=login, days=days, items=items, avatar_url=avatar_url)
