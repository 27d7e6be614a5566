"""
Calendar Event Extraction

Turns normalized project items into calendar events by resolving start and
end dates from project fields, issue body markers, creation date and
milestone due date, in that order.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .dates import parse_datetime, parse_loose_date
from .integrations.github import FieldValue, Issue, Person, ProjectItem


START_MARKER = re.compile(r"\*\*Start Date:\*\*.*?\(([^)]+)\)")
END_MARKER = re.compile(r"\*\*End Date:\*\*.*?\(([^)]+)\)")

START_FIELD_KEYWORDS = ("start",)
END_FIELD_KEYWORDS = ("end", "due")
STATUS_FIELD_KEYWORDS = ("status", "state", "progress")


@dataclass(frozen=True)
class EventLabel:
    """Label as shown on the calendar; color is CSS-ready (#rrggbb)."""
    name: str
    color: str


@dataclass(frozen=True)
class CalendarEvent:
    """An issue placed on the calendar."""
    id: str
    title: str
    start_date: datetime
    end_date: Optional[datetime] = None
    url: str = ""
    labels: tuple[EventLabel, ...] = ()
    assignees: tuple[Person, ...] = ()
    status: str = "open"
    project_status: Optional[str] = None
    type: str = "issue"

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"

    @property
    def is_multi_day(self) -> bool:
        return self.end_date is not None and self.end_date != self.start_date

    def is_assigned_to(self, login: str) -> bool:
        return any(a.login == login for a in self.assignees)

    def is_overdue(self, now: datetime) -> bool:
        return self.end_date is not None and self.end_date < now

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "url": self.url,
            "labels": [{"name": l.name, "color": l.color} for l in self.labels],
            "assignees": [{"login": a.login, "avatar_url": a.avatar_url} for a in self.assignees],
            "status": self.status,
            "projectStatus": self.project_status,
            "type": self.type
        }


def _matches(field_name: str, keywords: tuple[str, ...]) -> bool:
    name = field_name.lower()
    return any(keyword in name for keyword in keywords)


def _body_date(body: Optional[str], marker: re.Pattern) -> Optional[datetime]:
    match = marker.search(body or "")
    return parse_loose_date(match.group(1)) if match else None


def resolve_dates(
    issue: Issue,
    field_values: Iterable[FieldValue] = ()
) -> tuple[Optional[datetime], Optional[datetime]]:
    """
    Resolve (start, end) for an issue.

    Fields win over body markers, which win over created_at (start) and the
    milestone due date (end). Each slot is resolved independently and the
    first match for a slot is kept.
    """
    start = None
    end = None

    for value in field_values:
        if value.date is None:
            continue
        if _matches(value.field_name, START_FIELD_KEYWORDS):
            if start is None:
                start = parse_datetime(value.date)
        elif _matches(value.field_name, END_FIELD_KEYWORDS):
            if end is None:
                end = parse_datetime(value.date)

    if start is None:
        start = _body_date(issue.body, START_MARKER)
    if end is None:
        end = _body_date(issue.body, END_MARKER)

    if start is None:
        start = parse_datetime(issue.created_at)
    if end is None and issue.milestone and issue.milestone.due_on:
        end = parse_datetime(issue.milestone.due_on)

    return start, end


def resolve_project_status(field_values: Iterable[FieldValue]) -> Optional[str]:
    """First single-select value of a status/state/progress field."""
    for value in field_values:
        if value.select_name and _matches(value.field_name, STATUS_FIELD_KEYWORDS):
            return value.select_name
    return None


def extract_event(issue: Issue, field_values: Iterable[FieldValue] = ()) -> Optional[CalendarEvent]:
    """Build a CalendarEvent, or None when no start date can be resolved."""
    field_values = tuple(field_values)
    start, end = resolve_dates(issue, field_values)
    if start is None:
        return None

    return CalendarEvent(
        id=str(issue.number),
        title=issue.title,
        start_date=start,
        end_date=end,
        url=issue.url,
        labels=tuple(EventLabel(name=l.name, color=f"#{l.color}") for l in issue.labels),
        assignees=issue.assignees,
        status=issue.state,
        project_status=resolve_project_status(field_values)
    )


def extract_events(items: Iterable[ProjectItem]) -> list[CalendarEvent]:
    """Extract events for all items, dropping those without a start date."""
    events = []
    for item in items:
        event = extract_event(item.issue, item.field_values)
        if event is not None:
            events.append(event)
    return events


def filter_by_assignee(events: Iterable[CalendarEvent], login: Optional[str]) -> list[CalendarEvent]:
    if not login:
        return list(events)
    return [e for e in events if e.is_assigned_to(login)]
