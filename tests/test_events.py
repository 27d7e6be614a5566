"""
Tests for calendar event extraction.
"""

from datetime import datetime, timezone

from github_calendar.events import (
    CalendarEvent,
    extract_event,
    extract_events,
    filter_by_assignee,
    resolve_dates,
    resolve_project_status
)
from github_calendar.integrations.github import (
    FieldKind,
    FieldValue,
    Issue,
    Label,
    Milestone,
    Person,
    ProjectItem
)


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_issue(**overrides) -> Issue:
    values = {
        "id": 1,
        "number": 42,
        "title": "Write the launch blog post",
        "body": None,
        "state": "open",
        "created_at": "2025-08-10T09:30:00Z",
        "url": "https://github.com/squareup/devrel/issues/42",
    }
    values.update(overrides)
    return Issue(**values)


def date_field(name, value):
    return FieldValue(field_name=name, kind=FieldKind.DATE, value=value)


def select_field(name, value):
    return FieldValue(field_name=name, kind=FieldKind.SINGLE_SELECT, value=value)


class TestDateResolution:
    """Tests for the start/end fallback chain."""

    def test_start_field_wins_over_body_and_created(self):
        """A start field date beats body markers and created_at."""
        issue = make_issue(body="**Start Date:** kickoff (2025-10-01)")
        start, _ = resolve_dates(issue, [date_field("Start date", "2025-09-03")])

        assert start == utc(2025, 9, 3)

    def test_field_name_match_is_case_insensitive(self):
        """Field names are matched case-insensitively."""
        start, end = resolve_dates(make_issue(), [
            date_field("KICKOFF START", "2025-09-03"),
            date_field("Due", "2025-09-20"),
        ])

        assert start == utc(2025, 9, 3)
        assert end == utc(2025, 9, 20)

    def test_end_date_and_due_fields(self):
        """Fields named 'end' or 'due' supply the end date."""
        _, end = resolve_dates(make_issue(), [date_field("Target End", "2025-09-12")])
        assert end == utc(2025, 9, 12)

        _, end = resolve_dates(make_issue(), [date_field("Due date", "2025-09-14")])
        assert end == utc(2025, 9, 14)

    def test_first_matching_field_wins(self):
        """Later fields for an already resolved slot are ignored."""
        start, end = resolve_dates(make_issue(), [
            date_field("Start", "2025-09-01"),
            date_field("Start (planned)", "2025-09-05"),
            date_field("End", "2025-09-10"),
            date_field("Due", "2025-09-30"),
        ])

        assert start == utc(2025, 9, 1)
        assert end == utc(2025, 9, 10)

    def test_non_date_fields_are_ignored(self):
        """A text value under a 'start' field does not resolve the start."""
        issue = make_issue()
        start, _ = resolve_dates(issue, [
            FieldValue(field_name="Start notes", kind=FieldKind.TEXT, value="soon")
        ])

        assert start == utc(2025, 8, 10, 9, 30)

    def test_body_markers(self):
        """Body markers resolve both slots when there are no fields."""
        issue = make_issue(body="**Start Date:** foo (2025-09-01)\n**End Date:** bar (2025-09-10)")
        start, end = resolve_dates(issue)

        assert start == utc(2025, 9, 1)
        assert end == utc(2025, 9, 10)

    def test_body_marker_only_fills_unresolved_slot(self):
        """A field-resolved start is kept while the body fills the end."""
        issue = make_issue(body="**Start Date:** foo (2025-10-01)\n**End Date:** bar (2025-10-10)")
        start, end = resolve_dates(issue, [date_field("Start", "2025-09-01")])

        assert start == utc(2025, 9, 1)
        assert end == utc(2025, 10, 10)

    def test_body_marker_with_written_date(self):
        """Body dates do not have to be ISO formatted."""
        issue = make_issue(body="**Start Date:** Monday (Sep 8, 2025)")
        start, _ = resolve_dates(issue)

        assert start == utc(2025, 9, 8)

    def test_unparseable_body_date_falls_back(self):
        """A marker with garbage in the parentheses is treated as missing."""
        issue = make_issue(body="**Start Date:** (whenever we can)")
        start, _ = resolve_dates(issue)

        assert start == utc(2025, 8, 10, 9, 30)

    def test_created_at_fallback(self):
        """Without fields or markers the start is the creation time."""
        start, end = resolve_dates(make_issue(body="No dates here"))

        assert start == utc(2025, 8, 10, 9, 30)
        assert end is None

    def test_milestone_due_date_fallback(self):
        """The milestone due date fills a missing end date."""
        issue = make_issue(milestone=Milestone(title="v2", due_on="2025-09-30T07:00:00Z"))
        _, end = resolve_dates(issue)

        assert end == utc(2025, 9, 30, 7)

    def test_end_never_used_for_start(self):
        """Slots are independent: an end field does not become a start."""
        issue = make_issue(milestone=Milestone(title="v2", due_on="2025-12-01T00:00:00Z"))
        start, end = resolve_dates(issue, [date_field("End", "2025-09-10")])

        assert start == utc(2025, 8, 10, 9, 30)
        assert end == utc(2025, 9, 10)


class TestProjectStatus:
    """Tests for project status resolution."""

    def test_status_select_field(self):
        status = resolve_project_status([
            date_field("Start", "2025-09-01"),
            select_field("Status", "In Progress"),
            select_field("Progress", "Blocked"),
        ])
        assert status == "In Progress"

    def test_state_and_progress_names(self):
        assert resolve_project_status([select_field("Review state", "Needs review")]) == "Needs review"
        assert resolve_project_status([select_field("Progress", "Done")]) == "Done"

    def test_no_status(self):
        assert resolve_project_status([select_field("Priority", "P1")]) is None


class TestExtractEvent:
    """Tests for building calendar events."""

    def test_event_fields(self):
        """Events carry issue data, # prefixed label colors and assignees."""
        issue = make_issue(
            labels=(Label(id=1, name="blog", color="d73a4a"),),
            assignees=(Person(login="alice", avatar_url="https://avatars/alice"),)
        )
        event = extract_event(issue, [select_field("Status", "Todo")])

        assert event.id == "42"
        assert event.title == "Write the launch blog post"
        assert event.url == "https://github.com/squareup/devrel/issues/42"
        assert event.labels[0].name == "blog"
        assert event.labels[0].color == "#d73a4a"
        assert event.assignees[0].login == "alice"
        assert event.status == "open"
        assert event.project_status == "Todo"
        assert event.type == "issue"

    def test_event_without_start_is_dropped(self):
        """An issue with no resolvable start date produces no event."""
        assert extract_event(make_issue(created_at="not a date")) is None

    def test_extract_events_filters_silently(self):
        items = [
            ProjectItem(id="a", issue=make_issue(number=1)),
            ProjectItem(id="b", issue=make_issue(number=2, created_at=None)),
            ProjectItem(id="c", issue=make_issue(number=3), field_values=(date_field("Start", "2025-09-01"),)),
        ]
        events = extract_events(items)

        assert [e.id for e in events] == ["1", "3"]

    def test_extraction_is_idempotent(self):
        """Running extraction twice yields identical events."""
        items = [
            ProjectItem(
                id="a",
                issue=make_issue(body="**End Date:** x (2025-09-10)"),
                field_values=(date_field("Start", "2025-09-01"), select_field("Status", "Todo"))
            ),
        ]
        assert extract_events(items) == extract_events(items)

    def test_to_dict(self):
        event = extract_event(make_issue(body="**End Date:** x (2025-09-10)"))
        data = event.to_dict()

        assert data["startDate"] == "2025-08-10T09:30:00+00:00"
        assert data["endDate"] == "2025-09-10T00:00:00+00:00"
        assert data["type"] == "issue"


class TestCalendarEvent:
    """Tests for CalendarEvent helpers."""

    def test_same_start_and_end_is_single_day(self):
        event = CalendarEvent(id="1", title="t", start_date=utc(2025, 9, 15), end_date=utc(2025, 9, 15))
        assert not event.is_multi_day

    def test_filter_by_assignee(self):
        alice = CalendarEvent(id="1", title="a", start_date=utc(2025, 9, 1), assignees=(Person("alice"),))
        bob = CalendarEvent(id="2", title="b", start_date=utc(2025, 9, 1), assignees=(Person("bob"),))

        assert filter_by_assignee([alice, bob], "bob") == [bob]
        assert filter_by_assignee([alice, bob], None) == [alice, bob]
