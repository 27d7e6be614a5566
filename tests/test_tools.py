"""
Tests for the tool dispatcher.
"""

import asyncio
from datetime import datetime, timezone

from github_calendar.config import CalendarSettings
from github_calendar.errors import UpstreamUnavailable
from github_calendar.integrations.github import Issue, Person, ProjectItem
from github_calendar.tools import TOOL_NAMES, ToolDispatcher


NOW = datetime(2025, 9, 15, 12, 0, tzinfo=timezone.utc)
STAMP = str(int(NOW.timestamp() * 1000))


def make_item(number, *logins, created="2025-09-10T00:00:00Z", state="open", body=None):
    issue = Issue(
        id=number,
        number=number,
        title=f"Issue {number}",
        body=body,
        state=state,
        created_at=created,
        url=f"https://github.com/squareup/devrel/issues/{number}",
        assignees=tuple(Person(login=login, avatar_url=f"https://avatars/{login}") for login in logins)
    )
    return ProjectItem(id=f"PVTI_{number}", issue=issue)


class FakeClient:
    """Stands in for GitHubClient and records what it was asked for."""

    def __init__(self, items=(), completed=None, error=None):
        self.items = list(items)
        self.completed = completed or {}
        self.error = error
        self.calls = []

    async def fetch_project_items(self, org=None, project_number=None, since=None):
        self.calls.append((org, project_number, since))
        if self.error:
            raise self.error
        return self.items

    async def get_completed_this_week(self, login, now=None):
        return self.completed.get(login, 0)


def make_dispatcher(client) -> ToolDispatcher:
    return ToolDispatcher(CalendarSettings(token="ghp_test"), client=client, clock=lambda: NOW)


def call(dispatcher, name, arguments=None):
    return asyncio.run(dispatcher.call_tool(name, arguments))


class TestDispatch:
    """Tests for tool lookup and argument handling."""

    def test_list_tools(self):
        tools = make_dispatcher(FakeClient()).list_tools()

        assert [t["name"] for t in tools] == TOOL_NAMES
        assert len(tools) == 5
        schedule = next(t for t in tools if t["name"] == "get_person_schedule")
        assert schedule["inputSchema"]["required"] == ["login"]

    def test_numeric_arguments_are_integers(self):
        tools = {t["name"]: t for t in make_dispatcher(FakeClient()).list_tools()}

        assert tools["get_person_schedule"]["inputSchema"]["properties"]["days"]["type"] == "integer"
        assert tools["get_calendar_events"]["inputSchema"]["properties"]["project"]["type"] == "integer"

    def test_unknown_tool(self):
        result = call(make_dispatcher(FakeClient()), "delete_everything")

        assert result.is_error
        assert result.text == "Error: Unknown tool: delete_everything"

    def test_missing_login(self):
        result = call(make_dispatcher(FakeClient()), "get_person_schedule", {})

        assert result.is_error
        assert "login" in result.text

    def test_bad_since(self):
        result = call(make_dispatcher(FakeClient()), "get_calendar_events", {"since": "last tuesday"})

        assert result.is_error

    def test_upstream_error_becomes_error_result(self):
        client = FakeClient(error=UpstreamUnavailable("GitHub request to /graphql failed"))
        result = call(make_dispatcher(client), "analyze_workload")

        assert result.is_error
        assert result.text == "Error: GitHub request to /graphql failed"
        assert result.to_dict()["isError"] is True

    def test_missing_token_becomes_error_result(self):
        dispatcher = ToolDispatcher(CalendarSettings(token=None), clock=lambda: NOW)
        result = call(dispatcher, "get_team_status")

        assert result.is_error
        assert "GITHUB_TOKEN" in result.text


class TestTools:
    """Tests for the individual tools."""

    def test_team_status(self):
        client = FakeClient(
            items=[make_item(1, "alice"), make_item(2, "alice"), make_item(3, "bob")],
            completed={"alice": 4}
        )
        result = call(make_dispatcher(client), "get_team_status")

        assert not result.is_error
        assert "**bob**" in result.text
        assert "- Completed This Week: 4" in result.text
        assert result.content[1].uri == f"ui://team-status/{STAMP}"
        assert result.html.startswith("<!DOCTYPE html>")

    def test_person_schedule(self):
        client = FakeClient(items=[make_item(1, "alice"), make_item(2, "bob")])
        result = call(make_dispatcher(client), "get_person_schedule", {"login": "alice", "days": "3"})

        assert result.text.startswith("# Schedule for alice (Next 3 days)")
        assert "Issue 1" in result.text
        assert "Issue 2" not in result.text
        assert result.content[1].uri == f"ui://person-schedule/alice/{STAMP}"

    def test_person_schedule_empty(self):
        result = call(make_dispatcher(FakeClient()), "get_person_schedule", {"login": "carol"})

        assert not result.is_error
        assert "No upcoming work found for carol in the next 7 days." in result.text

    def test_analyze_workload(self):
        client = FakeClient(items=[make_item(1, "bob"), make_item(2, "bob"), make_item(3, "alice")])
        result = call(make_dispatcher(client), "analyze_workload")

        assert result.text.index("**alice**") < result.text.index("**bob**")
        assert result.content[1].uri == f"ui://workload-analysis/{STAMP}"

    def test_find_best_assignee(self):
        items = [make_item(n, "bob") for n in range(5)] + [make_item(10, "alice"), make_item(11, "alice")]
        result = call(make_dispatcher(FakeClient(items=items)), "find_best_assignee")

        assert "**alice** has the lightest workload:" in result.text
        assert result.content[1].uri == f"ui://best-assignee/{STAMP}"

    def test_find_best_assignee_empty(self):
        result = call(make_dispatcher(FakeClient()), "find_best_assignee")

        assert not result.is_error
        assert result.text == "No team members found in the current project."
        assert result.html is None

    def test_calendar_events_with_overrides(self):
        client = FakeClient(items=[make_item(1, "alice"), make_item(2, "bob")])
        result = call(make_dispatcher(client), "get_calendar_events", {
            "org": "block",
            "project": 12,
            "since": "2025-09-01",
            "assignee": "bob",
        })

        assert client.calls == [("block", 12, datetime(2025, 9, 1, tzinfo=timezone.utc))]
        assert result.text.startswith("# Calendar Events (1 found)")
        assert result.content[1].uri == f"ui://calendar/{STAMP}"
        assert "September 2025" in result.html

    def test_calendar_today_follows_clock(self):
        """The highlighted day comes from the dispatcher clock."""
        result = call(make_dispatcher(FakeClient(items=[make_item(1, "alice")])), "get_calendar_events")

        assert '<div class="day today"><div class="num">15</div>' in result.html
        assert result.html.count('class="day today"') == 1

    def test_calendar_events_empty(self):
        result = call(make_dispatcher(FakeClient()), "get_calendar_events")

        assert result.text == "No calendar events found matching the criteria."
        assert result.content[1].uri == f"ui://calendar-empty/{STAMP}"

    def test_html_block_serialization(self):
        client = FakeClient(items=[make_item(1, "alice")])
        data = call(make_dispatcher(client), "analyze_workload").to_dict()

        assert data["content"][0]["type"] == "text"
        assert data["content"][1]["type"] == "resource"
        assert data["content"][1]["resource"]["mimeType"] == "text/html"
