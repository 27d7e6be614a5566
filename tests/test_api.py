"""
Tests for the HTTP API.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from github_calendar.api import create_app
from github_calendar.config import CalendarSettings
from github_calendar.errors import UpstreamUnavailable
from github_calendar.integrations.github import Issue, Person, ProjectItem
from github_calendar.tools import ToolDispatcher


NOW = datetime(2025, 9, 15, 12, 0, tzinfo=timezone.utc)


class StaticClient:
    def __init__(self, items=(), error=None):
        self.items = list(items)
        self.error = error

    async def fetch_project_items(self, org=None, project_number=None, since=None):
        if self.error:
            raise self.error
        return self.items

    async def get_completed_this_week(self, login, now=None):
        return 0


def make_item(number, login):
    issue = Issue(
        id=number,
        number=number,
        title=f"Issue {number}",
        body=None,
        state="open",
        created_at="2025-09-12T00:00:00Z",
        assignees=(Person(login=login),)
    )
    return ProjectItem(id=str(number), issue=issue)


def make_app_client(client) -> TestClient:
    dispatcher = ToolDispatcher(CalendarSettings(token="ghp_test"), client=client, clock=lambda: NOW)
    return TestClient(create_app(dispatcher))


@pytest.fixture
def api():
    return make_app_client(StaticClient(items=[make_item(1, "alice"), make_item(2, "bob"), make_item(3, "bob")]))


class TestAPI:
    """Tests for the FastAPI routes."""

    def test_health(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["integrations"]["github"] is True

    def test_list_tools(self, api):
        names = [tool["name"] for tool in api.get("/api/tools").json()["tools"]]

        assert "find_best_assignee" in names

    def test_call_tool(self, api):
        response = api.post("/api/tools/find_best_assignee", json={"arguments": {}})

        assert response.status_code == 200
        data = response.json()
        assert data["isError"] is False
        assert "**alice** has the lightest workload:" in data["content"][0]["text"]
        assert data["content"][1]["resource"]["uri"].startswith("ui://best-assignee/")

    def test_call_tool_argument_error(self, api):
        response = api.post("/api/tools/get_person_schedule", json={"arguments": {}})

        assert response.status_code == 200
        assert response.json()["isError"] is True

    def test_unknown_tool(self, api):
        assert api.post("/api/tools/nope", json={}).status_code == 404

    def test_reports(self, api):
        response = api.get("/api/reports/workload")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Team Workload Analysis" in response.text

    def test_schedule_report(self, api):
        response = api.get("/api/reports/schedule/bob", params={"days": 14})

        assert response.status_code == 200
        assert "bob's Schedule (next 14 days)" in response.text

    def test_unknown_report(self, api):
        assert api.get("/api/reports/gantt").status_code == 404

    def test_text_only_report(self):
        api = make_app_client(StaticClient())
        response = api.get("/api/reports/best-assignee")

        assert response.status_code == 200
        assert response.text == "<p>No team members found in the current project.</p>"

    def test_upstream_failure(self):
        api = make_app_client(StaticClient(error=UpstreamUnavailable("GitHub is down")))
        response = api.get("/api/reports/team-status")

        assert response.status_code == 502
        assert response.json()["detail"] == "Error: GitHub is down"
