"""
Tool Dispatcher for GitHub Calendar

Named operations an assistant can call. Each returns a text summary and,
where there is something to show, an HTML view. Failures come back as
error results instead of exceptions.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from .analyzer import TeamMemberStatus, TeamStatus, WorkloadAnalyzer
from .config import CalendarSettings, parse_since
from .dates import utcnow
from .errors import ToolArgumentError, UnknownToolError
from .events import CalendarEvent, extract_events, filter_by_assignee
from .integrations.github import GitHubClient
from .schedule import build_schedule
from .visualizer import Visualizer


logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE_DAYS = 7


@dataclass
class ContentBlock:
    """One block of tool output: markdown text or an HTML view."""
    type: str
    text: str
    uri: Optional[str] = None

    @property
    def is_html(self) -> bool:
        return self.type == "html"

    def to_dict(self) -> dict:
        if self.is_html:
            return {
                "type": "resource",
                "resource": {"uri": self.uri, "mimeType": "text/html", "text": self.text}
            }
        return {"type": "text", "text": self.text}


@dataclass
class ToolResult:
    content: list[ContentBlock] = field(default_factory=list)
    is_error: bool = False

    @property
    def text(self) -> str:
        """The text summary (first text block)."""
        return next((b.text for b in self.content if not b.is_html), "")

    @property
    def html(self) -> Optional[str]:
        return next((b.text for b in self.content if b.is_html), None)

    def to_dict(self) -> dict:
        return {"content": [b.to_dict() for b in self.content], "isError": self.is_error}

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content=[ContentBlock(type="text", text=f"Error: {message}")], is_error=True)


TOOLS = [
    {
        "name": "get_team_status",
        "description": (
            "Get current status of the development team including active issues, "
            "due items, and recent completions for each team member"
        ),
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "get_person_schedule",
        "description": "Get the schedule and upcoming work for a specific team member",
        "inputSchema": {
            "type": "object",
            "properties": {
                "login": {"type": "string", "description": "GitHub username of the team member"},
                "days": {
                    "type": "integer",
                    "description": "Number of days to look ahead (default: 7)",
                    "default": DEFAULT_SCHEDULE_DAYS,
                },
            },
            "required": ["login"],
        },
    },
    {
        "name": "analyze_workload",
        "description": "Analyze team workload distribution and identify who can take on new tasks",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "find_best_assignee",
        "description": "Find the team member with the lightest workload for assigning new tasks",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "get_calendar_events",
        "description": "Get GitHub project calendar events with optional filtering",
        "inputSchema": {
            "type": "object",
            "properties": {
                "org": {"type": "string", "description": "GitHub organization name"},
                "project": {"type": "integer", "description": "GitHub project number"},
                "since": {"type": "string", "description": "ISO date string to filter events from"},
                "assignee": {"type": "string", "description": "Filter events by assignee GitHub username"},
            },
        },
    },
]

TOOL_NAMES = [tool["name"] for tool in TOOLS]


def _int_argument(arguments: dict, name: str, default: Optional[int]) -> Optional[int]:
    value = arguments.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ToolArgumentError(f"'{name}' must be a number, got {value!r}")


class ToolDispatcher:
    """
    Dispatches tool calls to the calendar pipeline.

    Usage:
        dispatcher = ToolDispatcher(Config().settings())
        result = await dispatcher.call_tool("analyze_workload", {})
        print(result.text)
    """

    def __init__(
        self,
        settings: CalendarSettings,
        client: Optional[GitHubClient] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.settings = settings
        self._client = client
        self.clock = clock
        self.analyzer = WorkloadAnalyzer()
        self.visualizer = Visualizer()

    @property
    def client(self) -> GitHubClient:
        # Built on first use so a missing token surfaces as a tool error
        if self._client is None:
            self._client = GitHubClient(self.settings)
        return self._client

    def list_tools(self) -> list[dict]:
        return TOOLS

    async def call_tool(self, name: str, arguments: Optional[dict] = None) -> ToolResult:
        """Run a tool by name. Never raises; errors become error results."""
        arguments = arguments or {}
        handlers = {
            "get_team_status": self.get_team_status,
            "get_person_schedule": self.get_person_schedule,
            "analyze_workload": self.analyze_workload,
            "find_best_assignee": self.find_best_assignee,
            "get_calendar_events": self.get_calendar_events,
        }

        try:
            handler = handlers.get(name)
            if handler is None:
                raise UnknownToolError(name)
            return await handler(**self._tool_arguments(name, arguments))
        except UnknownToolError as e:
            logger.warning("%s", e)
            return ToolResult.error(str(e))
        except Exception as e:
            logger.exception("Error in tool %s", name)
            return ToolResult.error(str(e))

    def _tool_arguments(self, name: str, arguments: dict) -> dict:
        if name == "get_person_schedule":
            login = arguments.get("login")
            if not login or not isinstance(login, str):
                raise ToolArgumentError("'login' is required and must be a string")
            return {"login": login, "days": _int_argument(arguments, "days", DEFAULT_SCHEDULE_DAYS)}

        if name == "get_calendar_events":
            since = arguments.get("since")
            try:
                since_date = parse_since(since) if since else None
            except ValueError:
                raise ToolArgumentError(f"'since' must be an ISO date, got {since!r}")
            return {
                "org": arguments.get("org"),
                "project": _int_argument(arguments, "project", None),
                "since": since_date,
                "assignee": arguments.get("assignee"),
            }

        return {}

    def _uri(self, *parts: str) -> str:
        stamp = int(self.clock().timestamp() * 1000)
        return "ui://" + "/".join(list(parts) + [str(stamp)])

    def _result(self, text: str, html: Optional[str] = None, *uri_parts: str) -> ToolResult:
        content = [ContentBlock(type="text", text=text)]
        if html is not None:
            content.append(ContentBlock(type="html", text=html, uri=self._uri(*uri_parts)))
        return ToolResult(content=content)

    async def fetch_events(
        self,
        org: Optional[str] = None,
        project: Optional[int] = None,
        since: Optional[datetime] = None
    ) -> list[CalendarEvent]:
        items = await self.client.fetch_project_items(org, project, since)
        return extract_events(items)

    async def get_team_status(self) -> ToolResult:
        now = self.clock()
        events = await self.fetch_events()
        analysis = self.analyzer.analyze(events, now)

        members = []
        for entry in analysis.entries:
            members.append(TeamMemberStatus(
                workload=entry,
                due_today=self.analyzer.count_due_today(events, entry.login, now),
                completed_this_week=await self.client.get_completed_this_week(entry.login, now)
            ))
        status = TeamStatus(members=members, calculated_at=now)

        return self._result(
            self.visualizer.team_report(status, format="text"),
            self.visualizer.team_report(status, format="html"),
            "team-status"
        )

    async def get_person_schedule(self, login: str, days: int = DEFAULT_SCHEDULE_DAYS) -> ToolResult:
        events = await self.fetch_events()
        schedule = build_schedule(events, login, days, self.clock())

        return self._result(
            self.visualizer.schedule_report(schedule, format="text"),
            self.visualizer.schedule_report(schedule, format="html"),
            "person-schedule", login
        )

    async def analyze_workload(self) -> ToolResult:
        events = await self.fetch_events()
        analysis = self.analyzer.analyze(events, self.clock())

        return self._result(
            self.visualizer.workload_report(analysis, format="text"),
            self.visualizer.workload_report(analysis, format="html"),
            "workload-analysis"
        )

    async def find_best_assignee(self) -> ToolResult:
        events = await self.fetch_events()
        analysis = self.analyzer.analyze(events, self.clock())
        best = analysis.best_assignee

        text = self.visualizer.text.best_assignee(best)
        if best is None:
            return self._result(text)
        return self._result(
            text,
            self.visualizer.html.best_assignee(best, analysis.entries),
            "best-assignee"
        )

    async def get_calendar_events(
        self,
        org: Optional[str] = None,
        project: Optional[int] = None,
        since: Optional[datetime] = None,
        assignee: Optional[str] = None
    ) -> ToolResult:
        events = await self.fetch_events(org, project, since)
        events = filter_by_assignee(events, assignee)
        current = self.clock().date()

        return self._result(
            self.visualizer.calendar_report(events, format="text"),
            self.visualizer.calendar_report(events, format="html", current=current, today=current),
            "calendar" if events else "calendar-empty"
        )
