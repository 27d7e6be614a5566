"""
MCP Server for GitHub Calendar

Serves the calendar tools to an AI assistant over stdio.

Run with: github-calendar-mcp
"""

import logging
import sys
from typing import Optional

from mcp import types
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from .config import Config
from .tools import ContentBlock, ToolDispatcher


logger = logging.getLogger(__name__)

mcp = FastMCP("github-calendar-mcp")

_dispatcher: Optional[ToolDispatcher] = None


def get_dispatcher() -> ToolDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = ToolDispatcher(Config().settings())
    return _dispatcher


def to_mcp_content(block: ContentBlock):
    """Convert a ContentBlock to its MCP content type."""
    if block.is_html:
        return types.EmbeddedResource(
            type="resource",
            resource=types.TextResourceContents(uri=block.uri, mimeType="text/html", text=block.text)
        )
    return types.TextContent(type="text", text=block.text)


async def _run(name: str, arguments: dict):
    result = await get_dispatcher().call_tool(name, arguments)
    if result.is_error:
        raise ToolError(result.text)
    return [to_mcp_content(block) for block in result.content]


@mcp.tool()
async def get_team_status():
    """Get current status of the development team including active issues, due items, and recent completions for each team member"""
    return await _run("get_team_status", {})


@mcp.tool()
async def get_person_schedule(login: str, days: int = 7):
    """Get the schedule and upcoming work for a specific team member

    Args:
        login: GitHub username of the team member
        days: Number of days to look ahead (default: 7)
    """
    return await _run("get_person_schedule", {"login": login, "days": days})


@mcp.tool()
async def analyze_workload():
    """Analyze team workload distribution and identify who can take on new tasks"""
    return await _run("analyze_workload", {})


@mcp.tool()
async def find_best_assignee():
    """Find the team member with the lightest workload for assigning new tasks"""
    return await _run("find_best_assignee", {})


@mcp.tool()
async def get_calendar_events(
    org: Optional[str] = None,
    project: Optional[int] = None,
    since: Optional[str] = None,
    assignee: Optional[str] = None
):
    """Get GitHub project calendar events with optional filtering

    Args:
        org: GitHub organization name
        project: GitHub project number
        since: ISO date string to filter events from
        assignee: Filter events by assignee GitHub username
    """
    return await _run(
        "get_calendar_events",
        {"org": org, "project": project, "since": since, "assignee": assignee}
    )


def main():
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logger.info("GitHub Calendar MCP server running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
