"""
GitHub Integration for GitHub Calendar

Pulls project items from GitHub Projects v2 (GraphQL) and falls back to the
REST search API, normalizing both into one Issue shape.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, AsyncIterator, Optional, Union
from dataclasses import dataclass, field

import httpx

from ..config import CalendarSettings
from ..dates import parse_datetime, utcnow
from ..errors import UpstreamUnavailable


logger = logging.getLogger(__name__)

PAGE_SIZE = 100
# GitHub search never returns more than this many results for one query
SEARCH_RESULT_LIMIT = 1000


@dataclass(frozen=True)
class Person:
    """A GitHub account as it appears on an issue."""
    login: str = ""
    avatar_url: str = ""


@dataclass(frozen=True)
class Label:
    """Represents a GitHub label. Color is the bare hex GitHub returns."""
    id: Union[int, str, None]
    name: str
    color: str = ""
    description: Optional[str] = None


@dataclass(frozen=True)
class Milestone:
    title: str = ""
    description: Optional[str] = None
    due_on: Optional[str] = None


@dataclass(frozen=True)
class Issue:
    """Represents a GitHub Issue, normalized from either API."""
    id: Union[int, str]
    number: int
    title: str
    body: Optional[str]
    state: str
    created_at: str
    updated_at: Optional[str] = None
    closed_at: Optional[str] = None
    url: str = ""
    author: Person = field(default_factory=Person)
    labels: tuple[Label, ...] = ()
    assignees: tuple[Person, ...] = ()
    milestone: Optional[Milestone] = None

    @property
    def is_closed(self) -> bool:
        return self.state == "closed"

    def has_label(self, name: str) -> bool:
        return any(label.name == name for label in self.labels)


class FieldKind(Enum):
    """Payload kinds of a Projects v2 field value."""
    DATE = "date"
    TEXT = "text"
    SINGLE_SELECT = "name"
    NUMBER = "number"


@dataclass(frozen=True)
class FieldValue:
    """A custom field value attached to a project item."""
    field_name: str
    kind: FieldKind
    value: Any

    @property
    def date(self) -> Optional[str]:
        return self.value if self.kind is FieldKind.DATE else None

    @property
    def select_name(self) -> Optional[str]:
        return self.value if self.kind is FieldKind.SINGLE_SELECT else None


@dataclass(frozen=True)
class ProjectItem:
    """One project board row: an issue plus its custom field values."""
    id: str
    issue: Issue
    field_values: tuple[FieldValue, ...] = ()


# Normalization

def normalize_field_value(node: Optional[dict]) -> Optional[FieldValue]:
    """Turn a fieldValues node into a FieldValue, or None if it carries nothing."""
    if not node:
        return None
    name = (node.get("field") or {}).get("name") or ""
    for kind in FieldKind:
        value = node.get(kind.value)
        if value is not None and value != "":
            return FieldValue(field_name=name, kind=kind, value=value)
    return None


def _person(raw: Optional[dict], avatar_key: str) -> Person:
    raw = raw or {}
    return Person(login=raw.get("login") or "", avatar_url=raw.get(avatar_key) or "")


def _label(raw: dict) -> Label:
    return Label(
        id=raw.get("id"),
        name=raw.get("name") or "",
        color=raw.get("color") or "",
        description=raw.get("description")
    )


def _milestone(raw: Optional[dict], due_key: str) -> Optional[Milestone]:
    if not raw:
        return None
    return Milestone(
        title=raw.get("title") or "",
        description=raw.get("description"),
        due_on=raw.get(due_key)
    )


def normalize_graphql_item(node: dict) -> Optional[ProjectItem]:
    """
    Normalize a Projects v2 item node.

    Returns None for draft items, pull requests and items without content.
    """
    content = node.get("content")
    if not content or node.get("type") != "ISSUE":
        return None

    issue = Issue(
        id=content.get("id"),
        number=content.get("number"),
        title=content.get("title") or "",
        body=content.get("body"),
        state=(content.get("state") or "").lower(),
        created_at=content.get("createdAt"),
        updated_at=content.get("updatedAt"),
        closed_at=content.get("closedAt"),
        url=content.get("url") or "",
        author=_person(content.get("author"), "avatarUrl"),
        labels=tuple(_label(l) for l in (content.get("labels") or {}).get("nodes") or [] if l),
        assignees=tuple(
            _person(a, "avatarUrl") for a in (content.get("assignees") or {}).get("nodes") or [] if a
        ),
        milestone=_milestone(content.get("milestone"), "dueOn")
    )

    field_values = []
    for fv in (node.get("fieldValues") or {}).get("nodes") or []:
        value = normalize_field_value(fv)
        if value:
            field_values.append(value)

    return ProjectItem(id=str(node.get("id")), issue=issue, field_values=tuple(field_values))


def normalize_rest_issue(raw: dict) -> ProjectItem:
    """Normalize a REST issue (search or list endpoint). No field values."""
    issue = Issue(
        id=raw.get("id"),
        number=raw.get("number"),
        title=raw.get("title") or "",
        body=raw.get("body"),
        state=(raw.get("state") or "").lower(),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
        closed_at=raw.get("closed_at"),
        url=raw.get("html_url") or "",
        author=_person(raw.get("user"), "avatar_url"),
        labels=tuple(_label(l) for l in raw.get("labels") or [] if isinstance(l, dict)),
        assignees=tuple(_person(a, "avatar_url") for a in raw.get("assignees") or [] if a),
        milestone=_milestone(raw.get("milestone"), "due_on")
    )
    return ProjectItem(id=str(raw.get("id")), issue=issue)


PROJECT_ITEMS_QUERY = """
query($org: String!, $projectNumber: Int!, $cursor: String) {
  organization(login: $org) {
    projectV2(number: $projectNumber) {
      id
      title
      items(first: 100, after: $cursor) {
        pageInfo { hasNextPage endCursor }
        nodes {
          id
          type
          content {
            ... on Issue {
              id
              number
              title
              body
              state
              createdAt
              updatedAt
              closedAt
              url
              author { login avatarUrl }
              labels(first: 20) { nodes { id name color description } }
              assignees(first: 10) { nodes { login avatarUrl } }
              milestone { title description dueOn }
            }
          }
          fieldValues(first: 20) {
            nodes {
              ... on ProjectV2ItemFieldDateValue {
                field { ... on ProjectV2FieldCommon { id name } }
                date
              }
              ... on ProjectV2ItemFieldTextValue {
                field { ... on ProjectV2FieldCommon { id name } }
                text
              }
              ... on ProjectV2ItemFieldSingleSelectValue {
                field { ... on ProjectV2FieldCommon { id name } }
                name
              }
              ... on ProjectV2ItemFieldNumberValue {
                field { ... on ProjectV2FieldCommon { id name } }
                number
              }
            }
          }
        }
      }
    }
  }
}
"""


class GitHubClient:
    """
    GitHub API client for fetching project calendar data.

    Usage:
        client = GitHubClient(settings)
        items = await client.fetch_project_items()
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        settings: CalendarSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings
        self.token = settings.require_token()
        self.transport = transport

        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28"
        }

    async def _send(self, method: str, endpoint: str, **kwargs) -> Any:
        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    f"{self.BASE_URL}{endpoint}",
                    headers=self.headers,
                    timeout=30.0,
                    **kwargs
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise UpstreamUnavailable(f"GitHub request to {endpoint} failed: {e}") from e
            return response.json()

    async def _request(self, endpoint: str, params: Optional[dict] = None) -> Any:
        """Make authenticated GET request to the REST API."""
        return await self._send("GET", endpoint, params=params)

    async def _graphql(self, query: str, variables: dict) -> dict:
        """Run a GraphQL query; GraphQL-level errors raise UpstreamUnavailable."""
        payload = await self._send("POST", "/graphql", json={"query": query, "variables": variables})
        errors = payload.get("errors") or []
        if errors:
            messages = "; ".join(e.get("message", str(e)) for e in errors)
            raise UpstreamUnavailable(f"GraphQL errors: {messages}")
        return payload.get("data") or {}

    async def iter_project_pages(self, org: str, project_number: int) -> AsyncIterator[list[dict]]:
        """Yield pages of raw project item nodes, following the cursor."""
        cursor = None
        while True:
            data = await self._graphql(
                PROJECT_ITEMS_QUERY,
                {"org": org, "projectNumber": project_number, "cursor": cursor}
            )
            project = (data.get("organization") or {}).get("projectV2")
            if not project:
                raise UpstreamUnavailable(
                    f"Project {project_number} not found for organization {org}"
                )

            items = project.get("items") or {}
            yield items.get("nodes") or []

            page_info = items.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")

    async def fetch_project_items_graphql(
        self,
        org: str,
        project_number: int,
        since: datetime
    ) -> list[ProjectItem]:
        """Fetch labelled issues created since the cutoff from a Projects v2 board."""
        all_items = []
        async for nodes in self.iter_project_pages(org, project_number):
            for node in nodes:
                item = normalize_graphql_item(node or {})
                if item is None or not item.issue.has_label(self.settings.label):
                    continue
                created = parse_datetime(item.issue.created_at)
                if created is None or created < since:
                    continue
                all_items.append(item)

        logger.info("Fetched %d items from project %s/%s via GraphQL", len(all_items), org, project_number)
        return all_items

    async def iter_search_pages(self, org: str, since: datetime) -> AsyncIterator[list[dict]]:
        """Yield pages of REST search results for the configured label."""
        query = (
            f'org:{org} label:"{self.settings.label}" type:issue '
            f'created:>={since.date().isoformat()}'
        )
        page = 1
        while True:
            result = await self._request(
                "/search/issues",
                {"q": query, "per_page": PAGE_SIZE, "page": page}
            )
            items = result.get("items") or []
            if not items:
                break
            yield items
            total = min(result.get("total_count") or SEARCH_RESULT_LIMIT, SEARCH_RESULT_LIMIT)
            if len(items) < PAGE_SIZE or page * PAGE_SIZE >= total:
                break
            page += 1

    async def fetch_issues_by_label(self, org: str, since: datetime) -> list[ProjectItem]:
        """Fallback: search issues carrying the configured label."""
        all_items = []
        async for issues in self.iter_search_pages(org, since):
            all_items.extend(normalize_rest_issue(issue) for issue in issues)

        logger.info("Fetched %d issues for %s via search", len(all_items), org)
        return all_items

    async def fetch_project_items(
        self,
        org: Optional[str] = None,
        project_number: Optional[int] = None,
        since: Optional[datetime] = None
    ) -> list[ProjectItem]:
        """
        Fetch project items, falling back once to the search API.

        Args:
            org: Organization login (defaults to settings)
            project_number: Projects v2 number (defaults to settings)
            since: Creation-date cutoff (defaults to settings)

        Returns:
            Normalized project items
        """
        settings = self.settings.with_overrides(org, project_number, since)

        try:
            return await self.fetch_project_items_graphql(
                settings.org, settings.project_number, settings.since
            )
        except (UpstreamUnavailable, ValueError) as e:
            logger.warning("GraphQL API failed, falling back to Search API: %s", e)

        return await self.fetch_issues_by_label(settings.org, settings.since)

    async def get_completed_this_week(self, login: str, now: Optional[datetime] = None) -> int:
        """
        Count issues assigned to login that were closed this week.

        Failures are logged and reported as 0 so one member cannot break
        a team-wide report.
        """
        now = now or utcnow()
        week_start = (now - timedelta(days=now.weekday())).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        params = {
            "state": "closed",
            "assignee": login,
            "since": (now - timedelta(days=7)).isoformat(),
            "per_page": PAGE_SIZE
        }

        try:
            issues = await self._request(
                f"/repos/{self.settings.repo_owner}/{self.settings.repo}/issues", params
            )
        except Exception as e:
            logger.warning("Error getting completed issues for %s: %s", login, e)
            return 0

        count = 0
        for raw in issues or []:
            if "pull_request" in raw:
                continue
            closed = parse_datetime(raw.get("closed_at"))
            if closed is not None and week_start <= closed <= now:
                count += 1
        return count
