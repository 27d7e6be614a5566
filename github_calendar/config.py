"""
Configuration for GitHub Calendar

Loads settings from config.yaml, a .env file and the environment, and
freezes them into a CalendarSettings value that is passed to the pipeline.
"""

import os
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError


DEFAULT_ORG = "squareup"
DEFAULT_PROJECT_NUMBER = 333
DEFAULT_LABEL = "area: devrel-opensource"
DEFAULT_SINCE = datetime(2025, 8, 1, tzinfo=timezone.utc)
DEFAULT_REPO = "devrel"


@dataclass(frozen=True)
class CalendarSettings:
    """Settings for one GitHub project calendar."""
    token: Optional[str] = None
    org: str = DEFAULT_ORG
    project_number: int = DEFAULT_PROJECT_NUMBER
    label: str = DEFAULT_LABEL
    since: datetime = DEFAULT_SINCE
    owner: Optional[str] = None
    repo: str = DEFAULT_REPO

    @property
    def repo_owner(self) -> str:
        """Owner used for repository lookups (defaults to the organization)."""
        return self.owner or self.org

    def with_overrides(
        self,
        org: Optional[str] = None,
        project_number: Optional[int] = None,
        since: Optional[datetime] = None
    ) -> "CalendarSettings":
        """Copy of these settings with per-call overrides applied."""
        changes = {}
        if org:
            changes["org"] = org
        if project_number is not None:
            changes["project_number"] = int(project_number)
        if since is not None:
            changes["since"] = since
        return replace(self, **changes) if changes else self

    def require_token(self) -> str:
        if not self.token:
            raise ConfigurationError(
                "GITHUB_TOKEN is required. Set it in the environment, a .env file "
                "or the github.token key of config.yaml."
            )
        return self.token


def parse_since(value: str) -> datetime:
    """Parse an ISO date or timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class Config:
    """Load configuration from config.yaml and environment."""

    def __init__(
        self,
        config_path: str = "config/config.yaml",
        env_file: Optional[str] = ".env"
    ):
        self.config = {}

        if env_file and os.path.exists(env_file):
            load_dotenv(env_file, override=False)

        if os.path.exists(config_path):
            with open(config_path) as f:
                self.config = yaml.safe_load(f) or {}

        # Override with environment variables
        self._load_env()

    def _load_env(self):
        """Load configuration from environment variables."""
        env_mapping = {
            "GITHUB_TOKEN": ("github", "token"),
            "GITHUB_ORG": ("github", "org"),
            "GITHUB_PROJECT_NUMBER": ("github", "project_number"),
            "GITHUB_LABEL": ("github", "label"),
            "GITHUB_SINCE": ("github", "since"),
            "GITHUB_OWNER": ("github", "owner"),
            "GITHUB_REPO": ("github", "repo"),
        }

        for env_var, (section, key) in env_mapping.items():
            value = os.getenv(env_var)
            if value:
                if section not in self.config:
                    self.config[section] = {}
                self.config[section][key] = value

    def get(self, section: str, key: str, default=None):
        """Get configuration value."""
        return (self.config.get(section) or {}).get(key, default)

    @property
    def github_token(self) -> Optional[str]:
        return self.get("github", "token")

    @property
    def github_org(self) -> str:
        return self.get("github", "org", DEFAULT_ORG)

    @property
    def project_number(self) -> int:
        return int(self.get("github", "project_number", DEFAULT_PROJECT_NUMBER))

    @property
    def label(self) -> str:
        return self.get("github", "label", DEFAULT_LABEL)

    @property
    def since(self) -> datetime:
        value = self.get("github", "since")
        if not value:
            return DEFAULT_SINCE
        # PyYAML hands back date objects for unquoted ISO dates
        return parse_since(str(value))

    @property
    def github_owner(self) -> Optional[str]:
        return self.get("github", "owner")

    @property
    def github_repo(self) -> str:
        return self.get("github", "repo", DEFAULT_REPO)

    def settings(self) -> CalendarSettings:
        """Freeze the loaded configuration into CalendarSettings."""
        return CalendarSettings(
            token=self.github_token,
            org=self.github_org,
            project_number=self.project_number,
            label=self.label,
            since=self.since,
            owner=self.github_owner,
            repo=self.github_repo
        )
