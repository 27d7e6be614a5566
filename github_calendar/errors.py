"""
Errors for GitHub Calendar

Every error raised by the package derives from GitHubCalendarError so the
tool dispatcher can turn any of them into an error result.
"""


class GitHubCalendarError(Exception):
    """Base class for all GitHub Calendar errors."""


class ConfigurationError(GitHubCalendarError):
    """Required configuration (usually the GitHub token) is missing."""


class UpstreamUnavailable(GitHubCalendarError):
    """The GitHub data source could not be reached or returned an error.

    A project or organization that does not exist is reported as this too.
    """


class UnknownToolError(GitHubCalendarError):
    """A tool call named an operation that does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolArgumentError(GitHubCalendarError):
    """A tool call was made with missing or invalid arguments."""
