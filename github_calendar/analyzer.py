"""
Team Workload Analyzer

Counts open work per assignee, ranks the team from lightest to heaviest
workload and picks who should get the next task.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional
from enum import Enum

from .dates import utcnow
from .events import CalendarEvent


class WorkloadLevel(Enum):
    """Workload bucket by number of open issues."""
    LIGHT = "light"            # 0-2
    MODERATE = "moderate"      # 3-4
    HEAVY = "heavy"            # 5-6
    OVERLOADED = "overloaded"  # 7+

    @classmethod
    def for_count(cls, count: int) -> "WorkloadLevel":
        if count <= 2:
            return cls.LIGHT
        elif count <= 4:
            return cls.MODERATE
        elif count <= 6:
            return cls.HEAVY
        return cls.OVERLOADED

    @property
    def emoji(self) -> str:
        return {
            WorkloadLevel.LIGHT: "🟢",
            WorkloadLevel.MODERATE: "🟡",
            WorkloadLevel.HEAVY: "🟠",
            WorkloadLevel.OVERLOADED: "🔴"
        }[self]

    @property
    def color(self) -> str:
        return {
            WorkloadLevel.LIGHT: "#10b981",
            WorkloadLevel.MODERATE: "#f59e0b",
            WorkloadLevel.HEAVY: "#f97316",
            WorkloadLevel.OVERLOADED: "#ef4444"
        }[self]


@dataclass
class WorkloadEntry:
    """Open work counters for one assignee."""
    login: str
    avatar_url: str = ""
    active_issues: int = 0
    upcoming_issues: int = 0
    overdue_issues: int = 0

    @property
    def total_workload(self) -> int:
        # Closed events never reach the counters, so total and active are one number.
        return self.active_issues

    @property
    def level(self) -> WorkloadLevel:
        return WorkloadLevel.for_count(self.total_workload)

    @property
    def recommendation(self) -> str:
        if self.level == WorkloadLevel.LIGHT:
            if self.total_workload == 0:
                return "Available for new assignments"
            return "Can take on additional work"
        return {
            WorkloadLevel.MODERATE: "Good workload balance",
            WorkloadLevel.HEAVY: "At capacity, avoid new assignments",
            WorkloadLevel.OVERLOADED: "Consider redistributing some tasks"
        }[self.level]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "login": self.login,
            "avatar_url": self.avatar_url,
            "activeIssues": self.active_issues,
            "upcomingIssues": self.upcoming_issues,
            "overdueIssues": self.overdue_issues,
            "totalWorkload": self.total_workload,
            "workloadLevel": self.level.value,
            "recommendation": self.recommendation
        }


@dataclass
class WorkloadAnalysis:
    """Ranked team workload, lightest first."""
    entries: list[WorkloadEntry] = field(default_factory=list)
    calculated_at: datetime = field(default_factory=utcnow)

    @property
    def team_size(self) -> int:
        return len(self.entries)

    @property
    def total_workload(self) -> int:
        return sum(e.total_workload for e in self.entries)

    @property
    def average_workload(self) -> float:
        if not self.entries:
            return 0
        return self.total_workload / len(self.entries)

    @property
    def max_workload(self) -> int:
        return max([e.total_workload for e in self.entries] + [1])

    @property
    def least_busy(self) -> list[str]:
        return [e.login for e in self.entries if e.level == WorkloadLevel.LIGHT]

    @property
    def most_busy(self) -> list[str]:
        return [
            e.login for e in self.entries
            if e.level in (WorkloadLevel.HEAVY, WorkloadLevel.OVERLOADED)
        ]

    @property
    def overloaded_count(self) -> int:
        return len([e for e in self.entries if e.level == WorkloadLevel.OVERLOADED])

    @property
    def best_assignee(self) -> Optional[WorkloadEntry]:
        return self.entries[0] if self.entries else None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "calculated_at": self.calculated_at.isoformat(),
            "summary": {
                "team_size": self.team_size,
                "total_workload": self.total_workload,
                "average_workload": round(self.average_workload, 1),
                "overloaded": self.overloaded_count,
                "least_busy": self.least_busy,
                "most_busy": self.most_busy
            },
            "members": [e.to_dict() for e in self.entries]
        }


@dataclass
class TeamMemberStatus:
    """Workload entry plus the day-to-day numbers shown in team status."""
    workload: WorkloadEntry
    due_today: int = 0
    completed_this_week: int = 0

    @property
    def login(self) -> str:
        return self.workload.login


@dataclass
class TeamStatus:
    members: list[TeamMemberStatus] = field(default_factory=list)
    calculated_at: datetime = field(default_factory=utcnow)

    @property
    def total_active_issues(self) -> int:
        return sum(m.workload.active_issues for m in self.members)

    @property
    def total_due_today(self) -> int:
        return sum(m.due_today for m in self.members)


class WorkloadAnalyzer:
    """
    Analyzes team workload from calendar events.

    Usage:
        analyzer = WorkloadAnalyzer()
        analysis = analyzer.analyze(events)
        best = analysis.best_assignee
    """

    def aggregate(
        self,
        events: Iterable[CalendarEvent],
        now: Optional[datetime] = None
    ) -> list[WorkloadEntry]:
        """
        Count open, upcoming and overdue issues per assignee.

        Closed events are skipped entirely. The result is sorted by
        total workload ascending; ties keep first-seen order.
        """
        now = now or utcnow()
        entries: dict[str, WorkloadEntry] = {}

        for event in events:
            if event.is_closed:
                continue

            for assignee in event.assignees:
                entry = entries.get(assignee.login)
                if entry is None:
                    entry = WorkloadEntry(login=assignee.login, avatar_url=assignee.avatar_url)
                    entries[assignee.login] = entry

                entry.active_issues += 1
                if event.is_overdue(now):
                    entry.overdue_issues += 1
                if event.start_date > now:
                    entry.upcoming_issues += 1

        return sorted(entries.values(), key=lambda e: e.total_workload)

    def analyze(
        self,
        events: Iterable[CalendarEvent],
        now: Optional[datetime] = None
    ) -> WorkloadAnalysis:
        now = now or utcnow()
        return WorkloadAnalysis(entries=self.aggregate(events, now), calculated_at=now)

    def count_due_today(
        self,
        events: Iterable[CalendarEvent],
        login: str,
        now: Optional[datetime] = None
    ) -> int:
        """Open events assigned to login whose end date is today."""
        today = (now or utcnow()).date()
        return len([
            e for e in events
            if not e.is_closed and e.is_assigned_to(login)
            and e.end_date is not None and e.end_date.date() == today
        ])


def aggregate_workload(
    events: Iterable[CalendarEvent],
    now: Optional[datetime] = None
) -> list[WorkloadEntry]:
    """Per-assignee workload entries, lightest first."""
    return WorkloadAnalyzer().aggregate(events, now)


def find_best_assignee(entries: list[WorkloadEntry]) -> Optional[WorkloadEntry]:
    """Lightest-loaded entry of a ranking, or None for an empty team."""
    ranked = sorted(entries, key=lambda e: e.total_workload)
    return ranked[0] if ranked else None


# Convenience function
def analyze_team_workload(
    events: Iterable[CalendarEvent],
    now: Optional[datetime] = None
) -> WorkloadAnalysis:
    """
    Quick function to analyze team workload.

    Example:
        analysis = analyze_team_workload(events)

        print(f"Team average: {analysis.average_workload}")
        for entry in analysis.entries:
            print(f"  {entry.login}: {entry.total_workload}")
    """
    return WorkloadAnalyzer().analyze(events, now)
