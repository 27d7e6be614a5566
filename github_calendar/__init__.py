"""
GitHub Calendar

Team calendar and workload tools over GitHub Projects, for AI assistants.
"""

__version__ = "1.0.0"

from .config import Config, CalendarSettings

from .events import (
    CalendarEvent,
    EventLabel,
    extract_event,
    extract_events
)

from .analyzer import (
    WorkloadAnalyzer,
    WorkloadAnalysis,
    WorkloadEntry,
    WorkloadLevel,
    aggregate_workload,
    find_best_assignee,
    analyze_team_workload
)

from .grid import project_month, month_days

from .schedule import PersonSchedule, build_schedule

from .visualizer import (
    Visualizer,
    TextReporter,
    HTMLReporter
)

from .tools import ToolDispatcher, ToolResult

__all__ = [
    # Version
    "__version__",

    # Config
    "Config",
    "CalendarSettings",

    # Events
    "CalendarEvent",
    "EventLabel",
    "extract_event",
    "extract_events",

    # Analyzer
    "WorkloadAnalyzer",
    "WorkloadAnalysis",
    "WorkloadEntry",
    "WorkloadLevel",
    "aggregate_workload",
    "find_best_assignee",
    "analyze_team_workload",

    # Grid and schedule
    "project_month",
    "month_days",
    "PersonSchedule",
    "build_schedule",

    # Visualizer
    "Visualizer",
    "TextReporter",
    "HTMLReporter",

    # Tools
    "ToolDispatcher",
    "ToolResult",
]
