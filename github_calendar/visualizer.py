"""
Visualizer for GitHub Calendar

Creates the text summaries and embeddable HTML views returned by the tools.
"""

from datetime import date
from html import escape
from typing import Optional, Literal

from .analyzer import TeamStatus, WorkloadAnalysis, WorkloadEntry
from .dates import day_key, format_day, utcnow
from .events import CalendarEvent
from .grid import month_days, project_month
from .schedule import PersonSchedule


ASSIGNEE_COLORS = [
    "#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6",
    "#06b6d4", "#ec4899", "#84cc16", "#f97316", "#6366f1"
]
UNASSIGNED_COLOR = "#6b7280"
MAX_EVENTS_PER_DAY = 3

BASE_STYLE = (
    "body { font-family: system-ui, -apple-system, sans-serif; margin: 0; padding: 16px; background: #f8fafc; }"
)

# Keeps the host iframe sized to the content
RESIZE_SCRIPT = """
<script>
new ResizeObserver(entries => {
  entries.forEach(entry => {
    window.parent.postMessage({
      type: "ui-size-change",
      payload: { height: entry.contentRect.height + 50 }
    }, "*");
  });
}).observe(document.documentElement);
</script>
"""


def assignee_colors(events: list[CalendarEvent]) -> dict[str, str]:
    """Give each assignee a palette color in first-seen order."""
    colors: dict[str, str] = {}
    for event in events:
        for assignee in event.assignees:
            if assignee.login not in colors:
                colors[assignee.login] = ASSIGNEE_COLORS[len(colors) % len(ASSIGNEE_COLORS)]
    return colors


def _page(title: str, body: str, style: str = "") -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{escape(title)}</title>
    <style>
        {BASE_STYLE}
        .card {{ background: white; border-radius: 8px; padding: 16px; margin-bottom: 12px; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }}
        .muted {{ color: #64748b; font-size: 12px; }}
        .badge {{ display: inline-block; padding: 2px 8px; border-radius: 9999px; color: white; font-size: 12px; }}
        {style}
    </style>
</head>
<body>
{body}
{RESIZE_SCRIPT}
</body>
</html>
"""


class TextReporter:
    """Generate markdown text summaries."""

    @staticmethod
    def team_status(status: TeamStatus) -> str:
        blocks = []
        for member in status.members:
            entry = member.workload
            block = (
                f"**{entry.login}**\n"
                f"- Active Issues: {entry.active_issues}\n"
                f"- Upcoming Issues: {entry.upcoming_issues}\n"
                f"- Overdue Issues: {entry.overdue_issues}\n"
                f"- Total Workload: {entry.total_workload}"
            )
            if member.due_today:
                block += f"\n- Due Today: {member.due_today}"
            if member.completed_this_week:
                block += f"\n- Completed This Week: {member.completed_this_week}"
            blocks.append(block)

        report = "\n\n".join(blocks) or "No team members found with active work."
        return f"# Team Status Report\n\n{report}"

    @staticmethod
    def person_schedule(schedule: PersonSchedule) -> str:
        header = f"# Schedule for {schedule.login} (Next {schedule.days} days)"
        if not schedule.items:
            return f"{header}\n\nNo upcoming work found for {schedule.login} in the next {schedule.days} days."

        blocks = []
        for item in schedule.items:
            event = item.event
            end = format_day(event.end_date)
            if item.due_note:
                end += f" ({item.due_note})"
            blocks.append(
                f"**{event.title}** ({event.status})\n"
                f"- Start: {format_day(event.start_date)}\n"
                f"- End: {end}\n"
                f"- URL: {event.url}"
            )
        return f"{header}\n\n" + "\n\n".join(blocks)

    @staticmethod
    def workload_analysis(analysis: WorkloadAnalysis) -> str:
        lines = []
        for index, entry in enumerate(analysis.entries, start=1):
            lines.append(
                f"{index}. {entry.level.emoji} **{entry.login}** - {entry.level.value.title()} "
                f"({entry.total_workload} issues): {entry.recommendation}\n"
                f"   - Active: {entry.active_issues}, Upcoming: {entry.upcoming_issues}, "
                f"Overdue: {entry.overdue_issues}"
            )

        text = "\n".join(lines) or "No team workload data available."
        if analysis.least_busy:
            text += f"\n\n**Available for new work:** {', '.join(analysis.least_busy)}"
        if analysis.most_busy:
            text += f"\n\n**At capacity:** {', '.join(analysis.most_busy)}"
        return f"# Team Workload Analysis\n\n{text}"

    @staticmethod
    def best_assignee(best: Optional[WorkloadEntry]) -> str:
        if best is None:
            return "No team members found in the current project."
        return (
            "# Best Assignee Recommendation\n\n"
            f"**{best.login}** has the lightest workload:\n"
            f"- Current workload: {best.total_workload} issues\n"
            f"- Active: {best.active_issues}\n"
            f"- Upcoming: {best.upcoming_issues}\n"
            f"- Overdue: {best.overdue_issues}"
        )

    @staticmethod
    def calendar_events(events: list[CalendarEvent]) -> str:
        if not events:
            return "No calendar events found matching the criteria."

        blocks = []
        for event in events:
            assignees = ", ".join(a.login for a in event.assignees) or "Unassigned"
            blocks.append(
                f"**{event.title}** ({event.status})\n"
                f"- Assignees: {assignees}\n"
                f"- Start: {format_day(event.start_date)}\n"
                f"- End: {format_day(event.end_date)}\n"
                f"- URL: {event.url}"
            )
        return f"# Calendar Events ({len(events)} found)\n\n" + "\n\n".join(blocks)


class HTMLReporter:
    """Generate HTML views for embedding in the assistant UI."""

    @staticmethod
    def team_status(status: TeamStatus) -> str:
        cards = ""
        for member in status.members:
            entry = member.workload
            level = entry.level
            cards += f"""
    <div class="card">
        <div style="display: flex; justify-content: space-between; align-items: center;">
            <strong>{escape(entry.login)}</strong>
            <span class="badge" style="background: {level.color};">{level.value.title()}</span>
        </div>
        <div class="muted">
            Active: {entry.active_issues} &middot; Upcoming: {entry.upcoming_issues} &middot;
            Overdue: {entry.overdue_issues} &middot; Due today: {member.due_today} &middot;
            Completed this week: {member.completed_this_week}
        </div>
    </div>"""

        if not cards:
            cards = '<div class="card muted">No team members found with active work.</div>'

        body = f"""
<h2>Team Status</h2>
<p class="muted">{status.total_active_issues} active issues, {status.total_due_today} due today.
Updated {status.calculated_at.strftime('%Y-%m-%d %H:%M')} UTC</p>
{cards}"""
        return _page("Team Status", body)

    @staticmethod
    def person_schedule(schedule: PersonSchedule) -> str:
        if not schedule.items:
            body = f"""
<h2>{escape(schedule.login)}'s Schedule</h2>
<div class="card muted">No upcoming work in the next {schedule.days} days.</div>"""
            return _page(f"{schedule.login} schedule", body)

        cards = ""
        for item in schedule.items:
            event = item.event
            status_color = "#10b981" if event.status == "open" else UNASSIGNED_COLOR
            overdue = item.days_until_due is not None and item.days_until_due < 0
            urgency = "#ef4444" if overdue else "#3b82f6"
            others = "".join(
                f'<span class="muted">{escape(a.login)}</span> '
                for a in event.assignees if a.login != schedule.login
            )
            warning = '<span style="color: #ef4444; font-size: 12px;">⚠️ Overdue</span>' if overdue else ""
            also = f"<div>Also: {others}</div>" if others else ""
            cards += f"""
    <div class="card" style="border-left: 4px solid {urgency};">
        <a href="{escape(event.url)}" target="_blank"><strong>{escape(event.title)}</strong></a>
        <span class="badge" style="background: {status_color};">{escape(event.status)}</span>
        <div class="muted">{format_day(event.start_date)} &rarr; {format_day(event.end_date)}</div>
        {also}
        {warning}
    </div>"""

        body = f"""
<h2>{escape(schedule.login)}'s Schedule (next {schedule.days} days)</h2>
<p class="muted">Total: {len(schedule.items)} &middot; Open: {schedule.open_count} &middot; Overdue: {schedule.overdue_count}</p>
{cards}"""
        return _page(f"{schedule.login} schedule", body)

    @staticmethod
    def workload_analysis(analysis: WorkloadAnalysis) -> str:
        max_workload = analysis.max_workload
        cards = ""
        for index, entry in enumerate(analysis.entries, start=1):
            width = entry.total_workload / max_workload * 100
            cards += f"""
    <div class="card">
        <div><strong>{index}. {escape(entry.login)}</strong>
            <span class="badge" style="background: {entry.level.color};">{entry.level.value.title()}</span></div>
        <div style="background: #e2e8f0; height: 8px; border-radius: 4px; overflow: hidden; margin: 8px 0;">
            <div style="width: {width:.0f}%; height: 100%; background: {entry.level.color};"></div>
        </div>
        <div class="muted">{entry.total_workload} issues &middot; Upcoming: {entry.upcoming_issues} &middot;
            Overdue: {entry.overdue_issues} &middot; {entry.recommendation}</div>
    </div>"""

        body = f"""
<h2>Team Workload Analysis</h2>
<p class="muted">Total issues: {analysis.total_workload} &middot;
Average: {analysis.average_workload:.1f} &middot; Overloaded: {analysis.overloaded_count}</p>
{cards}"""
        return _page("Workload Analysis", body)

    @staticmethod
    def best_assignee(best: WorkloadEntry, ranking: list[WorkloadEntry]) -> str:
        rows = ""
        for index, entry in enumerate(ranking[:5], start=1):
            recommended = entry.login == best.login
            marker = "✓" if recommended else str(index)
            marker_color = "#10b981" if recommended else UNASSIGNED_COLOR
            rows += f"""
    <div class="card" style="display: flex; gap: 12px; align-items: center;">
        <span class="badge" style="background: {marker_color};">{marker}</span>
        <strong>{escape(entry.login)}</strong>
        <span class="muted">{entry.total_workload} issues ({entry.level.value})</span>
    </div>"""

        body = f"""
<div class="card" style="border: 2px solid #10b981;">
    <h2>Recommended: {escape(best.login)}</h2>
    <p class="muted">Current workload: {best.total_workload} issues &middot; Upcoming: {best.upcoming_issues}
    &middot; Overdue: {best.overdue_issues}</p>
</div>
<h3>Workload Comparison</h3>
{rows}"""
        return _page("Best Assignee", body)

    @staticmethod
    def calendar(
        events: list[CalendarEvent],
        current: Optional[date] = None,
        today: Optional[date] = None
    ) -> str:
        current = current or utcnow().date()
        today = today or utcnow().date()
        by_day = project_month(current, events)
        colors = assignee_colors(events)
        days = month_days(current)

        # Leading blanks so the first day lands in its weekday column (Sunday first)
        blanks = (days[0].weekday() + 1) % 7
        cells = '<div class="day empty"></div>' * blanks
        for day in days:
            day_events = by_day.get(day_key(day), [])
            items = ""
            for event in day_events[:MAX_EVENTS_PER_DAY]:
                primary = event.assignees[0].login if event.assignees else None
                color = colors.get(primary, UNASSIGNED_COLOR)
                check = "✓ " if event.is_closed else ""
                items += (
                    f'<div class="event" style="background: {color};" title="{escape(event.title)}">'
                    f'{check}{escape(event.title)}</div>'
                )
            more = len(day_events) - MAX_EVENTS_PER_DAY
            if more > 0:
                items += f'<div class="more">+{more} more</div>'
            today_class = " today" if day == today else ""
            cells += f'<div class="day{today_class}"><div class="num">{day.day}</div>{items}</div>'

        legend = "".join(
            f'<span class="legend"><span class="swatch" style="background: {color};"></span>{escape(login)}</span>'
            for login, color in colors.items()
        )
        weekdays = "".join(f'<div class="weekday">{d}</div>' for d in ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"])
        legend_card = f'<div class="card">{legend}</div>' if legend else ""

        body = f"""
<h2>{current.strftime('%B %Y')}</h2>
<div class="grid">{weekdays}{cells}</div>
{legend_card}"""

        style = """
        .grid { display: grid; grid-template-columns: repeat(7, 1fr); gap: 4px; margin-bottom: 12px; }
        .weekday { font-weight: 600; font-size: 12px; text-align: center; }
        .day { background: white; min-height: 80px; border-radius: 4px; padding: 4px; font-size: 11px; }
        .day.empty { background: transparent; }
        .day.today { outline: 2px solid #3b82f6; }
        .num { font-weight: 600; margin-bottom: 2px; }
        .event { color: white; border-radius: 3px; padding: 1px 4px; margin-bottom: 2px; overflow: hidden; white-space: nowrap; text-overflow: ellipsis; }
        .more { font-size: 9px; color: #666; }
        .legend { margin-right: 12px; font-size: 12px; }
        .swatch { display: inline-block; width: 10px; height: 10px; border-radius: 2px; margin-right: 4px; }
        """
        return _page("Project Calendar", body, style)


# Main visualization class
class Visualizer:
    """
    Main visualizer class that supports text and HTML output.

    Usage:
        viz = Visualizer()
        text = viz.workload_report(analysis, format="text")
        html = viz.workload_report(analysis, format="html")
    """

    def __init__(self):
        self.text = TextReporter()
        self.html = HTMLReporter()

    def team_report(self, status: TeamStatus, format: Literal["text", "html"] = "text") -> str:
        if format == "text":
            return self.text.team_status(status)
        elif format == "html":
            return self.html.team_status(status)
        raise ValueError(f"Unknown format: {format}")

    def schedule_report(self, schedule: PersonSchedule, format: Literal["text", "html"] = "text") -> str:
        if format == "text":
            return self.text.person_schedule(schedule)
        elif format == "html":
            return self.html.person_schedule(schedule)
        raise ValueError(f"Unknown format: {format}")

    def workload_report(self, analysis: WorkloadAnalysis, format: Literal["text", "html"] = "text") -> str:
        if format == "text":
            return self.text.workload_analysis(analysis)
        elif format == "html":
            return self.html.workload_analysis(analysis)
        raise ValueError(f"Unknown format: {format}")

    def calendar_report(
        self,
        events: list[CalendarEvent],
        format: Literal["text", "html"] = "text",
        current: Optional[date] = None,
        today: Optional[date] = None
    ) -> str:
        if format == "text":
            return self.text.calendar_events(events)
        elif format == "html":
            return self.html.calendar(events, current, today)
        raise ValueError(f"Unknown format: {format}")
