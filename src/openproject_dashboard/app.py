"""Service wiring and command dispatch for the CLI."""

from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Callable

from openproject_dashboard.core.chart_generator import (
    generate_burndown_chart,
    generate_workload_chart,
)
from openproject_dashboard.core.data_models import (
    DashboardReport,
    ProjectDashboard,
    ReportConfig,
    WorkloadBucket,
)
from openproject_dashboard.core.dates import format_date, format_date_range
from openproject_dashboard.core.metrics import NO_PARENT
from openproject_dashboard.core.openproject_client import OpenProjectClient
from openproject_dashboard.core.pdf_generator import generate_pdf
from openproject_dashboard.core.task_status import classify_task, status_display_name
from openproject_dashboard.services.auth_manager import AuthManager
from openproject_dashboard.services.config_manager import ConfigManager
from openproject_dashboard.services.dashboard import DashboardService

logger = logging.getLogger(__name__)

Printer = Callable[[str], None]


def run_app(
    args: argparse.Namespace,
    config: ConfigManager | None = None,
    client: OpenProjectClient | None = None,
    out: Printer = print,
    today: date | None = None,
) -> int:
    """Run one CLI command, returning the exit code.

    *today* pins the reference date for every view; defaults to the current day.
    """
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = config or ConfigManager()
    auth = AuthManager(config)

    if args.command == "login":
        auth.login(args.url, args.api_key)
        out(f"Stored credentials for {auth.base_url}")
        return 0
    if args.command == "logout":
        auth.logout()
        out("Logged out")
        return 0

    if client is None:
        client = OpenProjectClient(
            auth,
            page_size=int(config.get("page_size", 1000)),
            timeout=float(config.get("request_timeout", 30)),
            story_points_field=str(config.get("story_points_field", "storyPoints")),
        )
    if not client.connected and not client.connect():
        logger.error("Not connected — run 'openproject-dashboard login' first")
        return 1

    service = DashboardService(client, today)
    handlers = {
        "projects": _cmd_projects,
        "summary": _cmd_summary,
        "burndown": _cmd_burndown,
        "workload": _cmd_workload,
        "calendar": _cmd_calendar,
        "report": _cmd_report,
    }
    return handlers[args.command](args, service, config, out)


# -- commands -----------------------------------------------------------------


def _cmd_projects(
    args: argparse.Namespace, service: DashboardService, config: ConfigManager, out: Printer,
) -> int:
    overviews = service.project_overviews()
    if not overviews:
        out("No projects found")
        return 0
    for ov in overviews:
        verdict = ov.verdict.message if ov.verdict else "-"
        team = ", ".join(m.name or m.id for m in ov.team_members) or "no assignees"
        out(
            f"{ov.project.id:>5}  {ov.project.name:<32} {ov.progress:>3}%  "
            f"{ov.task_count:>4} tasks  {verdict:<18} {team}"
        )
    return 0


def _cmd_summary(
    args: argparse.Namespace, service: DashboardService, config: ConfigManager, out: Printer,
) -> int:
    dashboard = _load_dashboard(args, service, config, args.search, args.start, args.end)
    if dashboard is None:
        return 1

    _print_header(dashboard, out)
    s = dashboard.summary
    out(
        f"Tasks: {s.total} total, {s.pending} pending, {s.in_progress} in progress, "
        f"{s.completed} completed, {s.overdue} overdue"
    )
    out("")
    out("Workload:")
    _print_workload(dashboard.workload, out)
    out("")
    out("Tasks by user story:")
    for key, tasks in dashboard.groups.items():
        out(f"  {'No user story' if key == NO_PARENT else '#' + key}")
        for task in tasks:
            status = status_display_name(classify_task(task, service.today))
            out(
                f"    #{task.id:<6} {task.subject[:48]:<48} {status:<12} "
                f"due {format_date(task.due_date)}"
            )
    return 0


def _cmd_burndown(
    args: argparse.Namespace, service: DashboardService, config: ConfigManager, out: Printer,
) -> int:
    dashboard = _load_dashboard(args, service, config)
    if dashboard is None:
        return 1
    if not dashboard.burndown:
        out("Not enough data to build a burndown (no tasks or version dates)")
        return 0

    out(f"{'Day':<12} {'Ideal':>8} {'Actual':>8}")
    for point in dashboard.burndown:
        out(f"{format_date(point.day):<12} {point.ideal:>8.1f} {point.actual:>8.1f}")

    if args.png:
        png = generate_burndown_chart(
            dashboard.burndown, dark=config.get("theme") == "dark",
        )
        _write_bytes(args.png, png, out)
    return 0


def _cmd_workload(
    args: argparse.Namespace, service: DashboardService, config: ConfigManager, out: Printer,
) -> int:
    monday, sunday, buckets = service.weekly_workload(args.week_offset)
    out(f"Workload for {format_date_range(monday, sunday)}")
    _print_workload(buckets, out)
    if args.png and buckets:
        png = generate_workload_chart(buckets, dark=config.get("theme") == "dark")
        _write_bytes(args.png, png, out)
    return 0


def _cmd_calendar(
    args: argparse.Namespace, service: DashboardService, config: ConfigManager, out: Printer,
) -> int:
    groups = service.calendar(day=args.day, start=args.start, end=args.end)
    if not groups:
        out("No tasks due")
        return 0
    for group in groups:
        out(f"{group.project_name} ({len(group.tasks)})")
        for task in group.tasks:
            status = status_display_name(classify_task(task, service.today))
            out(f"  #{task.id:<6} {task.subject[:56]:<56} {status:<12} {task.percent_done or 0:.0f}%")
    return 0


def _cmd_report(
    args: argparse.Namespace, service: DashboardService, config: ConfigManager, out: Printer,
) -> int:
    dashboard = _load_dashboard(args, service, config)
    if dashboard is None:
        return 1
    report = DashboardReport(
        config=ReportConfig(
            title=args.title or config.get("default_title", "Project Dashboard Report"),
            author=args.author or config.get("default_author", ""),
            company_name=config.get("default_company", ""),
            dark_mode=args.dark or config.get("theme") == "dark",
            report_date=service.today,
        ),
        dashboard=dashboard,
    )
    _write_bytes(args.output, generate_pdf(report), out)
    return 0


# -- helpers ------------------------------------------------------------------


def _load_dashboard(
    args: argparse.Namespace,
    service: DashboardService,
    config: ConfigManager,
    search: str | None = None,
    start: str | None = None,
    end: str | None = None,
) -> ProjectDashboard | None:
    project_id = args.project or config.get("default_project", "")
    if not project_id:
        logger.error("No project given and no default_project configured")
        return None
    dashboard = service.project_dashboard(
        project_id, version_id=args.version_id, search=search, start=start, end=end,
    )
    if dashboard is None:
        logger.error("Project %s not found", project_id)
    return dashboard


def _print_header(dashboard: ProjectDashboard, out: Printer) -> None:
    out(dashboard.project.name)
    version = dashboard.selected_version
    if version is not None:
        out(f"Version: {version.name} ({format_date_range(version.start_date, version.end_date)})")
    if dashboard.verdict is not None:
        out(f"Status: {dashboard.verdict.message}")
    out(f"Progress: {dashboard.progress}%")


def _print_workload(buckets: list[WorkloadBucket], out: Printer) -> None:
    if not buckets:
        out("  No workload data available")
        return
    for b in buckets:
        out(
            f"  {b.name:<28} {b.total_tasks:>3} total  {b.pending_tasks:>3} pending  "
            f"{b.delayed_tasks:>3} delayed"
        )


def _write_bytes(path: str, data: bytes | None, out: Printer) -> None:
    if not data:
        out("Nothing to write")
        return
    Path(path).write_bytes(data)
    logger.info("Wrote %d bytes to %s", len(data), path)
    out(f"Saved {path}")
