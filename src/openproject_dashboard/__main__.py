"""Entry point for ``python -m openproject_dashboard``."""

from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openproject-dashboard",
        description="Progress, risk, workload, and burndown dashboards for OpenProject.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Store the instance URL and API key.")
    login.add_argument("--url", required=True, help="OpenProject instance URL.")
    login.add_argument("--api-key", required=True, help="Personal API key.")

    sub.add_parser("logout", help="Forget stored credentials.")
    sub.add_parser("projects", help="List projects with progress and status.")

    summary = sub.add_parser("summary", help="Show a project's dashboard.")
    _add_project_args(summary)
    summary.add_argument("--search", help="Filter tasks by subject, description, or assignee.")
    summary.add_argument("--from", dest="start", help="Range start (YYYY-MM-DD).")
    summary.add_argument("--to", dest="end", help="Range end (YYYY-MM-DD).")

    burndown = sub.add_parser("burndown", help="Show a version's burndown series.")
    _add_project_args(burndown)
    burndown.add_argument("--png", help="Also write the chart to this PNG file.")

    workload = sub.add_parser("workload", help="Show workload for tasks due in a week.")
    workload.add_argument(
        "--week-offset", type=int, default=0, help="Weeks relative to the current one.",
    )
    workload.add_argument("--png", help="Also write the chart to this PNG file.")

    calendar = sub.add_parser("calendar", help="List tasks due on a day or in a range.")
    calendar.add_argument("--date", dest="day", help="Day (YYYY-MM-DD); defaults to today.")
    calendar.add_argument("--from", dest="start", help="Range start (YYYY-MM-DD).")
    calendar.add_argument("--to", dest="end", help="Range end (YYYY-MM-DD).")

    report = sub.add_parser("report", help="Export a project's dashboard as PDF.")
    _add_project_args(report)
    report.add_argument("-o", "--output", required=True, help="PDF output path.")
    report.add_argument("--dark", action="store_true", help="Use the dark palette.")
    report.add_argument("--title", help="Report title.")
    report.add_argument("--author", help="Author shown on the title page.")
    return parser


def _add_project_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project", nargs="?", help="Project id or identifier (defaults to config).",
    )
    parser.add_argument("--version", dest="version_id", help="Version id or name.")


def main(argv: list[str] | None = None) -> int:
    """Parse the command line and run the requested command."""
    args = build_parser().parse_args(argv)

    from openproject_dashboard.app import run_app

    return run_app(args)


if __name__ == "__main__":
    raise SystemExit(main())
