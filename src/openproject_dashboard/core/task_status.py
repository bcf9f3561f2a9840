"""Classify a single work package into one of four statuses."""

from __future__ import annotations

import math
from datetime import date

from openproject_dashboard.core.data_models import TaskRecord, TaskStatus
from openproject_dashboard.core.dates import is_overdue

_COLORS = {
    TaskStatus.COMPLETED: "success",
    TaskStatus.IN_PROGRESS: "info",
    TaskStatus.PENDING: "warning",
    TaskStatus.OVERDUE: "danger",
}

_DISPLAY_NAMES = {
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.PENDING: "Pending",
    TaskStatus.OVERDUE: "Overdue",
}


def classify_task(task: TaskRecord, today: date | None = None) -> TaskStatus:
    """Return the task's status from its completion and due date.

    Overdue wins over pending/in-progress; a missing or non-finite
    ``percent_done`` is 0.
    """
    percent_done = number_or_zero(task.percent_done)
    if is_overdue(task.due_date, percent_done, today):
        return TaskStatus.OVERDUE
    if percent_done == 100:
        return TaskStatus.COMPLETED
    if percent_done > 0:
        return TaskStatus.IN_PROGRESS
    return TaskStatus.PENDING


def number_or_zero(value: float | None) -> float:
    """*value* as a float, or 0.0 when it is missing, non-numeric or non-finite."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def status_color(status: TaskStatus) -> str:
    """Severity tag used by the renderers for *status*."""
    return _COLORS.get(status, "muted")


def status_display_name(status: TaskStatus) -> str:
    return _DISPLAY_NAMES.get(status, "Unknown")
