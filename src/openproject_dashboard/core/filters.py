"""Task-set filters used by the project and calendar views."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from openproject_dashboard.core.data_models import ProjectTasks, TaskRecord
from openproject_dashboard.core.dates import DateLike, parse_date


def filter_by_version(tasks: Iterable[TaskRecord], version_id: str) -> list[TaskRecord]:
    return [t for t in tasks if t.version is not None and t.version.id == version_id]


def search_tasks(tasks: Iterable[TaskRecord], term: str | None) -> list[TaskRecord]:
    """Case-insensitive match on subject, description, or assignee name."""
    tasks = list(tasks)
    if not term or not term.strip():
        return tasks
    needle = term.strip().lower()

    def _matches(task: TaskRecord) -> bool:
        assignee_name = task.assignee.name if task.assignee and task.assignee.name else ""
        return any(
            needle in text.lower()
            for text in (task.subject, task.description, assignee_name)
        )

    return [t for t in tasks if _matches(t)]


def filter_by_date_overlap(
    tasks: Iterable[TaskRecord], start: DateLike, end: DateLike
) -> list[TaskRecord]:
    """Keep tasks that start or end inside [start, end] or span all of it.

    With either bound missing the tasks are returned unfiltered.
    """
    tasks = list(tasks)
    lo, hi = parse_date(start), parse_date(end)
    if lo is None or hi is None:
        return tasks

    def _overlaps(task: TaskRecord) -> bool:
        task_start = parse_date(task.start_date)
        task_due = parse_date(task.due_date)
        if task_start is not None and lo <= task_start <= hi:
            return True
        if task_due is not None and lo <= task_due <= hi:
            return True
        return (
            task_start is not None
            and task_due is not None
            and task_start <= lo
            and task_due >= hi
        )

    return [t for t in tasks if _overlaps(t)]


def tasks_due_on(tasks: Iterable[TaskRecord], day: DateLike) -> list[TaskRecord]:
    target = parse_date(day)
    if target is None:
        return []
    return [t for t in tasks if parse_date(t.due_date) == target]


def tasks_due_between(
    tasks: Iterable[TaskRecord], start: DateLike, end: DateLike
) -> list[TaskRecord]:
    """Tasks whose due date lies within [start, end] inclusive."""
    lo, hi = parse_date(start), parse_date(end)
    if lo is None or hi is None:
        return []
    result = []
    for task in tasks:
        due = parse_date(task.due_date)
        if due is not None and lo <= due <= hi:
            result.append(task)
    return result


def group_by_project(tasks: Iterable[TaskRecord]) -> list[ProjectTasks]:
    """Group tasks by project in first-seen order; project-less tasks are dropped."""
    names: dict[str, str] = {}
    grouped: dict[str, list[TaskRecord]] = {}
    for task in tasks:
        if task.project is None or not task.project.id:
            continue
        pid = task.project.id
        if pid not in grouped:
            names[pid] = task.project.name or "No project"
            grouped[pid] = []
        grouped[pid].append(task)
    return [
        ProjectTasks(project_id=pid, project_name=names[pid], tasks=tuple(items))
        for pid, items in grouped.items()
    ]


def week_bounds(day: date, offset: int = 0) -> tuple[date, date]:
    """Monday and Sunday of the week containing *day*, shifted by *offset* weeks."""
    monday = day - timedelta(days=day.weekday()) + timedelta(weeks=offset)
    return monday, monday + timedelta(days=6)
