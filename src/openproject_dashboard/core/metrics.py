"""Status counts, risk verdict, user-story grouping, and workload calculations."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import date

from openproject_dashboard.core.data_models import (
    Reference,
    RiskLevel,
    RiskVerdict,
    StatusSummary,
    TaskRecord,
    TaskStatus,
    WorkloadBucket,
)
from openproject_dashboard.core.task_status import classify_task, number_or_zero

logger = logging.getLogger(__name__)

NO_PARENT = "no_parent"

AT_RISK_OVERDUE_RATIO = 0.20
ATTENTION_OVERDUE_RATIO = 0.10
ATTENTION_COMPLETED_RATIO = 0.30


def count_by_status(
    tasks: Sequence[TaskRecord], today: date | None = None
) -> StatusSummary:
    """Count *tasks* per classified status in a single pass."""
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[classify_task(task, today)] += 1

    summary = StatusSummary(
        total=len(tasks),
        pending=counts[TaskStatus.PENDING],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        completed=counts[TaskStatus.COMPLETED],
        overdue=counts[TaskStatus.OVERDUE],
    )
    logger.debug("Status summary: %s", summary)
    return summary


def risk_verdict(tasks: Sequence[TaskRecord], today: date | None = None) -> RiskVerdict:
    """Judge the health of the current task set.

    More than 20% overdue is at risk; more than 10% overdue or less than 30%
    completed needs attention; anything else is on track.
    """
    if not tasks:
        return RiskVerdict(RiskLevel.INSUFFICIENT_DATA, "Insufficient data", "muted")

    summary = count_by_status(tasks, today)
    overdue_ratio = summary.overdue / summary.total
    completed_ratio = summary.completed / summary.total

    if overdue_ratio > AT_RISK_OVERDUE_RATIO:
        return RiskVerdict(RiskLevel.AT_RISK, "Project at risk", "danger")
    if overdue_ratio > ATTENTION_OVERDUE_RATIO or completed_ratio < ATTENTION_COMPLETED_RATIO:
        return RiskVerdict(RiskLevel.NEEDS_ATTENTION, "Needs attention", "warning")
    return RiskVerdict(RiskLevel.ON_TRACK, "Project on track", "success")


def group_by_parent(tasks: Iterable[TaskRecord]) -> dict[str, list[TaskRecord]]:
    """Group tasks under their parent (user story) id.

    Tasks without a parent share the :data:`NO_PARENT` key. Groups appear in
    first-seen order and keep input order internally.
    """
    grouped: dict[str, list[TaskRecord]] = {}
    for task in tasks:
        key = task.parent.id if task.parent and task.parent.id else NO_PARENT
        grouped.setdefault(key, []).append(task)
    return grouped


def workload_by_assignee(
    tasks: Iterable[TaskRecord], today: date | None = None
) -> list[WorkloadBucket]:
    """Roll up task counts per assignee, busiest first.

    Unassigned tasks are skipped. Ties keep first-seen order.
    """
    names: dict[str, str] = {}
    counts: dict[str, list[int]] = {}  # user id -> [total, pending, delayed]

    for task in tasks:
        if task.assignee is None:
            continue
        user_id = task.assignee.id
        if user_id not in counts:
            names[user_id] = task.assignee.name or f"User {user_id}"
            counts[user_id] = [0, 0, 0]

        status = classify_task(task, today)
        bucket = counts[user_id]
        bucket[0] += 1
        if status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS):
            bucket[1] += 1
        if status is TaskStatus.OVERDUE:
            bucket[2] += 1

    buckets = [
        WorkloadBucket(
            user_id=user_id,
            name=names[user_id],
            total_tasks=total,
            pending_tasks=pending,
            delayed_tasks=delayed,
        )
        for user_id, (total, pending, delayed) in counts.items()
    ]
    return sorted(buckets, key=lambda b: b.total_tasks, reverse=True)


def project_progress(tasks: Sequence[TaskRecord]) -> int:
    """Mean completion percentage, rounded half up; 0 for no tasks."""
    if not tasks:
        return 0
    mean = sum(number_or_zero(task.percent_done) for task in tasks) / len(tasks)
    if not math.isfinite(mean):
        return 0
    return math.floor(mean + 0.5)


def team_members(tasks: Iterable[TaskRecord]) -> list[Reference]:
    """Distinct assignees in first-seen order."""
    seen: dict[str, Reference] = {}
    for task in tasks:
        if task.assignee is not None and task.assignee.id not in seen:
            seen[task.assignee.id] = task.assignee
    return list(seen.values())
