"""Daily ideal vs. actual burndown series for a sprint interval."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import date, timedelta

from openproject_dashboard.core.data_models import BurndownPoint, TaskRecord
from openproject_dashboard.core.dates import DateLike, parse_date
from openproject_dashboard.core.task_status import number_or_zero

logger = logging.getLogger(__name__)


def generate_burndown(
    tasks: Sequence[TaskRecord], start: DateLike, end: DateLike
) -> list[BurndownPoint]:
    """Build one point per calendar day from *start* to *end* inclusive.

    The ideal line decays linearly from the total story points; the actual
    line is recomputed from scratch for each day. Returns an empty list when
    there are no tasks, a bound is missing or unparseable, or the interval
    is reversed.
    """
    first, last = parse_date(start), parse_date(end)
    if not tasks or first is None or last is None or last < first:
        logger.debug("No burndown data (tasks=%d, start=%r, end=%r)", len(tasks), start, end)
        return []

    days = [first + timedelta(days=i) for i in range((last - first).days + 1)]

    total_points = sum(number_or_zero(task.story_points) for task in tasks)
    daily_ideal_burn = total_points / len(days)

    points = []
    for i, day in enumerate(days):
        ideal = max(0.0, total_points - daily_ideal_burn * i)
        actual = sum(remaining_points(task, day) for task in tasks)
        points.append(BurndownPoint(day=day, ideal=_round1(ideal), actual=_round1(actual)))

    logger.debug(
        "Burndown %s..%s: %d days, %.1f total points", first, last, len(days), total_points
    )
    return points


def remaining_points(task: TaskRecord, day: date) -> float:
    """Story points *task* still carries on *day*.

    Completed tasks drop to zero from their due date on; partially done tasks
    carry their unfinished share; everything else carries full points.
    ``percent_done`` is used as given, without clamping; missing or
    non-finite numbers count as 0.
    """
    points = number_or_zero(task.story_points)
    percent_done = number_or_zero(task.percent_done)

    if percent_done == 100:
        due = parse_date(task.due_date)
        if due is not None and due <= day:
            return 0.0
    elif 0 < percent_done < 100:
        return points * (1 - percent_done / 100)
    return float(points)


def _round1(value: float) -> float:
    """Round half up to one decimal place; non-finite values become 0.0."""
    scaled = value * 10 + 0.5
    if not math.isfinite(scaled):
        return value if math.isfinite(value) else 0.0
    return math.floor(scaled) / 10
