"""Tests for openproject_dashboard.core.burndown."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from openproject_dashboard.core.burndown import generate_burndown, remaining_points
from openproject_dashboard.core.data_models import TaskRecord

DAY0 = "2024-06-10"
DAY1 = "2024-06-11"


def _task(
    story_points: float | None = 10,
    percent_done: float | None = 0,
    due_date: str | None = None,
) -> TaskRecord:
    return TaskRecord(
        id="1", story_points=story_points, percent_done=percent_done, due_date=due_date,
    )


class TestPreconditions:
    def test_no_tasks(self) -> None:
        assert generate_burndown([], DAY0, DAY1) == []

    @pytest.mark.parametrize("start,end", [(None, DAY1), (DAY0, None), ("bad", DAY1)])
    def test_missing_or_bad_bounds(self, start: str | None, end: str | None) -> None:
        assert generate_burndown([_task()], start, end) == []

    def test_reversed_interval(self) -> None:
        assert generate_burndown([_task()], DAY1, DAY0) == []


class TestSeries:
    def test_one_point_per_day_inclusive(self) -> None:
        points = generate_burndown([_task()], "2024-06-10", "2024-06-16")
        assert [p.day for p in points][0] == date(2024, 6, 10)
        assert [p.day for p in points][-1] == date(2024, 6, 16)
        assert len(points) == 7

    def test_not_started_task(self) -> None:
        points = generate_burndown([_task(10, 0)], DAY0, DAY1)
        assert [p.ideal for p in points] == [10.0, 5.0]
        assert [p.actual for p in points] == [10.0, 10.0]

    def test_completed_on_first_day(self) -> None:
        points = generate_burndown([_task(10, 100, DAY0)], DAY0, DAY1)
        assert [p.actual for p in points] == [0.0, 0.0]

    def test_completed_task_drops_on_its_due_day(self) -> None:
        points = generate_burndown([_task(10, 100, DAY1)], DAY0, DAY1)
        assert [p.actual for p in points] == [10.0, 0.0]

    def test_completed_without_due_date_stays_full(self) -> None:
        points = generate_burndown([_task(10, 100, None)], DAY0, DAY1)
        assert [p.actual for p in points] == [10.0, 10.0]

    def test_half_done_task_is_constant(self) -> None:
        points = generate_burndown([_task(10, 50)], DAY0, "2024-06-14")
        assert all(p.actual == 5.0 for p in points)

    def test_task_without_points_contributes_nothing(self) -> None:
        points = generate_burndown([_task(None, 0), _task(4, 0)], DAY0, DAY1)
        assert [p.actual for p in points] == [4.0, 4.0]

    def test_ideal_rounded_to_one_decimal(self) -> None:
        points = generate_burndown([_task(10, 0)], DAY0, "2024-06-12")
        assert [p.ideal for p in points] == [10.0, 6.7, 3.3]

    def test_idempotent(self) -> None:
        tasks = [_task(8, 25), _task(3, 100, DAY0)]
        assert generate_burndown(tasks, DAY0, DAY1) == generate_burndown(tasks, DAY0, DAY1)


class TestRemainingPoints:
    def test_out_of_range_percent_is_not_clamped(self) -> None:
        # Neither complete nor partially done: carries full points.
        assert remaining_points(_task(10, 150, DAY0), date(2024, 6, 11)) == 10.0
        assert remaining_points(_task(10, -20), date(2024, 6, 11)) == 10.0

    def test_partial(self) -> None:
        assert remaining_points(_task(8, 25), date(2024, 6, 11)) == pytest.approx(6.0)


class TestDegradedInput:
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_story_points_count_as_zero(self, value: float) -> None:
        points = generate_burndown([_task(value, 0), _task(4, 0)], DAY0, DAY1)
        assert [p.actual for p in points] == [4.0, 4.0]
        assert [p.ideal for p in points] == [4.0, 2.0]

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_percent_counts_as_not_started(self, value: float) -> None:
        points = generate_burndown([_task(6, value, DAY0)], DAY0, DAY1)
        assert [p.actual for p in points] == [6.0, 6.0]

    def test_huge_points_do_not_overflow(self) -> None:
        points = generate_burndown([_task(1e308, 0), _task(1e308, 0)], DAY0, DAY1)
        assert len(points) == 2

    def test_interval_ending_on_last_representable_day(self) -> None:
        points = generate_burndown([_task(1, 0)], "9999-12-30", "9999-12-31")
        assert [p.day for p in points] == [date.max - timedelta(days=1), date.max]
        assert [p.ideal for p in points] == [1.0, 0.5]

    def test_single_day_at_date_max(self) -> None:
        points = generate_burndown([_task(2, 0)], date.max, date.max)
        assert [(p.day, p.ideal, p.actual) for p in points] == [(date.max, 2.0, 2.0)]
