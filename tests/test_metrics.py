"""Tests for openproject_dashboard.core.metrics."""

from __future__ import annotations

from datetime import date

from openproject_dashboard.core.data_models import (
    Reference,
    RiskLevel,
    StatusSummary,
    TaskRecord,
)
from openproject_dashboard.core.metrics import (
    NO_PARENT,
    count_by_status,
    group_by_parent,
    project_progress,
    risk_verdict,
    team_members,
    workload_by_assignee,
)

TODAY = date(2024, 6, 15)
PAST = "2024-06-01"
FUTURE = "2024-07-01"


def _task(
    task_id: str = "1",
    percent_done: float | None = 0,
    due_date: str | None = None,
    assignee: Reference | None = None,
    parent: Reference | None = None,
) -> TaskRecord:
    return TaskRecord(
        id=task_id,
        subject=f"Task {task_id}",
        percent_done=percent_done,
        due_date=due_date,
        assignee=assignee,
        parent=parent,
    )


ANN = Reference("7", "Ann")
BOB = Reference("8", "Bob")


class TestCountByStatus:
    def test_empty(self) -> None:
        assert count_by_status([], TODAY) == StatusSummary()

    def test_counts_sum_to_total(self) -> None:
        tasks = [
            _task("1", 0),
            _task("2", 50),
            _task("3", 100),
            _task("4", 10, PAST),
            _task("5", None),
        ]
        s = count_by_status(tasks, TODAY)
        assert s.total == 5
        assert (s.pending, s.in_progress, s.completed, s.overdue) == (2, 1, 1, 1)
        assert s.pending + s.in_progress + s.completed + s.overdue == s.total

    def test_idempotent(self) -> None:
        tasks = [_task("1", 0, PAST), _task("2", 100)]
        assert count_by_status(tasks, TODAY) == count_by_status(tasks, TODAY)


class TestRiskVerdict:
    def test_empty_is_insufficient_data(self) -> None:
        v = risk_verdict([], TODAY)
        assert v.level is RiskLevel.INSUFFICIENT_DATA
        assert v.severity == "muted"

    def test_at_risk_above_twenty_percent_overdue(self) -> None:
        # 1 of 4 overdue = 25%
        tasks = [_task("1", 0, PAST), _task("2", 100), _task("3", 100), _task("4", 100)]
        v = risk_verdict(tasks, TODAY)
        assert v.level is RiskLevel.AT_RISK
        assert v.severity == "danger"

    def test_exactly_twenty_percent_is_not_at_risk(self) -> None:
        tasks = [_task("1", 0, PAST)] + [_task(str(i), 100) for i in range(2, 6)]
        assert risk_verdict(tasks, TODAY).level is RiskLevel.NEEDS_ATTENTION

    def test_needs_attention_on_low_completion(self) -> None:
        # nothing overdue, 1 of 4 completed = 25%
        tasks = [_task("1", 100), _task("2", 0), _task("3", 20), _task("4", 0)]
        v = risk_verdict(tasks, TODAY)
        assert v.level is RiskLevel.NEEDS_ATTENTION
        assert v.severity == "warning"

    def test_on_track(self) -> None:
        tasks = [_task("1", 100), _task("2", 100), _task("3", 50, FUTURE)]
        v = risk_verdict(tasks, TODAY)
        assert v.level is RiskLevel.ON_TRACK
        assert v.message == "Project on track"


class TestGroupByParent:
    def test_groups_preserve_order(self) -> None:
        story_a = Reference("100", "Login")
        story_b = Reference("200", "Search")
        tasks = [
            _task("1", parent=story_b),
            _task("2", parent=story_a),
            _task("3"),
            _task("4", parent=story_b),
            _task("5"),
        ]
        grouped = group_by_parent(tasks)
        assert list(grouped) == ["200", "100", NO_PARENT]
        assert [t.id for t in grouped["200"]] == ["1", "4"]
        assert [t.id for t in grouped[NO_PARENT]] == ["3", "5"]

    def test_empty(self) -> None:
        assert group_by_parent([]) == {}


class TestWorkloadByAssignee:
    def test_unassigned_tasks_excluded(self) -> None:
        tasks = [_task("1", assignee=ANN), _task("2"), _task("3", assignee=BOB)]
        buckets = workload_by_assignee(tasks, TODAY)
        assert sum(b.total_tasks for b in buckets) == 2

    def test_counts_and_order(self) -> None:
        tasks = [
            _task("1", 0, assignee=ANN),
            _task("2", 0, PAST, assignee=BOB),
            _task("3", 50, assignee=BOB),
            _task("4", 100, assignee=BOB),
        ]
        buckets = workload_by_assignee(tasks, TODAY)
        assert [b.name for b in buckets] == ["Bob", "Ann"]
        bob = buckets[0]
        assert (bob.total_tasks, bob.pending_tasks, bob.delayed_tasks) == (3, 1, 1)
        ann = buckets[1]
        assert (ann.total_tasks, ann.pending_tasks, ann.delayed_tasks) == (1, 1, 0)

    def test_ties_keep_first_seen_order(self) -> None:
        tasks = [_task("1", assignee=BOB), _task("2", assignee=ANN)]
        assert [b.user_id for b in workload_by_assignee(tasks, TODAY)] == ["8", "7"]

    def test_missing_name_gets_placeholder(self) -> None:
        buckets = workload_by_assignee([_task("1", assignee=Reference("9"))], TODAY)
        assert buckets[0].name == "User 9"


class TestProgressAndTeam:
    def test_progress_mean_rounded(self) -> None:
        tasks = [_task("1", 100), _task("2", 0), _task("3", 50)]
        assert project_progress(tasks) == 50

    def test_progress_rounds_half_up(self) -> None:
        assert project_progress([_task("1", 1), _task("2", 0)]) == 1

    def test_progress_empty(self) -> None:
        assert project_progress([]) == 0

    def test_team_members_distinct(self) -> None:
        tasks = [_task("1", assignee=BOB), _task("2", assignee=ANN), _task("3", assignee=BOB)]
        assert team_members(tasks) == [BOB, ANN]

    def test_progress_ignores_non_finite_percent(self) -> None:
        tasks = [_task("1", float("inf")), _task("2", float("nan")), _task("3", 60)]
        assert project_progress(tasks) == 20

    def test_progress_huge_values_do_not_overflow(self) -> None:
        assert isinstance(project_progress([_task("1", 1e308), _task("2", 1e308)]), int)

    def test_count_by_status_tolerates_non_finite_percent(self) -> None:
        summary = count_by_status([_task("1", float("nan")), _task("2", float("inf"), PAST)], TODAY)
        assert (summary.pending, summary.overdue) == (1, 1)
