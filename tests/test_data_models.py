"""Tests for openproject_dashboard.core.data_models."""

from __future__ import annotations

import dataclasses
from datetime import date

import pytest

from openproject_dashboard.core.data_models import (
    DashboardReport,
    Project,
    ProjectDashboard,
    ReportConfig,
    StatusSummary,
    TaskRecord,
    TaskStatus,
)


class TestTaskRecord:
    """Verify optional fields default to absent."""

    def test_defaults(self) -> None:
        task = TaskRecord(id="42")
        assert task.percent_done is None
        assert task.due_date is None
        assert task.story_points is None
        assert task.assignee is None
        assert task.parent is None

    def test_is_immutable(self) -> None:
        task = TaskRecord(id="42")
        with pytest.raises(dataclasses.FrozenInstanceError):
            task.percent_done = 50  # type: ignore[misc]


class TestStatusSummary:
    def test_all_zero_by_default(self) -> None:
        s = StatusSummary()
        assert (s.total, s.pending, s.in_progress, s.completed, s.overdue) == (0, 0, 0, 0, 0)


class TestTaskStatus:
    def test_values(self) -> None:
        assert [s.value for s in TaskStatus] == [
            "pending", "in_progress", "completed", "overdue",
        ]


class TestProjectDashboard:
    def test_default_lists_not_shared(self) -> None:
        a = ProjectDashboard(project=Project(id="1", name="A"))
        b = ProjectDashboard(project=Project(id="2", name="B"))
        a.tasks.append(TaskRecord(id="1"))
        assert b.tasks == []
        assert b.groups == {}


class TestReportConfig:
    def test_defaults(self) -> None:
        cfg = ReportConfig()
        assert cfg.title == "Project Dashboard Report"
        assert cfg.dark_mode is False
        assert cfg.confidential is False
        assert cfg.report_date == date.today()

    def test_report_errors_default_empty(self) -> None:
        report = DashboardReport(
            config=ReportConfig(), dashboard=ProjectDashboard(project=Project(id="1", name="A")),
        )
        assert report.errors == []
