"""Data models for OpenProject Dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


@dataclass(frozen=True)
class Reference:
    """A link to another OpenProject resource (user, parent, project, version)."""

    id: str
    name: str | None = None


@dataclass(frozen=True)
class TaskRecord:
    """A single OpenProject work package.

    Dates are kept as the raw ISO strings returned by the API; every consumer
    parses them defensively.
    """

    id: str
    subject: str = ""
    percent_done: float | None = None
    due_date: str | None = None
    start_date: str | None = None
    story_points: float | None = None
    assignee: Reference | None = None
    parent: Reference | None = None
    project: Reference | None = None
    version: Reference | None = None
    description: str = ""


@dataclass(frozen=True)
class Project:
    """An OpenProject project."""

    id: str
    name: str
    identifier: str = ""
    description: str = ""
    active: bool = True


@dataclass(frozen=True)
class Version:
    """A project version, used as a sprint."""

    id: str
    name: str
    status: str = "open"  # "open", "locked", "closed"
    start_date: str | None = None
    end_date: str | None = None


@dataclass(frozen=True)
class User:
    """An OpenProject user."""

    id: str
    name: str
    login: str = ""
    email: str = ""


class TaskStatus(str, Enum):
    """Mutually exclusive task states."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class RiskLevel(str, Enum):
    """Aggregate health judgment over a task set."""

    AT_RISK = "at_risk"
    NEEDS_ATTENTION = "needs_attention"
    ON_TRACK = "on_track"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class StatusSummary:
    """Task counts per status; the four counts always sum to ``total``."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0


@dataclass(frozen=True)
class RiskVerdict:
    level: RiskLevel
    message: str
    severity: str  # "danger", "warning", "success", "muted"


@dataclass(frozen=True)
class WorkloadBucket:
    """Per-assignee rollup of task counts."""

    user_id: str
    name: str
    total_tasks: int = 0
    pending_tasks: int = 0
    delayed_tasks: int = 0


@dataclass(frozen=True)
class BurndownPoint:
    """One day of ideal vs. actual remaining story points."""

    day: date
    ideal: float
    actual: float


@dataclass(frozen=True)
class ProjectTasks:
    """Tasks belonging to one project (calendar view)."""

    project_id: str
    project_name: str
    tasks: tuple[TaskRecord, ...] = ()


@dataclass
class ProjectOverview:
    """Summary card for the projects list."""

    project: Project
    progress: int = 0
    task_count: int = 0
    team_members: list[Reference] = field(default_factory=list)
    verdict: RiskVerdict | None = None


@dataclass
class ProjectDashboard:
    """Everything shown on a single project's dashboard."""

    project: Project
    versions: list[Version] = field(default_factory=list)
    selected_version: Version | None = None
    tasks: list[TaskRecord] = field(default_factory=list)
    summary: StatusSummary = field(default_factory=StatusSummary)
    verdict: RiskVerdict | None = None
    progress: int = 0
    groups: dict[str, list[TaskRecord]] = field(default_factory=dict)
    workload: list[WorkloadBucket] = field(default_factory=list)
    burndown: list[BurndownPoint] = field(default_factory=list)


@dataclass
class ReportConfig:
    """Configuration for a PDF report run."""

    title: str = "Project Dashboard Report"
    author: str = ""
    company_name: str = ""
    report_date: date = field(default_factory=date.today)
    confidential: bool = False
    dark_mode: bool = False


@dataclass
class DashboardReport:
    """All data needed to render the PDF report."""

    config: ReportConfig
    dashboard: ProjectDashboard
    errors: list[str] = field(default_factory=list)
