"""Assemble dashboard views from API data and the core calculations."""

from __future__ import annotations

import logging
from datetime import date

from openproject_dashboard.core.burndown import generate_burndown
from openproject_dashboard.core.data_models import (
    ProjectDashboard,
    ProjectOverview,
    ProjectTasks,
    Version,
    WorkloadBucket,
)
from openproject_dashboard.core.dates import DateLike
from openproject_dashboard.core.filters import (
    filter_by_date_overlap,
    filter_by_version,
    group_by_project,
    search_tasks,
    tasks_due_between,
    tasks_due_on,
    week_bounds,
)
from openproject_dashboard.core.metrics import (
    count_by_status,
    group_by_parent,
    project_progress,
    risk_verdict,
    team_members,
    workload_by_assignee,
)
from openproject_dashboard.core.openproject_client import OpenProjectClient

logger = logging.getLogger(__name__)


class DashboardService:
    """Build the projects list, project dashboard, and calendar views.

    Every call fetches fresh data; nothing is cached between calls.
    """

    def __init__(self, client: OpenProjectClient, today: date | None = None) -> None:
        self._client = client
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    def project_overviews(self) -> list[ProjectOverview]:
        """Progress, team, and verdict for every visible project."""
        overviews = []
        for project in self._client.get_projects():
            tasks = self._client.get_project_work_packages(project.id)
            overviews.append(
                ProjectOverview(
                    project=project,
                    progress=project_progress(tasks),
                    task_count=len(tasks),
                    team_members=team_members(tasks),
                    verdict=risk_verdict(tasks, self.today),
                )
            )
        logger.info("Built %d project overview(s)", len(overviews))
        return overviews

    def project_dashboard(
        self,
        project_id: str,
        version_id: str | None = None,
        search: str | None = None,
        start: DateLike = None,
        end: DateLike = None,
    ) -> ProjectDashboard | None:
        """Load one project and compute its dashboard.

        Without *version_id* the first open version is used, falling back to
        the first version. Returns ``None`` if the project cannot be found.
        """
        project = self._client.get_project(project_id)
        if project is None:
            logger.warning("Project %s not found", project_id)
            return None

        versions = self._client.get_project_versions(project_id)
        selected = self._select_version(versions, version_id)
        tasks = self._client.get_project_work_packages(project_id)

        if selected is not None:
            tasks = filter_by_version(tasks, selected.id)
        tasks = search_tasks(tasks, search)
        tasks = filter_by_date_overlap(tasks, start, end)

        today = self.today
        dashboard = ProjectDashboard(
            project=project,
            versions=versions,
            selected_version=selected,
            tasks=tasks,
            summary=count_by_status(tasks, today),
            verdict=risk_verdict(tasks, today),
            progress=project_progress(tasks),
            groups=group_by_parent(tasks),
            workload=workload_by_assignee(tasks, today),
            burndown=generate_burndown(
                tasks,
                selected.start_date if selected else None,
                selected.end_date if selected else None,
            ),
        )
        logger.info(
            "Dashboard for %s (version=%s): %d task(s), %s",
            project.name,
            selected.name if selected else "-",
            len(tasks),
            dashboard.verdict.level.value if dashboard.verdict else "-",
        )
        return dashboard

    def calendar(
        self, day: DateLike = None, start: DateLike = None, end: DateLike = None
    ) -> list[ProjectTasks]:
        """Tasks due in [start, end] if both are given, else due on *day* (default today)."""
        tasks = self._client.get_all_work_packages()
        if start is not None and end is not None:
            selected = tasks_due_between(tasks, start, end)
        else:
            selected = tasks_due_on(tasks, day if day is not None else self.today)
        return group_by_project(selected)

    def weekly_workload(
        self, week_offset: int = 0
    ) -> tuple[date, date, list[WorkloadBucket]]:
        """Workload over tasks due in the week *week_offset* weeks from this one."""
        monday, sunday = week_bounds(self.today, week_offset)
        tasks = tasks_due_between(self._client.get_all_work_packages(), monday, sunday)
        return monday, sunday, workload_by_assignee(tasks, self.today)

    @staticmethod
    def _select_version(versions: list[Version], version_id: str | None) -> Version | None:
        if version_id is not None:
            for version in versions:
                if version.id == str(version_id) or version.name == version_id:
                    return version
            logger.warning("Version %s not found, using default", version_id)
        for version in versions:
            if version.status == "open":
                return version
        return versions[0] if versions else None
