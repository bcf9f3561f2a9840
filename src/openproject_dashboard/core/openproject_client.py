"""OpenProject API v3 client built on ``requests``."""

from __future__ import annotations

import json
import logging
import math
import time
from typing import Any

import requests

from openproject_dashboard.core.data_models import Project, Reference, TaskRecord, User, Version
from openproject_dashboard.services.auth_manager import AuthManager

logger = logging.getLogger(__name__)

_API_PREFIX = "/api/v3"
_MAX_RETRIES = 4
_BACKOFF_BASE = 1.0  # seconds


class OpenProjectError(Exception):
    """An HTTP error returned by the OpenProject API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class OpenProjectClient:
    """Read-only access to projects, versions, work packages, and users.

    Collection requests ask for a single page of ``page_size`` elements.
    """

    def __init__(
        self,
        auth: AuthManager,
        *,
        page_size: int = 1000,
        timeout: float = 30,
        story_points_field: str = "storyPoints",
    ) -> None:
        self._auth = auth
        self._page_size = page_size
        self._timeout = timeout
        self._sp_field = story_points_field
        self._session: requests.Session | None = None
        self._api_url = ""

    # -- connection -----------------------------------------------------------

    def connect(self) -> bool:
        """Open an authenticated session and validate it.

        Returns True on success.
        """
        api_key = self._auth.get_api_key()
        if not api_key or not self._auth.base_url:
            logger.warning("Cannot connect — missing API key or instance URL")
            return False

        session = requests.Session()
        session.auth = ("apikey", api_key)
        session.headers["Content-Type"] = "application/json"
        self._session = session
        self._api_url = f"{self._auth.base_url.rstrip('/')}{_API_PREFIX}"
        logger.debug("Connecting to OpenProject at %s", self._api_url)

        try:
            me = self._get_with_retry("/users/me")
        except (OpenProjectError, requests.RequestException) as exc:
            logger.error("Failed to connect to OpenProject: %s", exc)
            self._session = None
            return False
        logger.info("Connected to OpenProject as %s", me.get("name", "?"))
        return True

    @property
    def connected(self) -> bool:
        """Return True when the API session is active."""
        return self._session is not None

    # -- projects -------------------------------------------------------------

    def get_projects(self) -> list[Project]:
        elements = self._fetch_collection("/projects")
        return [self._parse_project(e) for e in elements]

    def get_project(self, project_id: str) -> Project | None:
        """Return one project, or ``None`` if it cannot be fetched."""
        data = self._fetch_one(f"/projects/{project_id}")
        return self._parse_project(data) if data else None

    def get_project_versions(self, project_id: str) -> list[Version]:
        """Return the project's versions (sprints)."""
        elements = self._fetch_collection(f"/projects/{project_id}/versions")
        return [self._parse_version(e) for e in elements]

    # -- work packages --------------------------------------------------------

    def get_project_work_packages(
        self, project_id: str, filters: dict[str, Any] | None = None
    ) -> list[TaskRecord]:
        elements = self._fetch_collection(f"/projects/{project_id}/work_packages", filters)
        return [self._parse_work_package(e) for e in elements]

    def get_all_work_packages(self, filters: dict[str, Any] | None = None) -> list[TaskRecord]:
        elements = self._fetch_collection("/work_packages", filters)
        return [self._parse_work_package(e) for e in elements]

    def get_work_package(self, work_package_id: str) -> TaskRecord | None:
        data = self._fetch_one(f"/work_packages/{work_package_id}")
        return self._parse_work_package(data) if data else None

    def get_user_work_packages(self, user_id: str) -> list[TaskRecord]:
        """Return the work packages assigned to *user_id*."""
        assignee_filter = [{"assignee": {"operator": "=", "values": [str(user_id)]}}]
        return self.get_all_work_packages({"filters": json.dumps(assignee_filter)})

    # -- users ----------------------------------------------------------------

    def get_users(self) -> list[User]:
        elements = self._fetch_collection("/users")
        return [self._parse_user(e) for e in elements]

    def get_user(self, user_id: str) -> User | None:
        data = self._fetch_one(f"/users/{user_id}")
        return self._parse_user(data) if data else None

    # -- internals ------------------------------------------------------------

    def _fetch_collection(
        self, path: str, filters: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        if not self._session:
            return []
        params: dict[str, Any] = {"pageSize": self._page_size}
        for key, value in (filters or {}).items():
            if value is not None:
                params[key] = str(value)
        logger.debug("Fetching collection %s %s", path, params)
        try:
            data = self._get_with_retry(path, params)
        except (OpenProjectError, requests.RequestException) as exc:
            logger.error("Failed to fetch %s: %s", path, exc)
            return []
        elements = (data.get("_embedded") or {}).get("elements") or []
        logger.info("Fetched %d element(s) from %s", len(elements), path)
        return elements

    def _fetch_one(self, path: str) -> dict[str, Any] | None:
        if not self._session:
            return None
        try:
            return self._get_with_retry(path)
        except OpenProjectError as exc:
            if exc.status_code == 404:
                logger.warning("%s not found", path)
            else:
                logger.error("Failed to fetch %s: %s", path, exc)
            return None
        except requests.RequestException as exc:
            logger.error("Failed to fetch %s: %s", path, exc)
            return None

    def _get_with_retry(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """GET *path* with exponential backoff on 429."""
        assert self._session is not None, "call connect() first"
        url = f"{self._api_url}{path}"
        for attempt in range(_MAX_RETRIES):
            resp = self._session.get(url, params=params, timeout=self._timeout)
            if resp.status_code == 429 and attempt < _MAX_RETRIES - 1:
                delay = _BACKOFF_BASE * (2**attempt)
                logger.warning("Rate limited, retrying in %.1fs", delay)
                time.sleep(delay)
                continue
            if not resp.ok:
                raise OpenProjectError(
                    resp.status_code, f"API error: {resp.status_code} {resp.reason}"
                )
            return resp.json()

        raise OpenProjectError(429, "API error: rate limit retries exhausted")

    def _parse_work_package(self, data: dict[str, Any]) -> TaskRecord:
        percent = data.get("percentageDone", data.get("percentDone"))
        points = data.get(self._sp_field)
        if points is None and self._sp_field != "storyPoints":
            points = data.get("storyPoints")
        return TaskRecord(
            id=str(data.get("id", "")),
            subject=str(data.get("subject") or ""),
            percent_done=self._number(percent),
            due_date=data.get("dueDate") or None,
            start_date=data.get("startDate") or None,
            story_points=self._number(points),
            assignee=self._link(data, "assignee"),
            parent=self._link(data, "parent"),
            project=self._link(data, "project"),
            version=self._link(data, "version"),
            description=self._text(data.get("description")),
        )

    @classmethod
    def _parse_project(cls, data: dict[str, Any]) -> Project:
        return Project(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            identifier=str(data.get("identifier") or ""),
            description=cls._text(data.get("description")),
            active=bool(data.get("active", True)),
        )

    @staticmethod
    def _parse_version(data: dict[str, Any]) -> Version:
        return Version(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            status=str(data.get("status") or "open"),
            start_date=data.get("startDate") or None,
            end_date=data.get("endDate") or None,
        )

    @staticmethod
    def _parse_user(data: dict[str, Any]) -> User:
        return User(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            login=str(data.get("login") or ""),
            email=str(data.get("email") or ""),
        )

    @staticmethod
    def _link(data: dict[str, Any], name: str) -> Reference | None:
        """Resolve a HAL ``_links`` entry, or a flat ``{id, name}`` object."""
        link = (data.get("_links") or {}).get(name)
        if isinstance(link, dict) and link.get("href"):
            ref_id = str(link["href"]).rstrip("/").rsplit("/", 1)[-1]
            return Reference(id=ref_id, name=link.get("title")) if ref_id else None
        flat = data.get(name)
        if isinstance(flat, dict) and flat.get("id") is not None:
            return Reference(id=str(flat["id"]), name=flat.get("name"))
        return None

    @staticmethod
    def _number(value: Any) -> float | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None

    @staticmethod
    def _text(value: Any) -> str:
        """Plain text of a formattable field (``{"raw": ...}``) or a string."""
        if isinstance(value, dict):
            return str(value.get("raw") or "")
        return str(value) if value else ""
