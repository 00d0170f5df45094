"""Project list view: loading, sorting, filtering and paging by role."""

import logging
from typing import Any

from models.project import ProjectStatus
from portal.http import ApiError, Failure, FetchState, Loading, Success
from portal.session import AuthSession
from services.project_numbers import project_number_sort_key

logger = logging.getLogger(__name__)

ALL = "All"

BASE_COLUMNS = ["project_number", "name", "location", "status", "posting_date"]
ESTIMATOR_COLUMNS = BASE_COLUMNS + ["due_date", "client"]
ADMIN_COLUMNS = ESTIMATOR_COLUMNS + ["estimator", "sub_total", "gst", "total"]


def columns_for_role(role: str | None) -> list[str]:
    if role == "Admin":
        return list(ADMIN_COLUMNS)
    if role == "Estimator":
        return list(ESTIMATOR_COLUMNS)
    return list(BASE_COLUMNS)


def normalize_project(project: dict) -> dict:
    """Accept the legacy ``dueDate`` key alongside ``due_date``."""
    if project.get("due_date") is None and project.get("dueDate") is not None:
        project = {**project, "due_date": project["dueDate"]}
    return project


def location_text(location: Any) -> str:
    if isinstance(location, dict):
        return location.get("full_address") or location.get("line1") or ""
    return location or ""


class ProjectTable:
    """
    In-memory table over the projects visible to the current user.

    Admins load every project, everyone else only their linked projects.
    ``state`` holds the last fetch result; load failures end up there as
    ``Failure`` instead of being raised.
    """

    def __init__(self, session: AuthSession, page_size: int = 25):
        self.session = session
        self.page_size = page_size
        self.projects: list[dict] = []
        self.state: FetchState = Loading()

        self.sort_field = "project_number"
        self.descending = True
        self.status_tab = ALL
        self.month_tab = ALL
        self.search = ""
        self.page = 1

    @property
    def columns(self) -> list[str]:
        return columns_for_role(self.session.role)

    async def load(self) -> FetchState:
        path = "/projects/get-projects" if self.session.role == "Admin" else "/projects/get-user-projects"
        self.state = Loading()
        try:
            projects = await self.session.api.get(path)
        except ApiError as e:
            logger.warning("Failed to load projects: %s", e)
            self.state = Failure(e)
            return self.state
        self.projects = [normalize_project(project) for project in projects or []]
        self.state = Success(self.projects)
        return self.state

    def sort_by(self, field: str, descending: bool | None = None) -> None:
        """Sort by a field; repeating the current field flips the direction."""
        if descending is None:
            descending = not self.descending if field == self.sort_field else True
        self.sort_field = field
        self.descending = descending

    def set_status_tab(self, status: str) -> None:
        if status != ALL:
            status = ProjectStatus(status).value
        self.status_tab = status
        self.page = 1

    def set_month_tab(self, month: str) -> None:
        self.month_tab = month
        self.page = 1

    def set_search(self, text: str) -> None:
        self.search = text.strip().lower()
        self.page = 1

    def month_tabs(self) -> list[str]:
        """``YY-MM`` prefixes present in the loaded projects, newest first."""
        months = {project["project_number"][:5] for project in self.projects if project.get("project_number")}
        return [ALL] + sorted(months, reverse=True)

    def _matches(self, project: dict) -> bool:
        if self.status_tab != ALL and project.get("status") != self.status_tab:
            return False
        if self.month_tab != ALL and not (project.get("project_number") or "").startswith(self.month_tab):
            return False
        if self.search:
            haystack = f"{project.get('name', '')} {project.get('project_number', '')}".lower()
            if self.search not in haystack:
                return False
        return True

    def _sort_key(self, project: dict):
        if self.sort_field == "project_number":
            return project_number_sort_key(project.get("project_number"))
        value = project.get(self.sort_field)
        if self.sort_field == "location":
            value = location_text(value)
        # None sorts before everything
        return (value is not None, value if value is not None else "")

    def rows(self) -> list[dict]:
        """Every filtered and sorted row, across all pages."""
        matching = [project for project in self.projects if self._matches(project)]
        return sorted(matching, key=self._sort_key, reverse=self.descending)

    @property
    def page_count(self) -> int:
        total = len(self.rows())
        return max(1, -(-total // self.page_size))

    def page_rows(self) -> list[dict]:
        start = (self.page - 1) * self.page_size
        return self.rows()[start:start + self.page_size]

    def go_to_page(self, page: int) -> None:
        self.page = min(max(1, page), self.page_count)
