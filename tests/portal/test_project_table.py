"""Tests for the role-aware project table."""

import httpx
import pytest

from portal.http import Failure, Loading, Success
from portal.project_table import (
    ADMIN_COLUMNS,
    BASE_COLUMNS,
    ESTIMATOR_COLUMNS,
    ProjectTable,
    columns_for_role,
    normalize_project,
)
from tests.portal.mock_api import ADMIN, json_handler

PROJECTS = [
    {"project_number": "24-01001", "name": "Depot", "status": "New Lead", "dueDate": "2024-02-01"},
    {"project_number": "24-02003", "name": "School Hall", "status": "Completed", "due_date": "2024-03-01"},
    {"project_number": "23-12050", "name": "Warehouse", "status": "New Lead", "due_date": None},
    {"project_number": "24-011000", "name": "Depot Annex", "status": "Quote Sent", "due_date": "2024-01-15"},
]


def test_columns_for_role():
    assert columns_for_role("Admin") == ADMIN_COLUMNS
    assert columns_for_role("Estimator") == ESTIMATOR_COLUMNS
    assert columns_for_role("User") == BASE_COLUMNS
    assert "total" not in columns_for_role("Estimator")


def test_normalize_project_accepts_due_date_alias():
    assert normalize_project({"dueDate": "2024-02-01"})["due_date"] == "2024-02-01"
    assert normalize_project({"due_date": "2024-03-01", "dueDate": "x"})["due_date"] == "2024-03-01"


@pytest.mark.asyncio
async def test_admin_loads_every_project(make_session):
    calls = []
    session = make_session(
        json_handler({("GET", "/api/v1/projects/get-projects"): (200, PROJECTS)}, calls),
        user=ADMIN,
    )
    table = ProjectTable(session)
    assert isinstance(table.state, Loading)

    state = await table.load()
    assert isinstance(state, Success)
    assert state is table.state
    assert len(state.data) == 4
    assert calls[0].url.path.endswith("/projects/get-projects")
    assert table.columns == ADMIN_COLUMNS
    assert [row["project_number"] for row in table.rows()] == ["24-02003", "24-011000", "24-01001", "23-12050"]


@pytest.mark.asyncio
async def test_user_loads_linked_projects_and_keeps_errors(make_session):
    session = make_session(
        json_handler({("GET", "/api/v1/projects/get-user-projects"): (500, {"detail": "Database down"})}),
        user={**ADMIN, "role": "User"},
    )
    table = ProjectTable(session)

    state = await table.load()
    assert isinstance(state, Failure)
    assert state.error.status_code == 500
    assert state.message == "Database down"
    assert table.rows() == []


@pytest.mark.asyncio
async def test_connection_failure_becomes_failure_state(make_session):
    """
    Test: A refused connection is reported as a Failure with status 0, not raised.
    """
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    table = ProjectTable(make_session(refuse, user=ADMIN))

    state = await table.load()

    assert isinstance(state, Failure)
    assert state.error.status_code == 0
    assert "connection refused" in state.message
    assert table.projects == []


@pytest.mark.asyncio
async def test_filters_sorting_and_paging(make_session):
    session = make_session(json_handler({("GET", "/api/v1/projects/get-projects"): (200, PROJECTS)}), user=ADMIN)
    table = ProjectTable(session, page_size=2)
    await table.load()

    assert table.month_tabs() == ["All", "24-02", "24-01", "23-12"]
    assert table.page_count == 2
    table.go_to_page(5)
    assert table.page == 2
    assert [row["name"] for row in table.page_rows()] == ["Depot", "Warehouse"]

    table.set_month_tab("24-01")
    assert table.page == 1
    assert [row["name"] for row in table.rows()] == ["Depot Annex", "Depot"]

    table.sort_by("project_number")
    assert [row["name"] for row in table.rows()] == ["Depot", "Depot Annex"]

    table.set_month_tab("All")
    table.set_status_tab("New Lead")
    table.set_search("ware")
    assert [row["name"] for row in table.rows()] == ["Warehouse"]

    with pytest.raises(ValueError):
        table.set_status_tab("Sleeping")


@pytest.mark.asyncio
async def test_sort_by_due_date_puts_missing_last_when_descending(make_session):
    session = make_session(json_handler({("GET", "/api/v1/projects/get-projects"): (200, PROJECTS)}), user=ADMIN)
    table = ProjectTable(session)
    await table.load()

    table.sort_by("due_date")
    assert [row["name"] for row in table.rows()] == ["School Hall", "Depot", "Depot Annex", "Warehouse"]
