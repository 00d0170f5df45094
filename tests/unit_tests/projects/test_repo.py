"""Unit tests for projects repository layer.

These tests verify database operations in isolation.
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.project import Project
from repos import projects_repo
from tests.factories import create_client_record, create_project


@pytest.mark.asyncio
async def test_repo_create_project(db_session: AsyncSession):
    """Test: Repository can create a project."""
    project = Project(id=uuid4(), name="Repo Project", project_number="24-02001")

    created = await projects_repo.create(db_session, project)
    await db_session.commit()

    assert created.id == project.id
    assert created.status == "New Lead"
    assert created.row_version == 1

    fetched = await projects_repo.get_by_number(db_session, project_number="24-02001")
    assert fetched.id == project.id


@pytest.mark.asyncio
async def test_repo_list_filters_by_linked_user(db_session: AsyncSession, plain_user):
    """Test: Listing with user_id only returns projects linked to that user."""
    mine = await create_project(db_session, project_number="24-01001", user_ids=[plain_user.id])
    await create_project(db_session, project_number="24-01002")

    all_projects = await projects_repo.list(db_session)
    assert len(all_projects) == 2

    linked = await projects_repo.list(db_session, user_id=plain_user.id)
    assert [p.id for p in linked] == [mine.id]


@pytest.mark.asyncio
async def test_repo_list_numbers_with_prefix(db_session: AsyncSession):
    await create_project(db_session, project_number="24-01001")
    await create_project(db_session, project_number="24-011000")
    await create_project(db_session, project_number="24-02001")

    numbers = await projects_repo.list_numbers_with_prefix(db_session, prefix="24-01")
    assert sorted(numbers) == ["24-01001", "24-011000"]


@pytest.mark.asyncio
async def test_repo_link_sets_are_replaced_and_deduplicated(db_session: AsyncSession, plain_user, other_user):
    project = await create_project(db_session, user_ids=[plain_user.id])
    client = await create_client_record(db_session)

    await projects_repo.set_user_links(
        db_session,
        project_id=project.id,
        user_ids=[other_user.id, other_user.id],
    )
    await projects_repo.set_client_links(db_session, project_id=project.id, client_ids=[client.id])
    await db_session.commit()

    users, clients = await projects_repo.linked_ids(db_session, project_ids=[project.id])
    assert users[project.id] == [other_user.id]
    assert clients[project.id] == [client.id]


@pytest.mark.asyncio
async def test_repo_delete_project_removes_links(db_session: AsyncSession, plain_user):
    project = await create_project(db_session, user_ids=[plain_user.id])

    await projects_repo.delete_project(db_session, project)
    await db_session.commit()

    assert await projects_repo.get_by_id(db_session, project_id=project.id) is None
    users, _ = await projects_repo.linked_ids(db_session, project_ids=[project.id])
    assert users[project.id] == []
