"""Repository for Project database operations."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.links import ProjectClient, ProjectUser
from models.project import Project


async def get_by_id(session: AsyncSession, *, project_id: UUID) -> Project | None:
    """
    Get a project by ID.

    Args:
        session: Database session
        project_id: Project ID to fetch

    Returns:
        Project if found, None otherwise
    """
    result = await session.execute(select(Project).where(Project.id == project_id))
    return result.scalar_one_or_none()


async def get_by_alias(session: AsyncSession, *, alias: str) -> Project | None:
    result = await session.execute(select(Project).where(Project.alias == alias))
    return result.scalar_one_or_none()


async def get_by_number(session: AsyncSession, *, project_number: str) -> Project | None:
    result = await session.execute(
        select(Project).where(Project.project_number == project_number)
    )
    return result.scalar_one_or_none()


async def list(
    session: AsyncSession,
    *,
    user_id: UUID | None = None,
) -> list[Project]:
    """
    List projects, unordered.

    Args:
        session: Database session
        user_id: If given, only projects linked to this user

    Returns:
        List of projects
    """
    query = select(Project)
    if user_id is not None:
        query = query.join(ProjectUser, ProjectUser.project_id == Project.id).where(
            ProjectUser.user_id == user_id
        )

    result = await session.execute(query)
    return [project for project in result.scalars().all()]


async def list_numbers_with_prefix(session: AsyncSession, *, prefix: str) -> "list[str]":
    """Project numbers starting with ``prefix`` (e.g. ``"24-01"``)."""
    result = await session.execute(
        select(Project.project_number).where(Project.project_number.startswith(prefix))
    )
    return [number for number in result.scalars().all()]


async def create(session: AsyncSession, project: Project) -> Project:
    """
    Create a new project.

    Args:
        session: Database session
        project: Project instance to create

    Returns:
        Created project
    """
    session.add(project)
    await session.flush()
    await session.refresh(project)
    return project


async def linked_ids(
    session: AsyncSession,
    *,
    project_ids: "list[UUID]",
) -> "tuple[dict[UUID, list[UUID]], dict[UUID, list[UUID]]]":
    """
    Collect linked user and client IDs for a batch of projects.

    Returns:
        (users_by_project, clients_by_project)
    """
    users: dict[UUID, list[UUID]] = {project_id: [] for project_id in project_ids}
    clients: dict[UUID, list[UUID]] = {project_id: [] for project_id in project_ids}
    if not project_ids:
        return users, clients

    user_rows = await session.execute(
        select(ProjectUser.project_id, ProjectUser.user_id)
        .where(ProjectUser.project_id.in_(project_ids))
        .order_by(ProjectUser.created_at)
    )
    for project_id, user_id in user_rows.all():
        users[project_id].append(user_id)

    client_rows = await session.execute(
        select(ProjectClient.project_id, ProjectClient.client_id)
        .where(ProjectClient.project_id.in_(project_ids))
        .order_by(ProjectClient.created_at)
    )
    for project_id, client_id in client_rows.all():
        clients[project_id].append(client_id)

    return users, clients


async def set_user_links(
    session: AsyncSession,
    *,
    project_id: UUID,
    user_ids: "list[UUID]",
) -> None:
    """Replace the users linked to a project."""
    await session.execute(delete(ProjectUser).where(ProjectUser.project_id == project_id))
    for user_id in dict.fromkeys(user_ids):
        session.add(ProjectUser(project_id=project_id, user_id=user_id))
    await session.flush()


async def set_client_links(
    session: AsyncSession,
    *,
    project_id: UUID,
    client_ids: "list[UUID]",
) -> None:
    """Replace the clients linked to a project."""
    await session.execute(delete(ProjectClient).where(ProjectClient.project_id == project_id))
    for client_id in dict.fromkeys(client_ids):
        session.add(ProjectClient(project_id=project_id, client_id=client_id))
    await session.flush()


async def delete_project(session: AsyncSession, project: Project) -> None:
    """Delete a project together with its links."""
    await session.execute(delete(ProjectUser).where(ProjectUser.project_id == project.id))
    await session.execute(delete(ProjectClient).where(ProjectClient.project_id == project.id))
    await session.delete(project)
    await session.flush()
