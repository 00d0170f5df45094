"""Service layer for Project business logic."""

import logging
import re
import secrets
from datetime import datetime
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from api.access import require_project_access
from api.deps import is_admin
from models.project import (
    Project,
    ProjectCreate,
    ProjectResponse,
    ProjectStatus,
    ProjectUpdate,
)
from models.project_file import ProjectFile
from models.user import User
from repos import clients_repo, projects_repo, users_repo
from services import storage
from services.project_numbers import next_project_number, prefix_for, project_number_sort_key

logger = logging.getLogger(__name__)

ALIAS_SEPARATOR = "ART&"
LEGACY_ALIAS_RE = re.compile(r"^[0-9a-f]{32}$")
HYBRID_ALIAS_RE = re.compile(r"^(?P<number>[^&]+)ART&(?P<key>[0-9a-f]{32})$")


def sort_projects(projects: list[Project], descending: bool = True) -> list[Project]:
    """Order projects by their project number, numerically."""
    return sorted(
        projects,
        key=lambda project: project_number_sort_key(project.project_number),
        reverse=descending,
    )


async def to_responses(session: AsyncSession, projects: list[Project]) -> list[ProjectResponse]:
    """Build responses with the linked user and client IDs of each project."""
    users, clients = await projects_repo.linked_ids(
        session,
        project_ids=[project.id for project in projects],
    )
    responses = []
    for project in projects:
        response = ProjectResponse.model_validate(project)
        response.linked_users = users.get(project.id, [])
        response.linked_clients = clients.get(project.id, [])
        responses.append(response)
    return responses


async def to_response(session: AsyncSession, project: Project) -> ProjectResponse:
    return (await to_responses(session, [project]))[0]


async def _require_link_targets(
    session: AsyncSession,
    *,
    user_ids: list[UUID],
    client_ids: list[UUID],
) -> None:
    """
    Check that every user and client to be linked exists.

    Raises:
        HTTPException: 404 naming the first missing user or client
    """
    for user_id in user_ids:
        if not await users_repo.get_by_id(session, user_id=user_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {user_id} not found",
            )
    for client_id in client_ids:
        if not await clients_repo.get_by_id(session, client_id=client_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Client {client_id} not found",
            )


async def _get_or_404(session: AsyncSession, project_id: UUID) -> Project:
    project = await projects_repo.get_by_id(session, project_id=project_id)
    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )
    return project


async def list_projects(session: AsyncSession) -> list[Project]:
    """
    List every project, newest project number first.

    Args:
        session: Database session

    Returns:
        List of projects
    """
    projects = await projects_repo.list(session)
    return sort_projects(projects)


async def list_user_projects(session: AsyncSession, *, user: User) -> list[Project]:
    """List projects linked to ``user``, same ordering as list_projects."""
    projects = await projects_repo.list(session, user_id=user.id)
    return sort_projects(projects)


async def get_project(
    session: AsyncSession,
    *,
    user: User,
    project_id: UUID,
) -> Project:
    """
    Get a project by ID.

    Args:
        session: Database session
        user: Current user
        project_id: Project ID to fetch

    Returns:
        Project if found

    Raises:
        HTTPException: 404 if project not found, 403 if the user is not linked
    """
    project = await _get_or_404(session, project_id)
    await require_project_access(session, user=user, project_id=project.id)
    return project


async def create_project(
    session: AsyncSession,
    *,
    user: User,
    payload: ProjectCreate,
    now: datetime | None = None,
) -> Project:
    """
    Create a new project with the next free project number.

    Non-admin creators are linked to their own project.

    Args:
        session: Database session
        user: Creating user
        payload: Project creation data
        now: Allocation time for the project number

    Returns:
        Created project

    Raises:
        HTTPException: 404 if a linked user or client does not exist
    """
    linked_users = list(dict.fromkeys(payload.linked_users))
    if not is_admin(user) and user.id not in linked_users:
        linked_users.append(user.id)
    linked_clients = list(dict.fromkeys(payload.linked_clients))
    await _require_link_targets(session, user_ids=linked_users, client_ids=linked_clients)

    now = now or datetime.utcnow()
    existing = await projects_repo.list_numbers_with_prefix(session, prefix=prefix_for(now))
    project_number = next_project_number(existing, now)

    location = payload.location
    if location is not None and not isinstance(location, str):
        location = location.model_dump()

    project = Project(
        name=payload.name,
        project_number=project_number,
        status=payload.status.value,
        location=location,
        description=payload.description,
        due_date=payload.due_date,
        posting_date=payload.posting_date,
        sub_total=payload.sub_total,
        gst=payload.gst,
        total=payload.total,
        created_at=now,
        updated_at=now,
        row_version=1,  # Start at version 1
    )
    created_project = await projects_repo.create(session, project)

    await projects_repo.set_user_links(session, project_id=created_project.id, user_ids=linked_users)
    await projects_repo.set_client_links(session, project_id=created_project.id, client_ids=linked_clients)

    await session.commit()
    await session.refresh(created_project)

    logger.info("Project %s created by %s", created_project.project_number, user.email)
    return created_project


async def update_project(
    session: AsyncSession,
    *,
    user: User,
    project_id: UUID,
    payload: ProjectUpdate,
) -> Project:
    """
    Update an existing project.

    Only provided fields are applied. When no field actually changes the
    project is returned untouched and row_version is not bumped.

    Raises:
        HTTPException: 404 if project not found, 403 if the user is not linked
    """
    project = await get_project(session, user=user, project_id=project_id)

    changed = False
    for field in payload.model_fields_set:
        value = getattr(payload, field)
        if value is None and field in ("name", "status"):
            continue
        if isinstance(value, ProjectStatus):
            value = value.value
        elif field == "location" and value is not None and not isinstance(value, str):
            value = value.model_dump()
        if getattr(project, field) != value:
            setattr(project, field, value)
            changed = True

    if not changed:
        return project

    project.updated_at = datetime.utcnow()
    project.row_version += 1

    await session.commit()
    await session.refresh(project)

    return project


async def update_status(
    session: AsyncSession,
    *,
    user: User,
    project_id: UUID,
    new_status: ProjectStatus,
) -> Project:
    return await update_project(
        session,
        user=user,
        project_id=project_id,
        payload=ProjectUpdate(status=new_status),
    )


async def delete_project(session: AsyncSession, *, project_id: UUID) -> None:
    """
    Delete a project, its links, its file records and its storage folder.

    Raises:
        HTTPException: 404 if project not found
    """
    project = await _get_or_404(session, project_id)
    project_number = project.project_number

    await session.execute(delete(ProjectFile).where(ProjectFile.project_id == project.id))
    await projects_repo.delete_project(session, project)
    await session.commit()

    if storage.delete_project_dir(project_id):
        logger.info("Removed storage folder of project %s", project_number)
    logger.info("Project %s deleted", project_number)


async def assign_client(
    session: AsyncSession,
    *,
    project_id: UUID,
    client_id: UUID,
    multi_assign: bool = False,
) -> Project:
    """
    Link a client to a project.

    Without ``multi_assign`` the client replaces every existing client link.

    Raises:
        HTTPException: 404 if the project or client does not exist
    """
    project = await _get_or_404(session, project_id)
    if not await clients_repo.get_by_id(session, client_id=client_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found",
        )

    _, clients = await projects_repo.linked_ids(session, project_ids=[project.id])
    current = clients[project.id]
    client_ids = list(dict.fromkeys(current + [client_id])) if multi_assign else [client_id]
    await projects_repo.set_client_links(session, project_id=project.id, client_ids=client_ids)
    await session.commit()
    return project


async def unassign_client(session: AsyncSession, *, project_id: UUID, client_id: UUID) -> Project:
    """
    Remove a client link from a project.

    Raises:
        HTTPException: 404 if the project does not exist or the client was not linked
    """
    project = await _get_or_404(session, project_id)
    _, clients = await projects_repo.linked_ids(session, project_ids=[project.id])
    current = clients[project.id]
    if client_id not in current:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client is not assigned to this project",
        )

    await projects_repo.set_client_links(
        session,
        project_id=project.id,
        client_ids=[linked for linked in current if linked != client_id],
    )
    await session.commit()
    return project


async def assign_user(
    session: AsyncSession,
    *,
    project_id: UUID,
    user_id: UUID,
    multi_assign: bool = False,
) -> Project:
    """
    Link a user to a project.

    Without ``multi_assign`` the user replaces every existing user link.

    Raises:
        HTTPException: 404 if the project or user does not exist
    """
    project = await _get_or_404(session, project_id)
    if not await users_repo.get_by_id(session, user_id=user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    users, _ = await projects_repo.linked_ids(session, project_ids=[project.id])
    current = users[project.id]
    user_ids = list(dict.fromkeys(current + [user_id])) if multi_assign else [user_id]
    await projects_repo.set_user_links(session, project_id=project.id, user_ids=user_ids)
    await session.commit()
    return project


async def unassign_user(session: AsyncSession, *, project_id: UUID, user_id: UUID) -> Project:
    """
    Remove a user link from a project.

    Raises:
        HTTPException: 404 if the project does not exist or the user was not linked
    """
    project = await _get_or_404(session, project_id)
    users, _ = await projects_repo.linked_ids(session, project_ids=[project.id])
    current = users[project.id]
    if user_id not in current:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User is not assigned to this project",
        )

    await projects_repo.set_user_links(
        session,
        project_id=project.id,
        user_ids=[linked for linked in current if linked != user_id],
    )
    await session.commit()
    return project


def build_hybrid_alias(project: Project) -> str:
    """``{projectNumber}ART&{32 hex}``; projects without a number use ``PROJ-{last 6 of id}``."""
    number = project.project_number or f"PROJ-{project.id.hex[-6:]}"
    return f"{number}{ALIAS_SEPARATOR}{secrets.token_hex(16)}"


def is_hybrid_alias(alias: str | None) -> bool:
    return bool(alias) and HYBRID_ALIAS_RE.match(alias) is not None


async def generate_alias(session: AsyncSession, *, user: User, project_id: UUID) -> Project:
    """
    Issue a fresh hybrid alias for a project, replacing any previous one.

    Raises:
        HTTPException: 404 if project not found, 403 if the user is not linked
    """
    project = await get_project(session, user=user, project_id=project_id)

    project.alias = build_hybrid_alias(project)
    project.alias_created_at = datetime.utcnow()
    await session.commit()
    await session.refresh(project)

    logger.info("Generated alias for project %s", project.project_number)
    return project


async def get_or_create_alias(session: AsyncSession, *, user: User, project_id: UUID) -> Project:
    """Return the project with its hybrid alias, creating one when missing."""
    project = await get_project(session, user=user, project_id=project_id)
    if is_hybrid_alias(project.alias):
        return project
    return await generate_alias(session, user=user, project_id=project_id)


async def resolve_alias(session: AsyncSession, *, user: User, alias: str) -> Project:
    """
    Resolve a hybrid alias, a legacy 32-hex alias or a raw project UUID.

    Raises:
        HTTPException: 400 if the alias is malformed, 404 if no project
            matches, 403 if a non-admin is not linked to the project
    """
    alias = alias.strip()
    project = None

    if "&" in alias:
        if not is_hybrid_alias(alias):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid project alias format",
            )
        project = await projects_repo.get_by_alias(session, alias=alias)
    elif LEGACY_ALIAS_RE.match(alias):
        project = await projects_repo.get_by_alias(session, alias=alias)
        if project is None:
            project = await projects_repo.get_by_id(session, project_id=UUID(hex=alias))
    else:
        try:
            project_id = UUID(alias)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid project alias format",
            )
        project = await projects_repo.get_by_id(session, project_id=project_id)

    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )

    await require_project_access(session, user=user, project_id=project.id)
    return project


async def first_client_id(session: AsyncSession, *, project_id: UUID) -> UUID | None:
    """The first client linked to a project, or None when unassigned."""
    _, clients = await projects_repo.linked_ids(session, project_ids=[project_id])
    linked = clients.get(project_id) or []
    return linked[0] if linked else None
