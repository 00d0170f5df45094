"""Access checks for client- and project-scoped operations."""

from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import is_admin
from models.links import ClientUser, ProjectUser
from models.user import User


async def get_client_link(
    db: AsyncSession,
    *,
    client_id: UUID,
    user_id: UUID,
) -> ClientUser | None:
    result = await db.execute(
        select(ClientUser).where(
            ClientUser.client_id == client_id,
            ClientUser.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def require_client_access(
    db: AsyncSession,
    *,
    user: User,
    client_id: UUID,
    company_admin: bool = False,
) -> None:
    """
    Verify the user may act on a client.

    Args:
        db: Database session
        user: Current user
        client_id: Client being accessed
        company_admin: If True, a plain member link is not enough

    Raises:
        HTTPException: 403 if the user is neither Admin nor linked
    """
    if is_admin(user):
        return

    link = await get_client_link(db, client_id=client_id, user_id=user.id)
    if link is None or (company_admin and not link.is_admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this client",
        )


async def require_project_access(
    db: AsyncSession,
    *,
    user: User,
    project_id: UUID,
) -> None:
    """
    Verify the user is an Admin or linked to the project.

    Raises:
        HTTPException: 403 if the user is not linked
    """
    if is_admin(user):
        return

    result = await db.execute(
        select(ProjectUser).where(
            ProjectUser.project_id == project_id,
            ProjectUser.user_id == user.id,
        )
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this project",
        )
