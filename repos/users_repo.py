"""Repository for User database operations."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.links import ClientUser
from models.user import User


async def get_by_id(
    session: AsyncSession,
    *,
    user_id: UUID,
    include_deleted: bool = False,
) -> User | None:
    """
    Get a user by ID.

    Args:
        session: Database session
        user_id: User ID to fetch
        include_deleted: If True, include soft-deleted users

    Returns:
        User if found, None otherwise
    """
    query = select(User).where(User.id == user_id)

    if not include_deleted:
        query = query.where(User.is_deleted.is_(False))

    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_by_email(session: AsyncSession, *, email: str) -> User | None:
    """Get a user by email, case-insensitively."""
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def list(
    session: AsyncSession,
    *,
    role: str | None = None,
    include_deleted: bool = False,
) -> list[User]:
    """
    List users, newest first.

    Args:
        session: Database session
        role: Only return users with this role
        include_deleted: If True, include soft-deleted users

    Returns:
        List of users
    """
    query = select(User).order_by(User.created_at.desc())

    if role is not None:
        query = query.where(User.role == role)
    if not include_deleted:
        query = query.where(User.is_deleted.is_(False))

    result = await session.execute(query)
    return [user for user in result.scalars().all()]


async def create(session: AsyncSession, user: User) -> User:
    """
    Create a new user.

    Args:
        session: Database session
        user: User instance to create

    Returns:
        Created user
    """
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


async def list_client_links(session: AsyncSession, *, user_id: UUID) -> "list[ClientUser]":
    """List the client links of a user, oldest first."""
    result = await session.execute(
        select(ClientUser)
        .where(ClientUser.user_id == user_id)
        .order_by(ClientUser.created_at)
    )
    return [link for link in result.scalars().all()]
