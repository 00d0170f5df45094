"""Service layer for users: registration, login, profiles and admin actions."""

import logging
from urllib.parse import quote_plus
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import create_access_token
from auth.passwords import hash_password, verify_password
from models.user import CurrentUserResponse, User, UserProfileUpdate, UserRegister, UserRole
from repos import users_repo

logger = logging.getLogger(__name__)

AVATAR_URL = "https://ui-avatars.com/api/?name={name}&background=random"


def display_name(first_name: str | None, last_name: str | None) -> str:
    return " ".join(part.strip() for part in (first_name, last_name) if part and part.strip())


async def current_user_response(session: AsyncSession, user: User) -> CurrentUserResponse:
    """The user with linked client IDs and company-admin flag."""
    links = await users_repo.list_client_links(session, user_id=user.id)
    response = CurrentUserResponse.model_validate(user)
    response.linked_clients = [link.client_id for link in links]
    response.company_admin = any(link.is_admin for link in links)
    return response


async def register(session: AsyncSession, *, payload: UserRegister) -> User:
    """
    Register a new user with role User.

    Raises:
        HTTPException: 409 if the email is already registered
    """
    email = payload.email.strip().lower()
    if await users_repo.get_by_email(session, email=email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this email already exists",
        )

    name = payload.name or display_name(payload.first_name, payload.last_name)
    user = User(
        name=name,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=email,
        phone=payload.phone.strip(),
        password_hash=hash_password(payload.password),
        role=UserRole.USER.value,
        avatar=AVATAR_URL.format(name=quote_plus(name)),
        table_preferences={},
    )
    created = await users_repo.create(session, user)
    await session.commit()
    await session.refresh(created)

    logger.info("Registered user %s", created.email)
    return created


async def login(session: AsyncSession, *, email: str, password: str) -> tuple[User, str]:
    """
    Check credentials and issue a token.

    Returns:
        Tuple of (user, token)

    Raises:
        HTTPException: 401 on wrong credentials, 403 if blocked or deleted
    """
    user = await users_repo.get_by_email(session, email=email)
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if user.is_blocked or user.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is blocked",
        )

    return user, create_access_token(user)


async def get_user(session: AsyncSession, *, user_id: UUID) -> User:
    user = await users_repo.get_by_id(session, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def list_users(session: AsyncSession, *, role: UserRole | None = None) -> list[User]:
    return await users_repo.list(session, role=role.value if role else None)


async def update_profile(
    session: AsyncSession,
    *,
    user: User,
    payload: UserProfileUpdate,
) -> User:
    """Apply profile changes; the display name follows first/last name."""
    for field in payload.model_fields_set:
        value = getattr(payload, field)
        if value is None:
            continue
        setattr(user, field, value)

    if {"first_name", "last_name"} & payload.model_fields_set:
        user.name = display_name(user.first_name, user.last_name) or user.name

    await session.commit()
    await session.refresh(user)
    return user


async def set_role(session: AsyncSession, *, user_id: UUID, role: UserRole) -> User:
    """
    Change a user's global role.

    Raises:
        HTTPException: 404 if the user does not exist
    """
    user = await get_user(session, user_id=user_id)
    user.role = role.value
    await session.commit()
    await session.refresh(user)

    logger.info("User %s role set to %s", user.email, role.value)
    return user


async def set_blocked(session: AsyncSession, *, user_id: UUID, blocked: bool) -> User:
    user = await get_user(session, user_id=user_id)
    user.is_blocked = blocked
    await session.commit()
    await session.refresh(user)

    logger.info("User %s %s", user.email, "blocked" if blocked else "unblocked")
    return user


async def delete_user(session: AsyncSession, *, user_id: UUID) -> User:
    """Soft-delete a user. The record stays for audit and links."""
    user = await get_user(session, user_id=user_id)
    user.is_deleted = True
    await session.commit()
    await session.refresh(user)

    logger.info("User %s deleted", user.email)
    return user
