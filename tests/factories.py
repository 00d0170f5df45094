"""Factories for test users, clients and projects."""

from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import create_access_token
from auth.passwords import hash_password
from models.client import Client
from models.links import ClientUser, ProjectClient, ProjectUser
from models.project import Project
from models.user import User, UserRole

TEST_PASSWORD = "secret-password"


def make_auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


async def create_user(
    session: AsyncSession,
    *,
    email: str,
    role: UserRole = UserRole.USER,
    name: str = "Test User",
    company: str | None = None,
) -> User:
    user = User(
        id=uuid4(),
        name=name,
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        role=role.value,
        company=company,
        table_preferences={},
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_client_record(session: AsyncSession, *, name: str = "Acme Roofing", **fields) -> Client:
    client = Client(
        id=uuid4(),
        name=name,
        user_linking_code=fields.pop("user_linking_code", "USERCODE01"),
        admin_linking_code=fields.pop("admin_linking_code", "ADMINCODE1"),
        **fields,
    )
    session.add(client)
    await session.commit()
    await session.refresh(client)
    return client


async def create_project(
    session: AsyncSession,
    *,
    project_number: str = "24-01001",
    name: str = "Roof Replacement",
    user_ids: list | None = None,
    client_ids: list | None = None,
) -> Project:
    project = Project(id=uuid4(), name=name, project_number=project_number, status="New Lead")
    session.add(project)
    await session.flush()
    for user_id in user_ids or []:
        session.add(ProjectUser(project_id=project.id, user_id=user_id))
    for client_id in client_ids or []:
        session.add(ProjectClient(project_id=project.id, client_id=client_id))
    await session.commit()
    await session.refresh(project)
    return project


async def link_user_to_client(session: AsyncSession, *, user: User, client: Client, is_admin: bool = False) -> None:
    session.add(ClientUser(client_id=client.id, user_id=user.id, is_admin=is_admin))
    await session.commit()


