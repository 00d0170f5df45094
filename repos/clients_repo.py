"""Repository for Client database operations."""

from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.client import Client
from models.links import ClientUser, ProjectClient


async def get_by_id(session: AsyncSession, *, client_id: UUID) -> Client | None:
    """
    Get a client by ID.

    Args:
        session: Database session
        client_id: Client ID to fetch

    Returns:
        Client if found, None otherwise
    """
    result = await session.execute(select(Client).where(Client.id == client_id))
    return result.scalar_one_or_none()


async def get_by_name(session: AsyncSession, *, name: str) -> Client | None:
    result = await session.execute(
        select(Client).where(func.lower(Client.name) == name.strip().lower()).limit(1)
    )
    return result.scalar_one_or_none()


async def get_by_linking_code(session: AsyncSession, *, code: str) -> Client | None:
    """Find the client owning a user or admin linking code."""
    code = code.strip().upper()
    result = await session.execute(
        select(Client).where(
            or_(Client.user_linking_code == code, Client.admin_linking_code == code)
        )
    )
    return result.scalar_one_or_none()


async def list(
    session: AsyncSession,
    *,
    client_ids: "list[UUID] | None" = None,
) -> list[Client]:
    """
    List clients ordered by name.

    Args:
        session: Database session
        client_ids: If given, only return these clients

    Returns:
        List of clients
    """
    query = select(Client).order_by(Client.name)
    if client_ids is not None:
        query = query.where(Client.id.in_(client_ids))

    result = await session.execute(query)
    return [client for client in result.scalars().all()]


async def create(session: AsyncSession, client: Client) -> Client:
    """
    Create a new client.

    Args:
        session: Database session
        client: Client instance to create

    Returns:
        Created client
    """
    session.add(client)
    await session.flush()
    await session.refresh(client)
    return client


async def list_user_links(session: AsyncSession, *, client_id: UUID) -> "list[ClientUser]":
    result = await session.execute(
        select(ClientUser)
        .where(ClientUser.client_id == client_id)
        .order_by(ClientUser.created_at)
    )
    return [link for link in result.scalars().all()]


async def linked_user_ids(session: AsyncSession, *, client_ids: "list[UUID]") -> dict[UUID, "list[UUID]"]:
    """Map each client ID to the IDs of its linked users."""
    mapping: dict[UUID, list[UUID]] = {client_id: [] for client_id in client_ids}
    if not client_ids:
        return mapping

    result = await session.execute(
        select(ClientUser.client_id, ClientUser.user_id)
        .where(ClientUser.client_id.in_(client_ids))
        .order_by(ClientUser.created_at)
    )
    for client_id, user_id in result.all():
        mapping[client_id].append(user_id)
    return mapping


async def add_user_link(
    session: AsyncSession,
    *,
    client_id: UUID,
    user_id: UUID,
    is_admin: bool = False,
) -> ClientUser:
    """Link a user to a client, upgrading an existing link to admin if asked."""
    result = await session.execute(
        select(ClientUser).where(
            ClientUser.client_id == client_id,
            ClientUser.user_id == user_id,
        )
    )
    link = result.scalar_one_or_none()
    if link is None:
        link = ClientUser(client_id=client_id, user_id=user_id, is_admin=is_admin)
        session.add(link)
    elif is_admin:
        link.is_admin = True
    await session.flush()
    return link


async def remove_user_link(session: AsyncSession, *, client_id: UUID, user_id: UUID) -> int:
    result = await session.execute(
        delete(ClientUser).where(
            ClientUser.client_id == client_id,
            ClientUser.user_id == user_id,
        )
    )
    return result.rowcount


async def delete_client(session: AsyncSession, client: Client) -> None:
    """Delete a client together with its user and project links."""
    await session.execute(delete(ClientUser).where(ClientUser.client_id == client.id))
    await session.execute(delete(ProjectClient).where(ProjectClient.client_id == client.id))
    await session.delete(client)
    await session.flush()
