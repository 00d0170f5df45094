"""Service layer for Client business logic."""

import logging
import secrets
import string
from datetime import datetime
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.access import require_client_access
from api.deps import is_admin
from models.client import (
    Client,
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    QuickBooksConnectRequest,
)
from models.user import User
from repos import clients_repo, users_repo

logger = logging.getLogger(__name__)

LINKING_CODE_ALPHABET = string.ascii_uppercase + string.digits
LINKING_CODE_LENGTH = 10

_JSON_FIELDS = ("billing_address", "physical_address", "main_contact", "account_manager")


def generate_linking_code() -> str:
    """A random 10-character code from A-Z and 0-9."""
    return "".join(secrets.choice(LINKING_CODE_ALPHABET) for _ in range(LINKING_CODE_LENGTH))


async def to_responses(session: AsyncSession, clients: list[Client]) -> list[ClientResponse]:
    linked = await clients_repo.linked_user_ids(session, client_ids=[client.id for client in clients])
    responses = []
    for client in clients:
        response = ClientResponse.model_validate(client)
        response.linked_users = linked.get(client.id, [])
        responses.append(response)
    return responses


async def to_response(session: AsyncSession, client: Client) -> ClientResponse:
    return (await to_responses(session, [client]))[0]


async def get_client_or_404(session: AsyncSession, client_id: UUID) -> Client:
    client = await clients_repo.get_by_id(session, client_id=client_id)
    if not client:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found",
        )
    return client


async def list_clients(session: AsyncSession, *, user: User) -> list[Client]:
    """
    List clients visible to a user.

    Admins see every client; everyone else sees the clients they are linked to.
    """
    if is_admin(user):
        return await clients_repo.list(session)

    links = await users_repo.list_client_links(session, user_id=user.id)
    return await clients_repo.list(session, client_ids=[link.client_id for link in links])


async def get_client(session: AsyncSession, *, user: User, client_id: UUID) -> Client:
    """
    Get a client by ID.

    Raises:
        HTTPException: 404 if client not found, 403 if the user is not linked
    """
    client = await get_client_or_404(session, client_id)
    await require_client_access(session, user=user, client_id=client.id)
    return client


async def create_client(session: AsyncSession, *, user: User, payload: ClientCreate) -> Client:
    """
    Create a client with fresh user and admin linking codes.

    A non-admin creator becomes the company admin of the new client.
    """
    data = payload.model_dump()
    client = Client(
        **data,
        user_linking_code=generate_linking_code(),
        admin_linking_code=generate_linking_code(),
    )
    created = await clients_repo.create(session, client)

    if not is_admin(user):
        await clients_repo.add_user_link(session, client_id=created.id, user_id=user.id, is_admin=True)

    await session.commit()
    await session.refresh(created)

    logger.info("Client %s created by %s", created.name, user.email)
    return created


async def update_client(
    session: AsyncSession,
    *,
    user: User,
    client_id: UUID,
    payload: ClientUpdate,
) -> Client:
    """
    Update a client. Only Admins and company admins may do this.

    Raises:
        HTTPException: 404 if client not found, 403 if not allowed
    """
    client = await get_client_or_404(session, client_id)
    await require_client_access(session, user=user, client_id=client.id, company_admin=True)

    for field in payload.model_fields_set:
        value = getattr(payload, field)
        if field == "name" and value is None:
            continue
        if field in _JSON_FIELDS and value is not None:
            value = value.model_dump()
        setattr(client, field, value)

    await session.commit()
    await session.refresh(client)
    return client


async def delete_client(session: AsyncSession, *, client_id: UUID) -> None:
    """Delete a client and its user and project links."""
    client = await get_client_or_404(session, client_id)
    name = client.name
    await clients_repo.delete_client(session, client)
    await session.commit()
    logger.info("Client %s deleted", name)


async def assign_user(
    session: AsyncSession,
    *,
    client_id: UUID,
    user_id: UUID,
    is_company_admin: bool = False,
) -> Client:
    """
    Link a user to a client.

    Raises:
        HTTPException: 404 if the client or user does not exist
    """
    client = await get_client_or_404(session, client_id)
    if not await users_repo.get_by_id(session, user_id=user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    await clients_repo.add_user_link(
        session,
        client_id=client.id,
        user_id=user_id,
        is_admin=is_company_admin,
    )
    await session.commit()
    return client


async def unassign_user(session: AsyncSession, *, client_id: UUID, user_id: UUID) -> Client:
    """
    Remove a user from a client.

    Raises:
        HTTPException: 404 if the client does not exist or the user was not linked
    """
    client = await get_client_or_404(session, client_id)
    removed = await clients_repo.remove_user_link(session, client_id=client.id, user_id=user_id)
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User is not linked to this client",
        )
    await session.commit()
    return client


async def list_client_users(session: AsyncSession, *, user: User, client_id: UUID) -> list[dict]:
    """Users linked to a client, each flagged with ``company_admin``."""
    client = await get_client(session, user=user, client_id=client_id)
    links = await clients_repo.list_user_links(session, client_id=client.id)

    users = []
    for link in links:
        linked_user = await users_repo.get_by_id(session, user_id=link.user_id)
        if linked_user is None:
            continue
        users.append({"user": linked_user, "company_admin": link.is_admin})
    return users


async def get_linking_codes(session: AsyncSession, *, user: User, client_id: UUID) -> Client:
    client = await get_client_or_404(session, client_id)
    await require_client_access(session, user=user, client_id=client.id, company_admin=True)
    return client


async def regenerate_codes(
    session: AsyncSession,
    *,
    user: User,
    client_id: UUID,
    code_type: str,
) -> Client:
    """
    Regenerate the user code, the admin code, or both.

    Company admins may only regenerate the user code.

    Raises:
        HTTPException: 403 if the caller may not regenerate the requested code
    """
    client = await get_client_or_404(session, client_id)
    await require_client_access(session, user=user, client_id=client.id, company_admin=True)

    if code_type in ("admin", "both") and not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can regenerate the admin linking code",
        )

    if code_type in ("user", "both"):
        client.user_linking_code = generate_linking_code()
    if code_type in ("admin", "both"):
        client.admin_linking_code = generate_linking_code()

    await session.commit()
    await session.refresh(client)

    logger.info("Regenerated %s linking code(s) for client %s", code_type, client.name)
    return client


async def connect_quickbooks(
    session: AsyncSession,
    *,
    user: User,
    client_id: UUID,
    payload: QuickBooksConnectRequest,
) -> Client:
    """Store QuickBooks connection details for a client."""
    client = await get_client_or_404(session, client_id)
    await require_client_access(session, user=user, client_id=client.id, company_admin=True)

    client.qb_realm_id = payload.realm_id
    client.qb_access_token = payload.access_token
    client.qb_refresh_token = payload.refresh_token
    client.qb_connected_at = datetime.utcnow()

    await session.commit()
    await session.refresh(client)

    logger.info("QuickBooks connected for client %s", client.name)
    return client


async def disconnect_quickbooks(session: AsyncSession, *, user: User, client_id: UUID) -> Client:
    client = await get_client_or_404(session, client_id)
    await require_client_access(session, user=user, client_id=client.id, company_admin=True)

    client.qb_access_token = None
    client.qb_refresh_token = None
    client.qb_connected_at = None

    await session.commit()
    await session.refresh(client)

    logger.info("QuickBooks disconnected for client %s", client.name)
    return client
