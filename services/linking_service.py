"""Linking users to clients with one-time linking codes."""

import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from models.client import Client
from models.user import User
from repos import clients_repo
from services.clients_service import generate_linking_code

logger = logging.getLogger(__name__)


def contact_emails(client: Client) -> set[str]:
    """Main contact, accounts and account manager emails of a client, lower-cased."""
    emails = set()
    main_contact = client.main_contact or {}
    account_manager = client.account_manager or {}
    for value in (
        main_contact.get("email"),
        main_contact.get("accounts_email"),
        account_manager.get("email"),
    ):
        if value and value.strip():
            emails.add(value.strip().lower())
    return emails


async def find_client_by_contact_email(session: AsyncSession, *, email: str) -> Client | None:
    email = email.strip().lower()
    for client in await clients_repo.list(session):
        if email in contact_emails(client):
            return client
    return None


async def request_linking_code(session: AsyncSession, *, email: str) -> dict:
    """
    Look up the linking code to send to a client contact.

    A client with no linked users gets its admin code, so the first person to
    link becomes company admin. Otherwise the user code is chosen.

    Raises:
        HTTPException: 404 if no client has this contact email
    """
    client = await find_client_by_contact_email(session, email=email)
    if not client:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No company found for this email address",
        )

    links = await clients_repo.list_user_links(session, client_id=client.id)
    if links:
        code_type, code = "user", client.user_linking_code
    else:
        code_type, code = "admin", client.admin_linking_code

    # No mail transport: the code is returned to the caller
    logger.info("Linking code (%s) requested for client %s by %s", code_type, client.name, email)
    return {
        "client_id": client.id,
        "client_name": client.name,
        "code_type": code_type,
        "code": code,
    }


async def link_with_code(session: AsyncSession, *, user: User, code: str) -> dict:
    """
    Redeem a linking code for the current user.

    An admin code links the user as company admin, a user code as member.
    The redeemed code is replaced so it cannot be used again.

    Raises:
        HTTPException: 404 if the code does not match any client
    """
    code = code.strip().upper()
    client = await clients_repo.get_by_linking_code(session, code=code)
    if not client:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid linking code",
        )

    as_admin = client.admin_linking_code == code
    await clients_repo.add_user_link(session, client_id=client.id, user_id=user.id, is_admin=as_admin)

    if as_admin:
        client.admin_linking_code = generate_linking_code()
    else:
        client.user_linking_code = generate_linking_code()

    if not user.company:
        user.company = client.name

    await session.commit()

    logger.info("User %s linked to client %s (admin=%s)", user.email, client.name, as_admin)
    return {
        "client_id": client.id,
        "client_name": client.name,
        "company_admin": as_admin,
    }


def log_support_request(*, name: str, email: str, message: str, support_email: str) -> None:
    logger.info("Support request from %s <%s> for %s: %s", name, email, support_email, message)
