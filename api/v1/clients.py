"""Client endpoints: companies, their users, linking codes and QuickBooks."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, require_admin
from models.client import (
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    ClientUserAssignment,
    ClientUserResponse,
    LinkingCodesResponse,
    QuickBooksConnectRequest,
    QuickBooksStatusResponse,
    RegenerateCodesRequest,
)
from models.user import User, UserResponse
from services import clients_service

router = APIRouter()


def _quickbooks_status(client) -> QuickBooksStatusResponse:
    return QuickBooksStatusResponse(
        connected=client.quickbooks_connected,
        realm_id=client.qb_realm_id,
        connected_at=client.qb_connected_at,
    )


@router.get("/clients", response_model=List[ClientResponse])
async def list_clients(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List clients.

    Admins see every client; everyone else sees the clients they are linked to.
    """
    try:
        clients = await clients_service.list_clients(db, user=current_user)
        return await clients_service.to_responses(db, clients)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch clients: {str(e)}",
        )


@router.post("/clients", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a client with fresh user and admin linking codes.

    A non-admin creator becomes the company admin of the new client.
    """
    try:
        client = await clients_service.create_client(db, user=current_user, payload=payload)
        return await clients_service.to_response(db, client)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create client: {str(e)}",
        )


@router.patch("/clients/assignUser/{client_id}", response_model=ClientResponse)
async def assign_user(
    client_id: UUID,
    payload: ClientUserAssignment,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Link a user to a client, optionally as company admin (Admin only)."""
    try:
        client = await clients_service.assign_user(
            db,
            client_id=client_id,
            user_id=payload.user_id,
            is_company_admin=payload.company_admin,
        )
        return await clients_service.to_response(db, client)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to assign user: {str(e)}",
        )


@router.patch("/clients/unassignUser/{client_id}", response_model=ClientResponse)
async def unassign_user(
    client_id: UUID,
    payload: ClientUserAssignment,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        client = await clients_service.unassign_user(db, client_id=client_id, user_id=payload.user_id)
        return await clients_service.to_response(db, client)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to unassign user: {str(e)}",
        )


@router.get("/clients/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a client by ID.

    Raises:
        404 if not found, 403 if the user is not linked to it.
    """
    client = await clients_service.get_client(db, user=current_user, client_id=client_id)
    return await clients_service.to_response(db, client)


@router.patch("/clients/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: UUID,
    payload: ClientUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a client (Admin or company admin)."""
    try:
        client = await clients_service.update_client(
            db,
            user=current_user,
            client_id=client_id,
            payload=payload,
        )
        return await clients_service.to_response(db, client)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update client: {str(e)}",
        )


@router.delete("/clients/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a client together with its user and project links (Admin only)."""
    try:
        await clients_service.delete_client(db, client_id=client_id)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete client: {str(e)}",
        )


@router.get("/clients/{client_id}/users", response_model=List[ClientUserResponse])
async def list_client_users(
    client_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    entries = await clients_service.list_client_users(db, user=current_user, client_id=client_id)
    return [
        ClientUserResponse(
            **UserResponse.model_validate(entry["user"]).model_dump(),
            company_admin=entry["company_admin"],
        )
        for entry in entries
    ]


@router.get("/clients/{client_id}/linking-codes", response_model=LinkingCodesResponse)
async def get_linking_codes(
    client_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    client = await clients_service.get_linking_codes(db, user=current_user, client_id=client_id)
    return LinkingCodesResponse(
        user_linking_code=client.user_linking_code,
        admin_linking_code=client.admin_linking_code,
    )


@router.post("/clients/{client_id}/regenerate-codes", response_model=LinkingCodesResponse)
async def regenerate_codes(
    client_id: UUID,
    payload: RegenerateCodesRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Regenerate linking codes.

    Company admins may regenerate the user code; the admin code needs Admin.
    """
    try:
        client = await clients_service.regenerate_codes(
            db,
            user=current_user,
            client_id=client_id,
            code_type=payload.code_type,
        )
        return LinkingCodesResponse(
            user_linking_code=client.user_linking_code,
            admin_linking_code=client.admin_linking_code,
        )
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to regenerate linking codes: {str(e)}",
        )


@router.post("/clients/{client_id}/quickbooks/connect", response_model=QuickBooksStatusResponse)
async def connect_quickbooks(
    client_id: UUID,
    payload: QuickBooksConnectRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    client = await clients_service.connect_quickbooks(
        db,
        user=current_user,
        client_id=client_id,
        payload=payload,
    )
    return _quickbooks_status(client)


@router.post("/clients/{client_id}/quickbooks/disconnect", response_model=QuickBooksStatusResponse)
async def disconnect_quickbooks(
    client_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    client = await clients_service.disconnect_quickbooks(db, user=current_user, client_id=client_id)
    return _quickbooks_status(client)


@router.get("/clients/{client_id}/quickbooks/status", response_model=QuickBooksStatusResponse)
async def quickbooks_status(
    client_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    client = await clients_service.get_client(db, user=current_user, client_id=client_id)
    return _quickbooks_status(client)
