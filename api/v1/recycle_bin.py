"""Recycle bin endpoints."""

from typing import List, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.access import require_client_access
from api.deps import get_current_user, get_db, require_admin
from models.recycle_bin_item import (
    CleanupResult,
    RecycleBinActionResult,
    RecycleBinIdsRequest,
    RecycleBinItemResponse,
    RecycleBinListResponse,
    RecycleBinSummary,
)
from models.user import User
from repos import recycle_bin_repo
from services import recycle_bin_service

router = APIRouter()

SortField = Literal["deleted_at", "file_size", "file_name"]
SortOrder = Literal["asc", "desc"]


@router.get("/recycle-bin/items", response_model=RecycleBinListResponse)
async def list_items(
    file_type: str | None = None,
    search: str | None = None,
    sort_by: SortField = "deleted_at",
    sort_order: SortOrder = "desc",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Restorable items across every client the caller can access."""
    client_ids = await recycle_bin_service.accessible_client_ids(db, user=current_user)
    return await recycle_bin_service.list_items(
        db,
        client_ids=client_ids,
        file_type=file_type,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.get("/recycle-bin/client/{client_id}", response_model=RecycleBinListResponse)
async def list_client_items(
    client_id: UUID,
    file_type: str | None = None,
    search: str | None = None,
    sort_by: SortField = "deleted_at",
    sort_order: SortOrder = "desc",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Restorable items of a single client.

    Raises:
        403 if the caller is not linked to the client.
    """
    await require_client_access(db, user=current_user, client_id=client_id)
    return await recycle_bin_service.list_items(
        db,
        client_ids=[client_id],
        file_type=file_type,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.get("/recycle-bin/summary", response_model=RecycleBinSummary)
async def get_summary(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    client_ids = await recycle_bin_service.accessible_client_ids(db, user=current_user)
    items = await recycle_bin_repo.list(db, client_ids=client_ids)
    return recycle_bin_service.build_summary(items)


@router.post("/recycle-bin/restore/{item_id}", response_model=RecycleBinItemResponse)
async def restore_item(
    item_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Restore a recycled file to its project.

    Raises:
        404 if the item is unknown or already restored, 409 if the recycled
        file has gone missing.
    """
    try:
        item = await recycle_bin_service.restore_item(db, user=current_user, item_id=item_id)
        return recycle_bin_service.to_response(item)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to restore item: {str(e)}",
        )


@router.post("/recycle-bin/restore-bulk", response_model=List[RecycleBinActionResult])
async def restore_bulk(
    payload: RecycleBinIdsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await recycle_bin_service.restore_bulk(db, user=current_user, item_ids=payload.ids)


@router.post("/recycle-bin/permanent-delete", response_model=List[RecycleBinActionResult])
async def permanent_delete(
    payload: RecycleBinIdsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Purge items for good. Results are reported per item."""
    return await recycle_bin_service.permanently_delete(db, user=current_user, item_ids=payload.ids)


@router.post("/recycle-bin/cleanup", response_model=CleanupResult)
async def cleanup(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Purge expired items, then the oldest items over the size limit (Admin only)."""
    try:
        return await recycle_bin_service.cleanup(db)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to clean up recycle bin: {str(e)}",
        )
