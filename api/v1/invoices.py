"""Invoice feed endpoints and the QuickBooks CSV import."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, require_admin
from models.invoice import CsvImportResult, InvoiceSummary
from models.user import User
from services import invoices_service

router = APIRouter()


@router.get("/invoices/transactions")
async def get_transactions(
    client_id: UUID | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Invoices and payments of the caller's client, newest first.

    Args:
        client_id: Client to read (honoured for Admins only)
        status_filter: Invoice status; ``all`` disables filtering
        date_from: Earliest transaction date
        date_to: Latest transaction date
        limit: Page size
        offset: Rows to skip

    Raises:
        404 if the user has no linked client.
    """
    resolved = await invoices_service.resolve_client_id(db, user=current_user, client_id=client_id)
    try:
        return await invoices_service.get_transactions(
            db,
            client_id=resolved,
            status_filter=status_filter,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch transactions: {str(e)}",
        )


@router.get("/invoices/summary", response_model=InvoiceSummary)
async def get_summary(
    client_id: UUID | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    resolved = await invoices_service.resolve_client_id(db, user=current_user, client_id=client_id)
    return await invoices_service.get_summary(db, client_id=resolved)


@router.post("/invoices/import/csv", response_model=CsvImportResult)
async def import_csv(
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Import a QuickBooks transaction export (Admin only).

    Raises:
        400 if the upload is not UTF-8 text.
    """
    raw = await file.read()
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV file must be UTF-8 encoded",
        )

    try:
        return await invoices_service.import_csv(db, content=content)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to import CSV: {str(e)}",
        )
