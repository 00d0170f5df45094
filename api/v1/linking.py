"""Self-service linking of users to clients, plus support requests."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

import config
from api.deps import get_current_user, get_db
from models.client import LinkRequest, LinkResult, LinkingCodeRequest, LinkingCodeResult, SupportRequest
from models.user import User
from services import linking_service

router = APIRouter()


@router.post("/linking/request-linking-code", response_model=LinkingCodeResult)
async def request_linking_code(
    payload: LinkingCodeRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Find the company owning a contact email and hand out its linking code.

    Raises:
        404 if no client lists this email as a contact.
    """
    return await linking_service.request_linking_code(db, email=payload.email)


@router.post("/linking/link", response_model=LinkResult)
async def link(
    payload: LinkRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Redeem a linking code for the current user.

    Raises:
        404 if the code is unknown.
    """
    try:
        return await linking_service.link_with_code(db, user=current_user, code=payload.code)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to link account: {str(e)}",
        )


@router.post("/linking/send-support-request")
async def send_support_request(payload: SupportRequest):
    linking_service.log_support_request(
        name=payload.name,
        email=payload.email,
        message=payload.message,
        support_email=config.settings.SUPPORT_EMAIL,
    )
    return {"success": True, "message": "Support request received"}
