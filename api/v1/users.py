"""User endpoints: profiles and admin user management."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, is_admin, require_admin
from models.user import CurrentUserResponse, User, UserProfileUpdate, UserResponse, UserRole
from services import users_service

router = APIRouter()


class SetRoleRequest(BaseModel):
    role: UserRole


@router.get("/users/get-users", response_model=List[UserResponse])
async def list_users(
    role: UserRole | None = None,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    List every non-deleted user (Admin only).

    Args:
        role: Optionally only users with this role
    """
    try:
        return await users_service.list_users(db, role=role)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch users: {str(e)}",
        )


@router.get("/users/get-user/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a user by ID. Non-admins may only read themselves.

    Raises:
        403 when reading someone else without Admin role, 404 if not found.
    """
    if user_id != current_user.id and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return await users_service.get_user(db, user_id=user_id)


@router.get("/users/profile", response_model=CurrentUserResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await users_service.current_user_response(db, current_user)


@router.patch("/users/profile", response_model=CurrentUserResponse)
async def update_profile(
    payload: UserProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the current user's name, phone, avatar or table preferences."""
    try:
        user = await users_service.update_profile(db, user=current_user, payload=payload)
        return await users_service.current_user_response(db, user)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update profile: {str(e)}",
        )


@router.patch("/users/make-admin/{user_id}", response_model=UserResponse)
async def make_admin(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await users_service.set_role(db, user_id=user_id, role=UserRole.ADMIN)


@router.patch("/users/remove-admin/{user_id}", response_model=UserResponse)
async def remove_admin(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Demote an Admin back to User.

    Raises:
        400 when an Admin tries to demote themselves.
    """
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot remove your own admin role",
        )
    return await users_service.set_role(db, user_id=user_id, role=UserRole.USER)


@router.patch("/users/set-role/{user_id}", response_model=UserResponse)
async def set_role(
    user_id: UUID,
    payload: SetRoleRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await users_service.set_role(db, user_id=user_id, role=payload.role)


@router.patch("/users/block-user/{user_id}", response_model=UserResponse)
async def block_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot block yourself",
        )
    return await users_service.set_blocked(db, user_id=user_id, blocked=True)


@router.patch("/users/unblock-user/{user_id}", response_model=UserResponse)
async def unblock_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await users_service.set_blocked(db, user_id=user_id, blocked=False)


@router.patch("/users/delete-user/{user_id}")
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Soft-delete a user (Admin only)."""
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete yourself",
        )
    await users_service.delete_user(db, user_id=user_id)
    return {"success": True, "message": "User deleted"}
