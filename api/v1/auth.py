"""Authentication endpoints: register, login and the current user."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from auth.schemas import LoginRequest, LoginResponse
from models.user import CurrentUserResponse, User, UserRegister
from services import users_service

router = APIRouter()


@router.post("/auth/register", response_model=CurrentUserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserRegister,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new account with role User.

    Raises:
        409 if the email is already registered.
    """
    try:
        user = await users_service.register(db, payload=payload)
        return await users_service.current_user_response(db, user)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to register user: {str(e)}",
        )


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Exchange email and password for a bearer token.

    Returns:
        The user and a JWT.

    Raises:
        401 on wrong credentials, 403 if the account is blocked.
    """
    try:
        user, token = await users_service.login(db, email=payload.email, password=payload.password)
        return LoginResponse(
            user=await users_service.current_user_response(db, user),
            token=token,
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to log in: {str(e)}",
        )


@router.get("/auth/me", response_model=CurrentUserResponse)
async def get_me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current user with linked clients and company-admin flag."""
    return await users_service.current_user_response(db, current_user)
