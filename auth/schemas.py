"""JWT token payload and login schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr

from models.user import CurrentUserResponse


class TokenPayload(BaseModel):
    """JWT token payload structure."""

    sub: str  # user_id (standard JWT claim)
    email: str | None = None
    role: str  # Global role at issue time
    exp: datetime  # Expiration time (standard JWT claim)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Login result: the user and a bearer token."""

    user: CurrentUserResponse
    token: str
