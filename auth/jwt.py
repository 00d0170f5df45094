"""JWT token creation and validation."""

from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

import config
from auth.schemas import TokenPayload
from models.user import User


def create_access_token(user: User, expires_in_hours: int | None = None) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user: Authenticated user
        expires_in_hours: Token lifetime, defaults to JWT_EXPIRES_HOURS

    Returns:
        Encoded JWT token string
    """
    if expires_in_hours is None:
        expires_in_hours = config.settings.JWT_EXPIRES_HOURS

    now = datetime.now(timezone.utc)
    exp = now + timedelta(hours=expires_in_hours)

    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),  # JWT expects Unix timestamp
    }

    return jwt.encode(
        payload,
        config.settings.JWT_SECRET,
        algorithm=config.settings.JWT_ALGORITHM,
    )


def decode_token(token: str) -> TokenPayload:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        TokenPayload with decoded claims

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            config.settings.JWT_SECRET,
            algorithms=[config.settings.JWT_ALGORITHM],
        )

        return TokenPayload(
            sub=payload["sub"],
            email=payload.get("email"),
            role=payload["role"],
            exp=datetime.fromtimestamp(payload["exp"]),
        )
    except (JWTError, KeyError) as e:
        raise JWTError(f"Invalid token: {str(e)}") from e
