from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import Settings
from .exceptions import AuthRejected
from .models import User

# -----------------------------
# Password hashing helpers
# -----------------------------

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    """Return a secure bcrypt hash of *password*."""
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    """Verify *password* against *hashed* bcrypt digest."""
    return pwd_context.verify(password, hashed)

# -----------------------------
# Bearer tokens
# -----------------------------

def create_access_token(player_id: str, settings: Settings) -> str:
    """Issue a signed token carrying the ``userId`` claim."""
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    claims = {"userId": player_id, "exp": expires}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)

def decode_access_token(token: Optional[str], settings: Settings) -> str:
    """Return the player id inside *token*.

    Used by both the REST dependency and the playground WebSocket so the two
    accept exactly the same tokens.

    Raises
    ------
    AuthRejected
        If the token is missing, malformed, expired or lacks ``userId``.
    """
    if not token:
        raise AuthRejected("No token provided")
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise AuthRejected("Invalid token") from exc
    player_id = claims.get("userId")
    if not isinstance(player_id, str) or not player_id:
        raise AuthRejected("Invalid token")
    return player_id

async def find_user(player_id: str) -> Optional[User]:
    """Return the account for *player_id*, or ``None`` if it is unknown or not a UUID."""
    try:
        uuid.UUID(player_id)
    except ValueError:
        return None
    return await User.filter(id=player_id).first()

# -----------------------------
# FastAPI dependency helpers
# -----------------------------

security = HTTPBearer(auto_error=False)

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """Validate the bearer token and return the matching *User* instance.

    Raises
    ------
    HTTPException
        401 if the token is missing or invalid, or the account is gone.
    """
    settings: Settings = request.app.state.settings
    try:
        player_id = decode_access_token(credentials.credentials if credentials else None, settings)
    except AuthRejected as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)
    user = await find_user(player_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user.last_active = datetime.now(timezone.utc)
    await user.save(update_fields=["last_active"])
    return user

__all__ = [
    "pwd_context",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "find_user",
    "security",
    "get_current_user",
]
