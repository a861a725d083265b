"""
Dependency functions for FastAPI endpoints
Caller identity and shared collaborators
"""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from jose import JWTError, jwt
from typing import Optional
from uuid import UUID

from vtube.db.database import get_db
from vtube.models.user import User
from vtube.core.config import settings
from vtube.core.exceptions import AuthenticationError
from vtube.services.media_store import MediaStore, media_store

# Tokens are issued by the identity service; this only reads the bearer header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def _decode_subject(token: str) -> Optional[UUID]:
    """Return the user id carried in the token's ``sub`` claim, or None"""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None

    try:
        return UUID(str(subject))
    except ValueError:
        return None


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token

    Raises 401 if the token is missing or invalid, or the user is unknown or inactive
    """
    if not token:
        raise AuthenticationError("Not authenticated")

    user_id = _decode_subject(token)
    if user_id is None:
        raise AuthenticationError()

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise AuthenticationError()

    return user


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Get current user if a valid token is provided, otherwise return None

    Used for endpoints that work for both authenticated and anonymous users
    """
    if not token:
        return None

    user_id = _decode_subject(token)
    if user_id is None:
        return None

    user = await db.get(User, user_id)
    if user and user.is_active:
        return user
    return None


def get_media_store() -> MediaStore:
    """Media store used by the upload and delete endpoints"""
    return media_store
