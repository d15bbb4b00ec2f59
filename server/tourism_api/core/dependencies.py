"""FastAPI dependencies for authentication, authorization and idempotency."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header
from jwt import ExpiredSignatureError, PyJWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User
from .database import get_db
from .exceptions import AuthenticationError, AuthorizationError, ValidationError
from .security import decode_access_token

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError(detail="Not authorized, no token")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")
    return token


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Authentication dependency that resolves a bearer token to a user.

    Args:
        authorization: Authorization header with Bearer token
        db: Database session

    Returns:
        User: The account the token was issued to

    Raises:
        AuthenticationError: If the token is missing, malformed, expired, or
            refers to an account that no longer exists
    """
    token = _extract_bearer_token(authorization)

    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise AuthenticationError(detail="Token has expired")
    except PyJWTError as e:
        logger.info("Token validation failed", extra={"error": str(e)})
        raise AuthenticationError(detail="Not authorized, token failed")

    subject = payload.get("sub")
    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise AuthenticationError(detail="Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise AuthenticationError(detail="User for this token no longer exists")

    return user


async def get_optional_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Resolve the caller like get_current_user, or None when no Authorization header is sent."""
    if not authorization:
        return None
    return await get_current_user(authorization, db)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Authorization dependency for admin-only routes.

    Raises:
        AuthorizationError: If the authenticated user is not an admin
    """
    if not user.is_admin:
        logger.warning("Admin route denied", extra={"user_id": str(user.id), "role": user.role})
        raise AuthorizationError(detail="Not authorized as an admin", required_role="admin")
    return user


async def get_idempotency_key(
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key")
) -> Optional[str]:
    """
    Extract and validate the optional Idempotency-Key header.

    Raises:
        ValidationError: If the key is blank or longer than 255 characters
    """
    if idempotency_key is None:
        return None

    idempotency_key = idempotency_key.strip()
    if not 1 <= len(idempotency_key) <= 255:
        raise ValidationError(detail="Idempotency key must be between 1 and 255 characters")
    return idempotency_key


CurrentUser = Depends(get_current_user)
AdminUser = Depends(require_admin)
DatabaseSession = Depends(get_db)
IdempotencyKey = Depends(get_idempotency_key)
