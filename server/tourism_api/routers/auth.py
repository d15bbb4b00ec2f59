"""Auth router for registration, login, profile and admin user management."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import get_current_user, get_optional_user, require_admin
from ..core.exceptions import AuthorizationError, ProblemDetailsException
from ..core.responses import success_response
from ..models.user import User, UserRole
from ..schemas.user import (
    AdminUserUpdateRequest,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserOut,
)
from ..services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# Define dependencies to avoid B008 linting errors
DB_DEPENDENCY = Depends(get_db)
CURRENT_USER_DEPENDENCY = Depends(get_current_user)
ADMIN_DEPENDENCY = Depends(require_admin)
OPTIONAL_USER_DEPENDENCY = Depends(get_optional_user)


def _convert_user_to_schema(user: User) -> UserOut:
    """Convert user model to schema; admin-only fields are blank for customers."""
    schema = UserOut.model_validate(user)
    if not user.is_admin:
        schema.admin_id = None
        schema.department = None
        schema.permissions = None
    return schema


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    request: RegisterRequest,
    db: AsyncSession = DB_DEPENDENCY,
    caller: Optional[User] = OPTIONAL_USER_DEPENDENCY
) -> JSONResponse:
    """
    Register a new account and return a bearer token.

    Admin accounts can only be created by a caller who is already an admin.
    """
    if request.role == UserRole.ADMIN.value and not (caller and caller.is_admin):
        raise AuthorizationError(detail="Only an admin can create admin accounts", required_role="admin")

    try:
        user, token = await UserService(db).register(request)
        return success_response(201, token=token, user=_convert_user_to_schema(user))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in registration",
            extra={"username": request.username, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Exchange email and password for a bearer token."""
    try:
        user, token = await UserService(db).login(request)
        return success_response(token=token, user=_convert_user_to_schema(user))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error in login", extra={"error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.get("/me")
async def get_me(current_user: User = CURRENT_USER_DEPENDENCY) -> JSONResponse:
    """Return the authenticated account."""
    return success_response(user=_convert_user_to_schema(current_user))


@router.put("/update-profile")
async def update_profile(
    request: UpdateProfileRequest,
    db: AsyncSession = DB_DEPENDENCY,
    current_user: User = CURRENT_USER_DEPENDENCY
) -> JSONResponse:
    """Update the authenticated account's profile and optionally its password."""
    try:
        user = await UserService(db).update_profile(current_user, request)
        return success_response(message="Profile updated successfully", user=_convert_user_to_schema(user))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in profile update",
            extra={"user_id": str(current_user.id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.get("/users")
async def list_users(
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """List every account (admin only)."""
    users = await UserService(db).list_users()
    return success_response(
        count=len(users),
        users=[_convert_user_to_schema(user) for user in users]
    )


@router.get("/users/{user_id}")
async def get_user(
    user_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Get one account (admin only)."""
    user = await UserService(db).get_user_by_id_or_raise(user_id)
    return success_response(user=_convert_user_to_schema(user))


@router.put("/users/{user_id}")
async def update_user(
    user_id: UUID,
    request: AdminUserUpdateRequest,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Change another account's role, department, permissions or contact details (admin only)."""
    try:
        user = await UserService(db).update_user(user_id, request)

        logger.info(
            "User updated",
            extra={"user_id": str(user_id), "admin_id": str(admin.id)}
        )
        return success_response(message="User updated successfully", user=_convert_user_to_schema(user))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in user update",
            extra={"user_id": str(user_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Delete an account and its bookings, cart and payments (admin only)."""
    try:
        await UserService(db).delete_user(user_id, admin)
        return success_response(message="User deleted successfully")

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in user deletion",
            extra={"user_id": str(user_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e
