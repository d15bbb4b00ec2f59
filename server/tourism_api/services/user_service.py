"""User service for registration, authentication and account management."""

import logging
import secrets
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..core.security import create_access_token, hash_password, verify_password
from ..models.booking import Booking
from ..models.cart import Cart, CartItem
from ..models.notification import Notification
from ..models.payment import Payment, PaymentItem
from ..models.user import DEFAULT_ADMIN_DEPARTMENT, DEFAULT_ADMIN_PERMISSIONS, User, UserRole
from ..schemas.user import (
    AdminUserUpdateRequest,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
)

logger = logging.getLogger(__name__)


def generate_admin_id() -> str:
    """Return an admin identifier of the form ``ADM-1234``."""
    return f"ADM-{1000 + secrets.randbelow(9000)}"


class UserService:
    """Service for user and authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, request: RegisterRequest) -> tuple[User, str]:
        """
        Register a new account and issue a token.

        Args:
            request: Registration request

        Returns:
            Tuple of the created user and its access token

        Raises:
            ValidationError: If the email or username is already taken
        """
        stmt = select(User).where(or_(User.email == request.email, User.username == request.username))
        result = await self.db.execute(stmt)
        if result.scalars().first() is not None:
            logger.warning(
                "Registration failed - user already exists",
                extra={"email": request.email, "username": request.username}
            )
            raise ValidationError(detail="User with this email or username already exists")

        user = User(
            username=request.username,
            email=request.email,
            password_hash=hash_password(request.password),
            contact_number=request.contact_number,
            address=request.address,
            role=request.role,
            permissions=[],
        )
        if request.role == UserRole.ADMIN.value:
            self._grant_admin(user, request.department, request.permissions)

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Registration failed due to integrity constraint",
                extra={"email": request.email, "error": str(e)}
            )
            raise ValidationError(detail="User with this email or username already exists")

        logger.info(
            "User registered",
            extra={"user_id": str(user.id), "username": user.username, "role": user.role}
        )
        return user, self.issue_token(user)

    async def login(self, request: LoginRequest) -> tuple[User, str]:
        """
        Check credentials and issue a token.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        user = await self.get_user_by_email(request.email)
        if user is None or not verify_password(request.password, user.password_hash):
            logger.warning("Login failed - invalid credentials", extra={"email": request.email})
            raise AuthenticationError(detail="Invalid credentials")

        logger.info("User logged in", extra={"user_id": str(user.id)})
        return user, self.issue_token(user)

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(
            user_id=str(user.id),
            username=user.username,
            email=user.email,
            role=user.role,
        )

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id_or_raise(self, user_id: UUID) -> User:
        """
        Get user by ID or raise NotFoundError.

        Raises:
            NotFoundError: If user not found
        """
        user = await self.get_user_by_id(user_id)
        if user is None:
            logger.warning("User not found", extra={"user_id": str(user_id)})
            raise NotFoundError(resource_type="user", resource_id=str(user_id))
        return user

    async def list_users(self) -> list[User]:
        stmt = select(User).order_by(User.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_profile(self, user: User, request: UpdateProfileRequest) -> User:
        """
        Update the caller's own profile.

        Args:
            user: Authenticated user
            request: Fields to change

        Returns:
            Updated user

        Raises:
            ValidationError: If the new email or username is taken, or the
                current password does not match when changing password
        """
        await self._check_unique(user, request.email, request.username)

        if request.new_password:
            if not request.current_password or not verify_password(request.current_password, user.password_hash):
                raise ValidationError(detail="Current password is incorrect")
            user.password_hash = hash_password(request.new_password)

        for field in ("username", "email", "contact_number", "address"):
            value = getattr(request, field)
            if value is not None:
                setattr(user, field, value)

        if user.is_admin:
            if request.department is not None:
                user.department = request.department
            if request.permissions is not None:
                user.permissions = list(request.permissions)

        await self.db.commit()
        await self.db.refresh(user)

        logger.info("User profile updated", extra={"user_id": str(user.id)})
        return user

    async def update_user(self, user_id: UUID, request: AdminUserUpdateRequest) -> User:
        """
        Admin update of another account's role, department, permissions and contact fields.

        Raises:
            NotFoundError: If user not found
            ValidationError: If the new email or username is taken
        """
        user = await self.get_user_by_id_or_raise(user_id)
        await self._check_unique(user, request.email, request.username)

        for field in ("username", "email", "contact_number", "address"):
            value = getattr(request, field)
            if value is not None:
                setattr(user, field, value)

        if request.role is not None and request.role != user.role:
            if request.role == UserRole.ADMIN.value:
                self._grant_admin(user, request.department, request.permissions)
            else:
                user.admin_id = None
                user.department = None
                user.permissions = []
            user.role = request.role

        if user.is_admin:
            if request.department is not None:
                user.department = request.department
            if request.permissions is not None:
                user.permissions = list(request.permissions)

        await self.db.commit()
        await self.db.refresh(user)

        logger.info(
            "User updated by admin",
            extra={"user_id": str(user.id), "role": user.role}
        )
        return user

    async def delete_user(self, user_id: UUID, acting_user: User) -> None:
        """
        Delete an account and everything it owns.

        Raises:
            ValidationError: If an admin tries to delete their own account
            NotFoundError: If user not found
        """
        if user_id == acting_user.id:
            raise ValidationError(detail="You cannot delete your own account")

        user = await self.get_user_by_id_or_raise(user_id)

        cart_ids = select(Cart.id).where(Cart.user_id == user.id)
        payment_ids = select(Payment.id).where(Payment.user_id == user.id)
        await self.db.execute(delete(CartItem).where(CartItem.cart_id.in_(cart_ids)))
        await self.db.execute(delete(Cart).where(Cart.user_id == user.id))
        await self.db.execute(delete(PaymentItem).where(PaymentItem.payment_id.in_(payment_ids)))
        await self.db.execute(delete(Payment).where(Payment.user_id == user.id))
        await self.db.execute(delete(Booking).where(Booking.user_id == user.id))
        await self.db.execute(delete(Notification).where(Notification.user_id == user.id))
        await self.db.delete(user)
        await self.db.commit()

        logger.info(
            "User deleted",
            extra={"user_id": str(user_id), "deleted_by": str(acting_user.id)}
        )

    async def _check_unique(self, user: User, email: Optional[str], username: Optional[str]) -> None:
        if email is not None and email != user.email:
            if await self.get_user_by_email(email) is not None:
                raise ValidationError(detail="Email is already in use by another account")
        if username is not None and username != user.username:
            result = await self.db.execute(select(User).where(User.username == username))
            if result.scalar_one_or_none() is not None:
                raise ValidationError(detail="Username is already taken")

    @staticmethod
    def _grant_admin(user: User, department: Optional[str], permissions: Optional[list[str]]) -> None:
        user.role = UserRole.ADMIN.value
        user.admin_id = user.admin_id or generate_admin_id()
        user.department = department or DEFAULT_ADMIN_DEPARTMENT
        user.permissions = list(permissions) if permissions else list(DEFAULT_ADMIN_PERMISSIONS)
