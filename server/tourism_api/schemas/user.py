"""User and authentication Pydantic schemas."""

from datetime import datetime
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, Field, field_validator

from ..core.card_validation import CardValidationError, validate_email


def _check_email(v: str) -> str:
    try:
        return validate_email(v).lower()
    except CardValidationError as e:
        raise ValueError(str(e)) from e


EmailAddress = Annotated[str, AfterValidator(_check_email)]


class RegisterRequest(BaseModel):
    """Request schema for registering an account."""

    username: str = Field(..., min_length=3, max_length=50, description="Unique username")
    email: EmailAddress = Field(..., max_length=255, description="Unique email address")
    password: str = Field(..., min_length=6, max_length=128, description="Plain password")
    contact_number: Optional[str] = Field(None, max_length=32, description="Phone number")
    address: Optional[str] = Field(None, description="Postal address")
    role: str = Field("user", pattern=r"^(user|admin)$", description="Account role")
    department: Optional[str] = Field(None, max_length=100, description="Admin department")
    permissions: Optional[List[str]] = Field(None, description="Admin permissions")


class LoginRequest(BaseModel):
    """Request schema for logging in."""

    email: str = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Account password")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class UpdateProfileRequest(BaseModel):
    """Request schema for a user editing their own profile."""

    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailAddress] = Field(None, max_length=255)
    contact_number: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=6, max_length=128)
    department: Optional[str] = Field(None, max_length=100, description="Admins only")
    permissions: Optional[List[str]] = Field(None, description="Admins only")


class AdminUserUpdateRequest(BaseModel):
    """Request schema for an admin editing another account."""

    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailAddress] = Field(None, max_length=255)
    contact_number: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None
    role: Optional[str] = Field(None, pattern=r"^(user|admin)$")
    department: Optional[str] = Field(None, max_length=100)
    permissions: Optional[List[str]] = None


class UserOut(BaseModel):
    """User response schema; the password hash is never exposed."""

    id: UUID = Field(..., description="Unique user ID")
    username: str
    email: str
    contact_number: Optional[str] = None
    address: Optional[str] = None
    role: str
    admin_id: Optional[str] = None
    department: Optional[str] = None
    permissions: Optional[List[str]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    """Minimal user reference embedded in other resources."""

    id: UUID
    username: str
    email: str

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Token issued on register or login."""

    success: bool = True
    token: str = Field(..., description="Bearer token")
    user: UserOut
