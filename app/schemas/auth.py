"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    check_password_policy,
    normalize_email,
)


class RegisterRequest(BaseModel):
    """New account details. The password must satisfy the password policy."""

    email: EmailStr = Field(..., description="Email address (case-insensitive, unique)")
    password: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Password")
    first_name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    last_name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_policy(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., max_length=PASSWORD_MAX_LEN)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password_policy(v)


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    first_name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    last_name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)


class UserUpdateRequest(ProfileUpdateRequest):
    """Administrative user update; may also (de)activate the account."""

    is_active: bool | None = None


class UserOut(BaseModel):
    """User as returned to clients (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserOut


class TokenClaims(BaseModel):
    """Verified claim set carried by an access token."""

    id: int
    email: str
    first_name: str
    last_name: str
    issued_at: datetime
    expires_at: datetime


class UsersListResponse(BaseModel):
    """Paginated user listing."""

    users: list[UserOut]
    page: int
    limit: int
    total: int


class RoleAssignmentRequest(BaseModel):
    user_id: int = Field(..., ge=1)
    role_id: int = Field(..., ge=1)
