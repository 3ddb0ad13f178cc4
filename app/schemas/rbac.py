"""Request/response schemas for role and permission management."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.core.security import RBAC_NAME_PATTERN
from app.models.permission import PermissionAction
from app.schemas.auth import UserOut


class RoleCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50, pattern=RBAC_NAME_PATTERN)
    description: str = Field(..., min_length=5, max_length=200)
    is_active: bool = True


class RoleUpdateRequest(BaseModel):
    """Partial role update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=2, max_length=50, pattern=RBAC_NAME_PATTERN)
    description: str | None = Field(default=None, min_length=5, max_length=200)
    is_active: bool | None = None


class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PermissionCreateRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100, pattern=RBAC_NAME_PATTERN)
    resource: str = Field(..., min_length=2, max_length=50)
    action: PermissionAction
    description: str = Field(..., min_length=5, max_length=200)
    is_active: bool = True


class PermissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    resource: str
    action: PermissionAction
    description: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleDetailResponse(BaseModel):
    """A role together with the active permissions it grants."""

    role: RoleOut
    permissions: list[PermissionOut]


class PermissionAssignmentRequest(BaseModel):
    role_id: int = Field(..., ge=1)
    permission_id: int = Field(..., ge=1)


class ProfileResponse(BaseModel):
    """Current user with resolved roles and permissions."""

    user: UserOut
    roles: list[RoleOut]
    permissions: list[PermissionOut]


class UserDetailResponse(BaseModel):
    user: UserOut
    roles: list[RoleOut]


class UsersByRoleResponse(BaseModel):
    role_name: str
    users: list[UserOut]


class PermissionCheckResponse(BaseModel):
    user_id: int
    resource: str
    action: str
    has_permission: bool
