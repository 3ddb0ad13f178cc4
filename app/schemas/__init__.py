"""Pydantic request/response schemas."""

from app.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    RoleAssignmentRequest,
    TokenClaims,
    TokenResponse,
    UserOut,
    UsersListResponse,
    UserUpdateRequest,
)
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.health import HealthResponse
from app.schemas.rbac import (
    PermissionAssignmentRequest,
    PermissionCheckResponse,
    PermissionCreateRequest,
    PermissionOut,
    ProfileResponse,
    RoleCreateRequest,
    RoleDetailResponse,
    RoleOut,
    RoleUpdateRequest,
    UserDetailResponse,
    UsersByRoleResponse,
)

__all__ = [
    "ChangePasswordRequest",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "PermissionAssignmentRequest",
    "PermissionCheckResponse",
    "PermissionCreateRequest",
    "PermissionOut",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "RoleAssignmentRequest",
    "RoleCreateRequest",
    "RoleDetailResponse",
    "RoleOut",
    "RoleUpdateRequest",
    "TokenClaims",
    "TokenResponse",
    "UserDetailResponse",
    "UserOut",
    "UsersByRoleResponse",
    "UsersListResponse",
    "UserUpdateRequest",
]
