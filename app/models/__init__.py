"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.permission import Permission, PermissionAction
from app.models.role import Role
from app.models.role_permission import RolePermission
from app.models.user import User
from app.models.user_role import UserRole

__all__ = [
    "Base",
    "Permission",
    "PermissionAction",
    "Role",
    "RolePermission",
    "User",
    "UserRole",
]
