"""ORM model for permissions: one (resource, action) pair each."""

import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true
from sqlalchemy.orm import relationship

from app.models.base import Base


class PermissionAction(str, enum.Enum):
    """Closed set of actions. MANAGE is a distinct action, not a superset of the others."""

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    MANAGE = "MANAGE"


class Permission(Base):
    """
    Grantable capability on a resource.

    Authorization compares (resource, action) by exact equality only; name is
    a unique human-facing label such as EMPLOYEES_READ.
    """

    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    resource = Column(String(50), nullable=False, index=True)
    action = Column(String(16), nullable=False)
    description = Column(String(200), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    role_permissions = relationship(
        "RolePermission",
        back_populates="permission",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Permission id={self.id} {self.resource}:{self.action}>"
