"""ORM model for roles in the RBAC graph."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true
from sqlalchemy.orm import relationship

from app.models.base import Base


class Role(Base):
    """Named role (e.g. ADMIN, HR_MANAGER). Deleting a role removes its junction rows."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(String(200), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user_roles = relationship(
        "UserRole",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    role_permissions = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Role id={self.id} name={self.name!r}>"
