"""ORM model for application users (authentication identity)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true
from sqlalchemy.orm import relationship

from app.models.base import Base


class User(Base):
    """
    User account for JWT authentication.

    email is stored normalized (stripped, lower-cased). password_hash is never
    serialized to clients. Roles are held through UserRole rows, which are
    deleted with the user.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user_roles = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
