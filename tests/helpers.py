"""Shared builders for tests: an in-memory credential store and small row factories."""

from datetime import UTC, datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import enable_sqlite_foreign_keys
from app.core.security import hash_password
from app.models import Base, Permission, Role, User
from app.services.credential_store import CredentialStore
from app.services.token_service import TokenService

TEST_SECRET = "test-secret-do-not-use-in-production"
# Cheapest cost bcrypt accepts; keeps the suite fast.
TEST_BCRYPT_ROUNDS = 4
FIXED_NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with all tables and foreign keys enforced."""
    # One shared connection so every session and thread sees the same in-memory database.
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_session() -> Session:
    return make_session_factory()()


def make_token_service(clock=None, expire_minutes: int = 1440) -> TokenService:
    if clock is None:
        return TokenService(TEST_SECRET, expire_minutes=expire_minutes)
    return TokenService(TEST_SECRET, expire_minutes=expire_minutes, clock=clock)


def _user(
    store: CredentialStore,
    email: str = "alice@example.com",
    password: str = "Password1!",
    first_name: str = "Alice",
    last_name: str = "Smith",
    is_active: bool = True,
) -> User:
    """Create a user directly in the store (bypassing registration validation)."""
    user = store.create_user(
        email=email,
        password_hash=hash_password(password, rounds=TEST_BCRYPT_ROUNDS),
        first_name=first_name,
        last_name=last_name,
    )
    if not is_active:
        user = store.update_user(user.id, is_active=False)
    return user


def _role(store: CredentialStore, name: str = "EDITOR", is_active: bool = True) -> Role:
    return store.create_role(name, f"{name.title()} role", is_active=is_active)


def _permission(
    store: CredentialStore,
    resource: str = "docs",
    action: str = "UPDATE",
    name: str | None = None,
    is_active: bool = True,
) -> Permission:
    return store.create_permission(
        name=name or f"{resource.upper()}_{action}",
        resource=resource,
        action=action,
        description=f"{action.title()} {resource}",
        is_active=is_active,
    )
