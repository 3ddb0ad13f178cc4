"""FastAPI dependencies that wire the access gate into routes.

Routes declare ``Depends(get_current_user)`` to authenticate, and at most one of
``authorize(resource, action)``, ``require_role(name)`` or
``require_any_role(names)`` (each of which authenticates first).
"""

from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.exceptions import MissingTokenError
from app.models import User
from app.services.access_gate import AccessGate
from app.services.auth_service import AuthService
from app.services.credential_store import CredentialStore
from app.services.permission_resolver import PermissionResolver
from app.services.token_service import TokenService

security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide token service; the signing secret is read once at startup."""
    return TokenService.from_settings(get_settings())


def get_credential_store(db: Annotated[Session, Depends(get_db)]) -> CredentialStore:
    return CredentialStore(db)


def get_permission_resolver(db: Annotated[Session, Depends(get_db)]) -> PermissionResolver:
    return PermissionResolver(db)


def get_auth_service(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(store, tokens, bcrypt_rounds=get_settings().BCRYPT_ROUNDS)


def get_access_gate(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> AccessGate:
    return AccessGate(store, tokens, resolver)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    gate: Annotated[AccessGate, Depends(get_access_gate)],
) -> User:
    """Dependency: require a valid Bearer token for an active user. Raises 401 otherwise."""
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    user = gate.authenticate_token(credentials.credentials)
    request.state.user = user
    return user


def get_optional_user(
    request: Request,
    gate: Annotated[AccessGate, Depends(get_access_gate)],
) -> User | None:
    """Dependency: the authenticated user, or None when the request carries no usable identity."""
    user = gate.authenticate_optional(request.headers.get("Authorization"))
    request.state.user = user
    return user


def authorize(resource: str, action: str) -> Callable[..., User]:
    """Dependency factory: authenticated user holding the exact (resource, action) permission."""

    def dependency(
        current_user: Annotated[User, Depends(get_current_user)],
        gate: Annotated[AccessGate, Depends(get_access_gate)],
    ) -> User:
        gate.authorize(current_user, resource, action)
        return current_user

    return dependency


def require_role(role_name: str) -> Callable[..., User]:
    """Dependency factory: authenticated user holding the active role role_name."""

    def dependency(
        current_user: Annotated[User, Depends(get_current_user)],
        gate: Annotated[AccessGate, Depends(get_access_gate)],
    ) -> User:
        gate.require_role(current_user, role_name)
        return current_user

    return dependency


def require_any_role(role_names: Sequence[str]) -> Callable[..., User]:
    """Dependency factory: authenticated user holding at least one of role_names."""
    names = tuple(role_names)

    def dependency(
        current_user: Annotated[User, Depends(get_current_user)],
        gate: Annotated[AccessGate, Depends(get_access_gate)],
    ) -> User:
        gate.require_any_role(current_user, names)
        return current_user

    return dependency


# Role presets
require_admin = require_role("ADMIN")
require_hr_manager = require_any_role(["ADMIN", "HR_MANAGER"])
require_manager = require_any_role(["ADMIN", "HR_MANAGER", "MANAGER"])
require_employee = require_any_role(["ADMIN", "HR_MANAGER", "MANAGER", "EMPLOYEE"])

# Permission presets for the resources this API and its collaborators protect
can_manage_users = authorize("users", "MANAGE")
can_read_users = authorize("users", "READ")
can_create_users = authorize("users", "CREATE")
can_update_users = authorize("users", "UPDATE")
can_delete_users = authorize("users", "DELETE")

can_manage_employees = authorize("employees", "MANAGE")
can_read_employees = authorize("employees", "READ")
can_create_employees = authorize("employees", "CREATE")
can_update_employees = authorize("employees", "UPDATE")
can_delete_employees = authorize("employees", "DELETE")

can_manage_roles = authorize("roles", "MANAGE")
can_read_roles = authorize("roles", "READ")
can_create_roles = authorize("roles", "CREATE")
can_update_roles = authorize("roles", "UPDATE")
can_delete_roles = authorize("roles", "DELETE")

can_manage_permissions = authorize("permissions", "MANAGE")
can_read_permissions = authorize("permissions", "READ")

can_view_reports = authorize("reports", "READ")
can_manage_reports = authorize("reports", "MANAGE")

can_manage_system = authorize("system", "MANAGE")
