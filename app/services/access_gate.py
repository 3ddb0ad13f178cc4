"""Access gate: the per-request authentication and authorization pipeline.

    Unauthenticated --header ok, token verifies--> Identified
    Identified      --user exists and active----> Authenticated
    Authenticated   --no requirement / check ok--> ALLOW

Every other edge ends in a single deny: MissingTokenError or InvalidTokenError
(401) before Authenticated, ForbiddenError (403) after it. A missing or
deactivated user is reported exactly like a forged token.
"""

import logging
from collections.abc import Iterable

from app.core.exceptions import (
    ForbiddenError,
    InvalidTokenError,
    MissingTokenError,
)
from app.models import User
from app.services.credential_store import CredentialStore
from app.services.permission_resolver import PermissionResolver
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization[: len(BEARER_PREFIX)].lower() == BEARER_PREFIX:
        raise MissingTokenError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingTokenError()
    return token


class AccessGate:
    """Composes token verification, user loading and permission checks."""

    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenService,
        resolver: PermissionResolver,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.resolver = resolver

    def authenticate_token(self, token: str) -> User:
        """Verify a raw token and load its user fresh from the store."""
        claims = self.tokens.verify(token)
        user = self.store.find_user_by_id(claims.id)
        if user is None or not user.is_active:
            logger.warning(
                "Token rejected",
                extra={"user_id": claims.id, "reason": "missing_or_inactive_user"},
            )
            raise InvalidTokenError()
        return user

    def authenticate(self, authorization: str | None) -> User:
        """Resolve an Authorization header value to an active user, or raise a 401 error."""
        return self.authenticate_token(extract_bearer_token(authorization))

    def authenticate_optional(self, authorization: str | None) -> User | None:
        """Like authenticate, but any authentication failure yields None instead of a deny."""
        try:
            return self.authenticate(authorization)
        except (MissingTokenError, InvalidTokenError):
            return None

    def authorize(self, user: User, resource: str, action: str) -> None:
        """Raise ForbiddenError unless the user holds the exact (resource, action) permission."""
        if not self.resolver.user_has_permission(user.id, resource, action):
            logger.warning(
                "Access denied",
                extra={"user_id": user.id, "resource": resource, "action": action},
            )
            raise ForbiddenError()

    def require_role(self, user: User, role_name: str) -> None:
        if not self.resolver.user_has_role(user.id, role_name):
            logger.warning(
                "Access denied", extra={"user_id": user.id, "required_role": role_name}
            )
            raise ForbiddenError(f"Role '{role_name}' required")

    def require_any_role(self, user: User, role_names: Iterable[str]) -> None:
        names = list(role_names)
        if not self.resolver.user_has_any_role(user.id, names):
            logger.warning(
                "Access denied", extra={"user_id": user.id, "required_roles": names}
            )
            raise ForbiddenError(f"One of these roles required: {', '.join(names)}")
