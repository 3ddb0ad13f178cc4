"""Public credential operations: register, login and change password."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import lru_cache

from app.core.exceptions import (
    AccountDeactivatedError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    NotFoundError,
)
from app.core.security import hash_password, verify_password
from app.models import User
from app.services.credential_store import CredentialStore
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

# Hashed at the service's own cost and checked when the email is unknown, so both
# failure paths cost one bcrypt check of the same work factor.
_DUMMY_PASSWORD = "unknown-account-placeholder"


@lru_cache
def dummy_hash(rounds: int | None) -> str:
    return hash_password(_DUMMY_PASSWORD, rounds=rounds)


@dataclass
class LoginResult:
    user: User
    token: str


class AuthService:
    """Registration and credential checks layered over the store and token service."""

    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenService,
        bcrypt_rounds: int | None = None,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        self._dummy_hash = dummy_hash(bcrypt_rounds)

    def register(self, email: str, password: str, first_name: str, last_name: str) -> User:
        """Create an active account. Raises ConflictError on a duplicate email."""
        password_hash = hash_password(password, rounds=self.bcrypt_rounds)
        user = self.store.create_user(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
        )
        logger.info("User registered", extra={"user_id": user.id})
        return user

    def login(self, email: str, password: str) -> LoginResult:
        """
        Check credentials and issue a token.

        Unknown email and wrong password both raise InvalidCredentialsError with
        the same message. A correct password on a deactivated account raises
        AccountDeactivatedError. On success last_login is stamped.
        """
        user = self.store.find_user_by_email(email)
        if user is None:
            verify_password(password, self._dummy_hash)
            logger.warning("Login failed", extra={"reason": "invalid_credentials"})
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.warning("Login failed", extra={"reason": "invalid_credentials"})
            raise InvalidCredentialsError()
        if not user.is_active:
            logger.warning("Login refused", extra={"reason": "deactivated", "user_id": user.id})
            raise AccountDeactivatedError()

        user = self.store.update_user(user.id, last_login=datetime.now(UTC))
        token = self.tokens.issue(user)
        logger.info("User logged in", extra={"user_id": user.id})
        return LoginResult(user=user, token=token)

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        """Replace the password hash. Raises IncorrectPasswordError (400) if current_password is wrong."""
        user = self.store.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise IncorrectPasswordError()
        self.store.update_user(
            user_id,
            password_hash=hash_password(new_password, rounds=self.bcrypt_rounds),
        )
        logger.info("Password changed", extra={"user_id": user_id})
