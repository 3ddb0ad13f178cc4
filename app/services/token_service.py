"""Token service: issue and verify signed, time-bound identity tokens (JWT)."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt

from app.core.exceptions import InvalidTokenError
from app.schemas.auth import TokenClaims

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.models import User


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """
    Stateless bearer-token issuer. Holds only the signing secret, algorithm and
    lifetime; never touches the database. Tokens are not persisted, so expiry
    is their only lifecycle bound.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 1440,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            expire_minutes=settings.JWT_EXPIRE_MINUTES,
        )

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self.expire_minutes * 60

    def issue(self, user: "User") -> str:
        """Create a signed token carrying the user's id, email and names."""
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token; return its claims.
        Raises InvalidTokenError on bad signature, malformed payload or expiry.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "require": ["sub", "exp", "iat"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e

        # Expiry is checked against the injected clock rather than PyJWT's wall clock.
        exp = payload.get("exp")
        iat = payload.get("iat")
        if not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
            raise InvalidTokenError()
        if self._clock().timestamp() >= exp:
            raise InvalidTokenError()

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidTokenError() from e

        return TokenClaims(
            id=user_id,
            email=payload.get("email") or "",
            first_name=payload.get("first_name") or "",
            last_name=payload.get("last_name") or "",
            issued_at=datetime.fromtimestamp(iat, UTC),
            expires_at=datetime.fromtimestamp(exp, UTC),
        )
