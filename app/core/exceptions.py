"""Error taxonomy for the access control core.

Every failure the core can report is one of these classes. The API layer maps
them to HTTP responses using ``status_code``; services never raise
``HTTPException`` directly.
"""


class AccessControlError(Exception):
    """Base class: carries a client-safe message and the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    @property
    def error(self) -> str:
        return type(self).__name__.removesuffix("Error")


class ConflictError(AccessControlError):
    """Uniqueness violation: duplicate email, role name or junction pair."""

    status_code = 409


class NotFoundError(AccessControlError):
    """Referenced id or junction pair does not exist."""

    status_code = 404


class InvalidCredentialsError(AccessControlError):
    """Login or password mismatch. Deliberately generic to prevent account enumeration."""

    status_code = 401

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class AccountDeactivatedError(AccessControlError):
    status_code = 401

    def __init__(self, message: str = "Account is deactivated") -> None:
        super().__init__(message)


class MissingTokenError(AccessControlError):
    """No Authorization header, or one that is not ``Bearer <token>``."""

    status_code = 401

    def __init__(self, message: str = "Access token required") -> None:
        super().__init__(message)


class InvalidTokenError(AccessControlError):
    """Malformed, forged or expired token, or a token whose user is gone or inactive."""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class ForbiddenError(AccessControlError):
    """Authenticated, but lacking the required permission or role."""

    status_code = 403

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)


class IncorrectPasswordError(InvalidCredentialsError):
    """Password change refused because the current password does not match."""

    status_code = 400

    def __init__(self, message: str = "Current password is incorrect") -> None:
        super().__init__(message)
