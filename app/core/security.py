"""Password hashing and input policy for credentials."""

import re

import bcrypt

from app.core.config import settings

# Min/max lengths for credential and profile validation.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
NAME_MIN_LEN = 2
NAME_MAX_LEN = 50

# At least one lowercase, one uppercase, one digit and one special character.
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&]).+$")
PASSWORD_POLICY_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one number, and one special character (@$!%*?&)"
)

# Role and permission names: uppercase letters and underscores only.
RBAC_NAME_PATTERN = r"^[A-Z_]+$"


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store and look them up lower-cased."""
    return email.strip().lower()


def check_password_policy(password: str) -> str:
    """Return the password unchanged, or raise ValueError describing the policy violation."""
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise ValueError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters"
        )
    if not PASSWORD_PATTERN.match(password):
        raise ValueError(PASSWORD_POLICY_MESSAGE)
    return password


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    cost = rounds if rounds is not None else settings.BCRYPT_ROUNDS
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=cost)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False
