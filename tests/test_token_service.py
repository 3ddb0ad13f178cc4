"""Unit tests for app.services.token_service: issue/verify, tampering and expiry."""

import unittest
from datetime import timedelta
from types import SimpleNamespace

import jwt

from app.core.exceptions import InvalidTokenError
from app.services.token_service import TokenService
from tests.helpers import FIXED_NOW, TEST_SECRET


class _Clock:
    """Settable clock so expiry can be tested without sleeping."""

    def __init__(self, now=FIXED_NOW) -> None:
        self.now = now

    def __call__(self):
        return self.now


def _fake_user(**kwargs: object) -> SimpleNamespace:
    defaults = {
        "id": 42,
        "email": "alice@example.com",
        "first_name": "Alice",
        "last_name": "Smith",
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


class TestIssueAndVerify(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        self.tokens = TokenService(TEST_SECRET, expire_minutes=60, clock=self.clock)

    def test_verify_returns_issued_identity(self) -> None:
        token = self.tokens.issue(_fake_user())
        claims = self.tokens.verify(token)
        self.assertEqual(claims.id, 42)
        self.assertEqual(claims.email, "alice@example.com")
        self.assertEqual(claims.first_name, "Alice")
        self.assertEqual(claims.last_name, "Smith")
        self.assertEqual(claims.issued_at, FIXED_NOW)
        self.assertEqual(claims.expires_at, FIXED_NOW + timedelta(minutes=60))

    def test_token_valid_just_before_expiry(self) -> None:
        token = self.tokens.issue(_fake_user())
        self.clock.now = FIXED_NOW + timedelta(minutes=59, seconds=59)
        self.assertEqual(self.tokens.verify(token).id, 42)

    def test_token_rejected_after_expiry(self) -> None:
        token = self.tokens.issue(_fake_user())
        self.clock.now = FIXED_NOW + timedelta(minutes=60)
        with self.assertRaises(InvalidTokenError):
            self.tokens.verify(token)

    def test_default_lifetime_is_one_day(self) -> None:
        tokens = TokenService(TEST_SECRET, clock=self.clock)
        self.assertEqual(tokens.expires_in, 24 * 60 * 60)
        token = tokens.issue(_fake_user())
        self.clock.now = FIXED_NOW + timedelta(hours=23)
        tokens.verify(token)
        self.clock.now = FIXED_NOW + timedelta(hours=24, seconds=1)
        with self.assertRaises(InvalidTokenError):
            tokens.verify(token)

    def test_issue_is_deterministic_for_same_inputs(self) -> None:
        self.assertEqual(self.tokens.issue(_fake_user()), self.tokens.issue(_fake_user()))


class TestRejectedTokens(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        self.tokens = TokenService(TEST_SECRET, clock=self.clock)

    def test_wrong_secret(self) -> None:
        other = TokenService("another-secret", clock=self.clock)
        with self.assertRaises(InvalidTokenError):
            self.tokens.verify(other.issue(_fake_user()))

    def test_tampered_payload(self) -> None:
        header, payload, signature = self.tokens.issue(_fake_user()).split(".")
        forged = jwt.encode(
            {"sub": "1", "iat": FIXED_NOW, "exp": FIXED_NOW + timedelta(days=1)},
            "guess",
            algorithm="HS256",
        ).split(".")[1]
        with self.assertRaises(InvalidTokenError):
            self.tokens.verify(".".join([header, forged, signature]))

    def test_malformed_and_empty(self) -> None:
        for token in ("", "not-a-jwt", "a.b.c"):
            with self.subTest(token=token):
                with self.assertRaises(InvalidTokenError):
                    self.tokens.verify(token)

    def test_non_integer_subject(self) -> None:
        token = jwt.encode(
            {"sub": "alice", "iat": FIXED_NOW, "exp": FIXED_NOW + timedelta(hours=1)},
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(InvalidTokenError):
            self.tokens.verify(token)

    def test_missing_expiry(self) -> None:
        token = jwt.encode({"sub": "1", "iat": FIXED_NOW}, TEST_SECRET, algorithm="HS256")
        with self.assertRaises(InvalidTokenError):
            self.tokens.verify(token)

    def test_algorithm_none_rejected(self) -> None:
        token = jwt.encode(
            {"sub": "1", "iat": FIXED_NOW, "exp": FIXED_NOW + timedelta(hours=1)},
            None,
            algorithm="none",
        )
        with self.assertRaises(InvalidTokenError):
            self.tokens.verify(token)

    def test_empty_secret_refused(self) -> None:
        with self.assertRaises(ValueError):
            TokenService("")


if __name__ == "__main__":
    unittest.main()
