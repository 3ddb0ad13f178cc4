"""Tests for app.scripts.create_user against an in-memory database."""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from types import SimpleNamespace
from unittest.mock import patch

from app.core.exceptions import NotFoundError
from app.scripts import create_user
from app.services.credential_store import CredentialStore
from app.services.permission_resolver import PermissionResolver
from tests.helpers import TEST_BCRYPT_ROUNDS, _role, make_session_factory, make_token_service


class TestCreateUserScript(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.session = self.session_factory()
        self.store = CredentialStore(self.session)
        self.admin_role = _role(self.store, "ADMIN")
        patches = (
            patch.object(create_user, "SessionLocal", self.session_factory),
            patch.object(create_user, "get_token_service", make_token_service),
            patch.object(
                create_user,
                "get_settings",
                return_value=SimpleNamespace(BCRYPT_ROUNDS=TEST_BCRYPT_ROUNDS),
            ),
        )
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def tearDown(self) -> None:
        self.session.close()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = create_user.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_creates_user_with_role(self) -> None:
        code, out, _ = self._run(
            "admin@example.com", "Admin123!@#", "System", "Administrator", "--role", "ADMIN"
        )
        self.assertEqual(code, 0)
        self.assertIn("with role 'ADMIN'", out)
        user = self.store.find_user_by_email("admin@example.com")
        self.assertTrue(PermissionResolver(self.session).user_has_role(user.id, "ADMIN"))

    def test_unknown_role_creates_nothing(self) -> None:
        code, _, err = self._run("bob@example.com", "Password1!", "Bob", "Jones", "--role", "NOPE")
        self.assertEqual(code, 1)
        self.assertIn("does not exist", err)
        self.assertIsNone(self.store.find_user_by_email("bob@example.com"))

    def test_failed_role_assignment_removes_new_user(self) -> None:
        with patch.object(
            CredentialStore, "add_user_role", side_effect=NotFoundError("Role not found")
        ):
            code, out, err = self._run(
                "bob@example.com", "Password1!", "Bob", "Jones", "--role", "ADMIN"
            )
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("Could not assign role 'ADMIN'", err)
        self.assertIsNone(self.store.find_user_by_email("bob@example.com"))

    def test_weak_password_rejected(self) -> None:
        code, _, err = self._run("bob@example.com", "password", "Bob", "Jones")
        self.assertEqual(code, 1)
        self.assertIn("password", err)
        self.assertIsNone(self.store.find_user_by_email("bob@example.com"))


if __name__ == "__main__":
    unittest.main()
