"""Unit tests for app.services.permission_resolver: live, exact-match resolution."""

import unittest

from app.services.credential_store import CredentialStore
from app.services.permission_resolver import PermissionResolver
from tests.helpers import _permission, _role, _user, make_session


class ResolverTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.store = CredentialStore(self.session)
        self.resolver = PermissionResolver(self.session)
        self.alice = _user(self.store)

    def tearDown(self) -> None:
        self.session.close()

    def grant(self, role, resource: str, action: str, **kwargs: object):
        permission = _permission(self.store, resource=resource, action=action, **kwargs)
        self.store.add_role_permission(role.id, permission.id)
        return permission


class TestUserHasPermission(ResolverTestCase):
    def test_granted_through_role(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "UPDATE")
        self.store.add_user_role(self.alice.id, editor.id)
        self.assertTrue(self.resolver.user_has_permission(self.alice.id, "docs", "UPDATE"))

    def test_exact_match_only(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "UPDATE")
        self.store.add_user_role(self.alice.id, editor.id)
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "docs", "DELETE"))
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "Docs", "UPDATE"))
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "doc", "UPDATE"))
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "docs", "update"))

    def test_manage_does_not_imply_other_actions(self) -> None:
        admin = _role(self.store, "ADMIN")
        self.grant(admin, "employees", "MANAGE")
        self.store.add_user_role(self.alice.id, admin.id)
        self.assertTrue(self.resolver.user_has_permission(self.alice.id, "employees", "MANAGE"))
        for action in ("CREATE", "READ", "UPDATE", "DELETE"):
            with self.subTest(action=action):
                self.assertFalse(
                    self.resolver.user_has_permission(self.alice.id, "employees", action)
                )

    def test_revoking_only_role_takes_effect_immediately(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "UPDATE")
        self.store.add_user_role(self.alice.id, editor.id)
        self.assertTrue(self.resolver.user_has_permission(self.alice.id, "docs", "UPDATE"))
        self.store.remove_user_role(self.alice.id, editor.id)
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "docs", "UPDATE"))

    def test_revoking_permission_from_role_takes_effect_immediately(self) -> None:
        editor = _role(self.store, "EDITOR")
        permission = self.grant(editor, "docs", "UPDATE")
        self.store.add_user_role(self.alice.id, editor.id)
        self.store.remove_role_permission(editor.id, permission.id)
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "docs", "UPDATE"))

    def test_still_granted_through_second_role(self) -> None:
        editor = _role(self.store, "EDITOR")
        writer = _role(self.store, "WRITER")
        permission = self.grant(editor, "docs", "UPDATE")
        self.store.add_role_permission(writer.id, permission.id)
        self.store.add_user_role(self.alice.id, editor.id)
        self.store.add_user_role(self.alice.id, writer.id)
        self.store.remove_user_role(self.alice.id, editor.id)
        self.assertTrue(self.resolver.user_has_permission(self.alice.id, "docs", "UPDATE"))

    def test_inactive_role_grants_nothing(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "UPDATE")
        self.store.add_user_role(self.alice.id, editor.id)
        self.store.update_role(editor.id, is_active=False)
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "docs", "UPDATE"))

    def test_inactive_permission_grants_nothing(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "UPDATE", is_active=False)
        self.store.add_user_role(self.alice.id, editor.id)
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "docs", "UPDATE"))

    def test_deleted_role_grants_nothing(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "UPDATE")
        self.store.add_user_role(self.alice.id, editor.id)
        self.store.delete_role(editor.id)
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "docs", "UPDATE"))

    def test_user_without_roles(self) -> None:
        self.assertFalse(self.resolver.user_has_permission(self.alice.id, "docs", "READ"))


class TestRoleQueries(ResolverTestCase):
    def test_user_has_role_exact_and_active(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.store.add_user_role(self.alice.id, editor.id)
        self.assertTrue(self.resolver.user_has_role(self.alice.id, "EDITOR"))
        self.assertFalse(self.resolver.user_has_role(self.alice.id, "editor"))
        self.assertFalse(self.resolver.user_has_role(self.alice.id, "ADMIN"))
        self.store.update_role(editor.id, is_active=False)
        self.assertFalse(self.resolver.user_has_role(self.alice.id, "EDITOR"))

    def test_user_has_any_role(self) -> None:
        manager = _role(self.store, "MANAGER")
        self.store.add_user_role(self.alice.id, manager.id)
        self.assertTrue(self.resolver.user_has_any_role(self.alice.id, ["ADMIN", "MANAGER"]))
        self.assertFalse(self.resolver.user_has_any_role(self.alice.id, ["ADMIN", "HR_MANAGER"]))
        self.assertFalse(self.resolver.user_has_any_role(self.alice.id, []))

    def test_get_user_roles_only_active(self) -> None:
        editor = _role(self.store, "EDITOR")
        archived = _role(self.store, "ARCHIVED", is_active=False)
        self.store.add_user_role(self.alice.id, editor.id)
        self.store.add_user_role(self.alice.id, archived.id)
        self.assertEqual([r.name for r in self.resolver.get_user_roles(self.alice.id)], ["EDITOR"])

    def test_get_role_permissions_only_active(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "UPDATE")
        self.grant(editor, "docs", "DELETE", is_active=False)
        perms = self.resolver.get_role_permissions(editor.id)
        self.assertEqual([(p.resource, p.action) for p in perms], [("docs", "UPDATE")])

    def test_get_users_by_role(self) -> None:
        editor = _role(self.store, "EDITOR")
        bob = _user(self.store, email="bob@example.com", first_name="Bob")
        carol = _user(self.store, email="carol@example.com", first_name="Carol", is_active=False)
        for user in (self.alice, bob, carol):
            self.store.add_user_role(user.id, editor.id)
        users = self.resolver.get_users_by_role("EDITOR")
        self.assertEqual({u.email for u in users}, {"alice@example.com", "bob@example.com"})
        self.store.update_role(editor.id, is_active=False)
        self.assertEqual(self.resolver.get_users_by_role("EDITOR"), [])


class TestUserPermissions(ResolverTestCase):
    def test_union_deduplicated_by_id(self) -> None:
        editor = _role(self.store, "EDITOR")
        reviewer = _role(self.store, "REVIEWER")
        shared = self.grant(editor, "docs", "READ")
        self.store.add_role_permission(reviewer.id, shared.id)
        self.grant(editor, "docs", "UPDATE")
        self.grant(reviewer, "comments", "CREATE")
        self.store.add_user_role(self.alice.id, editor.id)
        self.store.add_user_role(self.alice.id, reviewer.id)

        permissions = self.resolver.get_user_permissions(self.alice.id)
        ids = [p.id for p in permissions]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(
            {(p.resource, p.action) for p in permissions},
            {("docs", "READ"), ("docs", "UPDATE"), ("comments", "CREATE")},
        )

    def test_repeated_resolution_is_stable(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "READ")
        self.grant(editor, "docs", "UPDATE")
        self.store.add_user_role(self.alice.id, editor.id)
        first = {p.id for p in self.resolver.get_user_permissions(self.alice.id)}
        second = {p.id for p in self.resolver.get_user_permissions(self.alice.id)}
        self.assertEqual(first, second)

    def test_inactive_role_excluded_from_union(self) -> None:
        editor = _role(self.store, "EDITOR")
        self.grant(editor, "docs", "UPDATE")
        self.store.add_user_role(self.alice.id, editor.id)
        self.store.update_role(editor.id, is_active=False)
        self.assertEqual(self.resolver.get_user_permissions(self.alice.id), [])


if __name__ == "__main__":
    unittest.main()
