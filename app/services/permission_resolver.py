"""Permission resolver: live queries over the User -> Role -> Permission graph.

Nothing is cached. Every answer is computed from the junction tables at call
time, so revoking a role or permission takes effect on the next check.
Matching is exact on (resource, action); MANAGE does not imply other actions.
"""

from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.models import Permission, Role, RolePermission, User, UserRole


class PermissionResolver:
    """Answers role and permission queries for a user, bound to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_user_roles(self, user_id: int) -> list[Role]:
        """Active roles held by the user."""
        return (
            self.session.query(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == user_id, Role.is_active.is_(True))
            .order_by(Role.name)
            .all()
        )

    def get_role_permissions(self, role_id: int) -> list[Permission]:
        """Active permissions granted to the role."""
        return (
            self.session.query(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .filter(RolePermission.role_id == role_id, Permission.is_active.is_(True))
            .order_by(Permission.id)
            .all()
        )

    def get_user_permissions(self, user_id: int) -> list[Permission]:
        """
        Union of active permissions over every active role the user holds,
        one entry per permission id.
        """
        return (
            self.session.query(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(Role, Role.id == RolePermission.role_id)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(
                UserRole.user_id == user_id,
                Role.is_active.is_(True),
                Permission.is_active.is_(True),
            )
            .distinct()
            .order_by(Permission.id)
            .all()
        )

    def user_has_permission(self, user_id: int, resource: str, action: str) -> bool:
        """True iff an active role of the user grants an active (resource, action) permission."""
        query = (
            self.session.query(UserRole.id)
            .join(Role, Role.id == UserRole.role_id)
            .join(RolePermission, RolePermission.role_id == Role.id)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .filter(
                UserRole.user_id == user_id,
                Role.is_active.is_(True),
                Permission.is_active.is_(True),
                Permission.resource == resource,
                Permission.action == action,
            )
        )
        return self.session.query(query.exists()).scalar()

    def user_has_role(self, user_id: int, role_name: str) -> bool:
        """True iff the user holds an active role with exactly this name."""
        return self.user_has_any_role(user_id, [role_name])

    def user_has_any_role(self, user_id: int, role_names: Iterable[str]) -> bool:
        """True iff the user's active role names intersect role_names."""
        names = list(role_names)
        if not names:
            return False
        query = (
            self.session.query(UserRole.id)
            .join(Role, Role.id == UserRole.role_id)
            .filter(
                UserRole.user_id == user_id,
                Role.is_active.is_(True),
                Role.name.in_(names),
            )
        )
        return self.session.query(query.exists()).scalar()

    def get_users_by_role(self, role_name: str) -> list[User]:
        """Active users holding the active role role_name."""
        return (
            self.session.query(User)
            .join(UserRole, UserRole.user_id == User.id)
            .join(Role, Role.id == UserRole.role_id)
            .filter(
                Role.name == role_name,
                Role.is_active.is_(True),
                User.is_active.is_(True),
            )
            .order_by(User.id)
            .all()
        )
