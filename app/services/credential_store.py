"""Credential store: durable CRUD for users, roles, permissions and their junction rows.

Uniqueness is enforced by the database. Inserts that may collide (user email,
role/permission name, user-role and role-permission pairs) are attempted
directly and the resulting IntegrityError is the conflict signal; there is no
read-then-insert check. Deletes remove junction rows in the same transaction
as their parent.
"""

import logging
import re
from typing import Any

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.core.security import RBAC_NAME_PATTERN, normalize_email
from app.models import Permission, PermissionAction, Role, RolePermission, User, UserRole

logger = logging.getLogger(__name__)

# Fields a caller may change through update_user / update_role.
USER_UPDATABLE_FIELDS = ("first_name", "last_name", "is_active", "last_login", "password_hash")
ROLE_UPDATABLE_FIELDS = ("name", "description", "is_active")


def check_rbac_name(name: str) -> str:
    """Role and permission names are upper-case letters and underscores only."""
    if not isinstance(name, str) or not re.fullmatch(RBAC_NAME_PATTERN, name):
        raise ValueError(f"Invalid name '{name}': use upper-case letters and underscores")
    return name


class CredentialStore:
    """Storage handle for access-control entities, bound to one SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _commit_insert(self, row: Any, conflict_message: str) -> None:
        self.session.add(row)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError(conflict_message) from e
        self.session.refresh(row)

    def _commit_update(self, row: Any, conflict_message: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError(conflict_message) from e
        self.session.refresh(row)

    # Users

    def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """Insert a new active user. Raises ConflictError if the email is taken."""
        user = User(
            email=normalize_email(email),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            is_active=True,
        )
        self._commit_insert(user, "User with this email already exists")
        logger.info("User created", extra={"user_id": user.id})
        return user

    def find_user_by_email(self, email: str) -> User | None:
        return (
            self.session.query(User)
            .filter(User.email == normalize_email(email))
            .first()
        )

    def find_user_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def _user_query(self, search: str | None, is_active: bool | None):
        """
        search is a case-insensitive substring match over first name, last name
        and email. It is for administrative listing only and plays no part in
        authorization decisions.
        """
        query = self.session.query(User)
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                )
            )
        return query

    def list_users(
        self,
        search: str | None = None,
        is_active: bool | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> list[User]:
        """List users newest first, optionally filtered by activity and a search term."""
        return (
            self._user_query(search, is_active)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_users(self, search: str | None = None, is_active: bool | None = None) -> int:
        return self._user_query(search, is_active).count()

    def update_user(self, user_id: int, **fields: Any) -> User:
        """
        Partially update a user. Fields whose value is None are ignored.
        Raises NotFoundError if the user does not exist.
        """
        user = self.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        for name, value in fields.items():
            if name not in USER_UPDATABLE_FIELDS:
                raise ValueError(f"Field '{name}' cannot be updated")
            if value is not None:
                setattr(user, name, value)
        self._commit_update(user, "User update violates a uniqueness constraint")
        logger.info("User updated", extra={"user_id": user_id, "fields": sorted(fields)})
        return user

    def delete_user(self, user_id: int) -> None:
        """Delete a user and their role assignments. Raises NotFoundError if absent."""
        self.session.query(UserRole).filter(UserRole.user_id == user_id).delete(
            synchronize_session=False
        )
        deleted = (
            self.session.query(User)
            .filter(User.id == user_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.session.rollback()
            raise NotFoundError("User not found")
        self.session.commit()
        logger.info("User deleted", extra={"user_id": user_id})

    # Roles

    def create_role(self, name: str, description: str, is_active: bool = True) -> Role:
        """Insert a role. Raises ConflictError if the name is taken."""
        check_rbac_name(name)
        role = Role(name=name, description=description, is_active=is_active)
        self._commit_insert(role, f"Role '{name}' already exists")
        logger.info("Role created", extra={"role_id": role.id, "role_name": name})
        return role

    def find_role_by_id(self, role_id: int) -> Role | None:
        return self.session.get(Role, role_id)

    def find_role_by_name(self, name: str) -> Role | None:
        return self.session.query(Role).filter(Role.name == name).first()

    def list_roles(self) -> list[Role]:
        """Active roles ordered by name."""
        return (
            self.session.query(Role)
            .filter(Role.is_active.is_(True))
            .order_by(Role.name)
            .all()
        )

    def update_role(self, role_id: int, **fields: Any) -> Role:
        """Partially update a role; None values are ignored."""
        role = self.find_role_by_id(role_id)
        if role is None:
            raise NotFoundError("Role not found")
        for name in fields:
            if name not in ROLE_UPDATABLE_FIELDS:
                raise ValueError(f"Field '{name}' cannot be updated")
        if fields.get("name") is not None:
            check_rbac_name(fields["name"])
        for name, value in fields.items():
            if value is not None:
                setattr(role, name, value)
        self._commit_update(role, f"Role '{fields.get('name')}' already exists")
        logger.info("Role updated", extra={"role_id": role_id})
        return role

    def delete_role(self, role_id: int) -> None:
        """Delete a role together with every assignment and grant that references it."""
        self.session.query(UserRole).filter(UserRole.role_id == role_id).delete(
            synchronize_session=False
        )
        self.session.query(RolePermission).filter(RolePermission.role_id == role_id).delete(
            synchronize_session=False
        )
        deleted = (
            self.session.query(Role)
            .filter(Role.id == role_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.session.rollback()
            raise NotFoundError("Role not found")
        self.session.commit()
        logger.info("Role deleted", extra={"role_id": role_id})

    # Permissions

    def create_permission(
        self,
        name: str,
        resource: str,
        action: PermissionAction | str,
        description: str,
        is_active: bool = True,
    ) -> Permission:
        """Insert a permission. action must be one of PermissionAction."""
        check_rbac_name(name)
        action_value = PermissionAction(action).value
        permission = Permission(
            name=name,
            resource=resource,
            action=action_value,
            description=description,
            is_active=is_active,
        )
        self._commit_insert(permission, f"Permission '{name}' already exists")
        logger.info(
            "Permission created",
            extra={"permission_id": permission.id, "resource": resource, "action": action_value},
        )
        return permission

    def find_permission_by_id(self, permission_id: int) -> Permission | None:
        return self.session.get(Permission, permission_id)

    def find_permission_by_name(self, name: str) -> Permission | None:
        return self.session.query(Permission).filter(Permission.name == name).first()

    def list_permissions(self) -> list[Permission]:
        """Active permissions ordered by resource then action."""
        return (
            self.session.query(Permission)
            .filter(Permission.is_active.is_(True))
            .order_by(Permission.resource, Permission.action)
            .all()
        )

    def delete_permission(self, permission_id: int) -> None:
        """Delete a permission and every grant of it."""
        self.session.query(RolePermission).filter(
            RolePermission.permission_id == permission_id
        ).delete(synchronize_session=False)
        deleted = (
            self.session.query(Permission)
            .filter(Permission.id == permission_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.session.rollback()
            raise NotFoundError("Permission not found")
        self.session.commit()
        logger.info("Permission deleted", extra={"permission_id": permission_id})

    # Junctions

    def add_user_role(self, user_id: int, role_id: int) -> UserRole:
        """
        Assign a role to a user.

        Raises ConflictError if the user already holds the role, NotFoundError
        if either the user or the role does not exist.
        """
        link = UserRole(user_id=user_id, role_id=role_id)
        self.session.add(link)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if self.find_user_by_id(user_id) is None:
                raise NotFoundError("User not found") from e
            if self.find_role_by_id(role_id) is None:
                raise NotFoundError("Role not found") from e
            raise ConflictError("User already has this role") from e
        logger.info("Role assigned to user", extra={"user_id": user_id, "role_id": role_id})
        return link

    def remove_user_role(self, user_id: int, role_id: int) -> None:
        """Remove a role from a user. Raises NotFoundError if the user does not hold it."""
        deleted = (
            self.session.query(UserRole)
            .filter(UserRole.user_id == user_id, UserRole.role_id == role_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.session.rollback()
            raise NotFoundError("User does not have this role")
        self.session.commit()
        logger.info("Role removed from user", extra={"user_id": user_id, "role_id": role_id})

    def add_role_permission(self, role_id: int, permission_id: int) -> RolePermission:
        """
        Grant a permission to a role.

        Raises ConflictError if the role already has it, NotFoundError if either
        side does not exist.
        """
        link = RolePermission(role_id=role_id, permission_id=permission_id)
        self.session.add(link)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if self.find_role_by_id(role_id) is None:
                raise NotFoundError("Role not found") from e
            if self.find_permission_by_id(permission_id) is None:
                raise NotFoundError("Permission not found") from e
            raise ConflictError("Role already has this permission") from e
        logger.info(
            "Permission assigned to role",
            extra={"role_id": role_id, "permission_id": permission_id},
        )
        return link

    def remove_role_permission(self, role_id: int, permission_id: int) -> None:
        """Revoke a permission from a role. Raises NotFoundError if it was not granted."""
        deleted = (
            self.session.query(RolePermission)
            .filter(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.session.rollback()
            raise NotFoundError("Role does not have this permission")
        self.session.commit()
        logger.info(
            "Permission removed from role",
            extra={"role_id": role_id, "permission_id": permission_id},
        )
