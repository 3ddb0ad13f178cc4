"""Default RBAC catalogue: five roles, the resource/action permissions, and who gets what."""

import logging
from dataclasses import dataclass

from app.core.exceptions import ConflictError
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

DEFAULT_ROLES: dict[str, str] = {
    "ADMIN": "System administrator with full access to all features and data",
    "HR_MANAGER": "Human Resources manager with access to employee management and user administration",
    "MANAGER": "Department manager with access to team management and reporting",
    "EMPLOYEE": "Regular employee with limited access to personal data and basic features",
    "GUEST": "Guest user with read-only access to public information",
}

# (name, resource, action, description)
DEFAULT_PERMISSIONS: list[tuple[str, str, str, str]] = [
    ("USERS_MANAGE", "users", "MANAGE", "Full access to user management"),
    ("USERS_READ", "users", "READ", "Read user information"),
    ("USERS_CREATE", "users", "CREATE", "Create new users"),
    ("USERS_UPDATE", "users", "UPDATE", "Update user information"),
    ("USERS_DELETE", "users", "DELETE", "Delete users"),
    ("EMPLOYEES_MANAGE", "employees", "MANAGE", "Full access to employee management"),
    ("EMPLOYEES_READ", "employees", "READ", "Read employee information"),
    ("EMPLOYEES_CREATE", "employees", "CREATE", "Create new employees"),
    ("EMPLOYEES_UPDATE", "employees", "UPDATE", "Update employee information"),
    ("EMPLOYEES_DELETE", "employees", "DELETE", "Delete employees"),
    ("ROLES_MANAGE", "roles", "MANAGE", "Full access to role management"),
    ("ROLES_READ", "roles", "READ", "Read role information"),
    ("ROLES_CREATE", "roles", "CREATE", "Create new roles"),
    ("ROLES_UPDATE", "roles", "UPDATE", "Update role information"),
    ("ROLES_DELETE", "roles", "DELETE", "Delete roles"),
    ("PERMISSIONS_MANAGE", "permissions", "MANAGE", "Full access to permission management"),
    ("PERMISSIONS_READ", "permissions", "READ", "Read permission information"),
    ("REPORTS_MANAGE", "reports", "MANAGE", "Full access to reports and analytics"),
    ("REPORTS_READ", "reports", "READ", "Read reports and analytics"),
    ("SYSTEM_MANAGE", "system", "MANAGE", "Full access to system administration"),
]

# ADMIN receives every permission in DEFAULT_PERMISSIONS.
ROLE_PERMISSIONS: dict[str, list[str]] = {
    "ADMIN": [p[0] for p in DEFAULT_PERMISSIONS],
    "HR_MANAGER": [
        "USERS_MANAGE", "USERS_READ", "USERS_CREATE", "USERS_UPDATE", "USERS_DELETE",
        "EMPLOYEES_MANAGE", "EMPLOYEES_READ", "EMPLOYEES_CREATE", "EMPLOYEES_UPDATE",
        "EMPLOYEES_DELETE", "ROLES_READ", "PERMISSIONS_READ", "REPORTS_MANAGE", "REPORTS_READ",
    ],
    "MANAGER": [
        "USERS_READ", "EMPLOYEES_READ", "EMPLOYEES_CREATE", "EMPLOYEES_UPDATE",
        "ROLES_READ", "REPORTS_READ",
    ],
    "EMPLOYEE": ["USERS_READ", "EMPLOYEES_READ", "REPORTS_READ"],
    "GUEST": ["EMPLOYEES_READ"],
}


@dataclass
class SeedSummary:
    roles_created: int = 0
    permissions_created: int = 0
    grants_created: int = 0


def seed_rbac(store: CredentialStore) -> SeedSummary:
    """
    Create the default roles, permissions and grants. Safe to run repeatedly:
    existing rows are left as they are and duplicate grants are skipped.
    """
    summary = SeedSummary()

    roles = {}
    for name, description in DEFAULT_ROLES.items():
        role = store.find_role_by_name(name)
        if role is None:
            role = store.create_role(name, description)
            summary.roles_created += 1
        roles[name] = role

    permissions = {}
    for name, resource, action, description in DEFAULT_PERMISSIONS:
        permission = store.find_permission_by_name(name)
        if permission is None:
            permission = store.create_permission(name, resource, action, description)
            summary.permissions_created += 1
        permissions[name] = permission

    for role_name, permission_names in ROLE_PERMISSIONS.items():
        role_id = roles[role_name].id
        for permission_name in permission_names:
            try:
                store.add_role_permission(role_id, permissions[permission_name].id)
            except ConflictError:
                continue
            summary.grants_created += 1

    logger.info(
        "RBAC seed completed: roles_created=%s permissions_created=%s grants_created=%s",
        summary.roles_created,
        summary.permissions_created,
        summary.grants_created,
    )
    return summary
