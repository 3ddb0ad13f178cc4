"""Role and permission management, plus permission-resolution queries."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import (
    can_create_roles,
    can_delete_roles,
    can_manage_permissions,
    can_manage_roles,
    can_read_permissions,
    can_read_roles,
    can_read_users,
    can_update_roles,
    get_credential_store,
    get_permission_resolver,
)
from app.core.exceptions import NotFoundError
from app.models import User
from app.schemas.auth import UserOut
from app.schemas.common import MessageResponse
from app.schemas.rbac import (
    PermissionAssignmentRequest,
    PermissionCheckResponse,
    PermissionCreateRequest,
    PermissionOut,
    RoleCreateRequest,
    RoleDetailResponse,
    RoleOut,
    RoleUpdateRequest,
    UsersByRoleResponse,
)
from app.services.credential_store import CredentialStore
from app.services.permission_resolver import PermissionResolver

router = APIRouter()


@router.get("/roles", response_model=list[RoleOut])
def list_roles(
    _user: Annotated[User, Depends(can_read_roles)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> list[RoleOut]:
    return [RoleOut.model_validate(r) for r in store.list_roles()]


@router.get("/roles/{role_id}", response_model=RoleDetailResponse)
def get_role(
    role_id: int,
    _user: Annotated[User, Depends(can_read_roles)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> RoleDetailResponse:
    role = store.find_role_by_id(role_id)
    if role is None:
        raise NotFoundError("Role not found")
    return RoleDetailResponse(
        role=RoleOut.model_validate(role),
        permissions=[
            PermissionOut.model_validate(p) for p in resolver.get_role_permissions(role.id)
        ],
    )


@router.post("/roles", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
def create_role(
    body: RoleCreateRequest,
    _user: Annotated[User, Depends(can_create_roles)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> RoleOut:
    role = store.create_role(body.name, body.description, is_active=body.is_active)
    return RoleOut.model_validate(role)


@router.put("/roles/{role_id}", response_model=RoleOut)
def update_role(
    role_id: int,
    body: RoleUpdateRequest,
    _user: Annotated[User, Depends(can_update_roles)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> RoleOut:
    role = store.update_role(
        role_id,
        name=body.name,
        description=body.description,
        is_active=body.is_active,
    )
    return RoleOut.model_validate(role)


@router.delete("/roles/{role_id}", response_model=MessageResponse)
def delete_role(
    role_id: int,
    _user: Annotated[User, Depends(can_delete_roles)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MessageResponse:
    """Delete a role; its user assignments and permission grants go with it."""
    store.delete_role(role_id)
    return MessageResponse(message="Role deleted successfully")


@router.get("/roles/{role_id}/permissions", response_model=list[PermissionOut])
def get_role_permissions(
    role_id: int,
    _user: Annotated[User, Depends(can_read_roles)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> list[PermissionOut]:
    if store.find_role_by_id(role_id) is None:
        raise NotFoundError("Role not found")
    return [PermissionOut.model_validate(p) for p in resolver.get_role_permissions(role_id)]


@router.get("/roles/name/{role_name}/users", response_model=UsersByRoleResponse)
def get_users_by_role(
    role_name: str,
    _user: Annotated[User, Depends(can_read_roles)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> UsersByRoleResponse:
    users = resolver.get_users_by_role(role_name)
    return UsersByRoleResponse(
        role_name=role_name,
        users=[UserOut.model_validate(u) for u in users],
    )


@router.get("/permissions", response_model=list[PermissionOut])
def list_permissions(
    _user: Annotated[User, Depends(can_read_permissions)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> list[PermissionOut]:
    return [PermissionOut.model_validate(p) for p in store.list_permissions()]


@router.get("/permissions/{permission_id}", response_model=PermissionOut)
def get_permission(
    permission_id: int,
    _user: Annotated[User, Depends(can_read_permissions)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> PermissionOut:
    permission = store.find_permission_by_id(permission_id)
    if permission is None:
        raise NotFoundError("Permission not found")
    return PermissionOut.model_validate(permission)


@router.post("/permissions", response_model=PermissionOut, status_code=status.HTTP_201_CREATED)
def create_permission(
    body: PermissionCreateRequest,
    _user: Annotated[User, Depends(can_manage_permissions)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> PermissionOut:
    permission = store.create_permission(
        name=body.name,
        resource=body.resource,
        action=body.action,
        description=body.description,
        is_active=body.is_active,
    )
    return PermissionOut.model_validate(permission)


@router.post("/assign-permission", response_model=MessageResponse)
def assign_permission(
    body: PermissionAssignmentRequest,
    _user: Annotated[User, Depends(can_manage_roles)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MessageResponse:
    store.add_role_permission(body.role_id, body.permission_id)
    return MessageResponse(message="Permission assigned successfully")


@router.post("/remove-permission", response_model=MessageResponse)
def remove_permission(
    body: PermissionAssignmentRequest,
    _user: Annotated[User, Depends(can_manage_roles)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MessageResponse:
    store.remove_role_permission(body.role_id, body.permission_id)
    return MessageResponse(message="Permission removed successfully")


@router.get("/users/{user_id}/permissions", response_model=list[PermissionOut])
def get_user_permissions(
    user_id: int,
    _user: Annotated[User, Depends(can_read_users)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> list[PermissionOut]:
    return [PermissionOut.model_validate(p) for p in resolver.get_user_permissions(user_id)]


@router.get("/users/{user_id}/check-permission", response_model=PermissionCheckResponse)
def check_user_permission(
    user_id: int,
    _user: Annotated[User, Depends(can_read_users)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
    resource: str = Query(..., min_length=1),
    action: str = Query(..., min_length=1),
) -> PermissionCheckResponse:
    """Answer whether user_id holds (resource, action), matched exactly."""
    return PermissionCheckResponse(
        user_id=user_id,
        resource=resource,
        action=action,
        has_permission=resolver.user_has_permission(user_id, resource, action),
    )
