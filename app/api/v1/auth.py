"""Authentication routes: register, login, profile, password, and user administration."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import (
    can_delete_users,
    can_manage_users,
    can_read_users,
    can_update_users,
    get_auth_service,
    get_credential_store,
    get_current_user,
    get_permission_resolver,
    get_token_service,
)
from app.core.exceptions import NotFoundError
from app.models import User
from app.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    RoleAssignmentRequest,
    TokenResponse,
    UserOut,
    UsersListResponse,
    UserUpdateRequest,
)
from app.schemas.common import MessageResponse
from app.schemas.rbac import PermissionOut, ProfileResponse, RoleOut, UserDetailResponse
from app.services.auth_service import AuthService
from app.services.credential_store import CredentialStore
from app.services.permission_resolver import PermissionResolver
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UserOut:
    """Create an account. Returns 409 if the email is already registered."""
    user = auth.register(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return UserOut.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    result = auth.login(body.email, body.password)
    return TokenResponse(
        access_token=result.token,
        token_type="bearer",
        expires_in=tokens.expires_in,
        user=UserOut.model_validate(result.user),
    )


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> ProfileResponse:
    """Current user with the roles and permissions resolved for them right now."""
    return ProfileResponse(
        user=UserOut.model_validate(current_user),
        roles=[RoleOut.model_validate(r) for r in resolver.get_user_roles(current_user.id)],
        permissions=[
            PermissionOut.model_validate(p)
            for p in resolver.get_user_permissions(current_user.id)
        ],
    )


@router.put("/profile", response_model=UserOut)
def update_profile(
    body: ProfileUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> UserOut:
    user = store.update_user(
        current_user.id,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return UserOut.model_validate(user)


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Replace the caller's password. A wrong current password is a 400 IncorrectPassword."""
    auth.change_password(current_user.id, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")


@router.post("/logout", response_model=MessageResponse)
def logout(
    current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    """Tokens are stateless; the client discards its token. Nothing is revoked server-side."""
    logger.info("User logged out", extra={"user_id": current_user.id})
    return MessageResponse(message="Logout successful")


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _user: Annotated[User, Depends(can_read_users)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    search: str | None = Query(default=None, max_length=100),
    is_active: bool | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> UsersListResponse:
    """List users newest first (requires users:READ)."""
    users = store.list_users(
        search=search,
        is_active=is_active,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return UsersListResponse(
        users=[UserOut.model_validate(u) for u in users],
        page=page,
        limit=limit,
        total=store.count_users(search=search, is_active=is_active),
    )


@router.get("/users/{user_id}", response_model=UserDetailResponse)
def get_user(
    user_id: int,
    _user: Annotated[User, Depends(can_read_users)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> UserDetailResponse:
    user = store.find_user_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserDetailResponse(
        user=UserOut.model_validate(user),
        roles=[RoleOut.model_validate(r) for r in resolver.get_user_roles(user.id)],
    )


@router.put("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    _user: Annotated[User, Depends(can_update_users)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> UserOut:
    """Update a user's names or active flag. Deactivation locks out their live tokens."""
    user = store.update_user(
        user_id,
        first_name=body.first_name,
        last_name=body.last_name,
        is_active=body.is_active,
    )
    return UserOut.model_validate(user)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    _user: Annotated[User, Depends(can_delete_users)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MessageResponse:
    store.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")


@router.post("/assign-role", response_model=MessageResponse)
def assign_role(
    body: RoleAssignmentRequest,
    _user: Annotated[User, Depends(can_manage_users)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MessageResponse:
    """Give a user a role. 409 if they already hold it."""
    store.add_user_role(body.user_id, body.role_id)
    return MessageResponse(message="Role assigned successfully")


@router.post("/remove-role", response_model=MessageResponse)
def remove_role(
    body: RoleAssignmentRequest,
    _user: Annotated[User, Depends(can_manage_users)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MessageResponse:
    """Take a role away from a user. 404 if they do not hold it."""
    store.remove_user_role(body.user_id, body.role_id)
    return MessageResponse(message="Role removed successfully")
