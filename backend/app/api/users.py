"""
Users Router
Registration, login, and user management (admin only).
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status

from app.api.dependencies import Principal, get_current_user_optional, get_user_store, require_admin
from app.api.rate_limit import limiter
from app.config import settings
from app.exceptions import ConflictError, ForbiddenError, InvalidCredentialsError, NotFoundError
from app.models.user import User, UserRole
from app.schemas.common import PaginatedResponse, Pagination
from app.schemas.user import AuthResponse, MessageResponse, UserCreate, UserLogin, UserResponse, UserUpdate
from app.services import auth_service
from app.services.user_query import build_user_filter, list_users as list_user_page
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(user: User) -> str:
    return auth_service.create_access_token(subject_id=user.id, role=user.role)


async def _ensure_other_admin(store: UserStore, user: User, action: str) -> None:
    """Refuse to remove the last active administrator."""
    if not (user.is_admin and user.is_active):
        return
    admins = await store.count(build_user_filter(role=UserRole.ADMIN.value, active="true"))
    if admins <= 1:
        raise ConflictError(f"Cannot {action} the last administrator")


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_register)
async def register(
    request: Request,
    user_data: UserCreate,
    store: UserStore = Depends(get_user_store),
    principal: Optional[Principal] = Depends(get_current_user_optional),
):
    """
    Create a user.

    Anonymous callers self-register: the role is always ``user``, the account
    is active, and a token is returned. An authenticated admin may set role
    and active flag; no token is minted for the new account.
    """
    fields = user_data.model_dump(exclude_unset=True)

    if principal is not None and principal.is_admin:
        user = await store.create(fields)
        return AuthResponse(token=None, user=UserResponse.model_validate(user))

    fields["role"] = UserRole.USER.value
    fields["is_active"] = True
    user = await store.create(fields)
    return AuthResponse(token=_issue_token(user), user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,
    login_data: UserLogin,
    store: UserStore = Depends(get_user_store),
):
    """
    Authenticate with email and password and return a bearer token.
    Rate limited to prevent brute force attacks.
    """
    user = await store.find_by_email(login_data.email)

    if not user or not await store.verify_secret(user, login_data.password):
        logger.warning(f"Failed login attempt for {login_data.email.strip().lower()}")
        raise InvalidCredentialsError()

    if not user.is_active:
        raise ForbiddenError("User account is deactivated")

    return AuthResponse(token=_issue_token(user), user=UserResponse.model_validate(user))


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    page: int = Query(1, description="Page number, clamped to 1 or more"),
    limit: int = Query(settings.default_page_size, description="Page size"),
    search: Optional[str] = Query(None, description="Substring of name or email"),
    role: Optional[str] = Query(None),
    active: Optional[str] = Query(None, description="'true' or 'false'"),
    sort: Optional[str] = Query(None, description="field:direction, e.g. createdAt:desc"),
    store: UserStore = Depends(get_user_store),
    admin: Principal = Depends(require_admin),
):
    """
    List users with search, filters, sorting and pagination (Admin only).
    """
    result = await list_user_page(
        store,
        search=search,
        role=role,
        active=active,
        sort=sort,
        page=page,
        limit=limit,
    )
    return PaginatedResponse[UserResponse](
        records=[UserResponse.model_validate(u) for u in result.records],
        pagination=Pagination(current=result.current, pages=result.pages, total=result.total),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    store: UserStore = Depends(get_user_store),
    admin: Principal = Depends(require_admin),
):
    """Get a single user (Admin only)."""
    user = await store.find_by_id(user_id)
    if not user:
        raise NotFoundError()
    return user


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    update_data: UserUpdate,
    store: UserStore = Depends(get_user_store),
    admin: Principal = Depends(require_admin),
):
    """
    Update a user (Admin only).
    Partial: edit fields, toggle active, change role or reset the password.
    """
    fields = update_data.model_dump(exclude_unset=True)

    user = await store.find_by_id(user_id)
    if not user:
        raise NotFoundError()

    demoting = fields.get("role", user.role) != UserRole.ADMIN.value
    deactivating = fields.get("is_active", user.is_active) is False
    if demoting or deactivating:
        await _ensure_other_admin(store, user, "demote or deactivate")

    return await store.update(user_id, fields)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    store: UserStore = Depends(get_user_store),
    admin: Principal = Depends(require_admin),
):
    """
    Delete a user permanently (Admin only).
    Cannot delete self or the last admin.
    """
    if user_id == admin.id:
        raise ConflictError("Cannot delete your own account")

    user = await store.find_by_id(user_id)
    if not user:
        raise NotFoundError()
    await _ensure_other_admin(store, user, "delete")

    if not await store.delete(user_id):
        raise NotFoundError()
    return MessageResponse(message="User deleted")
