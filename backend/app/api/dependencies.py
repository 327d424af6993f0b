"""
API Dependencies
Reusable FastAPI dependencies for endpoint protection.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import ForbiddenError, InvalidTokenError, UnauthenticatedError
from app.models.user import User, UserRole
from app.services import auth_service
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The identity resolved from a verified token for the current request."""
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_bearer_token(request: Request) -> Optional[str]:
    """Read the token from ``Authorization: Bearer <token>``."""
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def authenticate(token: Optional[str], store: UserStore) -> Principal:
    """
    Verify the token and resolve its subject.
    Raises UnauthenticatedError if any step fails.
    """
    if not token:
        raise UnauthenticatedError("No token, authorization denied")

    try:
        claims = auth_service.verify_access_token(token)
    except InvalidTokenError as e:
        logger.info(f"Rejected access token: {e.reason}")
        raise UnauthenticatedError(e.message)

    if not isinstance(claims["id"], int):
        raise UnauthenticatedError("Token is not valid")

    user: Optional[User] = await store.find_by_id(claims["id"])
    if user is None or not user.is_active:
        raise UnauthenticatedError("Token is not valid")

    # Stored role, not the claim
    return Principal(id=user.id, role=user.role)


async def get_current_user(
    request: Request,
    store: UserStore = Depends(get_user_store),
) -> Principal:
    """
    Dependency that enforces authentication.
    Always requires a valid user - use get_current_user_optional for public endpoints.
    """
    return await authenticate(get_bearer_token(request), store)


async def get_current_user_optional(
    request: Request,
    store: UserStore = Depends(get_user_store),
) -> Optional[Principal]:
    """
    Resolve the principal if a valid token is present.
    Returns None if token is missing or invalid.
    """
    token = get_bearer_token(request)
    if not token:
        return None
    try:
        return await authenticate(token, store)
    except UnauthenticatedError:
        return None


async def require_admin(principal: Principal = Depends(get_current_user)) -> Principal:
    """
    Dependency that enforces admin privileges.
    User must be authenticated (via get_current_user) and have the admin role.
    """
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
    return principal
