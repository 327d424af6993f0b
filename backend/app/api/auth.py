"""
Authentication Router
Endpoints for the current session's user information.
"""

from fastapi import APIRouter, Depends

from app.api.dependencies import Principal, get_current_user, get_user_store
from app.exceptions import UnauthenticatedError
from app.schemas.user import UserResponse
from app.services.user_store import UserStore

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(
    principal: Principal = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
):
    """
    Get current user information based on the bearer token.
    Requires authentication.
    """
    user = await store.find_by_id(principal.id)
    if user is None:
        raise UnauthenticatedError("Token is not valid")
    return user
