"""Users API router: listing, search, own profile."""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from taskboard.api.deps import get_user_service
from taskboard.schemas.schemas import (
    MessageResponse, PasswordChangeRequest, UserOut, UserUpdateRequest,
)
from taskboard.services.user_service import UserService
from taskboard.core.security import get_current_user_id

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=list[UserOut])
async def list_users(
    active: Optional[bool] = Query(None),
    users: UserService = Depends(get_user_service),
    user_id: str = Depends(get_current_user_id),
):
    """List users, optionally filtered by active flag."""
    return [UserOut.model_validate(u) for u in users.list_users(active)]


@router.get("/search", response_model=list[UserOut])
async def search_users(
    q: str = Query(..., min_length=1),
    users: UserService = Depends(get_user_service),
    user_id: str = Depends(get_current_user_id),
):
    """Search users by username, name or email (for invitations)."""
    return [UserOut.model_validate(u) for u in users.search(q)]


@router.put("/me", response_model=UserOut)
async def update_me(
    body: UserUpdateRequest,
    users: UserService = Depends(get_user_service),
    user_id: str = Depends(get_current_user_id),
):
    """Update own profile."""
    user = users.update_profile(user_id, user_id, full_name=body.full_name, email=body.email)
    return UserOut.model_validate(user)


@router.post("/me/password", response_model=MessageResponse)
async def change_password(
    body: PasswordChangeRequest,
    users: UserService = Depends(get_user_service),
    user_id: str = Depends(get_current_user_id),
):
    """Change own password."""
    users.change_password(user_id, user_id, body.old_password, body.new_password)
    return MessageResponse(message="Password changed")


@router.post("/me/deactivate", response_model=UserOut)
async def deactivate_me(
    users: UserService = Depends(get_user_service),
    user_id: str = Depends(get_current_user_id),
):
    """Deactivate own account (soft delete)."""
    return UserOut.model_validate(users.deactivate(user_id, user_id))
