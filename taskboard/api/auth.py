"""Auth API router: register, login, me."""

from fastapi import APIRouter, Depends

from taskboard.api.deps import get_user_service
from taskboard.schemas.schemas import LoginRequest, RegisterRequest, TokenResponse, UserOut
from taskboard.services.user_service import UserService
from taskboard.core.security import create_access_token, get_current_user_id

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201)
async def register(body: RegisterRequest, users: UserService = Depends(get_user_service)):
    """Register a new user."""
    user = users.register(body.username, body.email, body.password, body.full_name)
    return UserOut.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, users: UserService = Depends(get_user_service)):
    """Authenticate and return a bearer token."""
    user = users.authenticate(body.username_or_email, body.password)
    token = create_access_token({"sub": user.id, "username": user.username})
    return TokenResponse(
        access_token=token,
        user={
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "full_name": user.full_name,
        },
    )


@router.get("/me", response_model=UserOut)
async def get_me(
    users: UserService = Depends(get_user_service),
    user_id: str = Depends(get_current_user_id),
):
    """Get current user profile."""
    return UserOut.model_validate(users.get(user_id))
