"""Account endpoints: register, login, token refresh, profile, password."""

import logging

from fastapi import APIRouter, Depends, status

from notive.api.dependencies import (
    get_account_service,
    get_bearer_token,
    get_current_user_id,
)
from notive.api.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdateResponse,
    RegisterRequest,
    SuccessResponse,
    UpdateProfileRequest,
    UserResponse,
)
from notive.application.services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    """Create an account and return its first token."""
    result = await accounts.register(body.name, body.email, body.password)
    return AuthResponse.from_result(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    """Exchange email + password for a token."""
    result = await accounts.login(body.email, body.password)
    return AuthResponse.from_result(result)


# Hey future me - this route must NOT use get_current_user_id! That guard rejects expired
# tokens with 403, and an expired token is exactly what clients send here. The service
# validates the signature itself and only skips the expiry check.
@router.post("/refresh-token", response_model=AuthResponse)
async def refresh_token(
    token: str | None = Depends(get_bearer_token),
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    """Trade a (possibly expired) token for a new one plus a fresh profile."""
    result = await accounts.refresh(token)
    return AuthResponse.from_result(result)


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    user_id: int = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    user = await accounts.get_profile(user_id)
    return UserResponse.from_entity(user)


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    body: UpdateProfileRequest,
    user_id: int = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_account_service),
) -> ProfileUpdateResponse:
    user = await accounts.update_profile(user_id, body.name, body.email)
    return ProfileUpdateResponse(user=UserResponse.from_entity(user))


@router.post("/change-password", response_model=SuccessResponse)
async def change_password(
    body: ChangePasswordRequest,
    user_id: int = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_account_service),
) -> SuccessResponse:
    await accounts.change_password(user_id, body.old_password, body.new_password)
    return SuccessResponse()
