from fastapi import APIRouter, Depends, Response
from typing import Optional

from ...api.deps import (
    get_backend, get_current_user, get_refresh_token, get_session_token,
    rate_limit_check
)
from ...core.backend import BackendClient
from ...core.security import CurrentUser, clear_session_cookies, set_session_cookies
from ...services.auth_service import AuthService
from ...schemas.auth import (
    RefreshTokenRequest, SignInRequest, SignUpRequest, SignUpResponse,
    TokenResponse, UserResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/sign-in", response_model=TokenResponse)
async def sign_in(
    login_data: SignInRequest,
    response: Response,
    backend: BackendClient = Depends(get_backend),
    _: None = Depends(rate_limit_check)
):
    """Sign in with email and password and start a session."""
    tokens = await AuthService(backend).sign_in(login_data)
    set_session_cookies(response, tokens.access_token, tokens.refresh_token, tokens.expires_in)
    return tokens


@router.post("/sign-up", response_model=SignUpResponse)
async def sign_up(
    user_data: SignUpRequest,
    response: Response,
    backend: BackendClient = Depends(get_backend),
    _: None = Depends(rate_limit_check)
):
    """Register a patient or doctor account."""
    result = await AuthService(backend).sign_up(user_data)

    if result.session:
        tokens = result.session
        set_session_cookies(response, tokens.access_token, tokens.refresh_token, tokens.expires_in)

    return result


@router.post("/sign-out")
async def sign_out(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    backend: BackendClient = Depends(get_backend)
):
    """End the session; cookies are cleared even if the backend call fails."""
    success = await AuthService(backend).sign_out(token)
    clear_session_cookies(response)

    return {
        "message": "Successfully signed out" if success else "Sign out completed",
        "redirect_to": "/auth",
    }


@router.post("/refresh", response_model=TokenResponse)
async def refresh_session(
    response: Response,
    refresh_data: Optional[RefreshTokenRequest] = None,
    cookie_token: Optional[str] = Depends(get_refresh_token),
    backend: BackendClient = Depends(get_backend)
):
    """Swap a refresh token (body or cookie) for a new session."""
    refresh_token = (refresh_data.refresh_token if refresh_data else None) or cookie_token
    tokens = await AuthService(backend).refresh_session(refresh_token)
    set_session_cookies(response, tokens.access_token, tokens.refresh_token, tokens.expires_in)
    return tokens


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: CurrentUser = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        role=current_user.role,
        first_name=current_user.metadata.get("first_name"),
        last_name=current_user.metadata.get("last_name"),
    )
