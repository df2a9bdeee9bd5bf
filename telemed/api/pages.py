"""Navigation routes: landing, auth form and dashboard.

Each returns the page's view model; where the page would navigate away
(signed-in user on /auth, visitor on /dashboard) it answers with a redirect.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from typing import Optional, Union

from .deps import get_backend, get_current_user_optional
from ..core.backend import BackendClient
from ..core.security import CurrentUser
from ..models.enums import UserRole
from ..schemas.auth import UserResponse
from ..schemas.views import AuthFormView, DashboardView, LandingView
from ..services.dashboard_service import DashboardService
from ..services.page_service import AUTH_MODES, SIGN_IN, build_auth_form, build_landing_view

router = APIRouter(tags=["Pages"])


def _user_response(user: CurrentUser) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        first_name=user.metadata.get("first_name"),
        last_name=user.metadata.get("last_name"),
    )


@router.get("/", response_model=LandingView)
async def landing(
    current_user: Optional[CurrentUser] = Depends(get_current_user_optional)
):
    """Landing page."""
    return build_landing_view(_user_response(current_user) if current_user else None)


@router.get("/auth", response_model=AuthFormView)
async def auth_page(
    mode: str = Query(SIGN_IN),
    role: UserRole = Query(UserRole.PATIENT),
    current_user: Optional[CurrentUser] = Depends(get_current_user_optional)
) -> Union[AuthFormView, RedirectResponse]:
    """Sign-in / sign-up form. Signed-in users are sent home."""
    if current_user:
        return RedirectResponse("/", status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    if mode not in AUTH_MODES or role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"mode must be one of {list(AUTH_MODES)} and role patient or doctor"
        )
    return build_auth_form(mode, role)


@router.get("/dashboard", response_model=DashboardView)
async def dashboard(
    current_user: Optional[CurrentUser] = Depends(get_current_user_optional),
    backend: BackendClient = Depends(get_backend)
) -> Union[DashboardView, RedirectResponse]:
    """Role-specific dashboard. Visitors are sent to the auth page."""
    if current_user is None:
        return RedirectResponse("/auth", status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    return await DashboardService(backend, current_user).build()
