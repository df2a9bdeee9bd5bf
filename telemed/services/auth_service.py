from fastapi import HTTPException, status
from typing import Optional
import logging

from ..core.backend import BackendClient, BackendError
from ..core.security import AuthenticationError
from ..schemas.auth import (
    BackendSession, BackendUser, SignInRequest, SignUpRequest,
    SignUpResponse, TokenResponse, UserResponse
)

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def sign_in(self, login_data: SignInRequest) -> TokenResponse:
        """Exchange email and password for a backend session."""
        try:
            payload = await self.backend.auth.sign_in_with_password(
                login_data.email, login_data.password
            )
        except BackendError as e:
            logger.warning(f"Sign-in failed for {login_data.email}: {e.message}")
            if e.status_code is not None and e.status_code >= 500:
                raise
            raise AuthenticationError(e.message or "Invalid email or password")

        return self._token_response(BackendSession(**payload))

    async def sign_up(self, user_data: SignUpRequest) -> SignUpResponse:
        """Register a new account; profile fields travel as user metadata."""
        if not user_data.passwords_match:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Passwords do not match"
            )

        try:
            payload = await self.backend.auth.sign_up(
                user_data.email, user_data.password, user_data.to_user_metadata()
            )
        except BackendError as e:
            logger.warning(f"Sign-up failed for {user_data.email}: {e.message}")
            if e.status_code is not None and e.status_code >= 500:
                raise
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=e.message
            )

        # With e-mail confirmation enabled the backend returns the bare user
        if payload.get("access_token"):
            tokens = self._token_response(BackendSession(**payload))
            return SignUpResponse(
                user=tokens.user,
                session_created=True,
                message="Account created",
                session=tokens,
                redirect_to="/",
            )

        user = BackendUser(**payload.get("user", payload))
        return SignUpResponse(
            user=UserResponse.from_backend_user(user),
            session_created=False,
            message="Account created. Check your email to confirm your address before signing in.",
        )

    async def sign_out(self, access_token: Optional[str]) -> bool:
        """Revoke the session on the backend. Returns False if that failed."""
        if not access_token:
            return False
        try:
            await self.backend.auth.sign_out(access_token)
            return True
        except BackendError as e:
            logger.error(f"Error signing out: {str(e)}")
            return False

    async def refresh_session(self, refresh_token: Optional[str]) -> TokenResponse:
        if not refresh_token:
            raise AuthenticationError("No refresh token")
        try:
            payload = await self.backend.auth.refresh_session(refresh_token)
        except BackendError as e:
            if e.status_code is not None and e.status_code >= 500:
                raise
            raise AuthenticationError("Invalid or expired refresh token")

        return self._token_response(BackendSession(**payload))

    @staticmethod
    def _token_response(session: BackendSession) -> TokenResponse:
        return TokenResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            token_type=session.token_type,
            expires_in=session.expires_in,
            user=UserResponse.from_backend_user(session.user),
        )
