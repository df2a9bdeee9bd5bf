from typing import Any, Dict, Optional
import logging

from jose import JWTError, jwt
from fastapi import HTTPException, Response, status
from pydantic import BaseModel

from .config import settings
from ..models.enums import UserRole

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None  # database role, e.g. "authenticated"
    aud: Optional[str] = None
    exp: Optional[int] = None
    user_metadata: Dict[str, Any] = {}


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: UserRole = UserRole.PATIENT
    metadata: Dict[str, Any] = {}

    @property
    def is_doctor(self) -> bool:
        return self.role == UserRole.DOCTOR


def verify_token(token: str) -> Optional[TokenPayload]:
    """Verify and decode a backend-issued access token."""
    try:
        payload = jwt.decode(
            token,
            settings.BACKEND_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        return TokenPayload(**payload)

    except JWTError as e:
        logger.info(f"Rejected access token: {str(e)}")
        return None


def user_from_payload(payload: TokenPayload) -> Optional[CurrentUser]:
    if not payload.sub:
        return None

    metadata = payload.user_metadata or {}
    try:
        role = UserRole(metadata.get("role", UserRole.PATIENT.value))
    except ValueError:
        role = UserRole.PATIENT

    return CurrentUser(id=payload.sub, email=payload.email, role=role, metadata=metadata)


# Session cookies
def set_session_cookies(response: Response, access_token: str, refresh_token: Optional[str], expires_in: Optional[int]):
    response.set_cookie(
        settings.ACCESS_COOKIE_NAME,
        access_token,
        max_age=expires_in,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    if refresh_token:
        response.set_cookie(
            settings.REFRESH_COOKIE_NAME,
            refresh_token,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
        )


def clear_session_cookies(response: Response):
    response.delete_cookie(settings.ACCESS_COOKIE_NAME)
    response.delete_cookie(settings.REFRESH_COOKIE_NAME)


# Security exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
