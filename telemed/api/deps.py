from fastapi import Depends, HTTPException, status, Request
from typing import AsyncGenerator, Optional

import httpx

from ..core.backend import BackendClient
from ..core.config import settings
from ..core.redis_client import get_redis
from ..core.security import AuthenticationError, CurrentUser, user_from_payload, verify_token


def get_session_token(request: Request) -> Optional[str]:
    """Access token from the session cookie, falling back to a Bearer header."""
    token = request.cookies.get(settings.ACCESS_COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None


def get_refresh_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.REFRESH_COOKIE_NAME)


def get_backend_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for backend calls; None means real network I/O."""
    return None


async def get_backend(
    token: Optional[str] = Depends(get_session_token),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_backend_transport),
) -> AsyncGenerator[BackendClient, None]:
    """Backend client acting as the signed-in user, so row-level security applies."""
    client = BackendClient(access_token=token, transport=transport)
    try:
        yield client
    finally:
        await client.aclose()


async def get_current_user_optional(
    token: Optional[str] = Depends(get_session_token),
) -> Optional[CurrentUser]:
    """Get current user if authenticated, None otherwise."""
    if not token:
        return None

    token_payload = verify_token(token)
    if not token_payload:
        return None
    return user_from_payload(token_payload)


async def get_current_user(
    current_user: Optional[CurrentUser] = Depends(get_current_user_optional),
) -> CurrentUser:
    """Get current authenticated user or fail with 401."""
    if current_user is None:
        raise AuthenticationError("Not authenticated")
    return current_user


# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for the sign-in and sign-up forms."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_MAX_REQUESTS:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
