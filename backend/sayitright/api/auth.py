"""Authentication API - signup, login and cookie-based refresh sessions"""

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response, status
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.config import get_settings
from sayitright.core.database import get_db
from sayitright.core.errors import UnauthorizedError
from sayitright.core.redis import get_redis
from sayitright.core.responses import ok
from sayitright.middleware.endpoint_limit import rate_limit
from sayitright.services.auth import AuthService, LoginRequest, SignupRequest

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/v1/auth", tags=["auth"])

REFRESH_COOKIE = "refreshToken"


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
) -> AuthService:
    return AuthService(db, redis)


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=refresh_token,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=settings.jwt_refresh_ttl_seconds,
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=REFRESH_COOKIE, path="/")


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("signup", max_requests=5, window=60))],
)
async def signup(body: SignupRequest, service: AuthService = Depends(get_auth_service)):
    access_token = await service.signup(body)
    return ok({"accessToken": access_token})


@router.post(
    "/login",
    dependencies=[Depends(rate_limit("login", max_requests=10, window=60))],
)
async def login(
    body: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
):
    """Password login; the refresh token is returned as an httpOnly cookie"""
    tokens = await service.login(body)
    set_refresh_cookie(response, tokens.refresh_token)
    return ok({"accessToken": tokens.access_token})


@router.post("/refresh")
async def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    service: AuthService = Depends(get_auth_service),
):
    if not refresh_token:
        raise UnauthorizedError("Invalid credentials")

    tokens = await service.refresh(refresh_token)
    set_refresh_cookie(response, tokens.refresh_token)
    return ok({"accessToken": tokens.access_token})


@router.post("/logout")
async def logout(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    service: AuthService = Depends(get_auth_service),
):
    if refresh_token:
        await service.logout(refresh_token)
    clear_refresh_cookie(response)
    return ok()


@router.post("/logout-all")
async def logout_all(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    service: AuthService = Depends(get_auth_service),
):
    """End every session of the cookie's user"""
    if refresh_token:
        await service.logout_all(refresh_token)
    clear_refresh_cookie(response)
    return ok()
