"""Authentication service - signup, login and refresh sessions

Refresh sessions live in Redis under ``refresh:{user_id}:{jti}``; a refresh
token is only honoured while its key exists.
"""

import logging
from typing import Optional

from pydantic import BaseModel, EmailStr, Field
from redis.asyncio import Redis
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.config import get_settings
from sayitright.core.errors import ConflictError, UnauthorizedError
from sayitright.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from sayitright.models.user import User

logger = logging.getLogger(__name__)

settings = get_settings()


class SignupRequest(BaseModel):
    """Signup request"""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    username: Optional[str] = Field(None, max_length=50)


class LoginRequest(BaseModel):
    """Login request"""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)


class TokenPair(BaseModel):
    """Access token plus the refresh token that goes into the cookie"""

    access_token: str
    refresh_token: str


def session_key(user_id: str, jti: str) -> str:
    return f"refresh:{user_id}:{jti}"


class AuthService:
    """Authentication service"""

    def __init__(self, db: AsyncSession, redis: Redis):
        self.db = db
        self.redis = redis
        self.refresh_ttl_seconds = settings.jwt_refresh_ttl_seconds

    async def _issue_tokens(self, user_id: str, email: str) -> TokenPair:
        """Sign a token pair and store the refresh session"""
        access_token = create_access_token(user_id, email)
        refresh_token, jti = create_refresh_token(user_id, email)
        await self.redis.set(session_key(user_id, jti), "1", ex=self.refresh_ttl_seconds)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def signup(self, body: SignupRequest) -> str:
        """
        Create a local account.

        Returns:
            Access token of the new user

        Raises:
            ConflictError: email already registered
        """
        email = body.email.lower()
        existing = await self.db.scalar(select(User.id).where(User.email == email))
        if existing:
            raise ConflictError("Email already in use")

        user = User(
            email=email,
            password_hash=hash_password(body.password),
            username=body.username,
            auth_provider="local",
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Email already in use")

        logger.info(f"User signed up: {user.id}")
        return create_access_token(user.id, user.email)

    async def login(self, body: LoginRequest) -> TokenPair:
        """
        Verify credentials and open a refresh session.

        Raises:
            UnauthorizedError: unknown email or wrong password
        """
        user = await self.db.scalar(select(User).where(User.email == body.email.lower()))
        if not user or not verify_password(body.password, user.password_hash):
            logger.warning("Login failed")
            raise UnauthorizedError("Invalid credentials")

        logger.info(f"User logged in: {user.id}")
        return await self._issue_tokens(user.id, user.email)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh session.

        The old session key is deleted before the new pair is issued, so a
        refresh token can be used only once.

        Raises:
            UnauthorizedError: bad signature, expired, or session revoked
        """
        payload = decode_refresh_token(refresh_token)
        key = session_key(payload.sub, payload.jti)

        # DEL returns 0 when the session is gone (revoked or already rotated)
        if not await self.redis.delete(key):
            logger.warning(f"Refresh with revoked session: user={payload.sub}")
            raise UnauthorizedError("Invalid credentials")

        return await self._issue_tokens(payload.sub, payload.email)

    async def logout(self, refresh_token: str) -> None:
        """End one session; invalid tokens are ignored"""
        try:
            payload = decode_refresh_token(refresh_token)
        except UnauthorizedError:
            return
        await self.redis.delete(session_key(payload.sub, payload.jti))

    async def logout_all(self, refresh_token: str) -> int:
        """
        End every session of the token's user.

        Returns:
            Number of sessions removed
        """
        try:
            payload = decode_refresh_token(refresh_token)
        except UnauthorizedError:
            return 0

        keys = [key async for key in self.redis.scan_iter(match=f"refresh:{payload.sub}:*")]
        if not keys:
            return 0

        removed = await self.redis.delete(*keys)
        logger.info(f"Removed {removed} sessions for user {payload.sub}")
        return removed
