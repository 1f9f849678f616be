"""Authentication dependencies"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.database import get_db
from sayitright.core.errors import UnauthorizedError
from sayitright.core.security import decode_access_token
from sayitright.models.user import User


def _parse_bearer(authorization: str) -> str:
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise UnauthorizedError("Invalid authorization header")
    if scheme.lower() != "bearer":
        raise UnauthorizedError("Invalid authentication scheme")
    return token


async def get_current_user(
    authorization: str = Header(None),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Current user (login required)

    Parses the Bearer access token from the Authorization header and loads
    the user together with its subscriptions.
    """
    if not authorization:
        raise UnauthorizedError("Not authenticated")

    token = _parse_bearer(authorization)
    payload = decode_access_token(token)

    user = await db.get(User, payload.sub)
    if not user:
        raise UnauthorizedError("User not found")

    return user


async def get_current_user_optional(
    authorization: str = Header(None),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Current user, or None for guests

    An invalid or expired token is treated as a guest request.
    """
    if not authorization:
        return None

    try:
        return await get_current_user(authorization, db)
    except UnauthorizedError:
        return None
