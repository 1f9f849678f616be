"""Current user API"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.auth_deps import get_current_user
from sayitright.core.database import get_db
from sayitright.core.responses import ok
from sayitright.models.user import User
from sayitright.services.user_service import UpdateProfileRequest, UserService

router = APIRouter(prefix="/v1/users", tags=["users"])


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/me")
async def get_me(
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return ok(await service.get_profile(user))


@router.patch("/me")
async def update_me(
    body: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return ok(await service.update_profile(user, body))


@router.get("/me/usage")
async def get_my_usage(
    days: int = Query(7, ge=1, le=90),
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Per-day usage counters, newest first"""
    return ok(await service.get_usage(user, days))
