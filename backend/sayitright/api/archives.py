"""Archive API"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.auth_deps import get_current_user
from sayitright.core.database import get_db
from sayitright.core.responses import ok
from sayitright.models.user import User
from sayitright.services.archive_service import (
    ArchiveService,
    archive_to_dict,
    create_archive_service,
    run_archive_cleanup,
)
from sayitright.services.list_filters import ListFilterParams, get_list_filters

router = APIRouter(prefix="/v1/archives", tags=["archives"])


def get_archive_service(db: AsyncSession = Depends(get_db)) -> ArchiveService:
    return create_archive_service(db)


@router.get("")
async def list_archives(
    background_tasks: BackgroundTasks,
    params: ListFilterParams = Depends(get_list_filters),
    user: User = Depends(get_current_user),
    service: ArchiveService = Depends(get_archive_service),
):
    """List archives; also schedules the retention sweep for this user"""
    background_tasks.add_task(run_archive_cleanup, user.id, user.tier or "free")
    return ok(await service.list_archives(user.id, params))


@router.get("/{archive_id}")
async def get_archive(
    archive_id: str,
    user: User = Depends(get_current_user),
    service: ArchiveService = Depends(get_archive_service),
):
    archive = await service.get_archive(archive_id, user.id)
    return ok(archive_to_dict(archive))


@router.delete("/{archive_id}")
async def delete_archive(
    archive_id: str,
    user: User = Depends(get_current_user),
    service: ArchiveService = Depends(get_archive_service),
):
    await service.delete_archive(archive_id, user.id)
    return ok()
