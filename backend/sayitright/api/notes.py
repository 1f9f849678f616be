"""Expression note API"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.auth_deps import get_current_user
from sayitright.core.database import get_db
from sayitright.core.responses import ok
from sayitright.models.user import User
from sayitright.services.note_service import (
    CreateNoteRequest,
    NoteService,
    NoteSort,
    UpdateNoteRequest,
    create_note_service,
    note_to_dict,
)

router = APIRouter(prefix="/v1/notes", tags=["notes"])


def get_note_service(db: AsyncSession = Depends(get_db)) -> NoteService:
    return create_note_service(db)


@router.get("")
async def list_notes(
    q: Optional[str] = Query(None, max_length=200),
    sort: NoteSort = Query(NoteSort.LATEST),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return ok(await service.list_notes(user.id, q=q, sort=sort, page=page, limit=limit))


@router.get("/{note_id}")
async def get_note(
    note_id: str,
    user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return ok(note_to_dict(await service.get_note(note_id, user.id)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_note(
    body: CreateNoteRequest,
    user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return ok(note_to_dict(await service.create_note(user.id, body)))


@router.put("/{note_id}")
async def update_note(
    note_id: str,
    body: UpdateNoteRequest,
    user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return ok(note_to_dict(await service.update_note(note_id, user.id, body)))


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    await service.delete_note(note_id, user.id)
    return ok()


@router.patch("/{note_id}/star")
async def toggle_star(
    note_id: str,
    user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    """Flip the starred flag"""
    return ok(note_to_dict(await service.toggle_star(note_id, user.id)))
