"""Expression note service"""

import logging
import math
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.errors import ForbiddenError, NotFoundError
from sayitright.core.schemas import CamelModel
from sayitright.models.note import ExpressionNote

logger = logging.getLogger(__name__)


class NoteSort(str, Enum):
    LATEST = "latest"
    OLDEST = "oldest"
    TERM_ASC = "term_asc"
    TERM_DESC = "term_desc"


class CreateNoteRequest(CamelModel):
    term: str = Field(..., max_length=255)
    description: Optional[str] = None
    example: Optional[str] = None

    @field_validator("term")
    @classmethod
    def term_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("term must not be empty")
        return v


class UpdateNoteRequest(CamelModel):
    term: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    example: Optional[str] = None

    @field_validator("term")
    @classmethod
    def term_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("term must not be empty")
        return v


def note_to_dict(note: ExpressionNote) -> Dict[str, Any]:
    return {
        "id": note.id,
        "term": note.term,
        "description": note.description,
        "example": note.example,
        "isStarred": note.is_starred,
        "createdAt": note.created_at.isoformat(),
        "updatedAt": note.updated_at.isoformat(),
    }


def _clean(value: Optional[str]) -> Optional[str]:
    # Trimmed text, or None when nothing is left
    return (value.strip() or None) if value else None


def _order_by(sort: NoteSort):
    if sort == NoteSort.OLDEST:
        return [ExpressionNote.created_at.asc()]
    if sort == NoteSort.TERM_ASC:
        return [ExpressionNote.term.asc()]
    if sort == NoteSort.TERM_DESC:
        return [ExpressionNote.term.desc()]
    # latest: starred first
    return [ExpressionNote.is_starred.desc(), ExpressionNote.created_at.desc()]


class NoteService:
    """Per-user vocabulary notes"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_notes(
        self,
        user_id: str,
        q: Optional[str] = None,
        sort: NoteSort = NoteSort.LATEST,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """
        Search and page through a user's notes.

        Args:
            user_id: Owner
            q: Case-insensitive search over term, description and example
            sort: latest / oldest / term_asc / term_desc
            page: 1-based page
            limit: Page size

        Returns:
            ``{notes, pagination: {page, limit, total, totalPages}}``
        """
        conditions = [ExpressionNote.user_id == user_id]

        term = q.strip() if q else ""
        if term:
            conditions.append(
                or_(
                    ExpressionNote.term.icontains(term, autoescape=True),
                    ExpressionNote.description.icontains(term, autoescape=True),
                    ExpressionNote.example.icontains(term, autoescape=True),
                )
            )

        total = await self.db.scalar(
            select(func.count()).select_from(ExpressionNote).where(*conditions)
        ) or 0
        result = await self.db.execute(
            select(ExpressionNote)
            .where(*conditions)
            .order_by(*_order_by(sort))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        notes = [note_to_dict(n) for n in result.scalars().all()]

        logger.info(f"Listed notes: user={user_id}, page={page}, total={total}")

        return {
            "notes": notes,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit) if limit else 0,
            },
        }

    async def get_note(self, note_id: str, user_id: str) -> ExpressionNote:
        note = await self.db.get(ExpressionNote, note_id)

        if note is None:
            raise NotFoundError("용어를 찾을 수 없습니다.")

        if note.user_id != user_id:
            logger.warning(f"User {user_id} tried to access note {note_id}")
            raise ForbiddenError("접근 권한이 없습니다.")

        return note

    async def create_note(self, user_id: str, body: CreateNoteRequest) -> ExpressionNote:
        note = ExpressionNote(
            user_id=user_id,
            term=body.term.strip(),
            description=_clean(body.description),
            example=_clean(body.example),
        )
        self.db.add(note)
        await self.db.commit()
        await self.db.refresh(note)

        logger.info(f"Note created: id={note.id}, term={note.term!r}")
        return note

    async def update_note(self, note_id: str, user_id: str, body: UpdateNoteRequest) -> ExpressionNote:
        note = await self.get_note(note_id, user_id)
        changes = body.model_dump(exclude_unset=True)

        if changes.get("term") is not None:
            note.term = changes["term"].strip()
        if "description" in changes:
            note.description = _clean(changes["description"])
        if "example" in changes:
            note.example = _clean(changes["example"])

        await self.db.commit()
        await self.db.refresh(note)

        logger.info(f"Note updated: id={note_id}")
        return note

    async def delete_note(self, note_id: str, user_id: str) -> None:
        note = await self.get_note(note_id, user_id)
        await self.db.delete(note)
        await self.db.commit()
        logger.info(f"Note deleted: id={note_id}")

    async def toggle_star(self, note_id: str, user_id: str) -> ExpressionNote:
        note = await self.get_note(note_id, user_id)
        note.is_starred = not note.is_starred

        await self.db.commit()
        await self.db.refresh(note)

        logger.info(f"Note star toggled: id={note_id}, is_starred={note.is_starred}")
        return note


def create_note_service(db: AsyncSession) -> NoteService:
    return NoteService(db)
