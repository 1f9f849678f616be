"""Archive service

Listing, lookup, deletion and retention cleanup of generated emails.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.database import async_session_maker
from sayitright.core.errors import ForbiddenError, NotFoundError
from sayitright.models.archive import Archive, make_preview
from sayitright.services.archive_policy import get_archive_policy, get_retention_cutoff
from sayitright.services.list_filters import ListFilterParams, build_filter_conditions

logger = logging.getLogger(__name__)


def archive_to_dict(archive: Archive) -> Dict[str, Any]:
    """Full archive representation"""
    return {
        "id": archive.id,
        "title": archive.title,
        "content": archive.content,
        "tone": archive.tone,
        "purpose": archive.purpose,
        "relationship": archive.relationship,
        "rationale": archive.rationale,
        "createdAt": archive.created_at.isoformat(),
        "updatedAt": archive.updated_at.isoformat(),
    }


def archive_to_list_item(archive: Archive) -> Dict[str, Any]:
    """List representation: preview instead of content"""
    return {
        "id": archive.id,
        "title": archive.title,
        "preview": archive.preview or make_preview(archive.content or "") or "(내용 없음)",
        "tone": archive.tone,
        "purpose": archive.purpose,
        "relationship": archive.relationship,
        "createdAt": archive.created_at.isoformat(),
        "updatedAt": archive.updated_at.isoformat(),
    }


class ArchiveService:
    """Per-user archive operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def build_archive(
        self,
        user_id: str,
        content: str,
        tone: Optional[str] = None,
        purpose: Optional[str] = None,
        relationship: Optional[str] = None,
        rationale: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Archive:
        """
        Stage a new archive row in the current session.

        The caller commits, so the insert can share a transaction with a
        credit charge.
        """
        archive = Archive(
            user_id=user_id,
            title=title,
            content=content,
            preview=make_preview(content),
            tone=tone or "neutral",
            purpose=purpose,
            relationship=relationship,
            rationale=rationale,
        )
        self.db.add(archive)
        return archive

    async def list_archives(self, user_id: str, params: ListFilterParams) -> Dict[str, Any]:
        """
        Paginated archive list, newest first.

        Returns:
            ``{items, total, page, limit}``
        """
        conditions = build_filter_conditions(Archive, user_id, params)

        total = await self.db.scalar(
            select(func.count()).select_from(Archive).where(*conditions)
        )
        result = await self.db.execute(
            select(Archive)
            .where(*conditions)
            .order_by(Archive.created_at.desc())
            .offset(params.offset)
            .limit(params.limit)
        )
        items = [archive_to_list_item(a) for a in result.scalars().all()]

        logger.info(f"Listed {len(items)} archives for user {user_id} (total {total})")

        return {
            "items": items,
            "total": total or 0,
            "page": params.page,
            "limit": params.limit,
        }

    async def get_archive(self, archive_id: str, user_id: str) -> Archive:
        """
        Fetch one archive owned by ``user_id``.

        Raises:
            NotFoundError: no such archive
            ForbiddenError: owned by someone else
        """
        archive = await self.db.get(Archive, archive_id)

        if archive is None:
            logger.warning(f"Archive {archive_id} not found")
            raise NotFoundError("Archive를 찾을 수 없습니다.")

        if archive.user_id != user_id:
            logger.warning(
                f"User {user_id} tried to access archive {archive_id} (owner: {archive.user_id})"
            )
            raise ForbiddenError("이 Archive에 접근할 권한이 없습니다.")

        return archive

    async def delete_archive(self, archive_id: str, user_id: str) -> None:
        archive = await self.get_archive(archive_id, user_id)
        await self.db.delete(archive)
        await self.db.commit()
        logger.info(f"Archive {archive_id} deleted")

    async def cleanup_old_archives(self, user_id: str, tier: str) -> int:
        """
        Apply the hybrid retention policy to one user's archives.

        Pass 1 deletes everything created before the cutoff. Pass 2 recounts
        and deletes exactly the oldest ``count - max_count`` rows.

        Returns:
            Number of archives deleted by both passes
        """
        policy = get_archive_policy(tier)
        cutoff = get_retention_cutoff(policy.retention_days)

        by_date = await self.db.execute(
            delete(Archive).where(
                Archive.user_id == user_id,
                Archive.created_at < cutoff,
            )
        )
        deleted_by_date = by_date.rowcount or 0
        await self.db.commit()

        logger.info(
            f"User {user_id}: deleted {deleted_by_date} archives older than "
            f"{policy.retention_days} days"
        )

        current_count = await self.db.scalar(
            select(func.count()).select_from(Archive).where(Archive.user_id == user_id)
        )
        if current_count <= policy.max_count:
            return deleted_by_date

        excess = current_count - policy.max_count
        oldest = await self.db.execute(
            select(Archive.id)
            .where(Archive.user_id == user_id)
            .order_by(Archive.created_at.asc())
            .limit(excess)
        )
        ids = list(oldest.scalars().all())

        by_count = await self.db.execute(delete(Archive).where(Archive.id.in_(ids)))
        deleted_by_count = by_count.rowcount or 0
        await self.db.commit()

        logger.info(
            f"User {user_id}: deleted {deleted_by_count} archives over the "
            f"{policy.max_count} limit"
        )

        return deleted_by_date + deleted_by_count


async def run_archive_cleanup(user_id: str, tier: str) -> None:
    """
    Background retention sweep with its own session.

    Failures are logged and never reach the request that scheduled it.
    """
    try:
        async with async_session_maker() as session:
            await ArchiveService(session).cleanup_old_archives(user_id, tier)
    except Exception as e:
        logger.error(f"Archive cleanup failed for user {user_id}: {e}", exc_info=True)


def create_archive_service(db: AsyncSession) -> ArchiveService:
    return ArchiveService(db)
