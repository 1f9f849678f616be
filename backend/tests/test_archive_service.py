"""Archive retention and access"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from sayitright.core.errors import ForbiddenError, NotFoundError
from sayitright.models.archive import Archive
from sayitright.services import archive_service as archive_module
from sayitright.services.archive_policy import (
    ArchivePolicy,
    get_archive_policy,
    get_retention_cutoff,
)
from sayitright.services.archive_service import ArchiveService, run_archive_cleanup


def add_archive(db, user_id, created_at, content="archived email body"):
    archive = ArchiveService(db).build_archive(user_id=user_id, content=content)
    archive.created_at = created_at
    archive.updated_at = created_at
    return archive


async def count_archives(db, user_id):
    return await db.scalar(
        select(func.count()).select_from(Archive).where(Archive.user_id == user_id)
    )


def test_policy_lookup():
    assert get_archive_policy("free") == ArchivePolicy(retention_days=7, max_count=200)
    assert get_archive_policy("premium") == ArchivePolicy(retention_days=30, max_count=2000)
    assert get_archive_policy("guest") == get_archive_policy("free")


def test_retention_cutoff_is_local_midnight():
    now = datetime(2026, 5, 10, 15, 30)
    cutoff = get_retention_cutoff(7, now)
    expected = datetime(2026, 5, 3).astimezone().astimezone(timezone.utc).replace(tzinfo=None)
    assert cutoff == expected


def test_build_archive_defaults(db_session):
    archive = ArchiveService(db_session).build_archive(user_id="u1", content="x" * 250)
    assert archive.tone == "neutral"
    assert archive.preview == "x" * 197 + "..."


async def test_cleanup_deletes_expired_by_date(db_session, make_user):
    user = await make_user()
    now = datetime.utcnow()
    for days_ago in (0, 1, 10, 20):
        add_archive(db_session, user.id, now - timedelta(days=days_ago))
    await db_session.commit()

    deleted = await ArchiveService(db_session).cleanup_old_archives(user.id, "free")

    assert deleted == 2
    assert await count_archives(db_session, user.id) == 2


async def test_cleanup_trims_oldest_over_count(db_session, make_user, monkeypatch):
    monkeypatch.setattr(
        archive_module,
        "get_archive_policy",
        lambda tier: ArchivePolicy(retention_days=7, max_count=3),
    )
    user = await make_user()
    now = datetime.utcnow()
    archives = [
        add_archive(db_session, user.id, now - timedelta(minutes=minutes), content=f"email {minutes}")
        for minutes in range(6)
    ]
    # Two already past retention
    add_archive(db_session, user.id, now - timedelta(days=30))
    add_archive(db_session, user.id, now - timedelta(days=40))
    await db_session.commit()
    newest_ids = {a.id for a in archives[:3]}

    deleted = await ArchiveService(db_session).cleanup_old_archives(user.id, "free")

    # 2 by date, then exactly 6 - 3 by count
    assert deleted == 5
    remaining = await db_session.execute(select(Archive.id).where(Archive.user_id == user.id))
    assert set(remaining.scalars().all()) == newest_ids


async def test_cleanup_at_max_count_deletes_nothing(db_session, make_user, monkeypatch):
    monkeypatch.setattr(
        archive_module,
        "get_archive_policy",
        lambda tier: ArchivePolicy(retention_days=7, max_count=3),
    )
    user = await make_user()
    now = datetime.utcnow()
    for minutes in range(3):
        add_archive(db_session, user.id, now - timedelta(minutes=minutes))
    await db_session.commit()

    deleted = await ArchiveService(db_session).cleanup_old_archives(user.id, "free")

    assert deleted == 0
    assert await count_archives(db_session, user.id) == 3


async def test_cleanup_leaves_other_users_alone(db_session, make_user):
    user = await make_user()
    other = await make_user(email="other@example.com")
    old = datetime.utcnow() - timedelta(days=60)
    add_archive(db_session, user.id, old)
    add_archive(db_session, other.id, old)
    await db_session.commit()

    await ArchiveService(db_session).cleanup_old_archives(user.id, "premium")

    assert await count_archives(db_session, user.id) == 0
    assert await count_archives(db_session, other.id) == 1


async def test_background_cleanup_swallows_errors(monkeypatch, caplog):
    async def boom(self, user_id, tier):
        raise RuntimeError("database gone")

    monkeypatch.setattr(ArchiveService, "cleanup_old_archives", boom)

    await run_archive_cleanup("u1", "free")

    assert "Archive cleanup failed" in caplog.text


async def test_get_archive_ownership(db_session, make_user):
    owner = await make_user()
    intruder = await make_user(email="intruder@example.com")
    archive = add_archive(db_session, owner.id, datetime.utcnow())
    await db_session.commit()

    service = ArchiveService(db_session)
    assert (await service.get_archive(archive.id, owner.id)).id == archive.id

    with pytest.raises(ForbiddenError):
        await service.get_archive(archive.id, intruder.id)
    with pytest.raises(NotFoundError):
        await service.get_archive("missing", owner.id)
