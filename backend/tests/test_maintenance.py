"""Celery maintenance tasks"""

from datetime import datetime, timedelta

from sayitright.core.celery_app import celery_app
from sayitright.core.database import async_session_maker
from sayitright.models.user import EmailVerification
from sayitright.tasks.maintenance import _cleanup_expired_verification_codes


def test_hourly_schedule_registered():
    entry = celery_app.conf.beat_schedule["cleanup-expired-verification-codes"]
    assert entry["task"] == "sayitright.tasks.maintenance.cleanup_expired_verification_codes"
    assert entry["task"] in celery_app.tasks


async def test_cleanup_removes_expired_codes():
    async with async_session_maker() as session:
        session.add(EmailVerification(
            email="old@example.com",
            code="111111",
            expires_at=datetime.utcnow() - timedelta(hours=1),
        ))
        await session.commit()

    assert await _cleanup_expired_verification_codes() == 1
