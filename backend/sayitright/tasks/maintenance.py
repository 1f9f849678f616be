"""Periodic maintenance tasks"""

import asyncio
import logging

from sayitright.core.celery_app import celery_app
from sayitright.core.database import async_session_maker, engine
from sayitright.services.email_verification import email_verification_service

logger = logging.getLogger(__name__)


async def _cleanup_expired_verification_codes() -> int:
    try:
        async with async_session_maker() as session:
            return await email_verification_service.cleanup_expired_codes(session)
    finally:
        # Each task run has its own event loop; pooled connections can't outlive it
        await engine.dispose()


@celery_app.task(name="sayitright.tasks.maintenance.cleanup_expired_verification_codes")
def cleanup_expired_verification_codes() -> int:
    """Delete expired email verification codes"""
    deleted = asyncio.run(_cleanup_expired_verification_codes())
    logger.info(f"Expired verification codes removed: {deleted}")
    return deleted
