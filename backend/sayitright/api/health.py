"""Health check"""

import logging

from fastapi import APIRouter

from sayitright.core.config import get_settings
from sayitright.core.responses import ok

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    logger.debug("Health check requested")
    return ok({"status": "up", "version": settings.app_version})
