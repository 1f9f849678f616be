"""FastAPI application entry point"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sayitright.api.ai import router as ai_router
from sayitright.api.archives import router as archives_router
from sayitright.api.auth import router as auth_router
from sayitright.api.email_verification import router as email_router
from sayitright.api.health import router as health_router
from sayitright.api.notes import router as notes_router
from sayitright.api.templates import router as templates_router
from sayitright.api.users import router as users_router
from sayitright.core.config import get_settings
from sayitright.core.database import close_db
from sayitright.core.logging_config import configure_logging
from sayitright.core.redis import close_redis
from sayitright.core.responses import register_exception_handlers
from sayitright.middleware.endpoint_limit import endpoint_store
from sayitright.middleware.rate_limit import cleanup_task, guest_rate_limiter
from sayitright.middleware.request_size import RequestSizeLimitMiddleware

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan"""
    configure_logging(settings.log_level)
    # Expired limiter windows are swept in the background
    cleanup_task_handle = asyncio.create_task(
        cleanup_task([guest_rate_limiter.store, endpoint_store])
    )

    yield

    cleanup_task_handle.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup_task_handle
    await close_db()
    await close_redis()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="SayItRight email writing assistant API",
    lifespan=lifespan,
)

# Body size is checked before anything else reads the request
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.max_request_bytes)

# CORS must be outermost; credentials are needed for the refresh cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(email_router)
app.include_router(users_router)
app.include_router(ai_router)
app.include_router(archives_router)
app.include_router(templates_router)
app.include_router(notes_router)
