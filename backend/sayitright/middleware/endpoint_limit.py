"""Per-endpoint rate limits for credential routes"""

import logging

from fastapi import Request

from sayitright.core.config import get_settings
from sayitright.core.errors import TooManyRequestsError
from sayitright.middleware.rate_limit import (
    RateLimitStore,
    create_rate_limit_store,
    get_client_ip,
)

logger = logging.getLogger(__name__)
settings = get_settings()

# Separate from the guest counters so the two never share a window
endpoint_store: RateLimitStore = create_rate_limit_store(settings.rate_limit_backend)


def rate_limit(name: str, max_requests: int = 10, window: int = 60):
    """
    Build a route dependency limiting one endpoint per client IP.

    Args:
        name: Counter namespace, usually the endpoint name
        max_requests: Requests allowed per window
        window: Window length in seconds

    Example:
        @router.post("/login", dependencies=[Depends(rate_limit("login", 10, 60))])
    """

    async def dependency(request: Request) -> None:
        client_ip = get_client_ip(request) or "unknown"
        count, reset_at = await endpoint_store.increment(f"endpoint:{name}:{client_ip}", window)

        if count > max_requests:
            logger.warning(f"Endpoint limit exceeded: {name}, ip={client_ip}")
            raise TooManyRequestsError(
                "요청이 너무 많습니다. 잠시 후 다시 시도해주세요.",
                details={"resetAt": int(reset_at)},
            )

    return dependency
