"""Rate limiting for API protection"""
import time
from typing import List

from fastapi import Request
from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from lexiom_admin.config import settings
from lexiom_admin.errors import RateLimitedError
from lexiom_admin.middleware.monitoring import record_rate_limited
from lexiom_admin.utils.logger import logger


def get_identifier(request: Request) -> str:
    """
    Get the rate-limit key for a request: the source IP.

    ``X-Forwarded-For`` (first hop) is only trusted when TRUST_PROXY_HEADERS
    is set, otherwise any client could pick its own bucket.
    """
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

    return get_remote_address(request)


# Login is decorated with this limit on top of the general API limit.
LOGIN_RATE_LIMIT = settings.RATE_LIMIT_LOGIN

API_RATE_LIMITS: List[RateLimitItem] = [parse(limit) for limit in settings.RATE_LIMIT_DEFAULT]


# Create limiter instance. Counters are process-local with memory:// storage;
# point RATE_LIMIT_STORAGE_URI at redis:// to share windows between instances.
limiter = Limiter(
    key_func=get_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def enforce_api_rate_limit(request: Request) -> None:
    """
    Router dependency applying RATE_LIMIT_DEFAULT to every API route.

    Health and metrics endpoints are mounted without it so that probes and
    scrapes are never throttled. Runs before the route's own auth dependencies.
    """
    if not limiter.enabled:
        return

    key = get_identifier(request)
    for item in API_RATE_LIMITS:
        if limiter.limiter.hit(item, "api", key):
            continue

        reset_at, _ = limiter.limiter.get_window_stats(item, "api", key)
        retry_after = max(1, int(reset_at - time.time()))
        record_rate_limited(request.url.path)
        logger.warning(
            "Rate limit exceeded",
            extra={"path": request.url.path, "method": request.method, "client": key},
        )
        raise RateLimitedError(
            extra={"detail": str(item)},
            headers={"Retry-After": str(retry_after)},
        )
