"""Per-client request throttling (slowapi).

A flat `RATE_LIMIT_DEFAULT` applies to every route through
SlowAPIMiddleware; probe routes opt out with `@limiter.exempt`. This is
abuse protection only. The monthly AI quota is UsageOperations' job.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from orgspace.core.config import settings

logger = logging.getLogger(__name__)


def client_key(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    return first_hop or get_remote_address(request)


limiter = Limiter(
    key_func=client_key,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded for %s on %s", client_key(request), request.url.path)
    return JSONResponse(
        status_code=429,
        content={
            "code": "RATE_LIMITED",
            "detail": f"Too many requests ({exc.detail}). Please slow down.",
        },
        headers={"Retry-After": "1"},
    )
