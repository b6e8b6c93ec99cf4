"""
Rate Limiting - Caps how fast one client can create short links.

Only POST /shorten is limited; following links is not.
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from ..core.config import RATE_LIMIT_ENABLED, RATE_LIMIT_PER_MINUTE
from ..core.logging_config import get_logger

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Clients sending X-API-Key share one budget per key, everyone else is limited per IP."""
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return f"api_key:{api_key}"
    return get_remote_address(request)


limiter = Limiter(key_func=get_rate_limit_key, enabled=RATE_LIMIT_ENABLED)

SHORTEN_LIMIT = f"{RATE_LIMIT_PER_MINUTE}/minute"
rate_limit_per_minute = limiter.limit(SHORTEN_LIMIT)


async def shorten_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 with the limit that was hit."""
    logger.warning(f"Rate limit hit by {get_rate_limit_key(request)} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={"detail": f"Too many links created, limit is {SHORTEN_LIMIT}"}
    )
