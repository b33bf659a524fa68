"""Fixed-window rate limiting for the public ledger append endpoint.

Only ``POST /api/v1/ledger`` is limited; every other route passes through.
Counting uses Redis INCR + EXPIRE keyed on the client address:

    ratelimit:ledger:{client_ip}:{window}

The client address comes from the first X-Forwarded-For hop when present
(reverse proxy aware), otherwise from the socket peer.
"""

import logging
import time

from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from config.settings import settings
from src.cx_common.errors import RateLimitError
from src.cx_common.redis_client import get_redis
from src.cx_common.response import error_response

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
LIMITED_PATH = "/api/v1/ledger"


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limit: int | None = None) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self._limit = settings.LEDGER_APPEND_RATE_LIMIT if limit is None else limit

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if (
            self._limit <= 0
            or request.method != "POST"
            or request.url.path.rstrip("/") != LIMITED_PATH
        ):
            return await call_next(request)

        window = int(time.time()) // WINDOW_SECONDS
        key = f"ratelimit:ledger:{client_ip(request)}:{window}"
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, WINDOW_SECONDS)
        except RedisError:
            # Limiter unavailable: fail open, the ledger itself is the authority.
            logger.warning("Rate limiter unavailable, admitting %s", key, exc_info=True)
            return await call_next(request)

        if count > self._limit:
            exc = RateLimitError()
            retry_after = WINDOW_SECONDS - int(time.time()) % WINDOW_SECONDS
            return JSONResponse(
                status_code=exc.http_status,
                content=error_response(exc.code, exc.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
