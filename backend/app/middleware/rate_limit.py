"""Per-IP, per-route fixed-window request limits backed by Redis."""

import logging
import time

from fastapi import Request, status
from fastapi.responses import ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.config import settings
from ..utils import redis_cache

logger = logging.getLogger(__name__)

EXEMPT_PREFIXES = ("/healthz", "/api/v1/health", "/docs", "/redoc", "/openapi.json", "/static")


def client_ip(request: Request) -> str:
    """Peer address; proxy headers are applied upstream for trusted proxies only."""
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Count requests per client IP and path; reject with 429 over the limit.

    Settings are read per request. When Redis is unavailable the counter
    reads zero and the request goes through.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not settings.RATE_LIMIT_ENABLED or request.method == "OPTIONS" or path.startswith(EXEMPT_PREFIXES):
            return await call_next(request)

        limit = settings.RATE_LIMIT_REQUESTS
        window = settings.RATE_LIMIT_WINDOW
        ip = client_ip(request)
        count, ttl = redis_cache.hit_counter(f"ratelimit:{ip}:{path}", window)
        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(max(0, limit - count)),
            "X-RateLimit-Reset": str(int(time.time()) + ttl),
        }
        if count > limit:
            logger.warning("Rate limit exceeded for %s on %s", ip, path)
            return ORJSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "detail": {
                        "message": "Too many requests. Please try again later.",
                        "retry_after": ttl,
                    }
                },
                headers={**headers, "Retry-After": str(ttl)},
            )

        response = await call_next(request)
        for name, value in headers.items():
            response.headers[name] = value
        return response
