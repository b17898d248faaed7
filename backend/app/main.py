# backend/app/main.py

import logging
import os
import time
from typing import Iterable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import TimeoutError as SA_TimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from . import models  # noqa: F401  (registers every table on Base.metadata)
from .api import (
    api_artist,
    api_city,
    api_contact_inquiry,
    api_health,
    api_pages,
    api_salon,
    api_tag,
    api_tattoo,
    auth,
)
from .core.config import FRONTEND_ORIGINS, settings
from .core.observability import setup_logging
from .database import Base, engine
from .middleware.rate_limit import RateLimitMiddleware, client_ip
from .services.monitoring_service import SLOW_REQUEST_MS, monitoring_service
from .utils import metrics
from .utils.errors import DomainError
from .utils.redis_cache import close_redis_client
from .utils.status_logger import register_status_listeners

# Configure logging before creating any loggers
setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME, default_response_class=ORJSONResponse)


# With cookies, Access-Control-Allow-Origin cannot be "*". Build a safe allowlist.

def _merge_origins(*groups: Iterable[str]) -> list[str]:
    merged: list[str] = []
    for group in groups:
        for origin in group:
            if not origin:
                continue
            normalized = origin.rstrip("/")
            if normalized not in merged:
                merged.append(normalized)
    return merged


ALLOWED_ORIGINS = _merge_origins(FRONTEND_ORIGINS)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
)
logger.info("CORS origins set to: %s", ALLOWED_ORIGINS)
app.add_middleware(GZipMiddleware, minimum_size=1024)
# Rewrites the client address from X-Forwarded-For, but only for trusted proxies
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.TRUSTED_PROXIES)


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    """Return JSON responses for HTTP errors and log them."""
    try:
        response = await call_next(request)
    except StarletteHTTPException as exc:  # return the original status and detail
        logger.error(
            "HTTP error %s at %s: %s", exc.status_code, request.url.path, exc.detail
        )
        response = ORJSONResponse(
            status_code=exc.status_code, content={"detail": exc.detail}
        )
    except SA_TimeoutError as exc:  # DB pool timeout -> 503 to reduce retry storms
        logger.error("DB timeout at %s: %s", request.url.path, str(exc))
        monitoring_service.record_error("E_DB_TIMEOUT")
        response = ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database busy, please retry"},
        )
    except Exception as exc:  # pragma: no cover - generic handler
        monitoring_service.log_error(
            exc, {"endpoint": request.url.path, "method": request.method, "ip_address": client_ip(request)}
        )
        response = ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error"},
        )

    # Ensure the CORS headers are present even when an exception occurs
    origin = request.headers.get("origin")
    if origin and origin.rstrip("/") in ALLOWED_ORIGINS:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        if "Vary" not in response.headers:
            response.headers["Vary"] = "Origin"

    return response


@app.middleware("http")
async def monitor_requests(request: Request, call_next):
    """Record a metric per request and flag slow ones."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    path = request.url.path
    monitoring_service.record_api_metric(
        path,
        request.method,
        elapsed_ms,
        response.status_code,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip(request),
    )
    metrics.timing_ms("http.request", elapsed_ms, tags={"method": request.method, "status": response.status_code})
    if elapsed_ms > SLOW_REQUEST_MS:
        monitoring_service.log_warning(
            "Slow request detected",
            {"endpoint": path, "method": request.method, "response_time_ms": elapsed_ms},
        )
    return response


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Map typed domain errors (not found, upload, delivery) to JSON."""
    if exc.status_code >= 500:
        monitoring_service.log_error(exc, {"endpoint": request.url.path, "method": request.method})
    else:
        logger.info("%s at %s: %s", exc.code, request.url.path, exc.message)
    return ORJSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return validation errors with details and log them for debugging."""
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )


# ─── Reference images uploaded with contact inquiries ──────────────────────
os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")


api_prefix = settings.API_V1_STR  # usually something like "/api/v1"

# ─── AUTH ROUTES (no version prefix) ───────────────────────────────────────
# Clients will POST to /auth/register and /auth/login
app.include_router(auth.router, prefix="/auth", tags=["auth"])

app.include_router(api_health.router)
app.include_router(api_city.router, prefix=f"{api_prefix}/cities")
app.include_router(api_salon.router, prefix=f"{api_prefix}/salons")
app.include_router(api_artist.router, prefix=f"{api_prefix}/artists")
app.include_router(api_tattoo.router, prefix=f"{api_prefix}/tattoos")
app.include_router(api_tag.router, prefix=f"{api_prefix}/tags")
app.include_router(api_contact_inquiry.router, prefix=f"{api_prefix}/contact-inquiries")

# Page props last: it owns "/"
app.include_router(api_pages.router)


@app.on_event("startup")
def bootstrap_database() -> None:
    """Create missing tables for development; production runs Alembic."""
    register_status_listeners()
    if os.getenv("SKIP_DB_BOOTSTRAP", "0").strip().lower() in ("1", "true", "yes"):
        logger.info("Skipping schema bootstrap")
        return
    Base.metadata.create_all(bind=engine)


@app.on_event("shutdown")
def shutdown_redis_client() -> None:
    """Close Redis connections when the application shuts down."""
    logger.info("Closing Redis client")
    close_redis_client()
