"""
Recruitment API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging
- Key-value store and rate limiter (Redis, or in-memory)
- Background job scheduler
- CORS middleware
- API routing under the primary and legacy prefixes
- Error response shape and health check endpoints
"""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from recruit.api import api_router
from recruit.core.config import settings
from recruit.core.rate_limit import (
    MemoryRateLimitStore,
    RateLimiter,
    RedisRateLimitStore,
    set_rate_limiter,
)
from recruit.core.redis import close_redis, init_redis
from recruit.core.scheduler import start_scheduler, stop_scheduler
from recruit.core.store import (
    MemoryKeyValueStore,
    RedisKeyValueStore,
    StoreError,
    get_store,
    set_store,
)
from recruit.modules.applications.jobs import register_application_jobs
from recruit.modules.applications.service import ApplicationServiceError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)


def _use_memory_backends() -> None:
    set_store(MemoryKeyValueStore())
    set_rate_limiter(
        RateLimiter(
            MemoryRateLimitStore(),
            limit=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
        )
    )


async def init_backends() -> None:
    """
    Configure the application store and the submission rate limiter.

    STORE_BACKEND=memory uses process-local backends. Otherwise Redis is
    required in production; elsewhere a failed connection falls back to memory.
    """
    if settings.store_backend == "memory":
        _use_memory_backends()
        logger.info("[OK] Using in-memory store")
        return

    try:
        client = await init_redis()
    except Exception as e:
        logger.error(f"[FAIL] Redis connection failed: {e}")
        if settings.is_production:
            raise
        _use_memory_backends()
        logger.warning("Falling back to in-memory store")
        return

    set_store(RedisKeyValueStore(client, namespace=settings.store_namespace))
    set_rate_limiter(
        RateLimiter(
            RedisRateLimitStore(client),
            limit=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
        )
    )
    logger.info("[OK] Redis connected")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Store and rate limiter backends
    - Background job scheduler
    """
    # Startup
    logger.info(f"Starting Recruitment API in {settings.python_env} mode...")

    await init_backends()

    # Initialize Background Job Scheduler
    try:
        # Register jobs before starting the scheduler
        register_application_jobs()

        await start_scheduler()
        logger.info("[OK] Background scheduler started")
    except Exception as e:
        logger.error(f"[FAIL] Background scheduler failed to start: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down Recruitment API...")

    # Stop the scheduler first (wait for running jobs)
    await stop_scheduler()

    await close_redis()
    set_store(None)
    set_rate_limiter(None)
    logger.info("[OK] Cleanup complete")


app = FastAPI(
    title="Recruitment API",
    description="Likelion Dankook 14th recruitment application API",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix=settings.api_prefix)
# Legacy prefix kept for clients that still fall back to it
app.include_router(api_router, prefix=settings.legacy_api_prefix, include_in_schema=False)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-admin-token"],
    expose_headers=["Content-Length", "Retry-After"],
    max_age=600,
)


# ============================================
# Error Responses
# ============================================
# Every error body is flat JSON: {"error": ..., "details": ...}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        content = {"error": "Not Found", "path": request.url.path}
    elif isinstance(exc.detail, dict):
        content = {key: value for key, value in exc.detail.items() if value is not None}
    else:
        content = {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Malformed request body on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid request body",
            "details": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
                for error in exc.errors()
            ],
        },
    )


@app.exception_handler(ApplicationServiceError)
async def service_error_handler(request: Request, exc: ApplicationServiceError) -> JSONResponse:
    content = {"error": exc.message}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(f"Store unavailable: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Store unavailable", "details": "STORE_UNAVAILABLE"},
    )


# ============================================
# Health Checks
# ============================================


def _health(path: str) -> dict[str, str]:
    return {"status": "ok", "path": path, "timestamp": datetime.now(UTC).isoformat()}


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint - liveness probe."""
    return _health("/")


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return _health("/health")


@app.get(f"{settings.legacy_api_prefix}/health", tags=["Health"], include_in_schema=False)
async def legacy_health_check() -> dict[str, str]:
    return _health(f"{settings.legacy_api_prefix}/health")


@app.get("/ready", tags=["Health"])
async def readiness_check() -> JSONResponse:
    """Readiness check endpoint. Reports store connectivity."""
    try:
        store_ok = await get_store().ping()
    except StoreError:
        store_ok = False

    body = _health("/ready")
    body["store"] = "connected" if store_ok else "unavailable"
    if not store_ok:
        body["status"] = "unavailable"
    return JSONResponse(
        status_code=status.HTTP_200_OK if store_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body,
    )


# ============================================
# Background Job Debug Endpoints
# ============================================
# Development only. In production, jobs run automatically on schedule.

if settings.is_development:

    @app.get("/debug/jobs", tags=["Debug"])
    async def list_jobs():
        """List all registered background jobs and their next run time."""
        from recruit.core.scheduler import list_registered_jobs

        return {"jobs": list_registered_jobs()}

    @app.post("/debug/jobs/{job_id}/trigger", tags=["Debug"])
    async def trigger_job(job_id: str):
        """
        Manually trigger a background job.

        Args:
            job_id: The ID of the job to trigger. Available jobs:
                - rate_limit_sweep

        Raises:
            HTTPException 400: If job_id is not found.
        """
        from recruit.core.scheduler import trigger_job_manually

        try:
            return await trigger_job_manually(job_id)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
