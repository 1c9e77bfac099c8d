"""Main FastAPI application."""
import os

import psutil
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import QueuePool

from reelvote.api.deps import get_db, global_cache, realtime_hub
from reelvote.api.v1.router import api_router
from reelvote.core.config import settings
from reelvote.core.logging_config import get_logger, setup_logging
from reelvote.core.rate_limit import limiter
from reelvote.db.session import engine
from reelvote.middleware import RequestLoggingMiddleware

setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENVIRONMENT == "production")
logger = get_logger(__name__)

for warning in settings.validate_production_config():
    logger.warning("production_config_warning", detail=warning)

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
    scoring_policy=settings.SCORING_POLICY,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(RequestLoggingMiddleware)


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response


# Cookie auth for the admin panel needs credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-API-Version"],
)

app.include_router(api_router)


def _pool_metrics() -> dict:
    pool = engine.pool
    if not isinstance(pool, QueuePool):
        # Singleton and static pools do not track checkouts
        return {"type": type(pool).__name__}
    return {
        "type": type(pool).__name__,
        "size": pool.size(),
        "checked_in": pool.checkedin(),
        "checked_out": pool.checkedout(),
        "overflow": pool.overflow(),
    }


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Liveness plus operational metrics.

    Returns:
        - status: "healthy" or "unhealthy"
        - cache: TTL cache statistics
        - database: connection status and pool metrics
        - realtime: hub members and connected (non-control) devices
        - memory: process memory usage

    Returns 503 if the database is unreachable.
    """
    health_status = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "cache": global_cache.get_stats(),
        "database": {"status": "connected", "pool": _pool_metrics()},
        "realtime": {
            "connections": realtime_hub.connection_count,
            "connected_devices": realtime_hub.connected_devices(),
        },
    }

    try:
        process = psutil.Process(os.getpid())
        memory_info = process.memory_info()
        health_status["memory"] = {
            "rss_mb": round(memory_info.rss / 1024 / 1024, 2),
            "vms_mb": round(memory_info.vms / 1024 / 1024, 2),
            "percent": round(process.memory_percent(), 2),
        }
    except psutil.Error as e:
        logger.warning("health_check_memory_error", error=str(e))
        health_status["memory"] = {"error": "unable to read"}

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = f"error: {e}"
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
