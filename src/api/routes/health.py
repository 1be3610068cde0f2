"""
Health endpoints.

``/api/health`` is cheap and process-local; ``/api/health/db`` round-trips
through the connection pool and reports the applied schema version.
"""

import time

import aiosqlite
from fastapi import APIRouter

from src.application.dto.responses import DatabaseHealthResponse, HealthResponse
from src.config import get_logger, get_settings
from src.core.exceptions import StorageError
from src.infrastructure.storage.sqlite import get_connection
from src.infrastructure.storage.sqlite.migrations import get_current_version

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started = time.monotonic()


def _snapshot(database: DatabaseHealthResponse | None = None) -> HealthResponse:
    healthy = database is None or database.available
    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=time.monotonic() - _started,
        database=database,
    )


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return _snapshot()


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Report database reachability instead of failing the request."""
    started = time.perf_counter()
    try:
        async with get_connection() as conn:
            version = await get_current_version(conn)
    except (aiosqlite.Error, StorageError, OSError) as e:
        logger.warning("db_health_check_failed", error=str(e))
        return _snapshot(DatabaseHealthResponse(available=False, error=str(e)))

    return _snapshot(
        DatabaseHealthResponse(
            available=True,
            schema_version=version,
            latency_ms=(time.perf_counter() - started) * 1000,
        )
    )
