"""Liveness and database readiness endpoints."""

import time

import aiosqlite
from fastapi import APIRouter

from warehouse import __version__
from warehouse.application.dto.responses import HealthResponse, ProviderHealthResponse
from warehouse.config import get_logger
from warehouse.core.exceptions import WarehouseError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_start_time = time.time()


def _uptime() -> float:
    return time.time() - _start_time


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=__version__, uptime_seconds=_uptime())


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Ledger database readiness.

    Reports query latency, the latest applied schema migration and how many
    pooled connections are checked out. An unreachable database yields
    ``unhealthy`` rather than an error status.
    """
    from warehouse.infrastructure.storage.sqlite import get_pool

    try:
        pool = await get_pool()
        start = time.perf_counter()
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT MAX(version) FROM schema_migrations")
            row = await cursor.fetchone()
        latency = (time.perf_counter() - start) * 1000

        database = ProviderHealthResponse(
            name="sqlite",
            available=True,
            latency_ms=round(latency, 2),
            schema_version=row[0] if row else None,
            connections_in_use=pool.in_use,
        )
    except (aiosqlite.Error, WarehouseError, OSError) as e:
        logger.warning("db_health_failed", error=str(e))
        database = ProviderHealthResponse(name="sqlite", available=False, error=str(e))

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=__version__,
        uptime_seconds=_uptime(),
        database=database,
    )
