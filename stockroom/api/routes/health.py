"""Liveness and database readiness endpoints."""

import time

from fastapi import APIRouter

from stockroom import __version__
from stockroom.application.dto.responses import ComponentHealthResponse, HealthResponse
from stockroom.config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _uptime() -> float:
    return round(time.monotonic() - _started_at, 3)


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=__version__, uptime_seconds=_uptime())


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Ping the ledger database through the connection pool.

    An unreachable database is reported in the body as "unhealthy" rather
    than raised, so health checks always get a payload.
    """
    from stockroom.infrastructure.storage.sqlite import get_pool

    try:
        pool = await get_pool()
        database = ComponentHealthResponse(
            name="sqlite",
            available=True,
            latency_ms=round(await pool.ping(), 3),
        )
    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        database = ComponentHealthResponse(name="sqlite", available=False, error=str(e))

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=__version__,
        uptime_seconds=_uptime(),
        database=database,
    )
