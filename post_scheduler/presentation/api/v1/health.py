import structlog
from fastapi import APIRouter

from ....config import settings
from ....infrastructure.logging import Timer
from ..dependencies import get_database

router = APIRouter(tags=["health"])
logger = structlog.get_logger()


@router.get("/health", summary="Health check")
async def health() -> dict:
    """Liveness check. No dependency is touched."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness check")
async def readiness() -> dict:
    """Schedule store reachable and delivery queue configured."""
    checks = {"database": await _database_check(), "queue": _queue_check()}
    ready = all(check["status"] == "healthy" for check in checks.values())
    return {"status": "ready" if ready else "degraded", "checks": checks}


async def _database_check() -> dict:
    try:
        with Timer() as t:
            await get_database().ping()
    except Exception as e:
        logger.error("Schedule store unreachable", error=str(e), error_type=type(e).__name__)
        return {"status": "unhealthy"}
    return {"status": "healthy", "latency_ms": t.duration_ms}


def _queue_check() -> dict:
    # Publishing needs the token, callbacks need the signing key
    if settings.qstash_token and settings.qstash_current_signing_key:
        return {"status": "healthy"}
    return {"status": "unconfigured"}
