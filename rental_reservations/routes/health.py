"""
Liveness and readiness endpoints for container orchestration probes.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.engine import Engine

from rental_reservations.db.engine import check_engine_health
from rental_reservations.dependencies import get_db_engine
from rental_reservations.models.reservations import Reservation

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """Liveness probe: the process is up."""
    return JSONResponse(content={"status": "ok"})


@router.get("/ready")
def readiness_check(db: Engine = Depends(get_db_engine)) -> JSONResponse:
    """
    Readiness probe.

    Ready once the database answers and the reservations table exists, i.e.
    migrations have been applied. Returns 503 otherwise.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"database": "ok", "schema": "ok"}}
    """
    checks = {"database": "ok" if check_engine_health(db) else "failed"}

    if checks["database"] == "ok":
        try:
            with db.connect() as conn:
                conn.execute(select(Reservation.id).limit(1))
            checks["schema"] = "ok"
        except Exception as e:
            logger.warning("schema_check_failed", error=str(e))
            checks["schema"] = "failed"

    if all(value == "ok" for value in checks.values()):
        return JSONResponse(content={"status": "ready", "checks": checks})

    logger.error("readiness_check_failed", checks=checks)
    return JSONResponse(status_code=503, content={"status": "not ready", "checks": checks})
