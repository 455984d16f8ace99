"""Health & Readiness Probes - liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if database is unreachable (readiness)
    - Readiness reports the number of user accounts (empty DB = seed not run)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
    - db_manager read through the module at call time (tests swap the singleton)
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from alphacore.core.errors import DatabaseError
from alphacore.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "alphacore-api",
        "version": "1.0.0",
    }


def _not_ready() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "not_ready",
            "reason": "database_unavailable",
        },
    )


@router.get("/ready")
async def readiness_check():
    """Readiness probe - database connectivity and user count."""
    manager = database.db_manager
    if not manager or not await manager.health_check():
        return _not_ready()
    try:
        user_count = await manager.count_users()
    except DatabaseError:
        return _not_ready()
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "user_count": user_count,
    }
