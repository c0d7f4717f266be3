"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /v1/health/ always returns 200 if process is up (liveness)
    - GET /v1/health/ready returns 503 if the store is unreachable (readiness)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_store
from app.core.repository_protocols import KeyValueStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "posts-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(store: KeyValueStore = Depends(get_store)):
    """Readiness probe, includes store connectivity."""
    if not await store.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "store_unavailable",
            },
        )
    return {"status": "ready", "checks": {"store": "healthy"}}
