"""Health check endpoints"""
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lexiom_admin import __version__
from lexiom_admin.config import settings
from lexiom_admin.database import get_db
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.utils.logger import logger

router = APIRouter(prefix="/health", tags=["health"])

# Track startup time
STARTUP_TIME = time.time()


@router.get("")
def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint

    Returns 200 if service is running
    """
    return {
        "status": "healthy",
        "service": "Lexiom Admin",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness check - verifies the credential store is reachable

    Returns 200 if ready to serve traffic, 503 if not ready
    """
    checks: Dict[str, Any] = {
        "database": False,
        "database_latency_ms": None,
    }

    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000
        checks["database"] = True
        checks["database_latency_ms"] = round(latency_ms, 2)
    except SQLAlchemyError:
        logger.exception("Readiness check failed: database unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "checks": checks, "message": "Database check failed"},
        )

    if latency_ms > 1000:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "degraded", "checks": checks, "message": "Database latency is high"},
        )

    return {
        "status": "ready",
        "checks": checks,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/live")
def liveness_check() -> Dict[str, Any]:
    """
    Liveness check - verifies service is alive

    Used by Kubernetes liveness probe
    """
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": utcnow().isoformat(),
    }
