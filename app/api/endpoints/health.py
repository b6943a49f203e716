"""
Health check endpoints.

Provides liveness and dependency status for database and file storage.
"""

import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy import text
from datetime import datetime, timezone

from app.core.database import get_db
from app.core.storage import StorageBackend, get_storage

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns 200 OK if the service is running.
    """
    return {
        "status": "healthy",
        "timestamp": _timestamp()
    }


@router.get("/health/detailed", status_code=status.HTTP_200_OK)
def detailed_health_check(
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
) -> Dict[str, Any]:
    """
    Detailed health check with dependency status.

    Checks database connectivity and that the storage backend is configured.
    Failures are reported per component; internal error text is only logged.
    """
    health_status = {
        "status": "healthy",
        "timestamp": _timestamp(),
        "checks": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": "Database unreachable"
        }

    health_status["checks"]["storage"] = {
        "status": "healthy",
        "message": f"{type(storage).__name__} configured"
    }

    return health_status
