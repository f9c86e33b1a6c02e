"""Health check utilities.

Provides health and readiness checks for the database and object storage.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..infrastructure.storage.s3_storage_adapter import S3StorageAdapter, StorageError
from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def check_database_health(db: Session) -> ComponentHealth:
    """Check database connectivity with a trivial query."""
    try:
        start = time.perf_counter()
        db.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000

        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Database connection OK",
            latency_ms=round(latency_ms, 2)
        )
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message="Database unavailable"
        )


async def check_object_storage_health(storage: Optional[S3StorageAdapter]) -> ComponentHealth:
    """Check that the document bucket is reachable.

    Storage problems degrade the service (document endpoints fail) but do
    not take it down, so this reports DEGRADED rather than UNHEALTHY.
    """
    if storage is None:
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message="Storage configuration error"
        )

    try:
        start = time.perf_counter()
        await storage.verify_bucket_exists()
        latency_ms = (time.perf_counter() - start) * 1000

        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Object storage OK",
            latency_ms=round(latency_ms, 2)
        )
    except StorageError as e:
        logger.warning(f"Object storage health check failed: {e}")
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message=str(e)
        )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Worst status across components."""
    statuses = {component.status for component in components.values()}
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
