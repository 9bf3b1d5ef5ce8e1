"""Health check and debug endpoints.

- /health - Service status and version
- /health/db - Database connection pool health
- /debug/stats - Aggregate catalog statistics (no record content)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from lsearch.api.deps import get_catalog_service
from lsearch.catalog.service import CatalogService
from lsearch.config import APP_VERSION
from lsearch.observability.telemetry import get_counter, get_latency_stats

router = APIRouter(tags=["health"])

POOL_DEGRADED_PERCENT = 80


@router.get("/health")
async def health_check() -> dict[str, Any]:
    return {
        "status": "healthy",
        "service": "lsearch API",
        "version": APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/db")
async def database_health() -> dict[str, Any]:
    """
    Connection pool health. Reports degraded above 80% usage.
    """
    from lsearch.infrastructure.database import get_pool_stats

    stats = get_pool_stats()
    degraded = stats["usage_percent"] > POOL_DEGRADED_PERCENT

    return {
        "status": "degraded" if degraded else "healthy",
        "pool": stats,
        "warning": "Pool usage high" if degraded else None,
    }


@router.get("/debug/stats")
def debug_stats(service: CatalogService = Depends(get_catalog_service)) -> dict[str, Any]:
    """Command counts per category plus sync timings."""
    from lsearch.infrastructure.database import get_pool_stats

    by_category = service.category_counts()
    return {
        "commands": {
            "total": sum(by_category.values()),
            "by_category": by_category,
        },
        "sync": {
            "fallback_used": get_counter("sync.fallback_used"),
            "notebook_failures": get_counter("sync.notebook_failures"),
            "notebook_call_ms": get_latency_stats("sync.notebook_call"),
            "persist_ms": get_latency_stats("sync.persist"),
        },
        "database": get_pool_stats(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
