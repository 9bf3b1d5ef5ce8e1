"""Seed endpoints: POST upserts the static seed list, GET reports its size."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from lsearch.api.deps import get_catalog_service
from lsearch.api.models import SeedInfoResponse, SeedResponse, SeedStats
from lsearch.catalog.service import CatalogService
from lsearch.config import API_ERROR_SAMPLE
from lsearch.utils.error_sanitizer import get_safe_error_detail, sanitize_error_list

router = APIRouter(prefix="/api/seed", tags=["seed"])


@router.post("", response_model=SeedResponse)
def seed_commands(
    service: CatalogService = Depends(get_catalog_service),
) -> SeedResponse | JSONResponse:
    try:
        merge = service.seed()
    except Exception as e:
        return JSONResponse(status_code=500, content={"success": False, "error": get_safe_error_detail(e)})

    total = len(service.seed_commands)
    written = merge.inserted + merge.updated
    return SeedResponse(
        success=len(merge.errors) < total,
        message=f"Seeded {written} commands",
        stats=SeedStats(inserted=written, total=total, errors=len(merge.errors)),
        errors=sanitize_error_list(merge.errors, API_ERROR_SAMPLE),
    )


@router.get("", response_model=SeedInfoResponse)
def seed_info(service: CatalogService = Depends(get_catalog_service)) -> SeedInfoResponse:
    return SeedInfoResponse(
        message="Use POST to seed the database",
        commandCount=len(service.seed_commands),
    )
