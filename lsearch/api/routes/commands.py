"""
Command catalog endpoints.

- GET   /api/commands  search by substring and category
- POST  /api/commands  manual create-or-update
- PATCH /api/commands  republish curated examples onto existing rows
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from lsearch.api.deps import get_catalog_service
from lsearch.api.models import (
    CommandCreateRequest,
    CommandCreateResponse,
    CommandListResponse,
    CommandOut,
    RepopulateResponse,
)
from lsearch.catalog.service import CatalogService
from lsearch.config import API_ERROR_SAMPLE
from lsearch.observability.logging import get_logger
from lsearch.utils.error_sanitizer import get_safe_error_detail, sanitize_error_list, sanitize_error_message

router = APIRouter(prefix="/api/commands", tags=["commands"])
logger = get_logger(__name__)


@router.get("", response_model=CommandListResponse)
def list_commands(
    q: str = Query("", max_length=200),
    category: str = Query("", max_length=50),
    service: CatalogService = Depends(get_catalog_service),
) -> CommandListResponse | JSONResponse:
    try:
        rows = service.search(q, category)
    except Exception as e:
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to fetch commands",
                "details": get_safe_error_detail(e),
                "commands": [],
            },
        )
    commands = [CommandOut.model_validate(row) for row in rows]
    return CommandListResponse(commands=commands, count=len(commands))


@router.post("", response_model=CommandCreateResponse)
def create_command(
    request: CommandCreateRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> CommandCreateResponse | JSONResponse:
    if not request.command or not request.description or not request.category:
        return JSONResponse(
            status_code=400,
            content={"error": "Missing required fields: command, description, category"},
        )

    try:
        row = service.create(
            command=request.command,
            description=request.description,
            category=request.category,
            subcategory=request.subcategory,
            examples=[example.model_dump() for example in request.examples],
            tags=request.tags,
        )
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": sanitize_error_message(str(e), 400)})
    except Exception as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to insert command", "details": get_safe_error_detail(e)},
        )

    logger.info("Saved command %s", row["command"])
    return CommandCreateResponse(success=True, command=CommandOut.model_validate(row))


@router.patch("", response_model=RepopulateResponse)
def repopulate_examples(
    service: CatalogService = Depends(get_catalog_service),
) -> RepopulateResponse | JSONResponse:
    try:
        result = service.repopulate_examples()
    except Exception as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to update examples", "details": get_safe_error_detail(e)},
        )

    return RepopulateResponse(
        success=True,
        message=f"Done. Sent example updates for {result.submitted} commands.",
        updated_count_estimate=len(result.updated_commands),
        updated_commands=result.updated_commands,
        errors_count=len(result.errors),
        errors_sample=sanitize_error_list(result.errors, API_ERROR_SAMPLE),
    )
