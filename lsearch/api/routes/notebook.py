"""
Notebook tool endpoints.

POST /api/notebooklm takes {action, query?}:
- sync:  query, parse, fall back if needed, persist
- query: raw tool result for a free-form question
- test:  small fixed query, parsed but not persisted
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from lsearch.api.deps import get_catalog_service
from lsearch.api.models import (
    CommandOut,
    NotebookActionRequest,
    NotebookInfoResponse,
    NotebookTestResponse,
    QueryResponse,
    SyncResponse,
    SyncStatsModel,
)
from lsearch.catalog.service import CatalogService
from lsearch.config import API_RAW_TEXT_PREVIEW, DEFAULT_FREE_QUERY
from lsearch.notebook.errors import NotebookError
from lsearch.observability.telemetry import counter
from lsearch.utils.error_sanitizer import get_safe_error_detail

router = APIRouter(prefix="/api/notebooklm", tags=["notebook"])


@router.get("", response_model=NotebookInfoResponse)
def notebook_info(service: CatalogService = Depends(get_catalog_service)) -> NotebookInfoResponse:
    return NotebookInfoResponse(success=True, notebookId=service.notebook_id)


@router.post("")
def notebook_action(
    request: NotebookActionRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    """Dispatch on `action`; failures come back as {success: false, error}."""
    try:
        if request.action == "sync":
            stats = service.sync()
            return SyncResponse(
                success=stats.inserted > 0 or stats.updated > 0,
                message=f"Synced: {stats.inserted} new, {stats.updated} updated",
                stats=SyncStatsModel.from_stats(stats),
            )

        if request.action == "query":
            result = service.query_notebook(request.query or DEFAULT_FREE_QUERY)
            return QueryResponse(success=True, result=result)

        if request.action == "test":
            raw_text, records = service.test_notebook()
            return NotebookTestResponse(
                success=True,
                rawText=raw_text[:API_RAW_TEXT_PREVIEW],
                parsed=[CommandOut.from_record(record) for record in records],
                count=len(records),
            )
    except Exception as e:
        if isinstance(e, NotebookError):
            counter("api.notebook_failures")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": get_safe_error_detail(e)},
        )

    return JSONResponse(status_code=400, content={"error": "Use action: sync, query, or test"})
