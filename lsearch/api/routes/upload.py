"""
Document upload endpoint.

Multipart form with `content` (text) or `file`, plus a `format` hint
("json" or "text"). JSON is forced for .json files and for content that
starts with "[" or "{".
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from lsearch.api.deps import get_catalog_service
from lsearch.api.models import UploadResponse, UploadStats
from lsearch.catalog.service import CatalogService
from lsearch.catalog.upload_parser import detect_format
from lsearch.config import API_ERROR_SAMPLE
from lsearch.observability.logging import get_logger
from lsearch.utils.error_sanitizer import sanitize_error_list

router = APIRouter(prefix="/api/upload", tags=["upload"])
logger = get_logger(__name__)

NO_COMMANDS_ERROR = (
    "No commands found. Use JSON [{command|comando|herramienta, description|descripcion}] "
    'or text lines "command - description"'
)


@router.post("", response_model=UploadResponse)
def upload_document(
    content: str | None = Form(None),
    file: UploadFile | None = File(None),
    format: str = Form("text"),
    service: CatalogService = Depends(get_catalog_service),
) -> UploadResponse | JSONResponse:
    try:
        text = content or ""
        filename = None
        if file is not None:
            text = file.file.read().decode("utf-8", errors="replace")
            filename = file.filename

        if not text.strip():
            return JSONResponse(status_code=400, content={"success": False, "error": "No content"})

        fmt = detect_format(text, filename=filename, hint=format)
        logger.info("Processing %s document, %d chars", fmt, len(text))
        records, merge = service.ingest_document(text, fmt)

        if not records:
            return JSONResponse(status_code=400, content={"success": False, "error": NO_COMMANDS_ERROR})
    except Exception as e:
        logger.exception("Upload failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Error processing document"},
        )

    return UploadResponse(
        success=merge.inserted > 0,
        message=f"Processed {merge.inserted} of {len(records)} commands",
        stats=UploadStats(inserted=merge.inserted, updated=merge.updated, errors=len(merge.errors)),
        errors=sanitize_error_list(merge.errors, API_ERROR_SAMPLE),
    )
