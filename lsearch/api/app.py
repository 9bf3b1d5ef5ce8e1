"""FastAPI server for the lsearch command catalog"""

from __future__ import annotations

import sqlite3
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lsearch.api.routes.commands import router as commands_router
from lsearch.api.routes.health import router as health_router
from lsearch.api.routes.notebook import router as notebook_router
from lsearch.api.routes.seed import router as seed_router
from lsearch.api.routes.upload import router as upload_router
from lsearch.config import API_CORS_ORIGINS, API_HOST, API_PORT, APP_VERSION
from lsearch.observability.logging import get_logger
from lsearch.observability.telemetry import counter

logger = get_logger(__name__)

app = FastAPI(title="lsearch API", version=APP_VERSION)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Sanitized 422: field names only, never the validation rules.

    Side Effects:
        - Logs the full validation errors
        - Increments api.validation_errors
    """
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=API_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

app.include_router(health_router)
app.include_router(commands_router)
app.include_router(notebook_router)
app.include_router(upload_router)
app.include_router(seed_router)


@app.on_event("startup")
async def prepare_database() -> None:
    """Create the schema if missing, then fail fast if it is broken.

    Side Effects:
        - Creates the database file and commands table on first run
        - May raise RuntimeError (the app refuses to start)
    """
    from lsearch.infrastructure.database import init_database, validate_schema

    try:
        init_database()
        validate_schema()
        logger.info("Database schema validation passed")
    except ValueError as e:
        logger.critical("Database schema invalid: %s", e)
        raise RuntimeError(f"Database schema validation failed: {e}") from e
    except sqlite3.OperationalError as e:
        logger.critical("Database schema error: %s", e)
        raise RuntimeError(f"Database initialization failed: {e}") from e


@app.get("/")
def root() -> dict[str, Any]:
    return {
        "service": "lsearch API",
        "version": APP_VERSION,
        "status": "running",
        "endpoints": {
            "commands": "/api/commands",
            "notebook": "/api/notebooklm",
            "upload": "/api/upload",
            "seed": "/api/seed",
            "health": "/health",
        },
    }


def main() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("lsearch.api.app:app", host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
