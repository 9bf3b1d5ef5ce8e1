"""FastAPI dependencies. Tests replace get_catalog_service via app.dependency_overrides."""

from __future__ import annotations

from functools import lru_cache

from lsearch.catalog.service import CatalogService
from lsearch.catalog.tables import (
    load_curated_examples,
    load_fallback_catalog,
    load_seed_commands,
)
from lsearch.notebook.client import NotebookClient
from lsearch.storage import CommandRepository


@lru_cache(maxsize=1)
def get_catalog_service() -> CatalogService:
    """Process-wide service wired to SQLite, the notebook tool and the shipped tables."""
    return CatalogService(
        store=CommandRepository(),
        notebook=NotebookClient(),
        fallback_catalog=load_fallback_catalog(),
        curated_examples=load_curated_examples(),
        seed_commands=load_seed_commands(),
    )
