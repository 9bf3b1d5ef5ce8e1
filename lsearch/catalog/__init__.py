"""
Catalog module - command extraction, classification and persistence policy.
"""

from lsearch.catalog.classifier import CategoryClassifier, TagExtractor, classify, extract_tags
from lsearch.catalog.examples import extract_examples
from lsearch.catalog.merge import build_update_payload, persist_records
from lsearch.catalog.parser import CommandBlockParser, parse_commands
from lsearch.catalog.service import CatalogService
from lsearch.catalog.sync import SyncOrchestrator, build_fallback_records
from lsearch.catalog.tables import ExampleCatalog
from lsearch.catalog.types import (
    Category,
    CommandExample,
    CommandRecord,
    MergeResult,
    SyncStats,
)
from lsearch.catalog.upload_parser import DocumentParser, detect_format, parse_document

__all__ = [
    # Types
    "Category",
    "CommandExample",
    "CommandRecord",
    "MergeResult",
    "SyncStats",
    # Classification
    "CategoryClassifier",
    "TagExtractor",
    "classify",
    "extract_tags",
    # Extraction
    "extract_examples",
    "CommandBlockParser",
    "parse_commands",
    "DocumentParser",
    "detect_format",
    "parse_document",
    # Tables
    "ExampleCatalog",
    # Persistence and sync
    "build_update_payload",
    "persist_records",
    "SyncOrchestrator",
    "build_fallback_records",
    "CatalogService",
]
