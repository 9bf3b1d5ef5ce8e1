"""lsearch - searchable catalog of Linux and security commands"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports for the catalog core
def __getattr__(name: str):
    """
    Lazy imports to avoid loading the API stack when only the parser is needed.
    """
    if name in ("Category", "CommandExample", "CommandRecord", "SyncStats"):
        from lsearch.catalog import types

        return getattr(types, name)

    if name == "parse_commands":
        from lsearch.catalog.parser import parse_commands

        return parse_commands

    if name == "parse_document":
        from lsearch.catalog.upload_parser import parse_document

        return parse_document

    if name == "SyncOrchestrator":
        from lsearch.catalog.sync import SyncOrchestrator

        return SyncOrchestrator

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "Category",
    "CommandExample",
    "CommandRecord",
    "SyncStats",
    "parse_commands",
    "parse_document",
    "SyncOrchestrator",
]
