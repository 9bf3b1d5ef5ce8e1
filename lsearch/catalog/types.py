"""
Module: types
Purpose: Shared domain types for the command catalog.
Dependencies: lsearch.config (placeholder description only)

Leaf module: parser, upload parser, merge, sync and the API all import from
here, so it must not import any of them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from lsearch.config import DEFAULT_EXAMPLE_DESCRIPTION


class Category(str, Enum):
    """Fixed category enumeration. Extends str so JSON carries the raw label."""

    NETWORKING = "networking"
    SECURITY = "security"
    FILES = "files"
    SYSTEM = "system"
    PROCESS = "process"
    TEXT = "text"
    PERMISSIONS = "permissions"
    DISK = "disk"
    USERS = "users"
    SCRIPTING = "scripting"

    @classmethod
    def coerce(cls, value: Any) -> Category | None:
        """Return the member for a label (case-insensitive), or None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class CommandExample:
    """One literal shell invocation and what it does."""

    code: str
    description: str = DEFAULT_EXAMPLE_DESCRIPTION

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommandExample | None:
        """
        Build from an English or Spanish keyed mapping.

        Returns None when there is no code to show.
        """
        code = str(data.get("code") or data.get("codigo") or "").strip()
        if not code:
            return None
        description = str(data.get("description") or data.get("descripcion") or "").strip()
        return cls(code=code, description=description or DEFAULT_EXAMPLE_DESCRIPTION)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "description": self.description}


@dataclass
class CommandRecord:
    """Canonical catalog entry; `command` is the natural key."""

    command: str
    description: str
    category: Category = Category.SYSTEM
    tags: list[str] = field(default_factory=list)
    examples: list[CommandExample] = field(default_factory=list)
    subcategory: str | None = None
    source_notebook_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "description": self.description,
            "category": self.category.value,
            "subcategory": self.subcategory,
            "tags": list(self.tags),
            "examples": [example.to_dict() for example in self.examples],
            "source_notebook_id": self.source_notebook_id,
        }


@dataclass
class SyncStats:
    """Outcome of one notebook sync."""

    inserted: int = 0
    updated: int = 0
    total: int = 0
    errors: list[str] = field(default_factory=list)
    warning: str | None = None

    @classmethod
    def failed(cls, error: str) -> SyncStats:
        """Zero counts and a single top-level error."""
        return cls(errors=[error])

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.warning is None:
            data.pop("warning")
        return data


@dataclass
class MergeResult:
    """Per-batch persistence outcome; failures are isolated per command."""

    inserted: int = 0
    updated: int = 0
    processed: int = 0
    errors: list[str] = field(default_factory=list)
