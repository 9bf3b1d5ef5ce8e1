"""Pydantic request/response models for the lsearch API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from lsearch.catalog.types import CommandRecord, SyncStats
from lsearch.config import API_ERROR_SAMPLE
from lsearch.utils.error_sanitizer import sanitize_error_list


class ExampleModel(BaseModel):
    code: str
    description: str = ""


class CommandCreateRequest(BaseModel):
    """Manual create; missing required fields are a 400, not a 422."""

    command: str = ""
    description: str = ""
    category: str = ""
    subcategory: str | None = None
    examples: list[ExampleModel] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class CommandOut(BaseModel):
    command: str
    description: str
    category: str
    subcategory: str | None = None
    examples: list[ExampleModel] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    source_notebook_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_record(cls, record: CommandRecord) -> CommandOut:
        return cls.model_validate(record.to_dict())


class CommandListResponse(BaseModel):
    commands: list[CommandOut]
    count: int
    source: str = "sqlite"


class CommandCreateResponse(BaseModel):
    success: bool
    command: CommandOut


class RepopulateResponse(BaseModel):
    success: bool
    message: str
    updated_count_estimate: int
    updated_commands: list[str]
    errors_count: int
    errors_sample: list[str]


class NotebookActionRequest(BaseModel):
    action: str = ""
    query: str | None = None


class SyncStatsModel(BaseModel):
    inserted: int
    updated: int
    total: int
    errors: list[str]

    @classmethod
    def from_stats(cls, stats: SyncStats) -> SyncStatsModel:
        """Fallback warning first, then a sanitized sample of the record errors."""
        leading = [stats.warning] if stats.warning else []
        record_errors = stats.errors[len(leading):]
        return cls(
            inserted=stats.inserted,
            updated=stats.updated,
            total=stats.total,
            errors=leading + sanitize_error_list(record_errors, API_ERROR_SAMPLE),
        )


class SyncResponse(BaseModel):
    success: bool
    message: str
    stats: SyncStatsModel


class QueryResponse(BaseModel):
    success: bool
    result: dict[str, Any]


class NotebookTestResponse(BaseModel):
    success: bool
    rawText: str
    parsed: list[CommandOut]
    count: int


class NotebookInfoResponse(BaseModel):
    success: bool
    notebookId: str


class UploadStats(BaseModel):
    inserted: int
    updated: int
    errors: int


class UploadResponse(BaseModel):
    success: bool
    message: str
    stats: UploadStats
    errors: list[str]


class SeedStats(BaseModel):
    inserted: int
    total: int
    errors: int


class SeedResponse(BaseModel):
    success: bool
    message: str
    stats: SeedStats
    errors: list[str]


class SeedInfoResponse(BaseModel):
    message: str
    commandCount: int
