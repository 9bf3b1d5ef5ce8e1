"""
Sync Orchestrator: notebook answer -> parsed records -> store.

One query per sync. When the answer is empty, too short, or parses to
nothing, the Fallback Catalog fills in every command the parser did not
produce and a warning is recorded. A failing notebook call is reported as
the single error of the sync and does not use the fallback.
"""

from __future__ import annotations

from typing import Protocol

from lsearch.catalog.classifier import CategoryClassifier, TagExtractor, parser_classifier, parser_tags
from lsearch.catalog.merge import persist_records
from lsearch.catalog.parser import CommandBlockParser
from lsearch.catalog.tables import ExampleCatalog
from lsearch.catalog.types import CommandRecord, SyncStats
from lsearch.config import (
    DEFAULT_FALLBACK_DESCRIPTION,
    NOTEBOOK_ID,
    SYNC_MIN_ANSWER_CHARS,
    SYNC_QUERY,
)
from lsearch.notebook.errors import NotebookError
from lsearch.observability.logging import get_logger
from lsearch.observability.telemetry import counter, log_event, time_block
from lsearch.storage.base import CommandStore

logger = get_logger(__name__)

FALLBACK_WARNING = "Warning: Used local backup commands because NotebookLM returned no data."
FALLBACK_FAILED = "No data from NotebookLM and fallback failed."


class NotebookQuery(Protocol):
    def query(self, notebook_id: str, question: str) -> str: ...


def build_fallback_records(
    catalog: ExampleCatalog,
    exclude: set[str],
    classifier: CategoryClassifier = parser_classifier,
    tagger: TagExtractor = parser_tags,
) -> list[CommandRecord]:
    """
    Records for catalog commands not in `exclude`, in catalog order.

    The first example's description stands in for the command description;
    category and tags read the command plus every example description.
    """
    records: list[CommandRecord] = []
    for command, examples in catalog.items():
        if command in exclude:
            continue
        description = examples[0].description if examples else DEFAULT_FALLBACK_DESCRIPTION
        signal = " ".join([command, description, *(example.description for example in examples)])
        records.append(
            CommandRecord(
                command=command,
                description=description,
                category=classifier.classify(signal),
                tags=tagger.extract(signal),
                examples=list(examples),
            )
        )
    return records


class SyncOrchestrator:
    """Runs one notebook sync against an injected store, client and fallback table."""

    def __init__(
        self,
        store: CommandStore,
        notebook: NotebookQuery,
        fallback_catalog: ExampleCatalog,
        parser: CommandBlockParser | None = None,
        notebook_id: str = NOTEBOOK_ID,
        question: str = SYNC_QUERY,
        min_answer_chars: int = SYNC_MIN_ANSWER_CHARS,
    ):
        self.store = store
        self.notebook = notebook
        self.fallback_catalog = fallback_catalog
        self.parser = parser or CommandBlockParser()
        self.notebook_id = notebook_id
        self.question = question
        self.min_answer_chars = min_answer_chars

    def sync(self) -> SyncStats:
        """
        Query, parse, fall back if needed, then persist record by record.

        Returns:
            SyncStats; never raises for notebook or per-record failures
        """
        logger.info("Syncing from notebook %s", self.notebook_id)
        try:
            with time_block("sync.notebook_call"):
                raw_text = self.notebook.query(self.notebook_id, self.question)
        except NotebookError as e:
            logger.error("Notebook query failed: %s", e)
            counter("sync.notebook_failures")
            return SyncStats.failed(str(e))

        raw_text = raw_text or ""
        logger.info("Got %d chars from notebook", len(raw_text))
        records = self.parser.parse(raw_text)

        warning = None
        if len(raw_text) < self.min_answer_chars or not records:
            logger.warning("Notebook returned no usable commands, using fallback catalog")
            records.extend(
                build_fallback_records(
                    self.fallback_catalog,
                    exclude={record.command for record in records},
                    classifier=self.parser.classifier,
                    tagger=self.parser.tagger,
                )
            )
            if not records:
                return SyncStats.failed(FALLBACK_FAILED)
            warning = FALLBACK_WARNING
            counter("sync.fallback_used")

        with time_block("sync.persist"):
            merge = persist_records(
                self.store,
                records,
                source_notebook_id=self.notebook_id,
                double_write=True,
            )

        stats = SyncStats(
            inserted=merge.inserted,
            updated=merge.updated,
            total=len(records),
            errors=([warning] if warning else []) + merge.errors,
            warning=warning,
        )
        log_event(
            "sync.completed",
            inserted=stats.inserted,
            updated=stats.updated,
            total=stats.total,
            errors=len(stats.errors),
            fallback=warning is not None,
        )
        return stats
