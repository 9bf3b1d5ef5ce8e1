"""Catalog service layer: facade between API routes and the store.

Owns the collaborators (store, notebook client, static tables) and the
write policies for each entry point: seed, upload, manual create, sync and
the bulk examples repopulate.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Protocol

from lsearch.catalog.merge import persist_records
from lsearch.catalog.parser import CommandBlockParser, is_valid_command, normalize_command
from lsearch.catalog.sync import NotebookQuery, SyncOrchestrator
from lsearch.catalog.tables import ExampleCatalog
from lsearch.catalog.types import (
    Category,
    CommandExample,
    CommandRecord,
    MergeResult,
    SyncStats,
)
from lsearch.catalog.upload_parser import DocumentParser
from lsearch.config import (
    DESCRIPTION_MAX_LEN,
    MAX_EXAMPLES,
    NOTEBOOK_ID,
    REPOPULATE_MAX_WORKERS,
    TEST_QUERY,
)
from lsearch.notebook.client import extract_answer
from lsearch.observability.logging import get_logger
from lsearch.observability.telemetry import counter, time_block
from lsearch.storage.base import CommandStore, StoreResult
from lsearch.storage.command_repository import utc_now

logger = get_logger(__name__)


class CatalogStoreError(RuntimeError):
    """A read the caller cannot do without failed in the store."""


@dataclass
class RepopulateResult:
    """Outcome of the bulk examples repopulate; counts are per table entry."""

    submitted: int = 0
    updated_commands: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class NotebookToolClient(NotebookQuery, Protocol):
    def query_raw(self, notebook_id: str, question: str) -> dict[str, Any]: ...


class CatalogService:
    """Service for command catalog operations."""

    def __init__(
        self,
        store: CommandStore,
        notebook: NotebookToolClient,
        fallback_catalog: ExampleCatalog,
        curated_examples: ExampleCatalog,
        seed_commands: tuple[CommandRecord, ...],
        notebook_id: str = NOTEBOOK_ID,
        max_workers: int = REPOPULATE_MAX_WORKERS,
    ):
        self.store = store
        self.notebook = notebook
        self.fallback_catalog = fallback_catalog
        self.curated_examples = curated_examples
        self.seed_commands = seed_commands
        self.notebook_id = notebook_id
        self.max_workers = max_workers
        self.parser = CommandBlockParser()
        self.document_parser = DocumentParser()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def search(self, query: str | None = None, category: str | None = None) -> list[dict[str, Any]]:
        """Stored commands ordered by name, filtered by category and substring."""
        return self._unwrap(self.store.select(query or None, category or None), "search")

    def category_counts(self) -> dict[str, int]:
        return self._unwrap(self.store.category_counts(), "category_counts")

    @staticmethod
    def _unwrap(result: StoreResult, operation: str) -> Any:
        if result.error:
            raise CatalogStoreError(f"{operation} failed: {result.error}")
        return result.data

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        command: str,
        description: str,
        category: str,
        subcategory: str | None = None,
        examples: list[dict[str, Any]] | None = None,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Manual create-or-update of one command.

        Raises:
            ValueError: Invalid command name, empty description or unknown category
            CatalogStoreError: The store rejected the write
        """
        normalized = normalize_command(command)
        if not is_valid_command(normalized):
            raise ValueError(f"Invalid command name: {command!r}")
        if not description.strip():
            raise ValueError("Description must not be empty")
        parsed_category = Category.coerce(category)
        if parsed_category is None:
            raise ValueError(f"Unknown category: {category!r}")

        record = CommandRecord(
            command=normalized,
            description=description.strip()[:DESCRIPTION_MAX_LEN],
            category=parsed_category,
            subcategory=subcategory or None,
            tags=list(tags or []),
            examples=[
                example
                for example in (CommandExample.from_dict(e) for e in examples or [])
                if example is not None
            ][:MAX_EXAMPLES],
        )
        merge = persist_records(self.store, [record])
        if merge.errors:
            raise CatalogStoreError(merge.errors[0])
        return self._unwrap(self.store.get(normalized), "get")

    def seed(self) -> MergeResult:
        """Upsert the static seed list, one record at a time."""
        with time_block("seed.persist"):
            return persist_records(self.store, self.seed_commands)

    def ingest_document(self, content: str, fmt: str) -> tuple[list[CommandRecord], MergeResult]:
        """Parse an upload and persist whatever it yields."""
        records = self.document_parser.parse(content, fmt)
        if not records:
            return records, MergeResult()
        return records, persist_records(self.store, records)

    def repopulate_examples(self) -> RepopulateResult:
        """
        Write curated examples onto existing rows by command name.

        Entries are independent keys, so every update is submitted at once
        to a bounded pool and the results are collected afterwards.
        """
        result = RepopulateResult()
        entries = list(self.curated_examples.items())
        result.submitted = len(entries)
        if not entries:
            return result

        with time_block("repopulate.fanout"), ThreadPoolExecutor(
            max_workers=max(1, min(self.max_workers, len(entries)))
        ) as executor:
            futures = {
                executor.submit(self._write_examples, command, examples): command
                for command, examples in entries
            }
            outcomes: dict[str, str | None] = {}
            for future in as_completed(futures):
                command = futures[future]
                try:
                    outcomes[command] = future.result()
                except Exception as e:
                    logger.exception("Repopulate worker failed for %s", command)
                    outcomes[command] = str(e)

        # Report in table order rather than completion order
        for command, _ in entries:
            error = outcomes[command]
            if error is None:
                result.updated_commands.append(command)
            else:
                result.errors.append(f"{command}: {error}")

        counter("repopulate.updated", len(result.updated_commands))
        logger.info(
            "Repopulated examples: %d sent, %d errors",
            len(result.updated_commands),
            len(result.errors),
        )
        return result

    def _write_examples(self, command: str, examples: tuple[CommandExample, ...]) -> str | None:
        _, error = self.store.update(
            command,
            {"examples": [example.to_dict() for example in examples], "updated_at": utc_now()},
        )
        return error

    # ------------------------------------------------------------------
    # Notebook
    # ------------------------------------------------------------------

    def sync(self) -> SyncStats:
        orchestrator = SyncOrchestrator(
            store=self.store,
            notebook=self.notebook,
            fallback_catalog=self.fallback_catalog,
            parser=self.parser,
            notebook_id=self.notebook_id,
        )
        return orchestrator.sync()

    def query_notebook(self, question: str) -> dict[str, Any]:
        """Raw tool result for a free-form question. Raises NotebookError."""
        return self.notebook.query_raw(self.notebook_id, question)

    def test_notebook(self, question: str = TEST_QUERY) -> tuple[str, list[CommandRecord]]:
        """Answer text and its parse, without persisting. Raises NotebookError."""
        raw_text = extract_answer(self.query_notebook(question))
        return raw_text, self.parser.parse(raw_text)
