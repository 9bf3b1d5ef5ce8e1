"""
Merge policy between incoming records and the persisted store.

Payloads only carry `examples` when the record has at least one, so a
partial update never wipes stored examples. Each record is written
independently; one failure does not stop the batch.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from lsearch.catalog.types import CommandRecord, MergeResult
from lsearch.observability.logging import get_logger
from lsearch.observability.telemetry import counter
from lsearch.storage.base import CommandStore
from lsearch.storage.command_repository import utc_now

logger = get_logger(__name__)


def build_update_payload(
    record: CommandRecord,
    source_notebook_id: str | None = None,
    updated_at: str | None = None,
) -> dict[str, Any]:
    """Update payload for one record; `command` is not included."""
    payload: dict[str, Any] = {
        "description": record.description,
        "category": record.category.value,
        "tags": list(record.tags),
        "updated_at": updated_at or utc_now(),
    }
    if source_notebook_id is not None:
        payload["source_notebook_id"] = source_notebook_id
    if record.subcategory:
        payload["subcategory"] = record.subcategory
    if record.examples:
        payload["examples"] = [example.to_dict() for example in record.examples]
    return payload


def persist_records(
    store: CommandStore,
    records: Iterable[CommandRecord],
    source_notebook_id: str | None = None,
    double_write: bool = False,
) -> MergeResult:
    """
    Write records one at a time.

    Args:
        store: Persisted store
        records: Records to write, in order
        source_notebook_id: Provenance marker (sync only)
        double_write: Update-by-key first, then always upsert. The update's
            matched-row count decides whether the record counts as updated
            or inserted. Without it a single upsert is issued and counted
            as inserted.

    Returns:
        MergeResult with per-command error strings
    """
    result = MergeResult()

    for record in records:
        result.processed += 1
        payload = build_update_payload(record, source_notebook_id)
        matched = 0

        try:
            if double_write:
                data, error = store.update(record.command, payload)
                if error:
                    result.errors.append(f"{record.command}: {error}")
                    continue
                matched = data or 0

            _, error = store.upsert({"command": record.command, **payload}, on_conflict="command")
        except Exception as e:
            # Store implementations should not raise; keep the batch going if one does
            logger.exception("Unexpected store failure for %s", record.command)
            result.errors.append(f"{record.command}: {e}")
            continue

        if error:
            logger.error("Error upserting %s: %s", record.command, error)
            result.errors.append(f"{record.command}: {error}")
        elif matched:
            result.updated += 1
        else:
            result.inserted += 1

    counter("merge.records_written", result.inserted + result.updated)
    if result.errors:
        counter("merge.record_errors", len(result.errors))
    logger.info(
        "Persisted %d records: %d inserted, %d updated, %d errors",
        result.processed,
        result.inserted,
        result.updated,
        len(result.errors),
    )
    return result
