"""
Command Repository - SQLite implementation of CommandStore.

Follows the database patterns in lsearch/infrastructure/database.py:
pooled connections, one transaction per write, lock retries. Storage
errors come back as StoreResult(error=...) rather than exceptions.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from lsearch.infrastructure.database import db_transaction, get_db_connection, retry_on_db_lock
from lsearch.observability.logging import get_logger
from lsearch.observability.telemetry import counter
from lsearch.storage.base import StoreResult

logger = get_logger(__name__)

# Columns a payload may write; anything else is rejected before reaching SQL
WRITABLE_COLUMNS = (
    "description",
    "category",
    "subcategory",
    "examples",
    "tags",
    "source_notebook_id",
    "updated_at",
)
JSON_COLUMNS = ("examples", "tags")
CONFLICT_TARGETS = ("command",)

_STORE_ERRORS = (sqlite3.Error, OSError, RuntimeError, ValueError)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _encode(payload: dict[str, Any]) -> dict[str, Any]:
    unknown = set(payload) - set(WRITABLE_COLUMNS) - {"command"}
    if unknown:
        raise ValueError(f"Unknown columns in payload: {sorted(unknown)}")
    encoded = dict(payload)
    for column in JSON_COLUMNS:
        if column in encoded:
            encoded[column] = json.dumps(encoded[column], ensure_ascii=False)
    encoded.setdefault("updated_at", utc_now())
    return encoded


def _decode(row: sqlite3.Row) -> dict[str, Any]:
    data = dict(row)
    for column in JSON_COLUMNS:
        try:
            data[column] = json.loads(data.get(column) or "[]")
        except json.JSONDecodeError:
            logger.warning("Corrupt %s JSON for command %s", column, data.get("command"))
            data[column] = []
    return data


def _guarded(operation: str, func: Callable[[], Any]) -> StoreResult:
    try:
        return StoreResult(data=func())
    except _STORE_ERRORS as e:
        logger.error("Store %s failed: %s", operation, e)
        counter(f"store.{operation}.errors")
        return StoreResult(error=str(e))


class CommandRepository:
    """CRUD for the commands table; `command` is the natural key."""

    def select(self, query: str | None = None, category: str | None = None) -> StoreResult:
        """
        List commands ordered by name.

        Args:
            query: Case-insensitive substring over command and description
            category: Exact category label
        """
        return _guarded("select", lambda: self._select(query, category))

    @staticmethod
    @retry_on_db_lock()
    def _select(query: str | None, category: str | None) -> list[dict[str, Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        if category:
            clauses.append("category = ?")
            params.append(category)
        if query:
            clauses.append(
                "(instr(unicode_lower(command), ?) > 0 OR instr(unicode_lower(description), ?) > 0)"
            )
            needle = query.lower()
            params.extend([needle, needle])

        sql = "SELECT * FROM commands"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY command"

        with get_db_connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_decode(row) for row in rows]

    def get(self, command: str) -> StoreResult:
        return _guarded("get", lambda: self._get(command))

    @staticmethod
    @retry_on_db_lock()
    def _get(command: str) -> dict[str, Any] | None:
        with get_db_connection() as conn:
            row = conn.execute("SELECT * FROM commands WHERE command = ?", (command,)).fetchone()
        return _decode(row) if row else None

    def update(self, command: str, payload: dict[str, Any]) -> StoreResult:
        """
        Update columns present in payload for one command.

        Returns:
            StoreResult whose data is the number of matched rows (0 or 1)

        Side Effects:
            - Updates the row in place; absent columns keep their stored value
        """
        return _guarded("update", lambda: self._update(command, payload))

    @staticmethod
    @retry_on_db_lock()
    def _update(command: str, payload: dict[str, Any]) -> int:
        encoded = _encode(payload)
        encoded.pop("command", None)
        columns = [column for column in WRITABLE_COLUMNS if column in encoded]
        assignments = ", ".join(f"{column} = :{column}" for column in columns)

        with db_transaction() as conn:
            cursor = conn.execute(
                f"UPDATE commands SET {assignments} WHERE command = :key",
                {**encoded, "key": command},
            )
            return cursor.rowcount

    def upsert(self, payload: dict[str, Any], on_conflict: str = "command") -> StoreResult:
        """
        Insert or update by the conflict key.

        On conflict only the payload's columns are overwritten, so a payload
        without `examples` leaves stored examples intact.
        """
        return _guarded("upsert", lambda: self._upsert(payload, on_conflict))

    @staticmethod
    @retry_on_db_lock()
    def _upsert(payload: dict[str, Any], on_conflict: str) -> int:
        if on_conflict not in CONFLICT_TARGETS:
            raise ValueError(f"Unsupported conflict target: {on_conflict}")
        if not payload.get("command") or not payload.get("description"):
            raise ValueError("command and description are required")

        encoded = _encode(payload)
        columns = ["command"] + [column for column in WRITABLE_COLUMNS if column in encoded]
        placeholders = ", ".join(f":{column}" for column in columns)
        updates = ", ".join(
            f"{column} = excluded.{column}" for column in columns if column != on_conflict
        )

        with db_transaction() as conn:
            cursor = conn.execute(
                f"INSERT INTO commands ({', '.join(columns)}) VALUES ({placeholders}) "
                f"ON CONFLICT({on_conflict}) DO UPDATE SET {updates}",
                encoded,
            )
            return cursor.rowcount

    def count(self) -> StoreResult:
        return _guarded("count", self._count)

    @staticmethod
    @retry_on_db_lock()
    def _count() -> int:
        with get_db_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM commands").fetchone()[0]

    def category_counts(self) -> StoreResult:
        return _guarded("category_counts", self._category_counts)

    @staticmethod
    @retry_on_db_lock()
    def _category_counts() -> dict[str, int]:
        with get_db_connection() as conn:
            rows = conn.execute(
                "SELECT category, COUNT(*) AS n FROM commands GROUP BY category ORDER BY category"
            ).fetchall()
        return {row["category"]: row["n"] for row in rows}
