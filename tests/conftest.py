"""
Pytest configuration shared across unit and integration tests.

Provides an isolated SQLite database, an in-memory CommandStore, a scripted
notebook client and small hand-built example tables.
"""

from __future__ import annotations

import copy
import sys
from pathlib import Path
from typing import Any

import pytest

from lsearch.catalog.tables import ExampleCatalog
from lsearch.notebook.errors import NotebookError
from lsearch.observability.telemetry import reset_telemetry
from lsearch.storage.base import StoreResult

FAKE_SERVER = Path(__file__).parent / "fixtures" / "fake_notebook_server.py"


class FakeStore:
    """
    In-memory CommandStore with the same merge semantics as SQLite:
    an upsert only overwrites the columns present in its payload.
    """

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.upsert_errors: dict[str, str] = {}
        self.update_errors: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []

    def add(self, command: str, **fields: Any) -> None:
        row = {"command": command, "examples": [], "tags": [], "category": "system"}
        row.update(fields)
        self.rows[command] = row

    def select(self, query: str | None = None, category: str | None = None) -> StoreResult:
        rows = sorted(self.rows.values(), key=lambda row: row["command"])
        if category:
            rows = [row for row in rows if row.get("category") == category]
        if query:
            needle = query.lower()
            rows = [
                row
                for row in rows
                if needle in row["command"].lower() or needle in row.get("description", "").lower()
            ]
        return StoreResult(data=copy.deepcopy(rows))

    def get(self, command: str) -> StoreResult:
        return StoreResult(data=copy.deepcopy(self.rows.get(command)))

    def update(self, command: str, payload: dict[str, Any]) -> StoreResult:
        self.calls.append(("update", command))
        if command in self.update_errors:
            return StoreResult(error=self.update_errors[command])
        if command not in self.rows:
            return StoreResult(data=0)
        self.rows[command].update(copy.deepcopy(payload))
        return StoreResult(data=1)

    def upsert(self, payload: dict[str, Any], on_conflict: str = "command") -> StoreResult:
        command = payload[on_conflict]
        self.calls.append(("upsert", command))
        if command in self.upsert_errors:
            return StoreResult(error=self.upsert_errors[command])
        row = self.rows.setdefault(command, {"command": command, "examples": [], "tags": []})
        row.update(copy.deepcopy(payload))
        return StoreResult(data=1)

    def count(self) -> StoreResult:
        return StoreResult(data=len(self.rows))

    def category_counts(self) -> StoreResult:
        counts: dict[str, int] = {}
        for row in self.rows.values():
            counts[row["category"]] = counts.get(row["category"], 0) + 1
        return StoreResult(data=counts)


class FakeNotebook:
    """Notebook client returning a fixed answer, or raising a fixed error."""

    def __init__(self, answer: str = "", error: NotebookError | None = None) -> None:
        self.answer = answer
        self.error = error
        self.questions: list[tuple[str, str]] = []

    def query_raw(self, notebook_id: str, question: str) -> dict[str, Any]:
        self.questions.append((notebook_id, question))
        if self.error is not None:
            raise self.error
        return {"structuredContent": {"answer": self.answer}}

    def query(self, notebook_id: str, question: str) -> str:
        return self.query_raw(notebook_id, question)["structuredContent"]["answer"]


@pytest.fixture(autouse=True)
def clean_telemetry():
    """Counters and latencies start empty in every test."""
    reset_telemetry()
    yield
    reset_telemetry()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_notebook() -> FakeNotebook:
    return FakeNotebook()


@pytest.fixture
def make_notebook():
    """FakeNotebook factory: make_notebook(answer) or make_notebook(error=...)."""
    return FakeNotebook


@pytest.fixture
def small_fallback() -> ExampleCatalog:
    """Three-entry fallback table."""
    return ExampleCatalog.from_mapping(
        {
            "ls": [{"code": "ls -la", "description": "Listar todos los archivos"}],
            "nmap": [{"code": "nmap -sV host", "description": "Escanear puertos y versiones"}],
            "top": [{"code": "top", "description": "Ver procesos en tiempo real"}],
        }
    )


@pytest.fixture
def isolated_db(tmp_path, monkeypatch):
    """
    Fresh SQLite database under tmp_path with the schema applied.

    Side Effects:
        - Sets LSEARCH_DB_PATH and resets the pool before and after the test
    """
    from lsearch.infrastructure.database import init_database, reset_pool

    db_path = tmp_path / "lsearch.db"
    monkeypatch.setenv("LSEARCH_DB_PATH", str(db_path))
    reset_pool()
    init_database()
    yield db_path
    reset_pool()


@pytest.fixture
def fake_server_command():
    """Build an MCP_SERVER_PATH-style command for the scripted JSON-RPC server."""

    def build(mode: str = "ok", *args: str) -> str:
        import shlex

        parts = [sys.executable, str(FAKE_SERVER), mode, *args]
        return " ".join(shlex.quote(part) for part in parts)

    return build
