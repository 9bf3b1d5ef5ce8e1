"""Persisted store interface shared by the SQLite repository and test fakes."""

from __future__ import annotations

from typing import Any, NamedTuple, Protocol


class StoreResult(NamedTuple):
    """(data, error) pair; exactly one of them is meaningful."""

    data: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CommandStore(Protocol):
    """
    Query/update/upsert over the `commands` collection.

    Implementations never raise for storage failures; they return
    StoreResult(error=...) instead. `update` reports the number of rows it
    matched as data.
    """

    def select(self, query: str | None = None, category: str | None = None) -> StoreResult: ...

    def get(self, command: str) -> StoreResult: ...

    def update(self, command: str, payload: dict[str, Any]) -> StoreResult: ...

    def upsert(self, payload: dict[str, Any], on_conflict: str = "command") -> StoreResult: ...

    def count(self) -> StoreResult: ...

    def category_counts(self) -> StoreResult: ...
