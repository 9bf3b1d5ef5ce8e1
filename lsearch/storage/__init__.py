"""Storage - persisted store interface and SQLite repository for commands"""

from lsearch.storage.base import CommandStore, StoreResult
from lsearch.storage.command_repository import CommandRepository

__all__ = ["CommandRepository", "CommandStore", "StoreResult"]
