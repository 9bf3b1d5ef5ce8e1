"""
Notebook - JSON-RPC client for the external notebook tool.
"""

from lsearch.notebook.client import NotebookClient, RpcSession, SessionState, extract_answer
from lsearch.notebook.errors import (
    NotebookError,
    NotebookProcessError,
    NotebookRPCError,
    NotebookTimeoutError,
)

__all__ = [
    "NotebookClient",
    "RpcSession",
    "SessionState",
    "extract_answer",
    "NotebookError",
    "NotebookProcessError",
    "NotebookRPCError",
    "NotebookTimeoutError",
]
