"""Failures of the external notebook tool call."""

from __future__ import annotations


class NotebookError(RuntimeError):
    """Base class: the notebook tool did not produce a result."""


class NotebookTimeoutError(NotebookError):
    """Raised when no response arrives before the deadline."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Timeout {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class NotebookRPCError(NotebookError):
    """The tool answered with a JSON-RPC error object."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class NotebookProcessError(NotebookError):
    """Spawn failure, broken pipe, or the process exited before responding."""

    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message)
        self.returncode = returncode
