"""
Error message sanitization for HTTP responses.

Internal failures (SQLite, the notebook tool process, file paths) are logged
in full and reach clients only as short messages.
"""

from __future__ import annotations

import re

from lsearch.observability.logging import get_logger

logger = get_logger(__name__)

# Fragments that must not reach a client
SENSITIVE_PATTERNS = [
    # File paths
    r"/[^\s]+\.(py|db|exe|js|sh)\b",
    r"\[Errno \d+\]",
    r"[A-Za-z]:\\[^\s]+",
    r"[A-Za-z]:/[^\s]+",
    # Stack traces
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    # SQL and SQLite
    r"sqlite3?\.",
    r"\b(SELECT|INSERT|UPDATE|DELETE)\b.+\b(FROM|INTO|SET|WHERE)\b",
    r"UNIQUE constraint",
    r"no such (table|column)",
    r"database is locked",
    # Credentials
    r"Bearer [A-Za-z0-9._-]+",
    r"(api[_-]?key|token|secret)\s*[=:]",
    # Internal module names
    r"lsearch\.[a-z_.]+",
]

GENERIC_MESSAGES = {
    400: "Invalid request. Please check your input and try again.",
    404: "Resource not found.",
    422: "Invalid data format.",
    500: "An internal error occurred. Please try again later.",
    503: "Service temporarily unavailable.",
}

_COMPILED = [re.compile(pattern, re.IGNORECASE) for pattern in SENSITIVE_PATTERNS]


def sanitize_error_message(message: str, status_code: int = 500) -> str:
    """
    Return `message` if it is short and carries nothing sensitive, else a
    generic message for the status code.
    """
    generic = GENERIC_MESSAGES.get(status_code, "An error occurred.")
    if not message:
        return generic

    for pattern in _COMPILED:
        if pattern.search(message):
            logger.warning("Sanitized sensitive error pattern: %s", pattern.pattern)
            return generic

    if len(message) <= 200 and "\n" not in message:
        return message
    return generic


def get_safe_error_detail(
    error: Exception,
    status_code: int = 500,
    context: str | None = None,
) -> str:
    """
    Log the full error and return a client-safe detail.

    Args:
        error: The exception that occurred
        status_code: HTTP status code
        context: Prefix such as "Sync failed"; kept even when the message is replaced
    """
    logger.error("Error (status=%d): %s - %s", status_code, type(error).__name__, error)
    safe = sanitize_error_message(str(error), status_code)
    return f"{context}: {safe}" if context else safe


def sanitize_error_list(errors: list[str], limit: int) -> list[str]:
    """
    First `limit` per-record errors, each made client-safe.

    "command: detail" entries keep their command prefix; only the detail is
    replaced when it carries something sensitive.
    """
    safe = []
    for message in errors[:limit]:
        prefix, sep, detail = message.partition(": ")
        if sep and prefix and " " not in prefix:
            safe.append(f"{prefix}: {sanitize_error_message(detail)}")
        else:
            safe.append(sanitize_error_message(message))
    return safe
