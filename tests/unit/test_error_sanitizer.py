"""Tests for client-facing error sanitization"""

from __future__ import annotations

import pytest

from lsearch.utils.error_sanitizer import (
    GENERIC_MESSAGES,
    get_safe_error_detail,
    sanitize_error_list,
    sanitize_error_message,
)


@pytest.mark.parametrize(
    "message",
    [
        "sqlite3.OperationalError: database is locked",
        "no such table: commands",
        "UNIQUE constraint failed: commands.command",
        "failed at /root/package/lsearch/storage/command_repository.py line 12",
        "INSERT INTO commands (command) VALUES ('ls')",
        "error in lsearch.catalog.merge",
        "Traceback (most recent call last)",
        "Could not start notebook server: [Errno 2] No such file or directory: 'notebooklm-mcp'",
        "spawn failed for /opt/mcp/server.js",
    ],
)
def test_sensitive_messages_replaced(message):
    assert sanitize_error_message(message, 500) == GENERIC_MESSAGES[500]


def test_short_safe_message_kept():
    assert sanitize_error_message("Timeout 90s") == "Timeout 90s"


def test_long_or_multiline_message_replaced():
    assert sanitize_error_message("x" * 201) == GENERIC_MESSAGES[500]
    assert sanitize_error_message("line one\nline two", 400) == GENERIC_MESSAGES[400]


def test_empty_message_and_unknown_status():
    assert sanitize_error_message("", 418) == "An error occurred."


def test_safe_detail_keeps_context():
    detail = get_safe_error_detail(RuntimeError("no such column: foo"), 500, context="Sync failed")
    assert detail == f"Sync failed: {GENERIC_MESSAGES[500]}"

    assert get_safe_error_detail(ValueError("Timeout 90s")) == "Timeout 90s"


class TestErrorList:
    def test_capped_to_limit(self):
        errors = [f"cmd{i}: disk full" for i in range(10)]
        assert sanitize_error_list(errors, 3) == ["cmd0: disk full", "cmd1: disk full", "cmd2: disk full"]

    def test_command_prefix_kept_detail_replaced(self):
        errors = ["ls: database is locked at /srv/lsearch/data/lsearch.db"]
        assert sanitize_error_list(errors, 5) == [f"ls: {GENERIC_MESSAGES[500]}"]

    def test_unprefixed_message_sanitized_whole(self):
        assert sanitize_error_list(["no such table: commands"], 5) == [GENERIC_MESSAGES[500]]
        assert sanitize_error_list(["Timeout 90s"], 5) == ["Timeout 90s"]
