"""
Tests for the command block parser (strategy cascade)

Covers the documented nmap scenario, first-writer-wins deduplication,
description cleanup and the length/format rejection rules.
"""

from __future__ import annotations

import pytest

from lsearch.catalog.classifier import CategoryClassifier
from lsearch.catalog.parser import (
    CommandBlockParser,
    clean_description,
    is_valid_command,
    normalize_command,
    parse_commands,
)
from lsearch.catalog.types import Category, CommandExample
from lsearch.observability.telemetry import get_counter

NMAP_ANSWER = "* **nmap**: Escaneo de puertos\n  - Ejemplo: `nmap -sV target` - detecta versión"


class TestNmapScenario:
    """Bold bullet with one marked example"""

    def test_single_record(self):
        records = parse_commands(NMAP_ANSWER)

        assert len(records) == 1
        record = records[0]
        assert record.command == "nmap"
        assert record.description == "Escaneo de puertos"
        assert record.category == Category.SECURITY
        assert record.examples == [CommandExample("nmap -sV target", "detecta versión")]

    def test_strategy_counters(self):
        parse_commands(NMAP_ANSWER)

        assert get_counter("parser.bullet_block.accepted") == 1
        # bold_colon sees the same command again and is dropped
        assert get_counter("parser.bold_colon.rejected") == 1


class TestDeduplication:
    def test_first_strategy_wins(self):
        text = "* **grep**: Search text patterns\n\nUse `grep` - another description here"
        records = parse_commands(text)

        assert [r.command for r in records] == ["grep"]
        assert records[0].description == "Search text patterns"

    def test_output_follows_strategy_order(self):
        text = "`curl` - Transfer data from URLs\n* **wget**: Download files from the web"
        assert [r.command for r in parse_commands(text)] == ["wget", "curl"]

    def test_idempotent(self):
        text = NMAP_ANSWER + "\n- netstat: Network statistics tool\n"
        first = [r.to_dict() for r in parse_commands(text)]
        second = [r.to_dict() for r in parse_commands(text)]
        assert first == second


class TestStrategies:
    def test_numbered_bold_without_colon(self):
        records = parse_commands("1. **htop** Interactive process viewer")

        assert [r.command for r in records] == ["htop"]
        assert records[0].category == Category.PROCESS
        assert get_counter("parser.numbered_bold.accepted") == 1

    def test_plain_bullet(self):
        records = parse_commands("- netstat: Network statistics tool")

        assert [r.command for r in records] == ["netstat"]
        assert records[0].category == Category.NETWORKING

    def test_parenthetical_alias_dropped(self):
        records = parse_commands("* **nc (netcat)**: Swiss army knife of networking")

        assert [r.command for r in records] == ["nc"]
        assert records[0].description == "Swiss army knife of networking"


class TestDescriptionCleanup:
    def test_trailing_citation_removed(self):
        records = parse_commands("* **awk**: Pattern scanning language [12, 34]")
        assert records[0].description == "Pattern scanning language"

    def test_semicolon_clause_removed(self):
        records = parse_commands("* **sed**: Stream editor; also used for scripts")
        assert records[0].description == "Stream editor"

    def test_truncated_to_400_chars(self):
        records = parse_commands("* **dd**: " + "a" * 450)
        assert len(records[0].description) == 400

    def test_clean_description_helper(self):
        assert clean_description("  Lists files [3] ") == "Lists files"


class TestRejection:
    def test_invalid_commands_never_emitted(self):
        text = (
            "**a**: single letter command\n"
            "**123**: numeric command here\n"
            "**abcdefghijklmnopqrstuvwxyz**: twenty six chars\n"
        )
        assert parse_commands(text) == []

    def test_short_description_rejected(self):
        assert parse_commands("**ls**: list") == []

    def test_empty_input(self):
        assert parse_commands("") == []

    @pytest.mark.parametrize(
        ("command", "valid"),
        [("a", False), ("ls", True), ("123", False), ("x" * 25, True), ("x" * 26, False)],
    )
    def test_is_valid_command(self, command, valid):
        assert is_valid_command(command) is valid

    def test_normalize_command(self):
        assert normalize_command("  NMAP ") == "nmap"
        assert normalize_command("aircrack-ng/x") == "aircrack-ngx"


def test_injected_classifier():
    parser = CommandBlockParser(classifier=CategoryClassifier([("text", r".")]))
    records = parser.parse(NMAP_ANSWER)
    assert records[0].category == Category.TEXT
