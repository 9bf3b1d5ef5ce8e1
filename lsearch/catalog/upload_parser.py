"""
Document Upload Parser.

User-supplied documents come in two shapes, never mixed:
- JSON: a list of objects (or one object) with English or Spanish keys
- text: one "command - description" per line

Both use the bilingual upload profile for category and tags.
"""

from __future__ import annotations

import json
import re
from typing import Any

from lsearch.catalog.classifier import (
    CategoryClassifier,
    TagExtractor,
    upload_classifier,
    upload_tags,
)
from lsearch.catalog.parser import is_valid_command, normalize_command
from lsearch.catalog.types import Category, CommandExample, CommandRecord
from lsearch.config import DESCRIPTION_MAX_LEN, MAX_EXAMPLES
from lsearch.observability.logging import get_logger
from lsearch.observability.telemetry import counter

logger = get_logger(__name__)

TEXT_LINE = re.compile(r"^([a-zA-Z0-9_-]+)\s*[-:]\s*(.+)")

COMMAND_KEYS = ("command", "comando", "herramienta")
DESCRIPTION_KEYS = ("description", "descripcion")
CATEGORY_KEYS = ("category", "categoria")
EXAMPLE_KEYS = ("examples", "ejemplos")
TAG_KEYS = ("tags", "etiquetas")


def detect_format(content: str, filename: str | None = None, hint: str | None = None) -> str:
    """
    Decide between "json" and "text".

    A .json file name or content opening with "[" or "{" forces JSON;
    otherwise the caller's hint is used, defaulting to text.
    """
    if filename and filename.lower().endswith(".json"):
        return "json"
    if content.strip().startswith(("[", "{")):
        return "json"
    return "json" if hint == "json" else "text"


def _first(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return None


def _present(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Like _first, but an explicit empty value counts as given."""
    for key in keys:
        if key in item:
            return item[key]
    return None


def _repair_json(content: str) -> str:
    cleaned = content.strip()
    if cleaned.endswith("."):
        cleaned = cleaned[:-1]
    if cleaned.startswith("[") and not cleaned.endswith("]"):
        cleaned += "]"
    return cleaned


def _coerce_examples(raw: Any) -> list[CommandExample]:
    if not isinstance(raw, list):
        return []
    examples: list[CommandExample] = []
    for entry in raw:
        if isinstance(entry, dict):
            example = CommandExample.from_dict(entry)
        elif isinstance(entry, str) and entry.strip():
            example = CommandExample(entry.strip())
        else:
            example = None
        if example is not None:
            examples.append(example)
    return examples[:MAX_EXAMPLES]


class DocumentParser:
    """Parse uploads with injectable classifier and tagger."""

    def __init__(
        self,
        classifier: CategoryClassifier = upload_classifier,
        tagger: TagExtractor = upload_tags,
    ):
        self.classifier = classifier
        self.tagger = tagger

    def parse(self, content: str, fmt: str) -> list[CommandRecord]:
        records = self.parse_json(content) if fmt == "json" else self.parse_text(content)
        counter("upload.records_parsed", len(records))
        logger.info("Upload parsed %d commands (%s)", len(records), fmt)
        return records

    def _build(
        self,
        raw_command: str,
        raw_description: str,
        category: Category | None = None,
        tags: list[str] | None = None,
        examples: list[CommandExample] | None = None,
    ) -> CommandRecord | None:
        command = normalize_command(raw_command)
        description = raw_description.strip()
        if not is_valid_command(command) or not description:
            counter("upload.records_rejected")
            return None

        signal = f"{command} {description}"
        return CommandRecord(
            command=command,
            description=description[:DESCRIPTION_MAX_LEN],
            category=category or self.classifier.classify(signal),
            tags=tags if tags is not None else self.tagger.extract(signal),
            examples=examples or [],
        )

    def parse_json(self, content: str) -> list[CommandRecord]:
        """Whole batch or nothing: malformed JSON yields no records."""
        try:
            parsed = json.loads(_repair_json(content))
        except json.JSONDecodeError as e:
            logger.warning("Upload JSON could not be parsed: %s", e)
            counter("upload.json_errors")
            return []

        items = parsed if isinstance(parsed, list) else [parsed]
        records: list[CommandRecord] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            raw_command = _first(item, COMMAND_KEYS)
            raw_description = _first(item, DESCRIPTION_KEYS)
            if not isinstance(raw_command, str) or not isinstance(raw_description, str):
                continue

            raw_tags = _present(item, TAG_KEYS)
            tags = [str(tag) for tag in raw_tags] if isinstance(raw_tags, list) else None
            record = self._build(
                raw_command,
                raw_description,
                category=Category.coerce(_first(item, CATEGORY_KEYS)),
                tags=tags,
                examples=_coerce_examples(_first(item, EXAMPLE_KEYS)),
            )
            if record is not None:
                records.append(record)
        return records

    def parse_text(self, content: str) -> list[CommandRecord]:
        """One candidate per matching line; other lines are skipped."""
        records: list[CommandRecord] = []
        for line in content.split("\n"):
            if not line.strip():
                continue
            match = TEXT_LINE.match(line)
            if match is None:
                continue
            record = self._build(match.group(1), match.group(2))
            if record is not None:
                records.append(record)
        return records


_default_parser = DocumentParser()


def parse_document(content: str, fmt: str) -> list[CommandRecord]:
    """Parse an uploaded document in "json" or "text" mode."""
    return _default_parser.parse(content, fmt)
