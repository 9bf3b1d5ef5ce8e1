"""
Static example tables shipped as YAML under lsearch/catalog/data/.

Each table is loaded once and handed to its consumer as an immutable
object; tests build their own with ExampleCatalog.from_mapping().
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from lsearch.catalog.parser import is_valid_command, normalize_command
from lsearch.catalog.types import Category, CommandExample, CommandRecord
from lsearch.config import MAX_EXAMPLES
from lsearch.observability.logging import get_logger

logger = get_logger(__name__)

DATA_DIR = Path(__file__).parent / "data"
FALLBACK_CATALOG_PATH = DATA_DIR / "fallback_catalog.yaml"
CURATED_EXAMPLES_PATH = DATA_DIR / "curated_examples.yaml"
SEED_COMMANDS_PATH = DATA_DIR / "seed_commands.yaml"


class ExampleCatalog(Mapping[str, tuple[CommandExample, ...]]):
    """Read-only command -> examples table."""

    def __init__(self, entries: Mapping[str, tuple[CommandExample, ...]]):
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source: str = "<memory>") -> ExampleCatalog:
        """
        Validate a {command: [{code, description}, ...]} mapping.

        Invalid command names and entries without usable examples are
        skipped with a warning.
        """
        entries: dict[str, tuple[CommandExample, ...]] = {}
        for key, raw_examples in (raw or {}).items():
            command = normalize_command(str(key))
            if not is_valid_command(command):
                logger.warning("Skipping invalid command %r in %s", key, source)
                continue
            examples = tuple(
                example
                for example in (
                    CommandExample.from_dict(item)
                    for item in (raw_examples or [])
                    if isinstance(item, dict)
                )
                if example is not None
            )[:MAX_EXAMPLES]
            if not examples:
                logger.warning("Skipping %r in %s: no examples", key, source)
                continue
            entries[command] = examples
        return cls(entries)

    def __getitem__(self, command: str) -> tuple[CommandExample, ...]:
        return self._entries[command]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _read_yaml(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_example_catalog(path: Path) -> ExampleCatalog:
    catalog = ExampleCatalog.from_mapping(_read_yaml(path), source=path.name)
    logger.info("Loaded %d entries from %s", len(catalog), path.name)
    return catalog


@lru_cache(maxsize=1)
def load_fallback_catalog() -> ExampleCatalog:
    """Fallback Catalog used by notebook sync when extraction yields nothing."""
    return load_example_catalog(FALLBACK_CATALOG_PATH)


@lru_cache(maxsize=1)
def load_curated_examples() -> ExampleCatalog:
    """Curated examples for the bulk repopulate operation."""
    return load_example_catalog(CURATED_EXAMPLES_PATH)


def seed_records_from_list(raw: list[dict[str, Any]], source: str = "<memory>") -> tuple[CommandRecord, ...]:
    """Validate fully specified seed entries into CommandRecords."""
    records: list[CommandRecord] = []
    for item in raw or []:
        command = normalize_command(str(item.get("command", "")))
        description = str(item.get("description") or "").strip()
        category = Category.coerce(item.get("category"))
        if not is_valid_command(command) or not description or category is None:
            logger.warning("Skipping invalid seed entry %r in %s", item.get("command"), source)
            continue
        examples = [
            example
            for example in (CommandExample.from_dict(e) for e in item.get("examples") or [])
            if example is not None
        ]
        records.append(
            CommandRecord(
                command=command,
                description=description,
                category=category,
                subcategory=item.get("subcategory"),
                tags=[str(tag) for tag in item.get("tags") or []],
                examples=examples[:MAX_EXAMPLES],
            )
        )
    return tuple(records)


@lru_cache(maxsize=1)
def load_seed_commands() -> tuple[CommandRecord, ...]:
    records = seed_records_from_list(_read_yaml(SEED_COMMANDS_PATH), source=SEED_COMMANDS_PATH.name)
    logger.info("Loaded %d seed commands", len(records))
    return records
