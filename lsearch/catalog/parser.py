"""
Command Block Parser.

Turns loosely structured markdown-ish answers (bold terms, bullet lists,
backticked examples) into CommandRecords. Five regex strategies run in a
fixed order, most structured first, over the whole document. Each yields
candidates into one accumulator keyed by normalized command name: the
first strategy to claim a command wins, later matches are dropped.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from lsearch.catalog.classifier import (
    CategoryClassifier,
    TagExtractor,
    parser_classifier,
    parser_tags,
)
from lsearch.catalog.examples import EXAMPLE_MARKER, extract_examples
from lsearch.catalog.types import CommandExample, CommandRecord
from lsearch.config import (
    COMMAND_MAX_LEN,
    COMMAND_MIN_LEN,
    DESCRIPTION_MAX_LEN,
    DESCRIPTION_MIN_LEN,
)
from lsearch.observability.logging import get_logger
from lsearch.observability.telemetry import counter

logger = get_logger(__name__)

_INVALID_COMMAND_CHARS = re.compile(r"[^a-z0-9_-]")
_TRAILING_CITATION = re.compile(r"\s*\[[\d,\s-]+\]\s*$")
_SEMICOLON_TAIL = re.compile(r";.*")

# Next "* **" bullet ends the current command's block
_BLOCK_SEPARATOR = "\n* **"


@dataclass
class Candidate:
    """Raw (command, description) pair as matched, before normalization."""

    command: str
    description: str
    examples: list[CommandExample] = field(default_factory=list)


def normalize_command(raw: str) -> str:
    """Lower-case and drop everything outside [a-z0-9_-]."""
    return _INVALID_COMMAND_CHARS.sub("", raw.strip().lower())


def clean_description(raw: str) -> str:
    """Strip a trailing citation marker like "[12, 34]" and any ";" clause."""
    cleaned = _TRAILING_CITATION.sub("", raw.strip())
    return _SEMICOLON_TAIL.sub("", cleaned).strip()


def is_valid_command(command: str) -> bool:
    return COMMAND_MIN_LEN <= len(command) <= COMMAND_MAX_LEN and not command.isdigit()


# ---------------------------------------------------------------------------
# Strategies, most structured first
# ---------------------------------------------------------------------------

BULLET_BLOCK = re.compile(
    r"\*\s*\*\*([a-zA-Z0-9_/-]+)(?:\s*\([^)]*\))?\*\*[:\s]*([^\n*]+)"
    r"(?:\n(?:[ \t]*[-•]\s*" + EXAMPLE_MARKER + r":\s*`([^`]+)`\s*[-–:]?\s*([^\n]*)\n?)*)?"
)
BOLD_COLON = re.compile(r"\*\*([a-zA-Z0-9_-]+)\*\*:\s*([^*\n\[]+)")
NUMBERED_BOLD = re.compile(r"^\d+\.\s*\*\*([a-zA-Z0-9_-]+)\*\*[:\s]*([^*\n\[]+)", re.MULTILINE)
PLAIN_BULLET = re.compile(r"^[*\-]\s+([a-zA-Z0-9_-]+):[:\s]*([^*\n\[]+)", re.MULTILINE)
BACKTICK_INLINE = re.compile(r"`([a-zA-Z0-9_-]+)`\s*[-–:]\s*([^`\n\[]+)")


def bullet_blocks(text: str) -> Iterator[Candidate]:
    """`* **cmd**: description` with any example lines up to the next bullet."""
    for match in BULLET_BLOCK.finditer(text):
        start = match.start()
        end = text.find(_BLOCK_SEPARATOR, start + 1)
        block = text[start : end if end > start else len(text)]
        yield Candidate(match.group(1), match.group(2), extract_examples(block))


def bold_colon_pairs(text: str) -> Iterator[Candidate]:
    for match in BOLD_COLON.finditer(text):
        yield Candidate(match.group(1), match.group(2))


def numbered_bold_pairs(text: str) -> Iterator[Candidate]:
    for match in NUMBERED_BOLD.finditer(text):
        yield Candidate(match.group(1), match.group(2))


def plain_bullet_pairs(text: str) -> Iterator[Candidate]:
    for match in PLAIN_BULLET.finditer(text):
        # A command name never contains whitespace
        if not any(ch.isspace() for ch in match.group(1)):
            yield Candidate(match.group(1), match.group(2))


def backtick_pairs(text: str) -> Iterator[Candidate]:
    for match in BACKTICK_INLINE.finditer(text):
        yield Candidate(match.group(1), match.group(2))


Strategy = Callable[[str], Iterator[Candidate]]

STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("bullet_block", bullet_blocks),
    ("bold_colon", bold_colon_pairs),
    ("numbered_bold", numbered_bold_pairs),
    ("plain_bullet", plain_bullet_pairs),
    ("backtick", backtick_pairs),
)


class CommandAccumulator:
    """
    Insert-if-absent store of accepted records, in acceptance order.

    Validation happens here so every strategy shares one set of rules.
    """

    def __init__(self, classifier: CategoryClassifier, tagger: TagExtractor):
        self.classifier = classifier
        self.tagger = tagger
        self._records: dict[str, CommandRecord] = {}

    def offer(self, candidate: Candidate) -> CommandRecord | None:
        """Normalize and validate; return the new record or None when rejected."""
        command = normalize_command(candidate.command)
        description = clean_description(candidate.description)

        if (
            not is_valid_command(command)
            or len(description) < DESCRIPTION_MIN_LEN
            or command in self._records
        ):
            return None

        signal = f"{command} {description}"
        record = CommandRecord(
            command=command,
            description=description[:DESCRIPTION_MAX_LEN],
            category=self.classifier.classify(signal),
            tags=self.tagger.extract(signal),
            examples=list(candidate.examples),
        )
        self._records[command] = record
        return record

    def records(self) -> list[CommandRecord]:
        return list(self._records.values())


class CommandBlockParser:
    """Run the strategy cascade with injectable classifier and tagger."""

    def __init__(
        self,
        classifier: CategoryClassifier = parser_classifier,
        tagger: TagExtractor = parser_tags,
        strategies: tuple[tuple[str, Strategy], ...] = STRATEGIES,
    ):
        self.classifier = classifier
        self.tagger = tagger
        self.strategies = strategies

    def parse(self, text: str) -> list[CommandRecord]:
        accumulator = CommandAccumulator(self.classifier, self.tagger)
        if not text:
            return []

        for name, strategy in self.strategies:
            accepted = rejected = 0
            for candidate in strategy(text):
                if accumulator.offer(candidate) is None:
                    rejected += 1
                else:
                    accepted += 1
            if accepted:
                counter(f"parser.{name}.accepted", accepted)
            if rejected:
                counter(f"parser.{name}.rejected", rejected)
            logger.debug("Strategy %s: %d accepted, %d rejected", name, accepted, rejected)

        records = accumulator.records()
        logger.info("Parsed %d commands", len(records))
        return records


_default_parser = CommandBlockParser()


def parse_commands(text: str) -> list[CommandRecord]:
    """Extract deduplicated command records from a raw answer."""
    return _default_parser.parse(text)
