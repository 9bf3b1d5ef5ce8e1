"""Usage-example extraction from a single command's text block."""

from __future__ import annotations

import re

from lsearch.catalog.types import CommandExample
from lsearch.config import DEFAULT_EXAMPLE_DESCRIPTION, MAX_EXAMPLES

# Bullet marker accepted before an example: Ejemplo(s): / Example(s):
EXAMPLE_MARKER = r"(?:[Ee]jemplos?|[Ee]xamples?)"

# - Ejemplo: `nmap -sV host` - detect versions
MARKED_EXAMPLE = re.compile(r"[-•]\s*" + EXAMPLE_MARKER + r":\s*`([^`]+)`\s*[-–:]?\s*([^\n]*)")

# Indented backtick-led line without a marker
INDENTED_EXAMPLE = re.compile(r"^\s+`([^`]+)`\s*[-–]?\s*([^\n]+)", re.MULTILINE)

_LEADING_SEPARATORS = re.compile(r"^[-–:\s]+")


def extract_examples(block: str, limit: int = MAX_EXAMPLES) -> list[CommandExample]:
    """
    Extract (code, description) pairs from one command's block.

    Marked bullets come first, then indented backtick lines whose code was
    not already seen. Missing descriptions get the usage-example placeholder.
    """
    examples: list[CommandExample] = []
    seen_codes: set[str] = set()

    for match in MARKED_EXAMPLE.finditer(block):
        code = match.group(1).strip()
        description = _LEADING_SEPARATORS.sub("", match.group(2).strip())
        if code:
            examples.append(CommandExample(code, description or DEFAULT_EXAMPLE_DESCRIPTION))
            seen_codes.add(code)

    for match in INDENTED_EXAMPLE.finditer(block):
        code = match.group(1).strip()
        if code and code not in seen_codes:
            description = match.group(2).strip()
            examples.append(CommandExample(code, description or DEFAULT_EXAMPLE_DESCRIPTION))
            seen_codes.add(code)

    return examples[:limit]
