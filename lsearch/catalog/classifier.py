"""
Keyword-rule category inference and tag extraction.

Both are pure functions of their input text: lower-case, then scan ordered
keyword data from vocabulary.py. The parser/sync path and the upload path
use different profiles; module-level instances cover each.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from lsearch.catalog.types import Category
from lsearch.catalog.vocabulary import (
    PARSER_CATEGORY_RULES,
    PARSER_TAG_VOCABULARY,
    UPLOAD_CATEGORY_RULES,
    UPLOAD_TAG_VOCABULARY,
)
from lsearch.config import PARSER_TAG_LIMIT, UPLOAD_TAG_LIMIT


class CategoryClassifier:
    """
    Map free text to one Category using ordered (label, regex) rules.

    The first rule whose regex matches anywhere in the lower-cased text wins;
    no match means Category.SYSTEM.
    """

    def __init__(self, rules: Iterable[tuple[str, str]]):
        compiled: list[tuple[Category, re.Pattern[str]]] = []
        for label, pattern in rules:
            category = Category.coerce(label)
            if category is None:
                raise ValueError(f"Unknown category in rules: {label}")
            compiled.append((category, re.compile(pattern)))
        self._rules = tuple(compiled)

    def classify(self, text: str) -> Category:
        lowered = (text or "").lower()
        for category, pattern in self._rules:
            if pattern.search(lowered):
                return category
        return Category.SYSTEM

    __call__ = classify


class TagExtractor:
    """Collect vocabulary terms found as substrings, in vocabulary order, up to `limit`."""

    def __init__(self, vocabulary: Iterable[str], limit: int):
        # dict.fromkeys keeps first occurrence order while dropping repeats
        self.vocabulary = tuple(dict.fromkeys(term.lower() for term in vocabulary))
        self.limit = limit

    def extract(self, text: str) -> list[str]:
        lowered = (text or "").lower()
        tags: list[str] = []
        for term in self.vocabulary:
            if len(tags) >= self.limit:
                break
            if term in lowered:
                tags.append(term)
        return tags

    __call__ = extract


parser_classifier = CategoryClassifier(PARSER_CATEGORY_RULES)
upload_classifier = CategoryClassifier(UPLOAD_CATEGORY_RULES)
parser_tags = TagExtractor(PARSER_TAG_VOCABULARY, PARSER_TAG_LIMIT)
upload_tags = TagExtractor(UPLOAD_TAG_VOCABULARY, UPLOAD_TAG_LIMIT)


def classify(text: str) -> Category:
    """Category for parsed/synced text ("system" when nothing matches)."""
    return parser_classifier.classify(text)


def extract_tags(text: str) -> list[str]:
    """Parser-profile tags, capped at PARSER_TAG_LIMIT."""
    return parser_tags.extract(text)
