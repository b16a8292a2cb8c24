"""Text normalisation helpers shared by slugs, sort keys and search tokens."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_REPEATED_HYPHENS = re.compile(r"-{2,}")
_TOKEN_SPLIT = re.compile(r"[\s,.;:!?/\\|-]+")


def strip_accents(value: str) -> str:
    """Decompose to NFD and drop combining marks (``é`` -> ``e``)."""
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(value: str, max_length: int = 60) -> str:
    """Lowercase, hyphenated, URL-safe form of ``value``, at most ``max_length`` chars."""
    slug = strip_accents(value.lower()).strip()
    slug = _NON_SLUG.sub("-", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    slug = slug.strip("-")
    return slug[:max_length]


def normalize_title(value: str) -> str:
    """Sort key used for alphabetical ordering of titles."""
    return strip_accents(value.lower()).strip()


def tokenize(value: str) -> list[str]:
    """Split free text into lowercase, accent-free search tokens."""
    normalized = strip_accents(value.lower())
    tokens = (token.strip() for token in _TOKEN_SPLIT.split(normalized))
    # Separators outside the split set (dashes, quotes) never form a token
    return [token for token in tokens if any(ch.isalnum() for ch in token)]


def unique_strings(values: Iterable[str]) -> list[str]:
    """De-duplicate while keeping first-seen order; empty strings are dropped."""
    return list(dict.fromkeys(value for value in values if value))
