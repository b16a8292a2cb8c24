"""Unit tests for text normalisation helpers."""

from __future__ import annotations

import pytest

from folio.text import normalize_title, slugify, strip_accents, tokenize, unique_strings


@pytest.mark.parametrize(
    "value,expected",
    [
        ("Lantern House", "lantern-house"),
        ("  Éclair Pavilion  ", "eclair-pavilion"),
        ("São João -- Market Hall!", "sao-joao-market-hall"),
        ("---", ""),
        ("2024: Studio/Loft", "2024-studio-loft"),
    ],
)
def test_slugify(value, expected):
    assert slugify(value) == expected


def test_slugify_truncates():
    assert slugify("a" * 80) == "a" * 60
    assert slugify("abc def", max_length=4) == "abc-"


def test_strip_accents():
    assert strip_accents("Crème brûlée") == "Creme brulee"


def test_normalize_title():
    assert normalize_title("  Éclair Pavilion") == "eclair pavilion"


def test_tokenize():
    assert tokenize("Lisbon, Portugal / Café-Bar; 2024") == [
        "lisbon",
        "portugal",
        "cafe",
        "bar",
        "2024",
    ]
    assert tokenize("   ") == []


def test_unique_strings_keeps_first_seen_order():
    assert unique_strings(["b", "a", "", "b", "c", "a"]) == ["b", "a", "c"]


def test_tokenize_drops_punctuation_only_tokens():
    assert tokenize("Ana Sousa — Atelier Norte") == ["ana", "sousa", "atelier", "norte"]
