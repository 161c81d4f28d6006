"""Shared fixtures: a small vocabulary laid out like GPT-2's."""

import pytest

import gptbpe as gb
from gptbpe.byte_map import default_byte_map
from gptbpe.vocab import base_vocabulary

# "Ġ" is the byte symbol for a space
MERGES: list[tuple[str, str]] = [
    ("h", "e"),
    ("l", "l"),
    ("Ġ", "w"),
    ("o", "r"),
    ("he", "ll"),
    ("hell", "o"),
    ("Ġw", "or"),
    ("Ġwor", "l"),
    ("Ġworl", "d"),
    ("i", "n"),
    ("a", "a"),
    ("Ġ", "t"),
]


def build_encoder(merges: list[tuple[str, str]]) -> dict[str, int]:
    """Base 256 byte symbols followed by one entry per merge, in rank order."""
    encoder = base_vocabulary(default_byte_map())
    for left, right in merges:
        encoder[left + right] = len(encoder)
    return encoder


@pytest.fixture
def encoder() -> dict[str, int]:
    return build_encoder(MERGES)


@pytest.fixture
def tokenizer(encoder) -> gb.Tokenizer:
    """Return a tokenizer over the synthetic tables."""
    return gb.Tokenizer(gb.Vocabulary(encoder), gb.MergeRanks.from_pairs(MERGES))
