"""
Core Byte Pair Encoding (BPE) merge operations.
"""

from typing import Mapping, Sequence

from .types import Symbol, SymbolPair, Word


def get_pairs(word: Sequence[Symbol]) -> set[SymbolPair]:
    """Return the distinct adjacent symbol pairs in ``word``."""
    return set(zip(word, word[1:]))


def merge_pair(word: Sequence[Symbol], target: SymbolPair) -> Word:
    """
    Replace every occurrence of ``target`` in ``word`` with the concatenated symbol.

    A single left-to-right pass: once two symbols are merged, scanning resumes
    after the merged symbol, so overlapping occurrences like ``a a a`` merge only
    the leftmost pair.
    """
    first, second = target
    merged = first + second
    new_word: Word = []

    i = 0
    n = len(word)
    while i < n:
        if i < n - 1 and word[i] == first and word[i + 1] == second:
            new_word.append(merged)
            i += 2
        else:
            new_word.append(word[i])
            i += 1

    return new_word


def bpe(chunk: str, ranks: Mapping[SymbolPair, int]) -> Word:
    """
    Split a byte-remapped chunk into its trained subword symbols.

    Starts from one symbol per character and repeatedly merges the adjacent pair
    with the lowest rank until no pair in the word has a rank or the word is a
    single symbol. Unranked pairs never merge.

    :param chunk: One pre-tokenized chunk, already passed through the byte map.
    :param ranks: Merge rank table, ``(left, right) -> rank``.
    :returns: Final symbols in order; their concatenation equals ``chunk``.
    """
    word: Word = list(chunk)
    if len(word) < 2:
        return word

    pairs = get_pairs(word)
    while True:
        # ranks are unique, so the minimum is unambiguous
        bigram = min(pairs, key=lambda pair: ranks.get(pair, float("inf")))
        if bigram not in ranks:
            break

        word = merge_pair(word, bigram)
        if len(word) == 1:
            break
        pairs = get_pairs(word)

    return word
