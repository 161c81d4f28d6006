"""
Vocabulary and merge-rank tables.

Both tables are built once from pretrained data and never mutated. The
vocabulary maps final subword strings (in byte-symbol form) to token ids; the
merge ranks order adjacent symbol pairs by the step at which training merged
them.
"""

import json
import logging
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .byte_map import ByteSymbolMap
from .errors import MalformedVocabularyError, UnknownTokenError
from .types import Symbol, SymbolPair, Token

log = logging.getLogger(__name__)

MERGES_HEADER = "#version: 0.2"


class Vocabulary:
    """Bidirectional ``token string <-> token id`` table."""

    __slots__ = ("_encoder", "_decoder")

    def __init__(self, encoder: Mapping[str, Token]) -> None:
        """
        Validate and freeze ``encoder``.

        :raises MalformedVocabularyError: If a key is not a string, a value is not a
                                          non-negative integer, or two keys share an id.
        """
        decoder: dict[Token, str] = {}
        for key, tok in encoder.items():
            if not isinstance(key, str):
                raise MalformedVocabularyError(f"vocabulary key is not a string: {key!r}")
            # bool is an int subclass, but true/false in JSON is never a token id
            if isinstance(tok, bool) or not isinstance(tok, int) or tok < 0:
                raise MalformedVocabularyError(
                    f"token id for {key!r} is not a non-negative integer: {tok!r}"
                )
            if tok in decoder:
                raise MalformedVocabularyError(
                    f"token id {tok} assigned to both {decoder[tok]!r} and {key!r}"
                )
            decoder[tok] = key

        self._encoder: Mapping[str, Token] = MappingProxyType(dict(encoder))
        self._decoder: Mapping[Token, str] = MappingProxyType(decoder)

    @classmethod
    def from_json(cls, text: str) -> "Vocabulary":
        """Parse an ``encoder.json`` document (a JSON object of string -> id)."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedVocabularyError(
                f"vocabulary is not valid JSON: {e.msg}", line_no=e.lineno
            ) from e
        if not isinstance(data, dict):
            raise MalformedVocabularyError(
                f"vocabulary must be a JSON object, got {type(data).__name__}"
            )
        return cls(data)

    def to_json(self) -> str:
        return json.dumps(dict(self._encoder))

    def __len__(self) -> int:
        return len(self._encoder)

    def __contains__(self, token: object) -> bool:
        return token in self._encoder

    def __iter__(self) -> Iterator[str]:
        return iter(self._encoder)

    def encode(self, token: str) -> Token | None:
        """Return the id of ``token``, or ``None`` when it is not in the vocabulary."""
        return self._encoder.get(token)

    def decode(self, tok: Token) -> str:
        """
        Return the string for ``tok``.

        :raises UnknownTokenError: If ``tok`` is outside the trained vocabulary.
        """
        try:
            return self._decoder[tok]
        except (KeyError, TypeError):
            raise UnknownTokenError(
                "token not found in vocabulary", invalid_tok=tok
            ) from None


class MergeRanks:
    """Ordered merge rules: lower rank means the pair was merged earlier in training."""

    __slots__ = ("_ranks",)

    def __init__(self, ranks: Mapping[SymbolPair, int]) -> None:
        self._ranks: Mapping[SymbolPair, int] = MappingProxyType(dict(ranks))

    @classmethod
    def from_pairs(cls, pairs: Iterable[SymbolPair]) -> "MergeRanks":
        """Rank pairs by position; a repeated pair takes its last rank."""
        ranks: dict[SymbolPair, int] = {}
        for rank, pair in enumerate(pairs):
            if pair in ranks:
                log.warning(
                    f"duplicate merge {pair} at rank {rank} replaces rank {ranks[pair]}"
                )
            ranks[pair] = rank
        return cls(ranks)

    @classmethod
    def from_text(cls, text: str) -> "MergeRanks":
        """
        Parse a ``vocab.bpe`` document.

        The first line is a version header and is skipped. Each following line holds
        two symbols separated by a single space. Parsing stops at the first blank
        line, so the file's trailing newline is harmless.

        :raises MalformedVocabularyError: If a line does not hold exactly two symbols.
        """
        lines = text.split("\n")

        def parse() -> Iterator[SymbolPair]:
            # line numbers are 1-based and include the header
            for line_no, line in enumerate(lines[1:], start=2):
                line = line.rstrip("\r")
                if not line:
                    break
                parts = line.split(" ")
                if len(parts) != 2 or not all(parts):
                    raise MalformedVocabularyError(
                        f"merge rule must be two space-separated symbols: {line!r}",
                        line_no=line_no,
                    )
                yield parts[0], parts[1]

        return cls.from_pairs(parse())

    def to_text(self) -> str:
        rules = "".join(f"{left} {right}\n" for left, right in self.pairs())
        return f"{MERGES_HEADER}\n{rules}"

    def __len__(self) -> int:
        return len(self._ranks)

    def __contains__(self, pair: object) -> bool:
        return pair in self._ranks

    def rank(self, pair: SymbolPair) -> int | None:
        return self._ranks.get(pair)

    def pairs(self) -> list[SymbolPair]:
        """Return merge rules sorted by rank."""
        return sorted(self._ranks, key=self._ranks.__getitem__)

    def as_mapping(self) -> Mapping[SymbolPair, int]:
        return self._ranks


def base_vocabulary(byte_map: ByteSymbolMap) -> dict[Symbol, Token]:
    """Return the 256 single-byte symbols numbered 0..255 in GPT-2 order."""
    return {sym: tok for tok, sym in enumerate(byte_map.symbols())}
