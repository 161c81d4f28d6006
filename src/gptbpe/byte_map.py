"""
Reversible mapping between raw bytes and printable unicode symbols.

BPE merges operate on strings, and the merge table is stored as text. Raw
control bytes and whitespace would make both awkward (a space could not be used
as a separator, a newline could not be written in ``vocab.bpe``), so every byte
is first replaced by a visible symbol. Printable Latin-1 bytes keep their own
code point; the rest are shifted into the range starting at U+0100.
"""

from functools import cache
from types import MappingProxyType
from typing import Iterator, Mapping

from .errors import InvalidSymbolError
from .types import Symbol

# bytes that render fine in most fonts and terminals map to themselves
_PRINTABLE_RANGES: tuple[tuple[int, int], ...] = (
    (ord("!"), ord("~")),
    (0xA1, 0xAC),
    (0xAE, 0xFF),
)


@cache
def bytes_to_unicode() -> dict[int, Symbol]:
    """
    Build the byte -> symbol table.

    Printable bytes come first in the table, followed by every remaining byte in
    ascending order, each assigned the next free code point from 256 upwards.
    Insertion order is significant: it is the order in which GPT-2 numbers its
    first 256 vocabulary entries.
    """
    bs: list[int] = []
    for lo, hi in _PRINTABLE_RANGES:
        bs.extend(range(lo, hi + 1))
    cs = list(bs)

    n = 0
    for b in range(256):
        if b not in bs:
            bs.append(b)
            cs.append(256 + n)
            n += 1

    return {b: chr(c) for b, c in zip(bs, cs)}


class ByteSymbolMap:
    """Immutable bijection between the 256 byte values and their symbols."""

    __slots__ = ("_encoder", "_decoder")

    def __init__(self) -> None:
        table = bytes_to_unicode()
        self._encoder: Mapping[int, Symbol] = MappingProxyType(dict(table))
        self._decoder: Mapping[Symbol, int] = MappingProxyType(
            {sym: b for b, sym in table.items()}
        )

    def __len__(self) -> int:
        return len(self._encoder)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._decoder

    def to_symbol(self, byte: int) -> Symbol:
        """Return the symbol standing in for ``byte``."""
        return self._encoder[byte]

    def to_byte(self, symbol: Symbol) -> int:
        """
        Return the byte behind ``symbol``.

        :raises InvalidSymbolError: If ``symbol`` is not one of the 256 symbols.
        """
        try:
            return self._decoder[symbol]
        except KeyError:
            raise InvalidSymbolError(
                "character is not a byte symbol", symbol=symbol
            ) from None

    def encode_bytes(self, data: bytes) -> str:
        """Remap every byte of ``data`` and concatenate the symbols."""
        enc = self._encoder
        return "".join(enc[b] for b in data)

    def decode_symbols(self, text: str) -> bytes:
        """
        Map each character of ``text`` back to its byte.

        :raises InvalidSymbolError: On the first character outside the alphabet,
                                    reporting its index in ``text``.
        """
        dec = self._decoder
        out = bytearray()
        for pos, ch in enumerate(text):
            b = dec.get(ch)
            if b is None:
                raise InvalidSymbolError(
                    "character is not a byte symbol", symbol=ch, position=pos
                )
            out.append(b)
        return bytes(out)

    def symbols(self) -> Iterator[Symbol]:
        """Yield symbols in table order (printable bytes first)."""
        return iter(self._encoder.values())


@cache
def default_byte_map() -> ByteSymbolMap:
    """Return the process-wide shared mapper; it is read-only, so one suffices."""
    return ByteSymbolMap()
