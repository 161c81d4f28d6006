"""
Byte-level BPE tokenizer over a fixed pretrained vocabulary.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from math import ceil
from pathlib import Path
from typing import Final, Iterable

from ._bpe import bpe as bpe_merge
from .byte_map import ByteSymbolMap, default_byte_map
from .cache import BPECache, CacheInfo
from .errors import InvalidUtf8Error
from .parallel import ParallelMode, ParallelStrategy
from .pattern import TokenPattern, compile_pattern, segment
from .types import Token
from .vocab import MergeRanks, Vocabulary

ENCODER_FILENAME: Final[str] = "encoder.json"
MERGES_FILENAME: Final[str] = "vocab.bpe"

_DECODE_ERRORS: Final[tuple[str, ...]] = ("replace", "strict")

log = logging.getLogger(__name__)


class Tokenizer:
    """
    Encode text to GPT-2 style token ids and back.

    Text is split by a regex into chunks, each chunk's UTF-8 bytes are remapped to
    printable symbols, BPE merges run per chunk (memoized), and the resulting
    subwords are looked up in the vocabulary.

    The vocabulary, merge ranks and byte map are read-only after construction and
    may be shared across threads; the chunk cache carries its own lock.
    """

    def __init__(
        self,
        vocab: Vocabulary,
        ranks: MergeRanks,
        pattern: str | TokenPattern | None = None,
        cache_size: int | None = None,
        byte_map: ByteSymbolMap | None = None,
    ) -> None:
        """
        :param vocab: Token string <-> id table.
        :param ranks: Merge rank table.
        :param pattern: Built-in pattern name, ``TokenPattern`` member or raw regex.
                        Defaults to ``TokenPattern.GPT2``.
        :param cache_size: Bound for the chunk cache; ``None`` keeps every entry.
        :param byte_map: Byte <-> symbol mapper; defaults to the shared instance.
        :raises PatternError: If ``pattern`` is neither a known name nor a valid regex.
        """
        self.vocab = vocab
        self.ranks = ranks
        self.byte_map = byte_map if byte_map is not None else default_byte_map()
        self.pat: str = _resolve_pattern(pattern)
        self.compiled_pat = compile_pattern(self.pat)
        self.cache = BPECache(cache_size)
        # plain mapping for the hot loop
        self._rank_table = ranks.as_mapping()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(vocab_size={len(self.vocab)}, "
            f"merges={len(self.ranks)})"
        )

    # Encoding
    # ---------------------------------------------------------------------------

    def bpe(self, chunk: str) -> str:
        """
        Return the space-joined subword symbols for a byte-remapped chunk.

        Results are memoized per chunk. Chunks with fewer than two symbols have no
        pair to merge and are returned as is.
        """
        if len(chunk) < 2:
            return chunk
        return self.cache.get_or_compute(chunk, self._merge)

    def _merge(self, chunk: str) -> str:
        """Run the merge loop on a cache miss."""
        return " ".join(bpe_merge(chunk, self._rank_table))

    def _encode_chunk(self, chunk: str) -> list[Token]:
        """Encode one pre-tokenized chunk of raw text."""
        symbols = self.byte_map.encode_bytes(chunk.encode("utf-8"))
        tokens: list[Token] = []
        for piece in self.bpe(symbols).split(" "):
            tok = self.vocab.encode(piece)
            if tok is None:
                # pieces missing from the vocabulary are dropped, not reported
                log.debug(f"dropping subword {piece!r} with no vocabulary entry")
                continue
            tokens.append(tok)
        return tokens

    def encode(self, text: str, num_workers: int | None = None) -> list[Token]:
        """
        Encode text into a sequence of token ids.

        A merged subword with no vocabulary entry is silently left out of the
        output. This cannot happen with a consistent vocabulary and merge table
        but is kept for compatibility with existing encoded corpora.

        :param text: Text to encode.
        :param num_workers: When greater than one, chunks are encoded on a thread
                            pool of this size. Output order is unaffected. The
                            merge loop is pure Python and holds the GIL, so this
                            gives no speedup; it is kept for API compatibility
                            with ``encode_batch``'s ``chunk`` mode.
        :returns: Token ids in chunk order.
        """
        chunks = segment(text, self.compiled_pat)

        if num_workers is None or num_workers <= 1:
            tokens: list[Token] = []
            for chunk in chunks:
                tokens.extend(self._encode_chunk(chunk))
            return tokens

        with ThreadPoolExecutor(max_workers=num_workers) as pool:
            encoded_chunks = list(pool.map(self._encode_chunk, chunks))
        return [tok for chunk_toks in encoded_chunks for tok in chunk_toks]

    def encode_batch(
        self,
        texts: list[str],
        num_workers: int | None = None,
        parallel_mode: ParallelStrategy | ParallelMode = ParallelMode.AUTO,
    ) -> list[list[Token]]:
        """
        Encode many texts using the requested parallelization mode.

        ``off`` encodes texts serially. ``chunk`` encodes each text using
        chunk-level parallelism. ``batch`` runs multiple full-text encodes in
        parallel. ``auto`` chooses chunk mode for a single input text and batch
        mode for multiple texts.

        All modes produce identical output. The merge loop is pure Python and
        holds the GIL, so the thread-pool modes add scheduling overhead without a
        speedup; they exist for API compatibility and for callers whose encode
        runs alongside I/O-bound work.

        :param texts: Text inputs to encode.
        :param num_workers: Worker count for chunk or batch parallelism.
        :param parallel_mode: Parallelization policy, by name or member.
        :returns: Encoded token sequences in input order.
        :raises ParallelModeError: If ``parallel_mode`` is not a known mode.
        """
        mode = ParallelMode.get(parallel_mode)

        if not texts:
            return []

        if num_workers is None:
            workers = os.cpu_count() or 1
        else:
            workers = max(1, num_workers)  # "0" interpreted as 1 worker

        def process_batch() -> list[list[Token]]:
            """Encode grouped texts in parallel, each text serially."""
            if workers == 1 or len(texts) <= 1:
                return [self.encode(text) for text in texts]

            # group texts to reduce task-scheduling overhead when the input
            # contains many documents
            target_tasks = min(len(texts), workers * 2)
            group_size = max(1, ceil(len(texts) / target_tasks))
            text_groups = [
                texts[idx : idx + group_size] for idx in range(0, len(texts), group_size)
            ]

            def encode_group(group: list[str]) -> list[list[Token]]:
                return [self.encode(text) for text in group]

            with ThreadPoolExecutor(max_workers=workers) as pool:
                encoded_groups = list(pool.map(encode_group, text_groups))
            return [encoded for group in encoded_groups for encoded in group]

        match mode:
            case ParallelMode.OFF:
                return [self.encode(text) for text in texts]
            case ParallelMode.CHUNK:
                return [self.encode(text, num_workers=workers) for text in texts]
            case ParallelMode.BATCH:
                return process_batch()
            case ParallelMode.AUTO:
                # single text sequence parallelized on chunk level
                if len(texts) == 1:
                    return [self.encode(texts[0], num_workers=workers)]
                return process_batch()

    # Decoding
    # ---------------------------------------------------------------------------

    def decode_bytes(self, tokens: Iterable[Token]) -> bytes:
        """
        Decode token ids into the raw byte stream they stand for.

        :raises UnknownTokenError: If any id is not in the vocabulary.
        :raises InvalidSymbolError: If a vocabulary string holds a character that
                                    is not a byte symbol.
        """
        text = "".join(self.vocab.decode(tok) for tok in tokens)
        return self.byte_map.decode_symbols(text)

    def decode(self, tokens: Iterable[Token], errors: str = "replace") -> str:
        """
        Decode token ids back into text.

        Token boundaries need not fall on UTF-8 character boundaries, so an
        arbitrary id sequence can produce invalid UTF-8. By default such bytes
        become U+FFFD; ``errors="strict"`` raises instead.

        :param tokens: Token ids to decode.
        :param errors: ``"replace"`` (default) or ``"strict"``.
        :raises UnknownTokenError: If any id is not in the vocabulary.
        :raises InvalidSymbolError: If a vocabulary string is not in byte-symbol form.
        :raises InvalidUtf8Error: If ``errors="strict"`` and the bytes are not UTF-8.
        """
        if errors not in _DECODE_ERRORS:
            raise ValueError(f"errors must be one of {_DECODE_ERRORS}, got {errors!r}")

        txt_bytes = self.decode_bytes(tokens)
        try:
            return txt_bytes.decode("utf-8", errors=errors)
        except UnicodeDecodeError as e:
            raise InvalidUtf8Error(
                "decoded bytes are not valid UTF-8", position=e.start
            ) from e

    def decode_batch(
        self, token_batch: list[list[Token]], errors: str = "replace"
    ) -> list[str]:
        """Decode multiple token sequences; see :meth:`decode`."""
        return [self.decode(tokens, errors=errors) for tokens in token_batch]

    # Introspection
    # ---------------------------------------------------------------------------

    def vocab_size(self) -> int:
        return len(self.vocab)

    def token_to_id(self, token: str) -> Token | None:
        """Return the id of a vocabulary string (in byte-symbol form)."""
        return self.vocab.encode(token)

    def id_to_token(self, tok: Token) -> str:
        """Return the vocabulary string for ``tok`` in byte-symbol form."""
        return self.vocab.decode(tok)

    def cache_info(self) -> CacheInfo:
        return self.cache.info()

    def clear_cache(self) -> None:
        self.cache.clear()

    # Persistence
    # ---------------------------------------------------------------------------

    def save(self, directory: str | os.PathLike[str]) -> Path:
        """
        Write ``encoder.json`` and ``vocab.bpe`` into ``directory``.

        The files load back with :func:`gptbpe.load_files` or
        :func:`gptbpe.from_pretrained`. The split pattern is not stored.

        :returns: The directory written to.
        """
        out_dir = Path(directory)
        # create directory if does not exist
        out_dir.mkdir(parents=True, exist_ok=True)

        log.info(f"saving tokenizer to {out_dir}")
        (out_dir / ENCODER_FILENAME).write_text(self.vocab.to_json(), encoding="utf-8")
        (out_dir / MERGES_FILENAME).write_text(
            self.ranks.to_text(), encoding="utf-8", newline="\n"
        )
        log.info(
            f"saved {len(self.vocab)} tokens and {len(self.ranks)} merge rules"
        )
        return out_dir


def _resolve_pattern(pattern: str | TokenPattern | None) -> str:
    """Map a pattern name or member to its regex; raw regexes pass through."""
    if pattern is None:
        return TokenPattern.GPT2.value
    if isinstance(pattern, TokenPattern):
        return pattern.value
    if pattern.upper().replace("-", "_") in TokenPattern.__members__:
        return TokenPattern.get(pattern)
    return pattern
