"""Factory functions for creating tokenizers from pretrained data."""

import logging
import os
from pathlib import Path
from typing import Any, Final

from tiktoken.load import read_file_cached

from ._decorators import measure_time
from .errors import MalformedVocabularyError, ModelLoadError
from .tokenizer import ENCODER_FILENAME, MERGES_FILENAME, Tokenizer
from .vocab import MergeRanks, Vocabulary

log = logging.getLogger(__name__)

_GPT2_BASE_URL: Final[str] = "https://openaipublic.blob.core.windows.net/gpt-2/encodings/main"

# name -> (encoder.json location, vocab.bpe location)
_PRETRAINED_REGISTRY: Final[dict[str, tuple[str, str]]] = {
    "gpt2": (
        f"{_GPT2_BASE_URL}/{ENCODER_FILENAME}",
        f"{_GPT2_BASE_URL}/{MERGES_FILENAME}",
    ),
}


def list_pretrained() -> list[str]:
    """Return names of the pretrained vocabularies that can be downloaded."""
    return list(_PRETRAINED_REGISTRY.keys())


def from_tables(
    encoder_json: str, merges_text: str, source: str | None = None, **kwargs: Any
) -> Tokenizer:
    """
    Build a tokenizer from the text of ``encoder.json`` and ``vocab.bpe``.

    :param encoder_json: JSON object mapping token strings to ids.
    :param merges_text: Merge rules, one pair per line after a header line.
    :param source: Where the data came from, used in error messages.
    :param kwargs: Passed through to :class:`Tokenizer`.
    :raises MalformedVocabularyError: If either table is not well-formed.
    """
    try:
        vocab = Vocabulary.from_json(encoder_json)
        ranks = MergeRanks.from_text(merges_text)
    except MalformedVocabularyError as e:
        if source is None or e.model_path is not None:
            raise
        raise MalformedVocabularyError(str(e), model_path=source) from e

    log.debug(f"built vocabulary with {len(vocab)} tokens and {len(ranks)} merge rules")
    return Tokenizer(vocab, ranks, **kwargs)


def _read_text(path: Path) -> str:
    if not path.is_file():
        raise ModelLoadError("file does not exist", model_path=str(path))
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedVocabularyError("file is not UTF-8", model_path=str(path)) from e
    except OSError as e:
        raise ModelLoadError(f"failed to read file: {e}", model_path=str(path)) from e


@measure_time
def load_files(
    encoder_path: str | os.PathLike[str],
    merges_path: str | os.PathLike[str],
    **kwargs: Any,
) -> Tokenizer:
    """
    Load a tokenizer from an ``encoder.json`` and a ``vocab.bpe`` file.

    :param encoder_path: Path to the vocabulary JSON file.
    :param merges_path: Path to the merge rules file.
    :param kwargs: Passed through to :class:`Tokenizer` (``pattern``, ``cache_size``).
    :raises ModelLoadError: If a file is missing or unreadable.
    :raises MalformedVocabularyError: If a file's contents are not well-formed.

    .. code-block:: python

        tokenizer = load_files("gpt2/encoder.json", "gpt2/vocab.bpe")
    """
    encoder_path, merges_path = Path(encoder_path), Path(merges_path)
    log.info(f"loading vocabulary from {encoder_path} and merges from {merges_path}")

    encoder_json = _read_text(encoder_path)
    merges_text = _read_text(merges_path)

    try:
        vocab = Vocabulary.from_json(encoder_json)
    except MalformedVocabularyError as e:
        raise MalformedVocabularyError(str(e), model_path=str(encoder_path)) from e
    try:
        ranks = MergeRanks.from_text(merges_text)
    except MalformedVocabularyError as e:
        raise MalformedVocabularyError(str(e), model_path=str(merges_path)) from e

    log.info(f"loaded {len(vocab)} tokens and {len(ranks)} merge rules")
    return Tokenizer(vocab, ranks, **kwargs)


@measure_time
def _download(name: str, **kwargs: Any) -> Tokenizer:
    encoder_url, merges_url = _PRETRAINED_REGISTRY[name]
    log.info(f"fetching pretrained {name!r} vocabulary")
    try:
        encoder_json = read_file_cached(encoder_url).decode("utf-8")
        merges_text = read_file_cached(merges_url).decode("utf-8")
    except Exception as e:
        raise ModelLoadError(
            f"failed to fetch pretrained vocabulary {name!r}: {e}", model_path=encoder_url
        ) from e
    return from_tables(encoder_json, merges_text, source=name, **kwargs)


def from_pretrained(name_or_path: str | os.PathLike[str], **kwargs: Any) -> Tokenizer:
    """
    Load a pretrained tokenizer by name or from a directory.

    A directory must hold ``encoder.json`` and ``vocab.bpe``. A registered name
    (see :func:`list_pretrained`) is downloaded once and cached by tiktoken; set
    ``TIKTOKEN_CACHE_DIR`` to control where.

    :param name_or_path: Directory path or pretrained name such as ``"gpt2"``.
    :param kwargs: Passed through to :class:`Tokenizer`.
    :return: Loaded tokenizer instance.
    :raises ModelLoadError: If the directory lacks the files, the name is unknown,
                            or the download fails.

    .. code-block:: python

        tokenizer = from_pretrained("gpt2")
        tokens = tokenizer.encode("Hello world")
    """
    path = Path(name_or_path)
    if path.is_dir():
        return load_files(path / ENCODER_FILENAME, path / MERGES_FILENAME, **kwargs)

    name = str(name_or_path).lower()
    if name not in _PRETRAINED_REGISTRY:
        raise ModelLoadError(
            f"unknown pretrained vocabulary, expected a directory or one of "
            f"{list_pretrained()}",
            model_path=str(name_or_path),
        )
    return _download(name, **kwargs)
