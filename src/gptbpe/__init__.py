"""gptbpe: byte-level BPE encoding and decoding over pretrained GPT-2 style vocabularies."""

from .byte_map import ByteSymbolMap, bytes_to_unicode
from .cache import BPECache, CacheInfo
from .errors import (
    DecodeError,
    GptBpeError,
    InvalidSymbolError,
    InvalidUtf8Error,
    MalformedVocabularyError,
    ModelLoadError,
    ParallelModeError,
    PatternError,
    UnknownTokenError,
)
from .factory import from_pretrained, from_tables, list_pretrained, load_files
from .parallel import ParallelMode, list_parallel_modes
from .pattern import TokenPattern, list_patterns
from .tokenizer import Tokenizer
from .vocab import MergeRanks, Vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gptbpe")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "Vocabulary",
    "MergeRanks",
    "ByteSymbolMap",
    "BPECache",
    "CacheInfo",
    "TokenPattern",
    "ParallelMode",
    "bytes_to_unicode",
    "from_pretrained",
    "from_tables",
    "load_files",
    "list_pretrained",
    "list_patterns",
    "list_parallel_modes",
    "GptBpeError",
    "ModelLoadError",
    "MalformedVocabularyError",
    "DecodeError",
    "UnknownTokenError",
    "InvalidSymbolError",
    "InvalidUtf8Error",
    "PatternError",
    "ParallelModeError",
]
