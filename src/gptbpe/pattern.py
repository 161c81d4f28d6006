from enum import Enum
from typing import Iterator

import regex as re

from .errors import PatternError


class TokenPattern(str, Enum):
    """
    Pre-defined regex patterns used to split text before BPE.

    Sources:
    - GPT2: https://github.com/latitudegames/GPT-3-Encoder
    - GPT2_LOOKAHEAD: https://github.com/openai/tiktoken/blob/main/tiktoken_ext/openai_public.py
    """

    # contractions, then letters / digits / other symbols with one optional
    # leading space, then whitespace runs as their own chunk
    GPT2 = (
        r"'s|'t|'re|'ve|'m|'ll|'d|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+"
    )

    # a whitespace run gives its last space to the word that follows it
    GPT2_LOOKAHEAD = (
        r"'s|'t|'re|'ve|'m|'ll|'d|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive)."""
        try:
            return cls[name.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name for pat in cls)}"
            ) from None


def list_patterns() -> list[str]:
    """Return names of all available built-in split patterns."""
    return [pat.name for pat in TokenPattern]


def compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile and validate a regex pattern.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e) from e


def segment(text: str, pattern: re.Pattern) -> Iterator[str]:
    """Lazily yield the non-empty chunks of ``text`` matched by ``pattern``."""
    for m in pattern.finditer(text):
        chunk = m.group(0)
        if chunk:
            yield chunk
