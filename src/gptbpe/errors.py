"""Custom exception hierarchy for gptbpe encoding and decoding errors."""

import regex as re

from .types import Token


class GptBpeError(Exception):
    """Base exception for all gptbpe errors."""


class ModelLoadError(GptBpeError):
    """Raised when vocabulary or merge files cannot be located or read."""

    def __init__(self, message: str, *, model_path: str | None = None) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        super().__init__(message + extra)
        self.model_path = model_path


class MalformedVocabularyError(ModelLoadError):
    """Raised when the vocabulary or merge-rank data is not well-formed."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        line_no: int | None = None,
    ) -> None:
        if line_no is not None:
            message = f"{message} (line: {line_no})"
        super().__init__(message, model_path=model_path)
        self.line_no = line_no


class DecodeError(GptBpeError):
    """Raised when a token sequence cannot be turned back into text."""


class UnknownTokenError(DecodeError):
    """Raised when a token id has no vocabulary entry."""

    def __init__(self, message: str, *, invalid_tok: Token) -> None:
        super().__init__(f"{message} (invalid token: {invalid_tok})")
        self.invalid_tok = invalid_tok


class InvalidSymbolError(DecodeError):
    """Raised when a character lies outside the byte-symbol alphabet."""

    def __init__(
        self, message: str, *, symbol: str, position: int | None = None
    ) -> None:
        extra = f" (symbol: {symbol!r})"
        if len(symbol) == 1:
            extra = f" (symbol: {symbol!r}, U+{ord(symbol):04X})"
        if position is not None:
            extra += f" (position: {position})"
        super().__init__(message + extra)
        self.symbol = symbol
        self.position = position


class InvalidUtf8Error(DecodeError):
    """Raised by strict decoding when the byte stream is not valid UTF-8."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        if position is not None:
            message = f"{message} (byte offset: {position})"
        super().__init__(message)
        self.position = position


class PatternError(GptBpeError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        Args:
            message: Error message.
            pattern: The regex pattern that failed.
            regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class ParallelModeError(GptBpeError):
    """Raised when an unknown parallel mode is requested."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available_modes: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available_modes}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available_modes = available_modes
