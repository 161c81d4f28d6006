"""Parallel processing mode helpers for batch encoding."""

from enum import Enum
from typing import Literal

from .errors import ParallelModeError

ParallelStrategy = Literal["auto", "batch", "chunk", "off"]


class ParallelMode(str, Enum):
    """Named parallelization modes for batch encoding."""

    AUTO = "auto"
    BATCH = "batch"
    CHUNK = "chunk"
    OFF = "off"

    @classmethod
    def get(cls, name: "str | ParallelMode") -> "ParallelMode":
        """Get parallel mode by name (case-insensitive)."""
        if isinstance(name, ParallelMode):
            return name
        try:
            return cls[name.upper()]
        except KeyError:
            raise ParallelModeError(
                "unknown mode",
                invalid_name=name,
                available_modes=[mode.value for mode in cls],
            ) from None


def list_parallel_modes() -> list[str]:
    """Return available parallel mode names."""
    return [mode.value for mode in ParallelMode]


__all__ = [
    "ParallelStrategy",
    "ParallelMode",
    "list_parallel_modes",
]
