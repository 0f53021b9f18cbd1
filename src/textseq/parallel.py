"""Parallel processing mode helpers for batch encoding."""

from enum import Enum
from typing import Literal

from .errors import InvalidConfigurationError

ParallelStrategy = Literal["auto", "batch", "off"]


class ParallelMode(str, Enum):
    """Named parallelization modes for batch encoding."""

    AUTO = "auto"
    BATCH = "batch"
    OFF = "off"

    @classmethod
    def get(cls, name: "str | ParallelMode") -> "ParallelMode":
        """Get parallel mode by name (case-insensitive)."""
        if isinstance(name, ParallelMode):
            return name
        try:
            return cls[name.upper()]
        except KeyError:
            raise InvalidConfigurationError(
                f"unknown parallel mode, available: {list_parallel_modes()}",
                field="parallel_mode",
                value=name,
            )


def list_parallel_modes() -> list[str]:
    """Return available parallel mode names."""
    return [mode.value for mode in ParallelMode]


__all__ = [
    "ParallelStrategy",
    "ParallelMode",
    "list_parallel_modes",
]
