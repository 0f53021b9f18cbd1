"""Encoding configuration consumed by the sequence pipeline."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any

from ._validation import positive_int
from .encoder import Side
from .errors import InvalidConfigurationError
from .pattern import TokenPattern


@dataclass(frozen=True)
class EncodingConfig:
    """
    Settings for one text -> sequence recipe.

    ``max_tokens`` (K) and ``sequence_length`` (L) have no defaults. Sides
    default to cutting and filling the tail of each document.
    """

    max_tokens: int
    sequence_length: int
    truncating: Side = Side.POST
    padding: Side = Side.POST
    min_times: int = 1
    pattern: str = "words"
    custom_pattern: str | None = None
    lowercase: bool = True

    def __post_init__(self) -> None:
        for name in ("max_tokens", "sequence_length", "min_times"):
            # frozen dataclass: store numpy integers as plain ints
            object.__setattr__(self, name, positive_int(name, getattr(self, name)))
        for name in ("truncating", "padding"):
            value = getattr(self, name)
            try:
                side = Side.get(value)
            except InvalidConfigurationError:
                raise InvalidConfigurationError(
                    "unknown side, expected one of: pre, post, head, tail",
                    field=name,
                    value=value,
                ) from None
            # frozen dataclass: normalise names to Side once
            object.__setattr__(self, name, side)
        builtin = self.pattern.upper().replace("-", "_") in TokenPattern.__members__
        if self.custom_pattern is None and not builtin:
            raise InvalidConfigurationError(
                "unknown tokenizer pattern", field="pattern", value=self.pattern
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EncodingConfig":
        """
        Build a config from a plain mapping (e.g. parsed JSON or CLI args).

        :raises InvalidConfigurationError: On unknown keys, missing K/L, or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigurationError(
                f"unknown config keys: {', '.join(sorted(unknown))}"
            )
        for required in ("max_tokens", "sequence_length"):
            if required not in data:
                raise InvalidConfigurationError("missing required key", field=required)
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dict with sides rendered as their names."""
        data = asdict(self)
        data["truncating"] = self.truncating.value
        data["padding"] = self.padding.value
        return data


__all__ = ["EncodingConfig"]
