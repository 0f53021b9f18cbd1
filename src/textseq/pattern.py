from enum import Enum

import regex as re

from .errors import PatternError


class TokenPattern(str, Enum):
    """
    Pre-defined regex patterns for splitting raw text into word tokens.

    Matches are kept as tokens; anything between matches (whitespace,
    punctuation) is discarded.
    """

    # words with inner apostrophes, decimal/grouped numbers; punctuation removed
    WORDS = (
        r"\p{N}+(?:[.,]\p{N}+)+|"
        r"[\p{L}\p{M}\p{N}]+(?:['’][\p{L}\p{M}\p{N}]+)*"
    )

    # runs of non-whitespace, punctuation kept attached
    WHITESPACE = r"\S+"

    # letters and digits only, splits on apostrophes
    ALNUM = r"[\p{L}\p{M}\p{N}]+"

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive)."""
        try:
            return cls[name.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name.lower() for pat in cls)}"
            )


def list_patterns() -> list[str]:
    """Return names of all available built-in tokenization patterns."""
    return [pat.name.lower() for pat in TokenPattern]


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile a split pattern with the ``regex`` library.

    :raises PatternError: If the pattern is empty, invalid, or matches the empty string.
    """
    if not pattern:
        raise PatternError("pattern must be a non-empty string", pattern=pattern)
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e)
    # a pattern matching "" would emit empty tokens between every character
    if compiled.fullmatch("") is not None:
        raise PatternError("pattern must not match the empty string", pattern=pattern)
    return compiled


__all__ = ["TokenPattern", "list_patterns", "compile_pattern"]
