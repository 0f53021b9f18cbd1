"""Regex word tokenizer used to turn raw text into documents."""

import logging
from typing import Protocol

import regex as re

from .pattern import TokenPattern, compile_pattern
from .types import Document

log = logging.getLogger(__name__)


class TextTokenizer(Protocol):
    """Anything that turns one raw text into a list of tokens."""

    def __call__(self, text: str) -> Document: ...


class WordTokenizer:
    """Split text into word tokens with a built-in or custom regex pattern."""

    def __init__(
        self,
        pattern: str = "words",
        lowercase: bool = True,
        *,
        custom_pattern: str | None = None,
    ) -> None:
        """
        :param pattern: Built-in pattern name ("words", "whitespace", "alnum").
                        Ignored if custom_pattern is provided.
        :param lowercase: Lowercase text before splitting.
        :param custom_pattern: Custom regex string. Overrides pattern parameter.
        :raises PatternError: If the pattern name is unknown or the regex is invalid.
        """
        if custom_pattern is not None:
            self.pattern_name: str | None = None
            self.pat = custom_pattern
        else:
            # get() handles invalid pattern names
            self.pat = TokenPattern.get(pattern)
            self.pattern_name = pattern.lower()
        self.compiled_pat: re.Pattern[str] = compile_pattern(self.pat)
        self.lowercase = lowercase
        log.debug(f"word tokenizer using pattern {self.pat!r}")

    def tokenize(self, text: str) -> Document:
        """Return the tokens of ``text`` in order of appearance."""
        if self.lowercase:
            text = text.lower()
        # zero-width matches (e.g. \b, lookaheads) are not tokens
        return [m.group(0) for m in self.compiled_pat.finditer(text) if m.end() > m.start()]

    def tokenize_batch(self, texts: list[str]) -> list[Document]:
        """Tokenize many texts, preserving input order."""
        return [self.tokenize(text) for text in texts]

    def __call__(self, text: str) -> Document:
        return self.tokenize(text)

    def __repr__(self) -> str:
        if self.pattern_name is None:
            return f"{self.__class__.__name__}(custom_pattern={self.pat!r}, lowercase={self.lowercase})"
        return f"{self.__class__.__name__}(pattern={self.pattern_name!r}, lowercase={self.lowercase})"


__all__ = ["TextTokenizer", "WordTokenizer"]
