"""
Frequency-ranked vocabulary shared by every sequence encoding.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Final

from ._decorators import measure_time
from ._validation import positive_int
from .errors import VocabularyError
from .types import Document, Token, TokenId

# reserved id for both padding slots and out-of-vocabulary tokens
PAD_ID: Final[TokenId] = 0
PAD_TOKEN: Final[str] = "<pad>"

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """
    Immutable token -> id mapping.

    Token at position ``i`` of ``tokens`` has id ``i + 1``; id 0 is reserved
    and never assigned to a token. ``counts`` holds the training frequency of
    each token in the same order.
    """

    tokens: tuple[Token, ...] = ()
    counts: tuple[int, ...] = ()
    _index: dict[Token, TokenId] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        tokens = tuple(self.tokens)
        counts = tuple(self.counts) if self.counts else (0,) * len(tokens)
        if len(counts) != len(tokens):
            raise VocabularyError(
                f"got {len(counts)} counts for {len(tokens)} tokens"
            )
        index = {tok: i + 1 for i, tok in enumerate(tokens)}
        if len(index) != len(tokens):
            raise VocabularyError("duplicate tokens in vocabulary")
        # frozen dataclass: bypass __setattr__ to normalise fields once
        object.__setattr__(self, "tokens", tokens)
        object.__setattr__(self, "counts", counts)
        object.__setattr__(self, "_index", index)

    def __len__(self) -> int:
        return len(self.tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._index

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def id_of(self, token: Token) -> TokenId:
        """Return the id of ``token``, or ``PAD_ID`` if it is not in the vocabulary."""
        return self._index.get(token, PAD_ID)

    def token_of(self, token_id: TokenId) -> Token:
        """
        Return the token with id ``token_id``.

        :raises VocabularyError: If the id is reserved or out of range.
        """
        if not 1 <= token_id <= len(self.tokens):
            raise VocabularyError("id not in vocabulary", invalid_id=token_id)
        return self.tokens[token_id - 1]

    def count_of(self, token: Token) -> int:
        """Return the training frequency of ``token`` (0 if absent)."""
        tok_id = self._index.get(token)
        if tok_id is None:
            return 0
        return self.counts[tok_id - 1]

    def as_dict(self) -> dict[Token, TokenId]:
        """Return a copy of the token -> id mapping."""
        return dict(self._index)


@measure_time
def build_vocabulary(
    documents: Iterable[Document], max_tokens: int, min_times: int = 1
) -> Vocabulary:
    """
    Build a vocabulary of the ``max_tokens`` most frequent tokens.

    Tokens are ranked by descending frequency across all documents. Ties keep
    the order in which tokens were first seen (document order, then position
    within the document), so a vocabulary built with a larger ``max_tokens``
    always extends the one built with a smaller value.

    :param documents: Tokenized training documents.
    :param max_tokens: Maximum number of tokens to keep (K).
    :param min_times: Drop tokens seen fewer than this many times.
    :returns: Frozen vocabulary with ids ``1..len(vocab)``.
    :raises InvalidConfigurationError: If ``max_tokens`` or ``min_times`` is not positive.
    """
    max_tokens = positive_int("max_tokens", max_tokens)
    min_times = positive_int("min_times", min_times)

    # Counter keeps first-insertion order, which is the tie-break order
    freqs: Counter[Token] = Counter()
    n_docs = 0
    for doc in documents:
        freqs.update(doc)
        n_docs += 1

    # sorted() is stable so equal counts stay in first-seen order
    ranked = sorted(
        ((tok, n) for tok, n in freqs.items() if n >= min_times),
        key=lambda item: item[1],
        reverse=True,
    )[:max_tokens]

    vocab = Vocabulary(
        tokens=tuple(tok for tok, _ in ranked),
        counts=tuple(n for _, n in ranked),
    )

    log.debug(
        f"built vocabulary with {len(vocab)} tokens from {n_docs} documents "
        f"({len(freqs)} distinct tokens seen)"
    )
    if 0 < len(vocab) < max_tokens:
        log.warning(
            f"only {len(vocab)} tokens qualified (requested {max_tokens}) "
            "vocabulary is smaller than max_tokens"
        )
    return vocab


__all__ = ["PAD_ID", "PAD_TOKEN", "Vocabulary", "build_vocabulary"]
