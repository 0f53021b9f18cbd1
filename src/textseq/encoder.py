"""
Fixed-length integer sequence encoding.

Every document, whatever its length, becomes exactly ``length`` ids: long
documents are cut on the truncating side and short ones are filled with
``PAD_ID`` on the padding side. Tokens missing from the vocabulary also map
to ``PAD_ID``, so an unknown token cannot be told apart from padding.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Literal, Sequence

import numpy as np
from tqdm import tqdm

from ._progress import _is_enabled
from ._validation import positive_int
from .errors import InvalidConfigurationError
from .parallel import ParallelMode, ParallelStrategy
from .types import Document, EncodedSequence, Token, TokenId
from .vocab import PAD_ID, PAD_TOKEN, Vocabulary

log = logging.getLogger(__name__)

SideName = Literal["pre", "post", "head", "tail"]


class Side(str, Enum):
    """End of a sequence that is cut or filled to reach the target length."""

    PRE = "pre"
    POST = "post"

    @classmethod
    def get(cls, name: "str | Side") -> "Side":
        """Get side by name (case-insensitive); "head" and "tail" are aliases."""
        if isinstance(name, Side):
            return name
        key = name.lower() if isinstance(name, str) else name
        key = {"head": "pre", "tail": "post"}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidConfigurationError(
                "unknown side, expected one of: pre, post, head, tail",
                value=name,
            )


def encode_sequence(
    document: Sequence[Token],
    vocab: Vocabulary,
    length: int,
    truncating: "SideName | Side" = Side.POST,
    padding: "SideName | Side" = Side.POST,
) -> EncodedSequence:
    """
    Encode one document into exactly ``length`` ids.

    :param document: Tokens of the document, in order.
    :param vocab: Frozen vocabulary used for lookup.
    :param length: Target sequence length (L).
    :param truncating: Side to drop tokens from when the document is longer than L.
    :param padding: Side to fill with ``PAD_ID`` when the document is shorter than L.
    :raises InvalidConfigurationError: If ``length`` is not positive or a side is unknown.

    .. code-block:: python

        encode_sequence(["a", "b", "c"], vocab, 5)
        # [id(a), id(b), id(c), 0, 0]
    """
    length = positive_int("sequence_length", length)
    trunc = Side.get(truncating)
    pad = Side.get(padding)
    return _encode_one(document, vocab, length, trunc, pad)


def _encode_one(
    document: Sequence[Token],
    vocab: Vocabulary,
    length: int,
    truncating: Side,
    padding: Side,
) -> EncodedSequence:
    """Encode with already validated arguments."""
    if len(document) > length:
        # keep the first L tokens when cutting the tail, the last L otherwise
        if truncating is Side.POST:
            document = document[:length]
        else:
            document = document[len(document) - length :]

    ids = [vocab.id_of(tok) for tok in document]
    fill = [PAD_ID] * (length - len(ids))

    if padding is Side.POST:
        return ids + fill
    return fill + ids


def encode_batch(
    documents: Sequence[Document],
    vocab: Vocabulary,
    length: int,
    truncating: "SideName | Side" = Side.POST,
    padding: "SideName | Side" = Side.POST,
    num_workers: int | None = None,
    parallel_mode: "ParallelStrategy | ParallelMode" = "auto",
    show_progress: bool = True,
) -> np.ndarray:
    """
    Encode many documents into an ``int32`` matrix of shape ``(len(documents), length)``.

    Each row is computed independently from the read-only vocabulary, so rows
    can be encoded on a thread pool. Row order always matches input order.

    :param num_workers: Worker count for batch-level parallel mode.
    :param parallel_mode: "off" encodes serially, "batch" always uses a thread
                          pool, "auto" uses one only for more than one document.
    :param show_progress: Display a progress bar when progress is globally enabled.
    :raises InvalidConfigurationError: If ``length``, a side or the mode is invalid.
    """
    length = positive_int("sequence_length", length)
    trunc = Side.get(truncating)
    pad = Side.get(padding)
    mode = ParallelMode.get(parallel_mode)

    n_docs = len(documents)
    if n_docs == 0:
        return np.zeros((0, length), dtype=np.int32)

    n_truncated = sum(1 for doc in documents if len(doc) > length)
    if n_truncated:
        log.debug(f"{n_truncated}/{n_docs} documents longer than {length} tokens")
        if n_truncated * 2 > n_docs:
            log.warning(
                f"{n_truncated} of {n_docs} documents exceed sequence length "
                f"{length} and will be truncated ({trunc.value})"
            )

    if num_workers is None:
        workers = os.cpu_count() or 1
    else:
        workers = max(1, num_workers)

    def encode(doc: Document) -> EncodedSequence:
        return _encode_one(doc, vocab, length, trunc, pad)

    use_pool = mode is ParallelMode.BATCH or (mode is ParallelMode.AUTO and n_docs > 1)

    rows: list[EncodedSequence] = []
    with tqdm(
        total=n_docs,
        desc="encoding",
        unit="doc",
        disable=not (show_progress and _is_enabled()),
    ) as bar:
        if use_pool:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                # map() yields in submission order
                for row in pool.map(encode, documents):
                    rows.append(row)
                    bar.update(1)
        else:
            for doc in documents:
                rows.append(encode(doc))
                bar.update(1)

    return np.asarray(rows, dtype=np.int32).reshape(n_docs, length)


def decode_sequence(
    sequence: Sequence[TokenId],
    vocab: Vocabulary,
    skip_padding: bool = True,
) -> Document:
    """
    Map ids back to tokens for inspection.

    Reserved ids are dropped when ``skip_padding`` is set and rendered as
    ``PAD_TOKEN`` otherwise. Unknown tokens cannot be recovered.

    :raises VocabularyError: If an id is outside the vocabulary.
    """
    tokens: Document = []
    for tok_id in sequence:
        tok_id = int(tok_id)
        if tok_id == PAD_ID:
            if not skip_padding:
                tokens.append(PAD_TOKEN)
            continue
        tokens.append(vocab.token_of(tok_id))
    return tokens


__all__ = [
    "Side",
    "SideName",
    "encode_sequence",
    "encode_batch",
    "decode_sequence",
]
