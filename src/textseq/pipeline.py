"""
Text -> fixed-length integer matrix recipe.

A pipeline tokenizes raw records, builds a vocabulary once on the training
records, and then encodes any later record set (validation, test, new data)
with that same frozen vocabulary.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Final

import numpy as np

from ._decorators import measure_time
from ._sanitise import render_token
from .config import EncodingConfig
from .encoder import encode_batch
from .errors import (
    ModelLoadError,
    NotFittedError,
    PatternError,
    RecordError,
    VocabularyError,
)
from .parallel import ParallelMode, ParallelStrategy
from .tokenizer import TextTokenizer, WordTokenizer
from .types import Document
from .vocab import Vocabulary, build_vocabulary

PREFIX: Final[str] = "TextSeq"
FORMAT_VERSION: Final[str] = "1"
MODEL_SUFFIX: Final[str] = ".model"
VOCAB_SUFFIX: Final[str] = ".vocab"

type Record = str | Mapping[str, Any]

log = logging.getLogger(__name__)


def _record_texts(records: Iterable[Record], text_field: str) -> list[str]:
    """Pull the text out of plain strings or mapping-like records."""
    texts: list[str] = []
    for i, record in enumerate(records):
        if isinstance(record, str):
            texts.append(record)
            continue
        try:
            text = record[text_field]
        except (KeyError, TypeError):
            raise RecordError("record has no text field", index=i, text_field=text_field)
        if text is None:
            # missing values encode as an empty document
            text = ""
        if not isinstance(text, str):
            raise RecordError(
                f"text must be a string, got {type(text).__name__}",
                index=i,
                text_field=text_field,
            )
        texts.append(text)
    return texts


class SequencePipeline:
    """
    Tokenize -> filter to top-K tokens -> encode to length L.

    .. code-block:: python

        config = EncodingConfig(max_tokens=20_000, sequence_length=150)
        pipe = SequencePipeline(config)
        x_train = pipe.fit_transform(train_records)
        x_test = pipe.transform(test_records)
    """

    PIPELINE_TYPE: str = "sequence"

    def __init__(
        self,
        config: EncodingConfig,
        tokenizer: TextTokenizer | None = None,
    ) -> None:
        self.config = config
        if tokenizer is None:
            tokenizer = WordTokenizer(
                config.pattern,
                lowercase=config.lowercase,
                custom_pattern=config.custom_pattern,
            )
        self.tokenizer = tokenizer
        self._vocab: Vocabulary | None = None

    @property
    def vocabulary(self) -> Vocabulary:
        """The frozen vocabulary learned by :meth:`fit`."""
        if self._vocab is None:
            raise NotFittedError(
                f"{self.__class__.__name__} must be fitted before use"
            )
        return self._vocab

    def is_fitted(self) -> bool:
        return self._vocab is not None

    def tokenize(self, records: Iterable[Record], text_field: str = "text") -> list[Document]:
        """Tokenize every record's text with the configured tokenizer."""
        return [self.tokenizer(text) for text in _record_texts(records, text_field)]

    @measure_time
    def fit(self, records: Iterable[Record], text_field: str = "text") -> "SequencePipeline":
        """
        Build the vocabulary from training records.

        Refitting replaces the previous vocabulary.

        :param records: Strings or mappings holding the text under ``text_field``.
        :param text_field: Key of the text in mapping records.
        :raises RecordError: If a record has no string text.
        """
        self._fit_documents(self.tokenize(records, text_field))
        return self

    def _fit_documents(self, docs: list[Document]) -> None:
        self._vocab = build_vocabulary(
            docs, self.config.max_tokens, min_times=self.config.min_times
        )
        log.info(
            f"fitted pipeline on {len(docs)} records: {len(self._vocab)} tokens in vocabulary"
        )

    def transform(
        self,
        records: Iterable[Record],
        text_field: str = "text",
        num_workers: int | None = None,
        parallel_mode: "ParallelStrategy | ParallelMode" = "auto",
        show_progress: bool = True,
    ) -> np.ndarray:
        """
        Encode records into an ``int32`` matrix of shape ``(n_records, sequence_length)``.

        :raises NotFittedError: If called before :meth:`fit`.
        """
        if not self.is_fitted():
            raise NotFittedError(
                f"{self.__class__.__name__} must be fitted before transforming"
            )
        return self.transform_documents(
            self.tokenize(records, text_field),
            num_workers=num_workers,
            parallel_mode=parallel_mode,
            show_progress=show_progress,
        )

    def transform_documents(
        self,
        documents: Sequence[Document],
        num_workers: int | None = None,
        parallel_mode: "ParallelStrategy | ParallelMode" = "auto",
        show_progress: bool = True,
    ) -> np.ndarray:
        """Encode already tokenized documents with the fitted vocabulary."""
        return encode_batch(
            documents,
            self.vocabulary,
            self.config.sequence_length,
            truncating=self.config.truncating,
            padding=self.config.padding,
            num_workers=num_workers,
            parallel_mode=parallel_mode,
            show_progress=show_progress,
        )

    def fit_transform(
        self,
        records: Iterable[Record],
        text_field: str = "text",
        num_workers: int | None = None,
        parallel_mode: "ParallelStrategy | ParallelMode" = "auto",
        show_progress: bool = True,
    ) -> np.ndarray:
        """Fit on ``records`` and encode them, tokenizing the text only once."""
        docs = self.tokenize(records, text_field)
        self._fit_documents(docs)
        return self.transform_documents(
            docs,
            num_workers=num_workers,
            parallel_mode=parallel_mode,
            show_progress=show_progress,
        )

    def save(self, file_prefix: str) -> None:
        """
        Save pipeline state to disk.

        Creates two files: a .model file with the config and vocabulary and a
        .vocab file with human-readable token representations.

        :param file_prefix: Path prefix for output files.
        :raises NotFittedError: If the pipeline has not been fitted yet.
        :raises VocabularyError: If a token contains a line break.
        :raises PatternError: If the custom pattern contains a line break.
        """
        vocab = self.vocabulary
        # check before opening: writing truncates any model already at this prefix
        for tok in vocab.tokens:
            if "\n" in tok or "\r" in tok:
                raise VocabularyError(f"cannot save token with line break: {tok!r}")
        pattern = self.config.custom_pattern
        if pattern and ("\n" in pattern or "\r" in pattern):
            raise PatternError("cannot save pattern with line break", pattern=pattern)
        if not isinstance(self.tokenizer, WordTokenizer):
            log.warning(
                "custom tokenizer is not saved; loading will rebuild the tokenizer from config"
            )
        log.info(f"saving pipeline to {file_prefix}")
        self._save_model(file_prefix, vocab)
        self._save_vocab(file_prefix, vocab)
        log.info("pipeline saved successfully")

    def _save_model(self, file_prefix: str, vocab: Vocabulary) -> None:
        """Persist config and vocabulary to a .model file."""
        model_path = Path(file_prefix).with_suffix(MODEL_SUFFIX)
        # create directory if does not exist
        model_path.parent.mkdir(parents=True, exist_ok=True)

        log.debug(f"saving model to {model_path}")

        cfg = self.config
        with model_path.open("w", encoding="utf-8", newline="\n") as f:
            # header: format version, pipeline type
            f.write(f"{PREFIX} {FORMAT_VERSION}\n")
            f.write(f"type {self.PIPELINE_TYPE}\n")
            # config, one "key value" per line
            f.write(f"max_tokens {cfg.max_tokens}\n")
            f.write(f"sequence_length {cfg.sequence_length}\n")
            f.write(f"truncating {cfg.truncating.value}\n")
            f.write(f"padding {cfg.padding.value}\n")
            f.write(f"min_times {cfg.min_times}\n")
            f.write(f"pattern {cfg.pattern}\n")
            f.write(f"lowercase {int(cfg.lowercase)}\n")
            f.write(f"re {cfg.custom_pattern or ''}\n")
            # start of vocabulary marker
            f.write("---\n")
            f.write(f"{len(vocab)}\n")
            # body: "count token", id is the line position
            for tok, count in zip(vocab.tokens, vocab.counts):
                f.write(f"{count} {tok}\n")
            # end of vocabulary marker
            f.write("---\n")

    def _save_vocab(self, file_prefix: str, vocab: Vocabulary) -> None:
        """Persist human-readable token representations to a .vocab file."""
        vocab_path = Path(file_prefix).with_suffix(VOCAB_SUFFIX)
        vocab_path.parent.mkdir(parents=True, exist_ok=True)

        log.debug(f"saving vocab to {vocab_path}")

        with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
            f.write("[0] <pad/unk>\n")
            for tok_id, (tok, count) in enumerate(zip(vocab.tokens, vocab.counts), start=1):
                f.write(f"[{tok_id}] {render_token(tok)} ({count})\n")

    def load(self, model_filename: str) -> None:
        """
        Load pipeline state from a .model file.

        Replaces the config, rebuilds the word tokenizer and restores the vocabulary.

        :param model_filename: Path to the .model file.
        :raises ModelLoadError: If the file is missing, malformed, or from another format version.
        """
        path = Path(model_filename)

        if not path.exists():
            raise ModelLoadError("model filepath does not exist", model_path=str(path))

        if path.is_dir():
            raise ModelLoadError("model path is a directory", model_path=str(path))

        if not path.suffix == MODEL_SUFFIX:
            raise ModelLoadError("expected .model file", model_path=str(path))

        log.info(f"loading model from {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                header = f.readline().strip().split(" ")
                if len(header) != 2 or header[0] != PREFIX:
                    raise ModelLoadError("not a textseq model file", model_path=str(path))
                if header[1] != FORMAT_VERSION:
                    raise ModelLoadError(
                        "model format version mismatch",
                        version_mismatch=(header[1], FORMAT_VERSION),
                    )

                pipe_type = f.readline().strip()
                if pipe_type != f"type {self.PIPELINE_TYPE}":
                    raise ModelLoadError(
                        f"pipeline type mismatch: (expected {self.PIPELINE_TYPE}) (got {pipe_type})"
                    )

                settings: dict[str, str] = {}
                for key in (
                    "max_tokens",
                    "sequence_length",
                    "truncating",
                    "padding",
                    "min_times",
                    "pattern",
                    "lowercase",
                    "re",
                ):
                    line = f.readline().rstrip("\n")
                    found, _, value = line.partition(" ")
                    if found != key:
                        raise ModelLoadError(f"expected {key} setting, got: {line!r}")
                    settings[key] = value

                try:
                    config = EncodingConfig(
                        max_tokens=int(settings["max_tokens"]),
                        sequence_length=int(settings["sequence_length"]),
                        truncating=settings["truncating"],
                        padding=settings["padding"],
                        min_times=int(settings["min_times"]),
                        pattern=settings["pattern"],
                        custom_pattern=settings["re"] or None,
                        lowercase=settings["lowercase"] == "1",
                    )
                    tokenizer = WordTokenizer(
                        config.pattern,
                        lowercase=config.lowercase,
                        custom_pattern=config.custom_pattern,
                    )
                # InvalidConfigurationError is a ValueError too
                except (ValueError, PatternError) as e:
                    raise ModelLoadError(f"invalid config in model file: {e}") from e

                start_marker = f.readline().strip()
                if start_marker != "---":
                    raise ModelLoadError(
                        f"start sequence marker missing: (expected ---) (got {start_marker})"
                    )

                n_tokens = f.readline().strip()
                try:
                    n_tokens = int(n_tokens)
                    if n_tokens < 0:
                        raise ValueError()
                except ValueError:
                    raise ModelLoadError(f"invalid token count: {n_tokens}")

                log.debug(f"loading {n_tokens} vocabulary tokens")

                tokens: list[str] = []
                counts: list[int] = []
                for _ in range(n_tokens):
                    line = f.readline()
                    if not line:
                        raise ModelLoadError(
                            f"vocabulary truncated: expected {n_tokens} tokens, got {len(tokens)}"
                        )
                    # split once from the left; the token itself may contain spaces
                    count, sep, tok = line.rstrip("\n").partition(" ")
                    if not sep:
                        raise ModelLoadError(
                            f"vocabulary entry must be delimited by a whitespace: {line.strip()}"
                        )
                    try:
                        counts.append(int(count))
                    except ValueError:
                        raise ModelLoadError(f"count is not a number: {count}")
                    tokens.append(tok)

                end_marker = f.readline().strip()
                if end_marker != "---":
                    raise ModelLoadError(
                        f"end sequence marker missing: (expected ---) (got {end_marker})"
                    )
        # a binary or non-UTF-8 file fails inside readline()
        except UnicodeDecodeError as e:
            raise ModelLoadError("model file is not valid UTF-8 text", model_path=str(path)) from e

        try:
            vocab = Vocabulary(tokens=tuple(tokens), counts=tuple(counts))
        except VocabularyError as e:
            raise ModelLoadError("invalid vocabulary in model file") from e

        # update pipeline state only after a successful read
        self.config = config
        self.tokenizer = tokenizer
        self._vocab = vocab

        log.info(f"model loaded successfully: {len(vocab)} tokens in vocabulary")


__all__ = [
    "MODEL_SUFFIX",
    "VOCAB_SUFFIX",
    "Record",
    "SequencePipeline",
]
