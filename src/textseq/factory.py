"""Factory functions for creating tokenizers and loading pipelines."""

from pathlib import Path
from typing import Literal, overload

from .config import EncodingConfig
from .errors import ModelLoadError
from .pipeline import MODEL_SUFFIX, SequencePipeline
from .tokenizer import WordTokenizer

Pattern = Literal["words", "whitespace", "alnum"]


@overload
def get_tokenizer(pattern: Pattern, lowercase: bool = True) -> WordTokenizer: ...


@overload
def get_tokenizer(*, custom_pattern: str, lowercase: bool = True) -> WordTokenizer: ...


def get_tokenizer(
    pattern: Pattern = "words",
    lowercase: bool = True,
    *,
    custom_pattern: str | None = None,
) -> WordTokenizer:
    """
    Create a word tokenizer with a built-in or custom regex pattern.

    :param pattern: Built-in pattern name ("words", "whitespace", "alnum").
                    Ignored if custom_pattern is provided.
    :param lowercase: Lowercase text before splitting.
    :param custom_pattern: Custom regex pattern string. Overrides pattern parameter.
    :return: Configured tokenizer instance.
    :raises PatternError: If the pattern name is unknown or custom_pattern is invalid regex.

    .. code-block:: python

        tokenizer = get_tokenizer("words")
        tokenizer = get_tokenizer(custom_pattern=r"[a-z]+")
    """
    return WordTokenizer(pattern, lowercase=lowercase, custom_pattern=custom_pattern)


def _detect_pipeline_type(model_path: str) -> str:
    """Read pipeline type from model file header."""
    path = Path(model_path)

    if not path.exists():
        raise ModelLoadError("model filepath does not exist", model_path=str(path))

    if path.is_dir():
        raise ModelLoadError("model path is a directory", model_path=str(path))

    if path.suffix != MODEL_SUFFIX:
        raise ModelLoadError("expected .model file", model_path=str(path))

    try:
        with path.open("r", encoding="utf-8") as f:
            # skip version to get pipeline type
            _ = f.readline().strip()
            pipe_type = f.readline().strip()
    except UnicodeDecodeError as e:
        raise ModelLoadError("model file is not valid UTF-8 text", model_path=str(path)) from e

    if pipe_type.startswith("type "):
        return pipe_type[5:]

    raise ModelLoadError(f"expected pipeline type got {pipe_type}")


def from_pretrained(model_path: str) -> SequencePipeline:
    """
    Load a fitted pipeline from disk.

    :param model_path: Path to the .model file written by ``SequencePipeline.save``.
    :return: Pipeline with its config, tokenizer and vocabulary restored.
    :raises ModelLoadError: If the file doesn't exist, has the wrong extension, or
                            holds an unknown pipeline type.

    .. code-block:: python

        pipe = from_pretrained("artifacts/doj.model")
        x = pipe.transform(records)
    """
    pipe_type = _detect_pipeline_type(model_path)

    if pipe_type != SequencePipeline.PIPELINE_TYPE:
        raise ModelLoadError(
            f"unknown pipeline type in model file: {pipe_type}", model_path=model_path
        )

    # placeholder config; load() replaces it with the saved one
    pipeline = SequencePipeline(EncodingConfig(max_tokens=1, sequence_length=1))
    pipeline.load(model_path)
    return pipeline


__all__ = ["Pattern", "get_tokenizer", "from_pretrained"]
