"""TextSeq: vocabulary building and fixed-length sequence encoding for text models."""

from ._progress import disable_progress, enable_progress
from .config import EncodingConfig
from .encoder import Side, decode_sequence, encode_batch, encode_sequence
from .errors import (
    InvalidConfigurationError,
    ModelLoadError,
    NotFittedError,
    PatternError,
    RecordError,
    TextSeqError,
    VocabularyError,
)
from .factory import from_pretrained, get_tokenizer
from .parallel import ParallelMode, list_parallel_modes
from .pattern import TokenPattern, list_patterns
from .pipeline import SequencePipeline
from .tokenizer import TextTokenizer, WordTokenizer
from .vocab import PAD_ID, PAD_TOKEN, Vocabulary, build_vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("textseq")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "PAD_ID",
    "PAD_TOKEN",
    "Vocabulary",
    "build_vocabulary",
    "Side",
    "encode_sequence",
    "encode_batch",
    "decode_sequence",
    "EncodingConfig",
    "SequencePipeline",
    "TextTokenizer",
    "WordTokenizer",
    "TokenPattern",
    "ParallelMode",
    "get_tokenizer",
    "from_pretrained",
    "list_patterns",
    "list_parallel_modes",
    "enable_progress",
    "disable_progress",
    "TextSeqError",
    "InvalidConfigurationError",
    "VocabularyError",
    "NotFittedError",
    "ModelLoadError",
    "PatternError",
    "RecordError",
]
