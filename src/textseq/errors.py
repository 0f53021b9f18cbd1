"""Custom exception hierarchy for textseq errors."""

import regex as re


class TextSeqError(Exception):
    """Base exception for all textseq errors."""


class InvalidConfigurationError(TextSeqError, ValueError):
    """Raised when a vocabulary size, sequence length or policy is invalid."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: object | None = None,
    ) -> None:
        """Initialize with optional field and value that get appended to the message."""
        extra = " "
        if field:
            extra += f"(field: {field}) "
        if value is not None:
            extra += f"(got: {value!r}) "
        super().__init__(message + extra)
        self.field = field
        self.value = value


class VocabularyError(TextSeqError):
    """Raised when vocabulary lookups fail."""

    def __init__(self, message: str, *, invalid_id: int | None = None) -> None:
        extra = " "
        # decoding: id not in vocabulary
        if invalid_id is not None:
            extra += f"(invalid id: {invalid_id}) "
        super().__init__(message + extra)
        self.invalid_id = invalid_id


class NotFittedError(TextSeqError):
    """Raised when a pipeline is used before it has been fitted."""


class ModelLoadError(TextSeqError):
    """Raised when loading a saved pipeline fails."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        version_mismatch: tuple[str, str] | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if version_mismatch is not None:
            extra += f"(expected: {version_mismatch[1]}) (got {version_mismatch[0]}) "
        super().__init__(message + extra)
        self.model_path = model_path
        self.version_mismatch = version_mismatch


class PatternError(TextSeqError):
    """Raised when compiling and/or validating tokenizer regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        Args:
            message: Error message.
            pattern: The regex pattern that failed.
            regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class RecordError(TextSeqError):
    """Raised when an input record has no usable text."""

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        text_field: str | None = None,
    ) -> None:
        extra = " "
        if index is not None:
            extra += f"(record: {index}) "
        if text_field:
            extra += f"(field: {text_field}) "
        super().__init__(message + extra)
        self.index = index
        self.text_field = text_field
