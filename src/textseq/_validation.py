"""Argument checks shared by the vocabulary, encoder and config."""

from numbers import Integral

from .errors import InvalidConfigurationError


def positive_int(name: str, value: object) -> int:
    """
    Return ``value`` as a plain ``int`` if it is a positive integer.

    Any ``numbers.Integral`` is accepted (``np.int64`` included); ``bool``
    and floats are not.

    :raises InvalidConfigurationError: Naming ``name`` as the offending field.
    """
    # bool is an int subclass but never a sensible size
    if isinstance(value, bool) or not isinstance(value, Integral) or value <= 0:
        raise InvalidConfigurationError(
            "must be a positive integer", field=name, value=value
        )
    return int(value)
