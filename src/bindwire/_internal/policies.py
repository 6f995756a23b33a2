from enum import Enum


class VariadicNamedValuePolicy(str, Enum):
    """Policy for a named raw value that targets the variadic parameter."""

    REPLACE = "replace"
    """Use the named value as the whole variadic tail and discard leftover positional values."""

    EXTEND = "extend"
    """Use the named value first and append the leftover positional values after it."""
