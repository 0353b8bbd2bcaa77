"""
Exception types for the mipsu toolkit.

Every error carries a ``reason`` naming the precise failure, so callers can tell
a too-short hex literal from a too-long one without parsing messages.
"""

from enum import Enum, auto


class ErrorReason(Enum):
    """Precise failure variants reported by the toolkit."""

    # Usage
    UNKNOWN_CMD = auto()
    TOO_MANY_ARGS = auto()
    BAD_CONFIG = auto()

    # Literal syntax
    BAD_DECIMAL = auto()
    BAD_RADIX = auto()
    MISSING_PREFIX = auto()
    BAD_HEX = auto()
    HEX_TOO_SHORT = auto()
    HEX_TOO_LONG = auto()
    BAD_BIN = auto()
    BIN_TOO_SHORT = auto()
    BIN_TOO_LONG = auto()
    TRUNCATED_WORD = auto()
    BAD_ENCODING = auto()

    # Semantics
    BAD_OP = auto()
    BAD_TYPE = auto()
    BAD_REGISTER = auto()
    BAD_OPERAND_FORMAT = auto()
    BAD_FIELD_COUNT = auto()

    # Range
    NEGATIVE = auto()
    OVERFLOW = auto()
    UNDERFLOW = auto()


class MipsuError(Exception):
    """Base exception for mipsu errors."""

    def __init__(
        self,
        message: str,
        reason: ErrorReason = None,
        location: str = None,
        source: str = None,
    ):
        self.reason = reason
        self.location = location
        self.source = source
        if location is not None:
            if source:
                message = f"{location}: {message}\n  {source}"
            else:
                message = f"{location}: {message}"
        super().__init__(message)

    def at(self, location: str, source: str = None) -> "MipsuError":
        """Return a copy of this error annotated with the unit that raised it."""
        return type(self)(self.args[0], self.reason, location, source)


class UsageError(MipsuError):
    """Exception raised for bad command usage (arity, unknown command)."""

    pass


class ConfigError(MipsuError):
    """Exception raised when a configuration file is invalid."""

    def __init__(self, message: str, reason: ErrorReason = ErrorReason.BAD_CONFIG,
                 location: str = None, source: str = None):
        super().__init__(message, reason, location, source)


class ParseError(MipsuError):
    """Exception raised for malformed literals (radix, digits, width)."""

    pass


class SemanticError(MipsuError):
    """Exception raised for unknown operations/registers or wrong operand counts."""

    pass


class RangeError(MipsuError):
    """Exception raised when a literal falls outside its field's bound."""

    pass
