"""Exceptions raised when building or parsing TypeIDs."""

from __future__ import annotations


class TypeIDError(ValueError):
    """Base class for every TypeID parsing or validation failure."""


class InvalidLengthError(TypeIDError):
    """Raised when a byte buffer or encoded string has the wrong length."""


class MalformedUUIDError(TypeIDError):
    """Raised when a string is not a canonical 8-4-4-4-12 UUID."""


class InvalidCharacterError(TypeIDError):
    """Raised when an encoded suffix contains a character outside the alphabet."""


class Base32OverflowError(TypeIDError):
    """Raised when an encoded suffix does not fit in 128 bits."""


class EmptyStringError(TypeIDError):
    """Raised when parsing an empty string."""


class MissingSuffixError(TypeIDError):
    """Raised when fewer than 26 characters follow the prefix separator."""


class InvalidPrefixError(TypeIDError):
    """Raised when a prefix breaks the prefix grammar."""


class InvalidSuffixError(TypeIDError):
    """Raised when the suffix cannot be decoded.

    The underlying codec error is available as ``__cause__``.
    """


class PrefixMismatchError(TypeIDError):
    """Raised when a valid TypeID carries a prefix other than the expected one."""


__all__ = [
    "Base32OverflowError",
    "EmptyStringError",
    "InvalidCharacterError",
    "InvalidLengthError",
    "InvalidPrefixError",
    "InvalidSuffixError",
    "MalformedUUIDError",
    "MissingSuffixError",
    "PrefixMismatchError",
    "TypeIDError",
]
