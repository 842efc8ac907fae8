"""TypeIDs - type-safe, K-sortable identifiers with a human-readable prefix."""

from __future__ import annotations

from typedid.errors import (
    Base32OverflowError,
    EmptyStringError,
    InvalidCharacterError,
    InvalidLengthError,
    InvalidPrefixError,
    InvalidSuffixError,
    MalformedUUIDError,
    MissingSuffixError,
    PrefixMismatchError,
    TypeIDError,
)
from typedid.registry import (
    EntityTag,
    Invalid,
    TypeIDRegistry,
    Valid,
    Validated,
    default_registry,
    factory,
    parse,
)
from typedid.typeid import TypeID


__all__ = [
    "Base32OverflowError",
    "EmptyStringError",
    "EntityTag",
    "Invalid",
    "InvalidCharacterError",
    "InvalidLengthError",
    "InvalidPrefixError",
    "InvalidSuffixError",
    "MalformedUUIDError",
    "MissingSuffixError",
    "PrefixMismatchError",
    "TypeID",
    "TypeIDError",
    "TypeIDRegistry",
    "Valid",
    "Validated",
    "default_registry",
    "factory",
    "parse",
]
