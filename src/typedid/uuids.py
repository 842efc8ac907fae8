"""Strict UUID helpers and UUIDv7 generation (RFC 9562).

The standard library ``uuid.UUID`` is the value type. The helpers here are
stricter than its constructor: ``parse_canonical`` only accepts the
36-character ``8-4-4-4-12`` form and ``from_bytes`` reports a wrong length
as ``InvalidLengthError``.
"""

from __future__ import annotations

import os
import re
import time
from typing import TYPE_CHECKING
from uuid import UUID

from typedid.errors import InvalidLengthError, MalformedUUIDError


if TYPE_CHECKING:
    from collections.abc import Callable


type Clock = Callable[[], int]
"""Returns the current Unix time in milliseconds."""

type RandomSource = Callable[[int], bytes]
"""Returns ``n`` cryptographically secure random bytes."""

_UUID_BYTES = 16
_CANONICAL_LENGTH = 36
_CANONICAL_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)

# UUIDv7 layout: unix_ts_ms(48) | ver(4) | rand_a(12) | var(2) | rand_b(62)
_TIMESTAMP_BITS = 48
_TIMESTAMP_SHIFT = 80
_TIMESTAMP_MASK = (1 << _TIMESTAMP_BITS) - 1
_VERSION_SHIFT = 76
_RAND_A_SHIFT = 64
_VARIANT_SHIFT = 62
_RAND_B_MASK = (1 << 62) - 1
_RAND_A_OFFSET = 68  # top 12 of the 80 drawn bits
_RANDOM_BYTES = 10


def system_clock() -> int:
    """Current Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


def from_bytes(data: bytes) -> UUID:
    """Wrap 16 raw bytes (big-endian) as a UUID.

    Raises:
        InvalidLengthError: If ``data`` is not exactly 16 bytes long.
    """
    if len(data) != _UUID_BYTES:
        raise InvalidLengthError(f"UUID must be {_UUID_BYTES} bytes, got {len(data)}")
    return UUID(bytes=bytes(data))


def parse_canonical(text: str) -> UUID:
    """Parse the canonical ``xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx`` form.

    Hex digits may be upper or lower case. Braces, ``urn:uuid:`` prefixes and
    undashed hex, which ``uuid.UUID`` would tolerate, are rejected.

    Raises:
        MalformedUUIDError: If ``text`` is not in canonical form.
    """
    if len(text) != _CANONICAL_LENGTH:
        raise MalformedUUIDError(
            f"UUID must be {_CANONICAL_LENGTH} characters, got {len(text)}"
        )
    if not _CANONICAL_PATTERN.fullmatch(text):
        raise MalformedUUIDError(f"UUID must be 8-4-4-4-12 hex groups, got {text!r}")
    return UUID(text)


def to_canonical(uid: UUID) -> str:
    """Format as lowercase ``8-4-4-4-12`` hex."""
    return str(uid)


def timestamp_ms(uid: UUID) -> int:
    """The 48-bit Unix millisecond timestamp stored in the top bits of a UUIDv7."""
    return uid.int >> _TIMESTAMP_SHIFT


def uuid7(
    *,
    clock: Clock | None = None,
    randbytes: RandomSource | None = None,
) -> UUID:
    """Generate a time-ordered UUIDv7.

    Values generated in different milliseconds sort by creation time. Within
    one millisecond the order is random; there is no in-process counter.

    Args:
        clock: Millisecond clock, defaults to the system clock.
        randbytes: Random byte source, defaults to ``os.urandom``.
    """
    ms = (clock or system_clock)() & _TIMESTAMP_MASK
    rand = int.from_bytes((randbytes or os.urandom)(_RANDOM_BYTES), "big")
    value = (
        (ms << _TIMESTAMP_SHIFT)
        | (7 << _VERSION_SHIFT)
        | ((rand >> _RAND_A_OFFSET) << _RAND_A_SHIFT)
        | (0b10 << _VARIANT_SHIFT)
        | (rand & _RAND_B_MASK)
    )
    return UUID(int=value)


__all__ = [
    "Clock",
    "RandomSource",
    "from_bytes",
    "parse_canonical",
    "system_clock",
    "timestamp_ms",
    "to_canonical",
    "uuid7",
]
