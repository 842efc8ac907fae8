"""TypeID - type-safe, K-sortable identifiers with a human-readable prefix."""

from __future__ import annotations

import re
from datetime import UTC
from datetime import datetime as dt_datetime
from typing import TYPE_CHECKING, Any, Self, cast, get_origin
from uuid import UUID

from pydantic_core import CoreSchema, core_schema

from typedid import base32, uuids
from typedid.errors import (
    EmptyStringError,
    InvalidPrefixError,
    InvalidSuffixError,
    MissingSuffixError,
    PrefixMismatchError,
    TypeIDError,
)


if TYPE_CHECKING:
    from typedid.uuids import Clock, RandomSource


_SEPARATOR = "_"
_MS_PER_SECOND = 1000

# Prefix: empty, or lowercase ASCII letters and underscores that start and end
# with a letter. The explicit length check runs first so huge inputs never
# reach the regex.
_PREFIX_PATTERN = re.compile(r"[a-z]([a-z_]{0,61}[a-z])?")
_PREFIX_MAX_LENGTH = 63


def validate_prefix(prefix: str) -> None:
    """Check that ``prefix`` is a valid TypeID prefix.

    Raises:
        InvalidPrefixError: If the prefix breaks the grammar.
    """
    if not prefix:
        return
    if len(prefix) > _PREFIX_MAX_LENGTH:
        raise InvalidPrefixError(
            f"Prefix must be at most {_PREFIX_MAX_LENGTH} characters, got {len(prefix)}"
        )
    if not _PREFIX_PATTERN.fullmatch(prefix):
        raise InvalidPrefixError(
            f"Prefix must be lowercase ASCII letters and underscores, starting and "
            f"ending with a letter, got {prefix!r}"
        )


class TypeID[T]:
    """A TypeID: an optional prefix plus a UUID encoded in base32.

    The type parameter names the entity the id belongs to. It only exists for
    the type checker: ``TypeID[User]`` and ``TypeID[Order]`` share one runtime
    representation but cannot be passed for one another.

    Example:
        >>> user_id = TypeID.generate("user")
        >>> print(user_id)  # user_01h455vb4pex5vsknk084sn02q
        >>> TypeID.from_string("user_01h455vb4pex5vsknk084sn02q").prefix
        'user'

    Note:
        ``datetime`` and ``timestamp`` assume a UUIDv7 suffix. For other UUID
        versions they return meaningless values.
    """

    __slots__ = ("_prefix", "_suffix", "_uuid")

    def __init__(self, prefix: str, uuid: UUID) -> None:
        """Initialize a TypeID from a prefix and a UUID.

        Args:
            prefix: The prefix, or ``""`` for a bare suffix.
            uuid: Any UUID; generated ids use UUIDv7.

        Raises:
            InvalidPrefixError: If the prefix breaks the grammar.
        """
        validate_prefix(prefix)
        self._prefix = prefix
        self._uuid = uuid
        self._suffix: str | None = None

    @property
    def prefix(self) -> str:
        """The type prefix (e.g. 'user', 'api_key'), possibly empty."""
        return self._prefix

    @property
    def uuid(self) -> UUID:
        """The underlying UUID."""
        return self._uuid

    @property
    def suffix(self) -> str:
        """The base32-encoded UUID (26 characters)."""
        if self._suffix is None:
            self._suffix = base32.encode(self._uuid.bytes)
        return self._suffix

    @property
    def datetime(self) -> dt_datetime:
        """The creation time stored in the UUIDv7."""
        return dt_datetime.fromtimestamp(self.timestamp, tz=UTC)

    @property
    def timestamp(self) -> float:
        """The Unix timestamp (seconds) stored in the UUIDv7."""
        return uuids.timestamp_ms(self._uuid) / _MS_PER_SECOND

    def __str__(self) -> str:
        """Return the canonical form, '<prefix>_<suffix>' or '<suffix>'."""
        if not self._prefix:
            return self.suffix
        return f"{self._prefix}{_SEPARATOR}{self.suffix}"

    def __repr__(self) -> str:
        return f"TypeID({self._prefix!r}, {self.suffix!r})"

    def __hash__(self) -> int:
        return hash((self._prefix, self._uuid))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TypeID):
            return self._prefix == other._prefix and self._uuid == other._uuid
        return NotImplemented

    # Ordering follows the canonical string, so ids sharing a prefix sort by
    # creation time.
    def __lt__(self, other: object) -> bool:
        if isinstance(other, TypeID):
            return str(self) < str(other)
        return NotImplemented

    def __le__(self, other: object) -> bool:
        if isinstance(other, TypeID):
            return str(self) <= str(other)
        return NotImplemented

    def __gt__(self, other: object) -> bool:
        if isinstance(other, TypeID):
            return str(self) > str(other)
        return NotImplemented

    def __ge__(self, other: object) -> bool:
        if isinstance(other, TypeID):
            return str(self) >= str(other)
        return NotImplemented

    def __copy__(self) -> Self:
        """Return self (TypeIDs are immutable)."""
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        """Return self (TypeIDs are immutable)."""
        return self

    def __reduce__(self) -> tuple[type[Self], tuple[str, UUID]]:
        """Support pickling."""
        return (type(self), (self._prefix, self._uuid))

    def unsafe_cast[U](self, entity: type[U]) -> TypeID[U]:  # noqa: ARG002
        """Reinterpret this id as belonging to ``entity``.

        Nothing is checked: the prefix is left as is. This is the only way to
        turn a ``TypeID[T]`` into a ``TypeID[U]``.
        """
        return cast("TypeID[U]", self)

    @classmethod
    def generate(
        cls,
        prefix: str = "",
        *,
        clock: Clock | None = None,
        randbytes: RandomSource | None = None,
    ) -> Self:
        """Generate a new TypeID with a fresh UUIDv7.

        Args:
            prefix: The prefix, or ``""`` for a bare suffix.
            clock: Millisecond clock, defaults to the system clock.
            randbytes: Random byte source, defaults to ``os.urandom``.

        Raises:
            InvalidPrefixError: If the prefix breaks the grammar.
        """
        validate_prefix(prefix)
        instance = cls.__new__(cls)
        instance._prefix = prefix  # noqa: SLF001
        instance._uuid = uuids.uuid7(clock=clock, randbytes=randbytes)  # noqa: SLF001
        instance._suffix = None  # noqa: SLF001
        return instance

    @classmethod
    def from_bytes(cls, prefix: str, data: bytes) -> Self:
        """Build a TypeID from a prefix and 16 raw UUID bytes.

        Raises:
            InvalidPrefixError: If the prefix breaks the grammar.
            InvalidLengthError: If ``data`` is not 16 bytes long.
        """
        return cls(prefix, uuids.from_bytes(data))

    @classmethod
    def from_string(cls, string: str, prefix: str | None = None) -> Self:
        """Parse a TypeID from its string form.

        The suffix is everything after the last '_' (or the whole string
        when there is none). Uppercase suffix characters are accepted and
        normalised. The id is fully decoded before ``prefix`` is compared,
        so a malformed suffix is reported even when the prefix differs.

        Args:
            string: The string to parse.
            prefix: If given, the prefix the id must carry.

        Raises:
            EmptyStringError: If ``string`` is empty.
            InvalidPrefixError: If the prefix breaks the grammar.
            MissingSuffixError: If fewer than 26 characters follow the separator.
            InvalidSuffixError: If the suffix cannot be decoded.
            PrefixMismatchError: If ``prefix`` is given and differs.
        """
        if not string:
            raise EmptyStringError("TypeID must not be an empty string")

        separator = string.rfind(_SEPARATOR)
        if separator == -1:
            parsed_prefix, encoded = "", string
        elif separator == 0:
            raise InvalidPrefixError(
                f"TypeID without a prefix must not start with {_SEPARATOR!r}, got {string!r}"
            )
        else:
            parsed_prefix, encoded = string[:separator], string[separator + 1 :]
            validate_prefix(parsed_prefix)
            if len(encoded) < base32.ENCODED_LENGTH:
                raise MissingSuffixError(
                    f"Suffix must be {base32.ENCODED_LENGTH} characters, got {len(encoded)}"
                )

        try:
            uid = UUID(bytes=base32.decode(encoded))
        except TypeIDError as e:
            raise InvalidSuffixError(f"Invalid suffix: {e}") from e

        if prefix is not None and parsed_prefix != prefix:
            raise PrefixMismatchError(f"Expected prefix {prefix!r}, got {parsed_prefix!r}")

        instance = cls.__new__(cls)
        instance._prefix = parsed_prefix  # noqa: SLF001
        instance._uuid = uid  # noqa: SLF001
        instance._suffix = encoded.lower()  # noqa: SLF001
        return instance

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,  # noqa: ANN401
        handler: Any,  # noqa: ANN401
    ) -> CoreSchema:
        """Pydantic integration for validation and serialization.

        ``TypeID[Entity]`` fields check the entity's prefix, resolved through
        the default registry when a value is validated. A bare ``TypeID``
        field accepts any valid TypeID.
        """
        from typedid.registry import EntityTag, default_registry  # noqa: PLC0415

        if get_origin(source_type) is None:

            def validate(v: object) -> TypeID[Any]:
                if isinstance(v, str):
                    return cls.from_string(v)
                if isinstance(v, TypeID):
                    return v
                raise TypeIDError(f"Expected TypeID or str, got {type(v).__name__}")

        else:
            entity = EntityTag.of(source_type).entity

            def validate(v: object) -> TypeID[Any]:
                return default_registry.ensure(entity, v)

        return core_schema.json_or_python_schema(
            json_schema=core_schema.chain_schema(
                [
                    core_schema.str_schema(),
                    core_schema.no_info_plain_validator_function(validate),
                ]
            ),
            python_schema=core_schema.no_info_plain_validator_function(validate),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


__all__ = ["TypeID", "validate_prefix"]
