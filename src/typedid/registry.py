"""Entity-typed construction and parsing of TypeIDs.

A registry maps entity classes to prefixes. By default the prefix is the
lowercase class name (``User`` -> ``user``); a class can override it with a
``__typeid_prefix__`` attribute, and a registry can override both with
``register``. The attribute is not inherited: a subclass gets its own
derived prefix unless it declares one.

Example:
    from typedid import TypeID, TypeIDRegistry

    class User: ...
    class Organization: ...

    registry = TypeIDRegistry().register(Organization, "org")

    user_id = registry.generate(User)          # TypeID[User], 'user_01h4...'
    org_id = registry.parse(Organization, "org_01h455vb4pex5vsknk084sn02q")
    registry.parse(User, str(org_id))          # raises PrefixMismatchError
"""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Self, TypeAliasType, get_args, get_origin

from typedid import uuids
from typedid.errors import PrefixMismatchError, TypeIDError
from typedid.typeid import TypeID, validate_prefix


if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID


logger = logging.getLogger(__name__)

# Bounds prefix resolution for entity types coming from untrusted descriptors.
_DEFAULT_CACHE_SIZE = 1000
_PREFIX_ATTRIBUTE = "__typeid_prefix__"


@dataclass(frozen=True, slots=True)
class EntityTag:
    """Opaque handle for the entity type a TypeID belongs to."""

    entity: type[Any]

    @property
    def name(self) -> str:
        return self.entity.__qualname__

    @classmethod
    def of(cls, descriptor: object) -> EntityTag:
        """Resolve an entity class, ``TypeID[Entity]`` or a ``type`` alias of one.

        Raises:
            TypeError: If the descriptor does not name an entity class.
        """
        if isinstance(descriptor, TypeAliasType):
            descriptor = descriptor.__value__
        if get_origin(descriptor) is TypeID:
            descriptor = get_args(descriptor)[0]
        elif descriptor is TypeID:
            raise TypeError("TypeID must be parameterized with an entity type, e.g. TypeID[User]")
        if not isinstance(descriptor, type):
            raise TypeError(f"Expected an entity class, got {descriptor!r}")
        return cls(descriptor)


@dataclass(frozen=True, slots=True)
class Valid[I]:
    """Successful validation result."""

    value: I


@dataclass(frozen=True, slots=True)
class Invalid:
    """Failed validation result with the error message."""

    error: str


type Validated[I] = Valid[I] | Invalid


class TypeIDRegistry:
    """Creates and parses TypeIDs for entity types.

    Args:
        uuid_generator: Source of new UUIDs, defaults to UUIDv7.
        cache_size: Maximum number of entity types whose prefix is cached.
    """

    def __init__(
        self,
        uuid_generator: Callable[[], UUID] | None = None,
        *,
        cache_size: int = _DEFAULT_CACHE_SIZE,
    ) -> None:
        self._uuid_generator = uuid_generator or uuids.uuid7
        self._custom_prefixes: dict[EntityTag, str] = {}
        self._lock = threading.Lock()
        self._resolve = functools.lru_cache(maxsize=cache_size)(self._derive_prefix)

    def with_uuid_generator(self, uuid_generator: Callable[[], UUID]) -> Self:
        """Replace the UUID generator used by ``generate``."""
        self._uuid_generator = uuid_generator
        logger.debug("Using UUID generator %r", uuid_generator)
        return self

    def register(self, entity: type[Any], prefix: str) -> Self:
        """Use ``prefix`` for ``entity`` instead of the derived default.

        Raises:
            InvalidPrefixError: If the prefix breaks the grammar.
        """
        validate_prefix(prefix)
        tag = EntityTag.of(entity)
        with self._lock:
            self._custom_prefixes[tag] = prefix
        logger.debug("Registered prefix %r for %s", prefix, tag.name)
        return self

    def prefix_for(self, entity: type[Any]) -> str:
        """The prefix used for ``entity``.

        Registered prefixes are looked up first; only derived defaults are
        cached.

        Raises:
            InvalidPrefixError: If the derived prefix breaks the grammar,
                e.g. for a class name containing digits.
        """
        tag = EntityTag.of(entity)
        with self._lock:
            prefix = self._custom_prefixes.get(tag)
        if prefix is not None:
            return prefix
        return self._resolve(tag)

    def _derive_prefix(self, tag: EntityTag) -> str:
        # Only a prefix declared on the class itself counts, not an inherited one.
        prefix = vars(tag.entity).get(_PREFIX_ATTRIBUTE)
        if prefix is None:
            prefix = tag.entity.__name__.lower()
            logger.debug("Derived prefix %r for %s", prefix, tag.name)
        validate_prefix(prefix)
        return prefix

    def generate[T](self, entity: type[T]) -> TypeID[T]:
        """Create a new id for ``entity``."""
        return TypeID(self.prefix_for(entity), self._uuid_generator())

    def from_uuid[T](self, entity: type[T], uuid: UUID) -> TypeID[T]:
        """Create an id for ``entity`` from an existing UUID."""
        return TypeID(self.prefix_for(entity), uuid)

    def parse[T](self, entity: type[T], string: str) -> TypeID[T]:
        """Parse an id that must carry ``entity``'s prefix.

        Raises:
            TypeIDError: If the string is invalid.
            PrefixMismatchError: If the string belongs to another prefix.
        """
        parsed: TypeID[T] = TypeID.from_string(string, self.prefix_for(entity))
        return parsed

    def parse_raw(self, string: str) -> TypeID[Any]:
        """Parse an id with any prefix."""
        return TypeID.from_string(string)

    def ensure[T](self, entity: type[T], value: object) -> TypeID[T]:
        """Accept a string or a TypeID and check it carries ``entity``'s prefix.

        Raises:
            TypeIDError: If the value is neither a valid string nor a TypeID.
            PrefixMismatchError: If the value belongs to another prefix.
        """
        prefix = self.prefix_for(entity)
        if isinstance(value, str):
            return self.parse(entity, value)
        if isinstance(value, TypeID):
            if value.prefix != prefix:
                raise PrefixMismatchError(f"Expected prefix {prefix!r}, got {value.prefix!r}")
            return value
        raise TypeIDError(f"Expected TypeID or str, got {type(value).__name__}")

    def validate[T](self, entity: type[T], string: str) -> Validated[TypeID[T]]:
        """Like ``parse`` but returns ``Valid`` or ``Invalid`` instead of raising."""
        try:
            return Valid(self.parse(entity, string))
        except TypeIDError as e:
            return Invalid(str(e))

    def validate_raw(self, string: str) -> Validated[TypeID[Any]]:
        """Like ``parse_raw`` but returns ``Valid`` or ``Invalid`` instead of raising."""
        try:
            return Valid(self.parse_raw(string))
        except TypeIDError as e:
            return Invalid(str(e))

    def is_id(self, entity: type[Any], string: str) -> bool:
        """Whether ``string`` is a valid id for ``entity``."""
        return isinstance(self.validate(entity, string), Valid)


default_registry = TypeIDRegistry()


def factory[T](
    id_type: type[TypeID[T]],
    *,
    registry: TypeIDRegistry | None = None,
) -> Callable[[], TypeID[T]]:
    """Create a factory function for generating new ids of a specific type.

    This is useful with Pydantic's Field(default_factory=...).

    Example:
        UserId = TypeID[User]

        class UserModel(BaseModel):
            id: UserId = Field(default_factory=factory(UserId))
    """
    entity = EntityTag.of(id_type).entity
    target = registry or default_registry

    def _factory() -> TypeID[T]:
        return target.generate(entity)

    return _factory


def parse[T](
    id_type: type[TypeID[T]],
    *,
    registry: TypeIDRegistry | None = None,
) -> Callable[[str], TypeID[T]]:
    """Create a parse function for converting strings to ids of a specific type.

    Raises TypeIDError on invalid input.

    Example:
        parse_user_id = parse(TypeID[User])

        try:
            user_id = parse_user_id("user_01h455vb4pex5vsknk084sn02q")
        except TypeIDError as e:
            print(f"Invalid ID: {e}")
    """
    entity = EntityTag.of(id_type).entity
    target = registry or default_registry

    def _parse(v: str) -> TypeID[T]:
        return target.parse(entity, v)

    return _parse


__all__ = [
    "EntityTag",
    "Invalid",
    "TypeIDRegistry",
    "Valid",
    "Validated",
    "default_registry",
    "factory",
    "parse",
]
