"""
Cache Key Codec

Derives the hierarchical string keys every backend stores values under, and
the wildcard patterns used for bulk invalidation.

Key layout:
    prefix . static-keys... . type-tag . additional-keys...

    app.v1.Widget.userId:7            value
    app.v1.Widget.userId:7.MetaData   freshness envelope

The type tag is the innermost generic argument of the cached type, so
``Page[Widget]``, ``list[Widget]`` and ``Widget`` all share the ``Widget``
tag and can be invalidated together with ``invalidate_by_type(Widget)``.
Only the FIRST type argument is followed: ``dict[str, Widget]`` tags as
``str``.

Derivation is pure: the same namespace, type and additional keys always
produce the same text, and additional keys keep the caller's order.
"""

from dataclasses import dataclass, field
from typing import Any, get_args

from cache_provider.core.config.constants import (
    GLOB_SPECIAL_CHARACTERS,
    KEY_SEPARATOR,
    METADATA_KEY,
    RESERVED_RESULT_TOKEN,
    WILDCARD,
)

# A type, a parametrized generic, or an explicit tag string
TypeTag = Any


@dataclass(frozen=True)
class CacheNamespace:
    """
    Namespace every key of a provider lives under.

    Attributes:
        prefix: Top-level key prefix; blank means caching is disabled
        static_keys: Ordered uniqueness tokens (tenant id, environment...)
    """

    prefix: str | None = None
    static_keys: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_configured(self) -> bool:
        """True when a non-blank prefix is set."""
        return bool(self.prefix and self.prefix.strip())

    def head(self) -> list[str]:
        """Leading key tokens: the prefix followed by the static keys."""
        return [self.prefix or "", *self.static_keys]


@dataclass(frozen=True)
class InvalidationPattern:
    """
    Pattern matching a key and every key nested under it.

    Nesting follows the key separator, so ``app.Widget`` covers
    ``app.Widget.id:1`` but not ``app.WidgetSummary.id:1`` or
    ``myapp.Widget.id:1``.

    Attributes:
        base: Literal key text the pattern starts with
    """

    base: str

    @property
    def glob(self) -> str:
        """Redis glob for keys nested under ``base`` (the exact key is not included)."""
        escaped = "".join(
            f"\\{char}" if char in GLOB_SPECIAL_CHARACTERS else char for char in self.base
        )
        return f"{escaped}{KEY_SEPARATOR}{WILDCARD}"

    def matches(self, key: str) -> bool:
        """True for ``base`` itself and for any key nested under it."""
        return key == self.base or key.startswith(f"{self.base}{KEY_SEPARATOR}")

    def __str__(self) -> str:
        return f"{self.base}{KEY_SEPARATOR}{WILDCARD}"


def _generic_arguments(value_type: TypeTag) -> tuple:
    args = get_args(value_type)
    if args:
        return args

    # Parametrized pydantic generic models are real classes, not aliases
    metadata = getattr(value_type, "__pydantic_generic_metadata__", None)
    if metadata:
        return tuple(metadata.get("args") or ())

    return ()


def resolve_type_tag(value_type: TypeTag) -> str:
    """
    Resolve the tag a cached type is stored under.

    Args:
        value_type: A class, a parametrized generic or a tag string

    Returns:
        str: Name of the innermost non-generic type along the first
        type argument

    Example:
        >>> resolve_type_tag(Page[list[Widget]])
        'Widget'
    """
    if isinstance(value_type, str):
        return value_type

    args = _generic_arguments(value_type)
    if args:
        return resolve_type_tag(args[0])

    name = getattr(value_type, "__name__", None) or getattr(value_type, "_name", None)
    return name or repr(value_type)


def derive_key(namespace: CacheNamespace, value_type: TypeTag, *additional_keys: str) -> str:
    """
    Derive the storage key of a cached value.

    Args:
        namespace: Provider namespace
        value_type: Type of the cached value
        *additional_keys: Call-site uniqueness keys, order significant

    Returns:
        str: ``prefix.static....tag.additional...``
    """
    tokens = [*namespace.head(), resolve_type_tag(value_type), *additional_keys]
    return KEY_SEPARATOR.join(tokens)


def derive_metadata_key(
    namespace: CacheNamespace, value_type: TypeTag, *additional_keys: str
) -> str:
    """Derive the key of the freshness envelope stored beside a value."""
    return derive_key(namespace, value_type, *additional_keys, METADATA_KEY)


def derive_type_pattern(
    namespace: CacheNamespace, value_type: TypeTag, *additional_keys: str
) -> InvalidationPattern:
    """
    Pattern matching every entry of a type, optionally narrowed by keys.

    With no additional keys this matches all cached forms of the type.
    """
    return InvalidationPattern(derive_key(namespace, value_type, *additional_keys))


def derive_keys_pattern(namespace: CacheNamespace, *additional_keys: str) -> InvalidationPattern:
    """
    Pattern built from the namespace and arbitrary keys, without a type tag.

    The reserved ``IResult`` token is dropped from the keys.
    """
    keys = [key for key in additional_keys if key != RESERVED_RESULT_TOKEN]
    return InvalidationPattern(KEY_SEPARATOR.join([*namespace.head(), *keys]))
