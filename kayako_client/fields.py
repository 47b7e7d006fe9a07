"""Field and relation descriptors declaring an object's wire schema."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from kayako_client.codec import STRING, Codec, to_constant

if TYPE_CHECKING:
    from kayako_client.object_base import ObjectBase


class Field:
    """A typed property mapped to a key of the decoded wire data.

    Args:
        wire: Key in the decoded data (``"@name"`` for an XML attribute, ``"#text"``
            for element text). None for fields that are never parsed generically.
        codec: Coercion used when parsing and when assigning
        post: Request key used when building outgoing data; True reuses ``wire``.
            Fields without a request key are read-only.
        required_create: Value must be set before ``create()``
        required_update: Value must be set before ``update()``
        default: Initial value, or a zero-argument factory for mutable defaults
        constant: Prefix of the owner's constants that assigned values must match
    """

    def __init__(
        self,
        wire: str | None,
        codec: Codec = STRING,
        *,
        post: str | bool = False,
        required_create: bool = False,
        required_update: bool = False,
        default: Any = None,
        constant: str | None = None,
    ) -> None:
        self.wire = wire
        self.codec = codec
        if post is True:
            post = wire.lstrip("@#") if wire else False
        self.post: str | None = post or None
        self.required_create = required_create
        self.required_update = required_update
        self.default = default
        self.constant = constant
        self.name = ""
        self.owner: type | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.owner = owner
        self.name = name

    def __repr__(self) -> str:
        return f"Field({self.name!r}, wire={self.wire!r}, post={self.post!r})"

    @property
    def read_only(self) -> bool:
        return self.post is None

    def initial(self) -> Any:
        return self.default() if callable(self.default) else self.default

    def decode(self, raw: Any) -> Any:
        value = self.codec.decode(raw)
        if value is None:
            return self.initial()
        return value

    def encode(self, value: Any) -> Any:
        return self.codec.encode(value)

    def coerce(self, instance: "ObjectBase", value: Any) -> Any:
        value = self.codec.decode(value)
        if self.constant is not None:
            value = to_constant(value, instance, self.constant)
        return value

    def __get__(self, instance: "ObjectBase | None", owner: type) -> Any:
        if instance is None:
            return self
        return instance._values.get(self.name)

    def __set__(self, instance: "ObjectBase", value: Any) -> None:
        if self.read_only:
            raise AttributeError(f"{type(instance).__name__}.{self.name} is read-only")
        instance._assign(self.name, self.coerce(instance, value))


class Relation:
    """A lazily resolved related object identified by a key field.

    Reading the attribute fetches the related object on first access and
    caches it for the lifetime of the owning object. Assigning the key field
    clears the cache; assigning the attribute updates both the cache and the
    key field.

    Args:
        target: Related class, or its name when it is declared in another module
        key: Name of the field holding the related object's identifier
        when: Predicate on the owner; when it returns False the relation is absent
        sync: Owner field -> related attribute copied when an object is assigned
        load: Custom loader ``(owner, target_class, key_value) -> object``
    """

    def __init__(
        self,
        target: type | str,
        key: str,
        *,
        when: Callable[[Any], bool] | None = None,
        sync: dict[str, str] | None = None,
        load: Callable[[Any, type, Any], Any] | None = None,
    ) -> None:
        self._target = target
        self.key = key
        self.when = when
        self.sync = sync or {}
        self.load = load
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Relation({self.name!r}, key={self.key!r})"

    def target(self, registry: dict[str, type]) -> type:
        if isinstance(self._target, str):
            return registry[self._target]
        return self._target

    def __get__(self, instance: "ObjectBase | None", owner: type) -> Any:
        if instance is None:
            return self
        return instance.get_related(self.name)

    def __set__(self, instance: "ObjectBase", value: Any) -> None:
        instance.set_related(self.name, value)
