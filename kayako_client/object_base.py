"""Generic life-cycle of objects mapped to the Kayako REST API."""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

import structlog

from kayako_client.codec import to_list, to_object
from kayako_client.exceptions import (
    IllegalState,
    InvalidResponse,
    MissingRequiredField,
    NotFound,
    UninitializedConfiguration,
)
from kayako_client.fields import Field, Relation
from kayako_client.identity import EntityIdentity
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config

logger = structlog.get_logger()

T = TypeVar("T", bound="ObjectBase")


def wire_value(data: Any, key: str) -> Any:
    """Look up ``key`` in a decoded node.

    A node that has neither attributes nor children decodes to its text, so
    ``"#text"`` on a plain string returns the string itself. Nested elements
    are addressed with ``/``, e.g. ``"usergroupidlist/usergroupid"``.
    """
    if "/" in key:
        head, rest = key.split("/", 1)
        return wire_value(wire_value(data, head), rest)
    if isinstance(data, dict):
        return data.get(key)
    if key == "#text" and isinstance(data, str):
        return data
    return None


def is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple, dict)) and len(value) == 0)


class ObjectBase:
    """Base class of every remote object.

    Subclasses declare ``controller`` (``/<Module>/<Controller>``),
    ``object_xml_name`` (node name in responses), a schema of :class:`Field`
    and :class:`Relation` descriptors and the fields forming their identity.
    """

    controller: ClassVar[str] = ""
    object_xml_name: ClassVar[str] = ""
    read_only: ClassVar[bool] = False
    identity_fields: ClassVar[tuple[str, ...]] = ("id",)

    registry: ClassVar[dict[str, type["ObjectBase"]]] = {}
    _fields: ClassVar[dict[str, Field]] = {}
    _relations: ClassVar[dict[str, Relation]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        fields: dict[str, Field] = {}
        relations: dict[str, Relation] = {}
        for klass in reversed(cls.__mro__):
            for name, attribute in vars(klass).items():
                if isinstance(attribute, Field):
                    fields[name] = attribute
                elif isinstance(attribute, Relation):
                    relations[name] = attribute
        cls._fields = fields
        cls._relations = relations
        ObjectBase.registry[cls.__name__] = cls

    def __init__(self, config: "Config | None" = None, data: Any = None) -> None:
        """Initialize an object.

        Args:
            config: Configuration used for requests and output formatting
            data: Decoded node to parse; when given the object is persisted
        """
        self._config = config
        self._values: dict[str, Any] = self._initial_values()
        self._related: dict[str, Any] = {}
        self._new = True
        self._deleted = False
        if data is not None:
            self.parse_data(data)
            self._new = False

    def _initial_values(self) -> dict[str, Any]:
        return {name: field.initial() for name, field in self._fields.items()}

    # -- state --------------------------------------------------------------

    @property
    def config(self) -> "Config":
        if self._config is None:
            raise UninitializedConfiguration(
                f"{type(self).__name__} is not bound to a configuration. Pass a Config when creating it."
            )
        return self._config

    @property
    def is_new(self) -> bool:
        return self._new

    @property
    def is_deleted(self) -> bool:
        return self._deleted

    def identity_fields_for(self) -> tuple[str, ...]:
        """Names of the fields forming this object's identity, parent first."""
        return self.identity_fields

    @property
    def identity(self) -> EntityIdentity:
        return EntityIdentity(tuple(self._values.get(name) for name in self.identity_fields_for()))

    def _require_persisted(self, action: str) -> None:
        if self._deleted:
            raise IllegalState(f"You can't {action} a deleted {type(self).__name__}.")
        if self._new:
            raise IllegalState(f"You can't {action} a {type(self).__name__} that was not created yet.")

    def _require_writable(self, action: str) -> None:
        if self.read_only:
            raise IllegalState(f"You can't {action} objects of type {type(self).__name__}.")

    # -- field state ----------------------------------------------------------

    def _assign(self, name: str, value: Any) -> None:
        """Store a field value and drop cached relations keyed on it."""
        self._values[name] = value
        for relation in self._relations.values():
            if relation.key == name:
                self._related.pop(relation.name, None)

    def get_related(self, name: str, reload: bool = False) -> Any:
        """Return the related object, fetching it on first access.

        The result is cached for the lifetime of this object. The cache is
        not time-bounded: pass ``reload=True`` or call
        :meth:`invalidate_related` to see changes made on the server.

        Args:
            name: Relation attribute name
            reload: True to fetch again even if a cached value is present

        Returns:
            Related object, or None when the key field is unset
        """
        relation = self._relations[name]
        if relation.when is not None and not relation.when(self):
            return None
        cached = self._related.get(name)
        if cached is not None and not reload:
            return cached
        key_value = self._values.get(relation.key)
        if is_empty(key_value) or (isinstance(key_value, int) and key_value <= 0):
            return None

        target = relation.target(self.registry)
        logger.debug("Resolving related object", owner=type(self).__name__, relation=name, key=key_value)
        if relation.load is not None:
            related = relation.load(self, target, key_value)
        else:
            related = target.get(self.config, key_value)
        self._related[name] = related
        return related

    def set_related(self, name: str, value: Any) -> None:
        """Set a related object together with its key field; None clears both."""
        relation = self._relations[name]
        related = to_object(value, relation.target(self.registry))
        self._values[relation.key] = related.id if related is not None else None
        for field_name, attribute in relation.sync.items():
            self._values[field_name] = getattr(related, attribute) if related is not None else None
        for other in self._relations.values():
            if other.key == relation.key and other.name != name:
                self._related.pop(other.name, None)
        self._related[name] = related

    def invalidate_related(self, name: str | None = None) -> None:
        """Drop one cached relation or collection, or all of them."""
        if name is None:
            self._related.clear()
        else:
            self._related.pop(name, None)

    def _memoized(self, slot: str, loader: Callable[[], Any], reload: bool = False) -> Any:
        """Cache a collection loaded by this object's own identity."""
        if self._new:
            raise IllegalState(f"{slot} is not available for a {type(self).__name__} that was not created yet.")
        if not reload and self._related.get(slot) is not None:
            return self._related[slot]
        value = loader()
        self._related[slot] = value
        return value

    # -- wire mapping --------------------------------------------------------

    def parse_data(self, data: Any) -> None:
        """Populate fields from a decoded node."""
        for field in self._fields.values():
            if field.wire is None:
                continue
            self._values[field.name] = field.decode(wire_value(data, field.wire))

    def check_required_fields(self, create: bool) -> None:
        """Fail on the first field required for the operation that has no value.

        Raises:
            MissingRequiredField: If a required field is unset
        """
        for field in self._fields.values():
            required = field.required_create if create else field.required_update
            if required and is_empty(self._values.get(field.name)):
                raise MissingRequiredField(field.post or field.name, create)

    def build_data(self, create: bool) -> dict[str, Any]:
        """Build request data for ``create()`` (create=True) or ``update()``.

        Raises:
            MissingRequiredField: If a field required for the operation is unset
        """
        self.check_required_fields(create)
        data: dict[str, Any] = {}
        for field in self._fields.values():
            if field.post is None:
                continue
            value = field.encode(self._values.get(field.name))
            if value is None:
                continue
            data[field.post] = value
        return data

    def build_files(self) -> dict[str, tuple[str, bytes]]:
        """Files sent along with ``create()``, keyed by request field name."""
        return {}

    def _parse_response(self, result: Any) -> None:
        nodes = to_list(wire_value(result, self.object_xml_name))
        if not nodes:
            raise InvalidResponse(f"Response does not contain a '{self.object_xml_name}' node")
        self._related.clear()
        self._values = self._initial_values()
        self.parse_data(nodes[0])

    # -- operations -----------------------------------------------------------

    @classmethod
    def _nodes(cls, result: Any) -> list[Any]:
        return to_list(wire_value(result, cls.object_xml_name))

    @classmethod
    def generic_get(cls: type[T], config: "Config", parameters: Iterable[Any]) -> T:
        """Fetch a single object addressed by positional parameters.

        Raises:
            NotFound: If the response holds no object
            TransportError: On network or protocol failure
        """
        parameters = list(parameters)
        logger.debug("Fetching object", type=cls.__name__, controller=cls.controller, parameters=parameters)
        result = config.transport.get(cls.controller, parameters)
        nodes = cls._nodes(result)
        if not nodes:
            raise NotFound(f"{cls.__name__} {'/'.join(str(p) for p in parameters)} not found")
        return cls(config, data=nodes[0])

    @classmethod
    def generic_get_all(cls: type[T], config: "Config", parameters: Iterable[Any] = ()) -> ResultSet[T]:
        """Fetch zero or more objects, keeping the server order."""
        parameters = list(parameters)
        logger.debug("Fetching objects", type=cls.__name__, controller=cls.controller, parameters=parameters)
        result = config.transport.get(cls.controller, parameters)
        objects = ResultSet(cls(config, data=node) for node in cls._nodes(result))
        logger.debug("Fetched objects", type=cls.__name__, count=len(objects))
        return objects

    def create(self: T) -> T:
        """Create this object on the server and re-read server-assigned fields.

        Raises:
            IllegalState: If the object already exists or its type is read-only
            MissingRequiredField: Before any request, if a required field is unset
        """
        self._require_writable("create")
        if self._deleted or not self._new:
            raise IllegalState(f"{type(self).__name__} {self.identity} was already created.")
        data = self.build_data(True)
        files = self.build_files()
        logger.info("Creating object", type=type(self).__name__, controller=self.controller)
        result = self.config.transport.post(self.controller, [], data, files)
        self._parse_response(result)
        self._new = False
        logger.info("Object created", type=type(self).__name__, identity=str(self.identity))
        return self

    def update(self: T) -> T:
        """Send changed fields to the server and re-read the object."""
        self._require_writable("update")
        self._require_persisted("update")
        data = self.build_data(False)
        logger.info("Updating object", type=type(self).__name__, identity=str(self.identity))
        result = self.config.transport.put(self.controller, list(self.identity), data)
        self._parse_response(result)
        return self

    def delete(self) -> None:
        """Delete this object on the server. The local object becomes unusable."""
        self._require_writable("delete")
        self._require_persisted("delete")
        logger.info("Deleting object", type=type(self).__name__, identity=str(self.identity))
        self.config.transport.delete(self.controller, list(self.identity))
        self._deleted = True

    def refresh(self: T) -> T:
        """Re-read all fields from the server and clear every cached relation."""
        self._require_persisted("refresh")
        identity = list(self.identity)
        logger.debug("Refreshing object", type=type(self).__name__, identity=identity)
        result = self.config.transport.get(self.controller, identity)
        nodes = self._nodes(result)
        if not nodes:
            raise NotFound(f"{type(self).__name__} {self.identity} not found")
        self._related.clear()
        self._values = self._initial_values()
        self.parse_data(nodes[0])
        return self

    # -- presentation ----------------------------------------------------------

    def format_datetime(self, name: str, fmt: str | None = None) -> str | None:
        """Format a timestamp field, by default with the configured datetime format."""
        timestamp = self._values.get(name)
        if not timestamp:
            return None
        return datetime.fromtimestamp(timestamp).strftime(fmt or self.config.datetime_format)

    def format_date(self, name: str, fmt: str | None = None) -> str | None:
        """Format a timestamp field, by default with the configured date format."""
        return self.format_datetime(name, fmt or self.config.date_format)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectBase):
            return NotImplemented
        if self is other:
            return True
        if type(self) is not type(other) or self._new or other._new:
            return False
        return self.identity == other.identity

    def __hash__(self) -> int:
        if self._new:
            raise TypeError(f"{type(self).__name__} objects without an identity are unhashable")
        return hash((type(self).__name__, self.identity))

    def __repr__(self) -> str:
        state = "new" if self._new else str(self.identity)
        return f"<{type(self).__name__} {state}>"

    def __str__(self) -> str:
        return repr(self)
