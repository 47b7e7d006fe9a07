"""Exceptions raised by the Kayako client."""

from typing import Any


class KayakoError(Exception):
    """Base class for all errors raised by this library."""


class MissingRequiredField(KayakoError):
    """A field required for the requested operation has no value."""

    def __init__(self, field: str, create: bool) -> None:
        self.field = field
        self.create = create
        operation = "create" if create else "update"
        super().__init__(f"Value for API field '{field}' is required for this operation ({operation}) to complete.")


class IllegalState(KayakoError):
    """Operation not allowed in the current life-cycle state of an object."""


class NotFound(KayakoError):
    """A single object lookup returned nothing."""


class InvalidEnumValue(KayakoError):
    """Value does not match any constant declared with the given prefix."""

    def __init__(self, value: Any, owner: type, prefix: str, allowed: list[Any]) -> None:
        self.value = value
        self.owner = owner
        self.prefix = prefix
        self.allowed = allowed
        super().__init__(f"Invalid value {value!r} for {owner.__name__}.{prefix}_* constants (allowed: {allowed})")


class TypeMismatch(KayakoError):
    """Value is not an instance of the expected type."""


class TransportError(KayakoError):
    """Network or protocol failure while talking to the API."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class InvalidResponse(TransportError):
    """Response could not be decoded or did not contain the expected data."""


class UninitializedConfiguration(KayakoError):
    """Configuration missing or incomplete."""


class CustomFieldError(KayakoError):
    """Custom field value rejected by its definition."""
