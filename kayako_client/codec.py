"""Type coercion between decoded wire values and typed fields.

Wire values arrive as strings, nested dicts or lists (see
:func:`kayako_client.transport.decode_xml`). The ``to_*`` helpers never
raise on malformed input, they return ``None`` instead. Only
:func:`to_constant` and :func:`to_object` raise, because they validate values
supplied by the caller rather than by the server.
"""

import base64
import binascii
import math
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from kayako_client.exceptions import InvalidEnumValue, TypeMismatch

TRUE_MARKERS = frozenset({"1", "true", "yes"})
FALSE_MARKERS = frozenset({"0", "false", "no", ""})

BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def _number(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if math.isfinite(number) else None
    return None


def to_positive_int(value: Any) -> int | None:
    """Return ``value`` as a positive integer or ``None``."""
    number = _number(value)
    if number is None or number <= 0:
        return None
    return number


def to_int(value: Any, default: int | None = None) -> int | None:
    """Return ``value`` as an integer, ``default`` when it is not numeric."""
    number = _number(value)
    return default if number is None else number


def to_bool(value: Any) -> bool | None:
    """Interpret wire truthy/falsy markers.

    Returns:
        True for ``1``, ``"true"``, ``"yes"``; False for ``0``, ``"false"``,
        ``"no"`` and the empty string; None for anything else.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        return None
    if isinstance(value, str):
        marker = value.strip().lower()
        if marker in TRUE_MARKERS:
            return True
        if marker in FALSE_MARKERS:
            return False
    return None


def to_string(value: Any) -> str | None:
    """Return ``value`` as a string, ``None`` for ``None`` and containers."""
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def to_list(value: Any) -> list[Any]:
    """Normalise a possibly-repeated wire element to a list.

    A repeated XML element decodes to a list, a single occurrence decodes to
    the element value itself and a missing one to ``None``.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def constants(owner: type, prefix: str) -> dict[str, Any]:
    """Return the ``<prefix>_*`` constants declared on ``owner``."""
    marker = prefix + "_"
    return {
        name: getattr(owner, name)
        for name in dir(owner)
        if name.startswith(marker) and name.isupper() and not callable(getattr(owner, name))
    }


def to_constant(value: Any, owner: type | object, prefix: str) -> Any:
    """Validate ``value`` against the ``<prefix>_*`` constants of ``owner``.

    Args:
        value: Value to check, compared by its string form so ``"2"`` matches ``2``
        owner: Class (or instance) declaring the constants
        prefix: Constant name prefix, for example ``"CREATOR_TYPE"``

    Returns:
        The matching constant's declared value, or None when ``value`` is None

    Raises:
        InvalidEnumValue: If no constant matches
    """
    if value is None:
        return None
    owner_type = owner if isinstance(owner, type) else type(owner)
    allowed = list(constants(owner_type, prefix).values())
    for candidate in allowed:
        if candidate == value or str(candidate) == str(value):
            return candidate
    raise InvalidEnumValue(value, owner_type, prefix, allowed)


def to_object(value: Any, expected_type: type) -> Any:
    """Pass through ``None`` or an instance of ``expected_type``.

    Raises:
        TypeMismatch: If ``value`` is of another type
    """
    if value is None or isinstance(value, expected_type):
        return value
    raise TypeMismatch(f"Expected {expected_type.__name__} or None, got {type(value).__name__}")


def to_timestamp(value: Any) -> int | None:
    """Return a Unix timestamp from a number, datetime or ISO-8601 string."""
    if isinstance(value, datetime):
        return int(value.timestamp())
    number = to_positive_int(value)
    if number is not None:
        return number
    if isinstance(value, str) and value.strip():
        try:
            return int(datetime.fromisoformat(value.strip()).timestamp())
        except ValueError:
            return None
    return None


def parse_duration(value: Any) -> int | None:
    """Return seconds from a number of seconds or an ``"HH:MM"`` string."""
    number = _number(value)
    if number is not None:
        return number
    if isinstance(value, str) and ":" in value:
        hours, minutes = value.split(":", 1)
        hours_number = _number(hours)
        minutes_number = _number(minutes)
        if hours_number is None or minutes_number is None:
            return None
        return hours_number * 3600 + minutes_number * 60
    return None


def encode(value: Any) -> Any:
    """Encode a typed value for an outgoing request.

    Booleans become ``1``/``0`` and sequences are encoded element-wise.
    ``None`` is returned unchanged so callers can skip the field.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (list, tuple)):
        return [encode(item) for item in value if item is not None]
    return value


def to_int_list(value: Any) -> list[int]:
    """Return positive integers from a single value or a list of them."""
    result = []
    for item in to_list(value):
        number = to_positive_int(item)
        if number is not None:
            result.append(number)
    return result


def to_string_list(value: Any) -> list[str]:
    """Return non-empty strings from a single value or a list of them."""
    return [text for text in (to_string(item) for item in to_list(value)) if text]


def from_base64(value: Any) -> bytes | None:
    """Decode base64 file contents, ``None`` when missing or malformed."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return base64.b64decode(value)
    except binascii.Error:
        return None


def to_base64(contents: bytes) -> str:
    return base64.b64encode(contents).decode("ascii")


def format_seconds(total_seconds: int | None) -> str | None:
    """Format seconds as ``HH:MM:SS``."""
    if total_seconds is None:
        return None
    total_seconds = max(int(total_seconds), 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_bytes(size: int | None, precision: int = 2) -> str | None:
    """Format a byte count with binary units, e.g. ``2048`` -> ``"2 KB"``."""
    if size is None:
        return None
    amount = float(max(int(size), 0))
    unit = 0
    while amount >= 1024 and unit < len(BYTE_UNITS) - 1:
        amount /= 1024
        unit += 1
    text = f"{amount:.{precision}f}".rstrip("0").rstrip(".")
    return f"{text} {BYTE_UNITS[unit]}"


class Codec:
    """Pair of decode/encode functions attached to a field declaration."""

    def __init__(self, name: str, decode: Callable[[Any], Any], encode: Callable[[Any], Any] = encode) -> None:
        self.name = name
        self.decode = decode
        self.encode = encode

    def __repr__(self) -> str:
        return f"Codec({self.name})"


def _identity(value: Any) -> Any:
    return value


def _join(values: Iterable[Any]) -> Any:
    return encode(list(values)) if values else None


RAW = Codec("raw", _identity)
STRING = Codec("string", to_string)
INT = Codec("int", to_int)
POSITIVE_INT = Codec("positive_int", to_positive_int)
BOOL = Codec("bool", to_bool)
TIMESTAMP = Codec("timestamp", to_timestamp)
INT_LIST = Codec("int_list", to_int_list, _join)
STRING_LIST = Codec("string_list", to_string_list, _join)
DURATION = Codec("duration", parse_duration)
