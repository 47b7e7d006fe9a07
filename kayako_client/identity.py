"""Composite identity of remote objects."""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EntityIdentity:
    """Ordered identity components, parent identifiers first.

    A ticket note living under ticket 42 with note id 7 is addressed as
    ``EntityIdentity((42, 7))`` which maps to ``/Tickets/TicketNote/42/7``.
    """

    parts: tuple[Any, ...]

    @classmethod
    def of(cls, *parts: Any) -> "EntityIdentity":
        return cls(tuple(parts))

    def components(self) -> tuple[Any, ...]:
        return self.parts

    @property
    def scalar(self) -> Any:
        """The object's own identifier (last component)."""
        return self.parts[-1] if self.parts else None

    @property
    def is_complete(self) -> bool:
        return bool(self.parts) and all(part is not None for part in self.parts)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __str__(self) -> str:
        return "/".join(str(part) for part in self.parts)
