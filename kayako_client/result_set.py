"""Ordered collection of fetched objects."""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Generic, TypeVar, overload

T = TypeVar("T")


class ResultSet(Sequence[T], Generic[T]):
    """Ordered, indexable collection keeping the server response order."""

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: list[T] = list(items)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> "ResultSet[T]": ...

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return ResultSet(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResultSet):
            return self._items == other._items
        return NotImplemented

    def __repr__(self) -> str:
        return f"ResultSet({self._items!r})"

    def at(self, index: int) -> T | None:
        """Return the item at ``index`` or None when out of range."""
        if -len(self._items) <= index < len(self._items):
            return self._items[index]
        return None

    def first(self) -> T | None:
        return self.at(0)

    def to_list(self) -> list[T]:
        return list(self._items)

    def collect_ids(self) -> list[Any]:
        """Return the identifier of every item, in order."""
        return [getattr(item, "id") for item in self._items]

    def filter(self, **criteria: Any) -> "ResultSet[T]":
        """Return items whose attributes equal all given values."""
        return ResultSet(
            item for item in self._items if all(getattr(item, key, None) == value for key, value in criteria.items())
        )

    def order_by(self, attribute: str, reverse: bool = False) -> "ResultSet[T]":
        """Return items sorted by ``attribute``; items lacking a value go last."""
        present = [item for item in self._items if getattr(item, attribute, None) is not None]
        missing = [item for item in self._items if getattr(item, attribute, None) is None]
        present.sort(key=lambda item: getattr(item, attribute), reverse=reverse)
        return ResultSet(present + missing)
