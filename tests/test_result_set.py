"""Tests for ResultSet."""

from dataclasses import dataclass

from kayako_client.result_set import ResultSet


@dataclass
class Item:
    """Minimal object with an identifier."""

    id: int
    title: str | None = None


def test_empty_result_set() -> None:
    """Test that an empty result set needs no special casing."""
    items: ResultSet[Item] = ResultSet()

    assert len(items) == 0
    assert items.first() is None
    assert items.at(0) is None
    assert items.to_list() == []
    assert items.collect_ids() == []


def test_order_and_access() -> None:
    """Test index access keeps insertion order."""
    items = ResultSet([Item(3), Item(1), Item(2)])

    assert items.first() == Item(3)
    assert items.at(2) == Item(2)
    assert items.at(-1) == Item(2)
    assert items.at(3) is None
    assert items[1] == Item(1)
    assert items.to_list() == [Item(3), Item(1), Item(2)]
    assert items.collect_ids() == [3, 1, 2]


def test_slice_returns_result_set() -> None:
    """Test slicing keeps the container type."""
    items = ResultSet([Item(1), Item(2), Item(3)])

    sliced = items[1:]

    assert isinstance(sliced, ResultSet)
    assert sliced.collect_ids() == [2, 3]


def test_filter_and_order_by() -> None:
    """Test filtering by attributes and ordering with missing values last."""
    items = ResultSet([Item(1, "b"), Item(2, None), Item(3, "a"), Item(4, "b")])

    assert items.filter(title="b").collect_ids() == [1, 4]
    assert items.order_by("title").collect_ids() == [3, 1, 4, 2]
    assert items.order_by("id", reverse=True).collect_ids() == [4, 3, 2, 1]
