"""Tests for EntityIdentity."""

from kayako_client.identity import EntityIdentity


def test_components_keep_order() -> None:
    """Test that parent identifiers come first."""
    identity = EntityIdentity.of(42, 7)

    assert identity.components() == (42, 7)
    assert list(identity) == [42, 7]
    assert len(identity) == 2
    assert identity.scalar == 7
    assert str(identity) == "42/7"


def test_equality_is_component_wise() -> None:
    """Test identity equality and hashing."""
    assert EntityIdentity.of(42, 7) == EntityIdentity((42, 7))
    assert EntityIdentity.of(42, 7) != EntityIdentity.of(7, 42)
    assert EntityIdentity.of(1) != EntityIdentity.of(1, None)
    assert len({EntityIdentity.of(1, 2), EntityIdentity.of(1, 2)}) == 1


def test_is_complete() -> None:
    """Test completeness requires every component."""
    assert EntityIdentity.of(3).is_complete
    assert not EntityIdentity.of(None, 3).is_complete
    assert not EntityIdentity(()).is_complete
    assert EntityIdentity(()).scalar is None
