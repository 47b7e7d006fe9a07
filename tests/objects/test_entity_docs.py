"""Tests for the documented entity API."""

import inspect

import pytest

from kayako_client import objects

PUBLIC_PREFIXES = ("get", "create_new", "new_", "set_")


def undocumented_methods(cls: type) -> list[str]:
    names = []
    for name, member in vars(cls).items():
        if name == "set_related" or not name.startswith(PUBLIC_PREFIXES):
            continue
        if isinstance(member, (classmethod, staticmethod)):
            member = member.__func__
        if inspect.isfunction(member) and not (member.__doc__ or "").strip():
            names.append(name)
    return names


@pytest.mark.parametrize("name", objects.__all__)
def test_entity_methods_are_documented(name: str) -> None:
    """Test finders, factories and setters of entities carry docstrings."""
    assert undocumented_methods(getattr(objects, name)) == []
