"""
Minimal string set used while compiling permission collections.

A PermissionSet is mutable during compilation; once compiled it is frozen
into a frozenset inside the AuthorizationIndex.
"""

from typing import FrozenSet, Iterator, Set


class PermissionSet:
    """Unordered set of permission names with in-place union."""

    __slots__ = ("_items",)

    def __init__(self, *initial: str):
        self._items: Set[str] = set(initial)

    def has(self, item: str) -> bool:
        return item in self._items

    def add(self, *items: str) -> "PermissionSet":
        """Add every item; duplicates collapse."""
        self._items.update(items)
        return self

    def union(self, other: "PermissionSet") -> "PermissionSet":
        """Add every element of `other` to this set (mutates the receiver)."""
        self._items |= other._items
        return self

    def copy(self) -> "PermissionSet":
        """Return an independent copy."""
        return PermissionSet(*self._items)

    def freeze(self) -> FrozenSet[str]:
        """Immutable copy, as stored in a compiled index."""
        return frozenset(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PermissionSet):
            return self._items == other._items
        if isinstance(other, (set, frozenset)):
            return self._items == other
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"PermissionSet({sorted(self._items)!r})"
