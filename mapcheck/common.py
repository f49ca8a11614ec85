"""Common utility types and comparators for the mapcheck differential tester.

This module provides the ordering vocabulary shared by the reference model,
the tree under test, and the shrinker: the comparator contract, the two
well-known comparators, and a few small helper types.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from enum import Enum
from typing import Any, Callable, Optional

__all__ = [
    "ASCENDING",
    "Comparator",
    "DESCENDING",
    "Impossible",
    "Ordering",
    "Sized",
    "comparator_by_name",
    "comparator_name",
    "to_ordering",
]


type Comparator = Callable[[Any, Any], int]
"""Total order over keys returning -1, 0 or 1."""


class Impossible(Exception):
    """Exception raised when encountering theoretically impossible states.

    Used to indicate internal consistency violations in data structure operations.
    """

    pass


class Sized(metaclass=ABCMeta):
    @abstractmethod
    def size(self) -> int: ...

    def null(self) -> bool:
        return self.size() == 0

    def __bool__(self) -> bool:
        return not self.null()

    def __len__(self) -> int:
        return self.size()


class Ordering(Enum):
    """Enumeration representing the result of a comparison operation."""

    Lt = -1
    Eq = 0
    Gt = 1


def to_ordering(result: int) -> Ordering:
    """Normalize a raw comparator result into an Ordering.

    Args:
        result: Any integer; only its sign is considered.

    Returns:
        The Ordering with the same sign.
    """
    if result < 0:
        return Ordering.Lt
    elif result > 0:
        return Ordering.Gt
    else:
        return Ordering.Eq


def ascending(a: Any, b: Any) -> int:
    """Natural ascending order."""
    if a < b:
        return -1
    elif a == b:
        return 0
    else:
        return 1


def descending(a: Any, b: Any) -> int:
    """Natural order flipped, so larger keys come first."""
    if a > b:
        return -1
    elif a == b:
        return 0
    else:
        return 1


ASCENDING: Comparator = ascending
DESCENDING: Comparator = descending

_WELL_KNOWN = {
    "asc": ASCENDING,
    "desc": DESCENDING,
}


def comparator_name(comparator: Comparator) -> Optional[str]:
    """Return the short name of a well-known comparator, if it is one."""
    for name, known in _WELL_KNOWN.items():
        if comparator is known:
            return name
    return None


def comparator_by_name(name: str) -> Comparator:
    """Look up a well-known comparator by short name.

    Raises:
        KeyError: If the name is not one of ``asc`` or ``desc``.
    """
    return _WELL_KNOWN[name]
