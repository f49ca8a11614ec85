"""The sorted map interface shared by the reference model and subjects under test."""

from __future__ import annotations

from abc import abstractmethod
from typing import Iterator, Optional, Tuple

from mapcheck.common import Comparator, Sized

__all__ = ["SortedMap"]


class SortedMap[K, V](Sized):
    """A mutable map from unique keys to values, ordered by a comparator.

    Implementations must be deterministic: every method is a function of the
    current contents and its arguments only. Internal failures are raised as
    exceptions and never reported as a missing entry.
    """

    def __init__(self, comparator: Comparator) -> None:
        self._comparator = comparator

    @property
    def comparator(self) -> Comparator:
        return self._comparator

    @abstractmethod
    def get(self, key: K) -> Optional[V]:
        """Look up the value stored under exactly ``key``.

        Returns:
            The value, or None if the key is absent.
        """
        ...

    @abstractmethod
    def set(self, key: K, value: V) -> bool:
        """Insert or overwrite an entry.

        Returns:
            True if the key was newly inserted, False if an existing value
            was overwritten.
        """
        ...

    @abstractmethod
    def remove(self, key: K) -> bool:
        """Remove an entry.

        Returns:
            True if the key was present and removed, False otherwise.
        """
        ...

    @abstractmethod
    def get_index(
        self, index: int, is_reversed: bool, start_key: Optional[K] = None
    ) -> Optional[Tuple[K, V]]:
        """Return the entry ``index`` positions away from a starting point.

        Walking forward, the starting point is the lower bound of
        ``start_key`` (the first key not ordered before it), or rank 0 when no
        start key is given. Walking in reverse, the starting point is the
        lower bound of ``start_key`` stepped back by one when ``start_key``
        itself is absent, or the last rank when no start key is given.

        Args:
            index: Number of positions to walk from the starting point.
            is_reversed: Walk toward lower ranks instead of higher ones.
            start_key: Optional key anchoring the walk.

        Returns:
            The (key, value) pair, or None when ``index`` is negative, when
            ``index >= size``, or when the walk leaves the map.
        """
        ...

    @abstractmethod
    def items(self) -> Iterator[Tuple[K, V]]:
        """Iterate over all entries in comparator order."""
        ...

    def keys(self) -> Iterator[K]:
        for key, _ in self.items():
            yield key

    def values(self) -> Iterator[V]:
        for _, value in self.items():
            yield value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.items())!r})"
