"""Reference model: a sorted array map that favors obvious correctness.

Entries live in a single Python list kept in comparator order. Every lookup
is a binary search for the lower bound followed by a list splice, which makes
the model easy to audit and slow enough that nobody is tempted to use it for
anything but checking other maps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, override

from mapcheck.common import Comparator
from mapcheck.sorted_map import SortedMap

__all__ = ["SortedArrayMap", "lower_bound"]


@dataclass
class _Slot[K, V]:
    key: K
    value: V


def lower_bound[K](keys: List[K], comparator: Comparator, key: K) -> int:
    """Find the index of ``key`` in a sorted list, or where it would be inserted.

    Args:
        keys: Keys sorted by ``comparator``.
        comparator: The total order the list is sorted by.
        key: The key to search for.

    Returns:
        The index of an equal key if one exists, otherwise the index of the
        first key ordered after ``key`` (``len(keys)`` if there is none).
    """
    lo = 0
    hi = len(keys)
    while lo < hi:
        mid = lo + ((hi - lo) >> 1)
        cmp = comparator(keys[mid], key)
        if cmp == 0:
            return mid
        elif cmp < 0:
            lo = mid + 1
        else:
            hi = mid
    return lo


class SortedArrayMap[K, V](SortedMap[K, V]):
    """Performance-naive sorted map used as ground truth."""

    def __init__(self, comparator: Comparator) -> None:
        super().__init__(comparator)
        self._slots: List[_Slot[K, V]] = []

    def _lower_bound(self, key: K) -> int:
        # Keys are projected on every search; fine for a model.
        return lower_bound([slot.key for slot in self._slots], self._comparator, key)

    def _in_bounds(self, ix: int) -> bool:
        return 0 <= ix < len(self._slots)

    def _entry(self, ix: int) -> Tuple[K, V]:
        slot = self._slots[ix]
        return (slot.key, slot.value)

    @override
    def size(self) -> int:
        return len(self._slots)

    @override
    def get(self, key: K) -> Optional[V]:
        lb = self._lower_bound(key)
        if not self._in_bounds(lb):
            return None
        slot = self._slots[lb]
        if self._comparator(key, slot.key) == 0:
            return slot.value
        return None

    @override
    def set(self, key: K, value: V) -> bool:
        lb = self._lower_bound(key)
        if self._in_bounds(lb):
            slot = self._slots[lb]
            if self._comparator(key, slot.key) == 0:
                slot.value = value
                return False
        self._slots.insert(lb, _Slot(key, value))
        return True

    @override
    def remove(self, key: K) -> bool:
        lb = self._lower_bound(key)
        if not self._in_bounds(lb):
            return False
        if self._comparator(key, self._slots[lb].key) == 0:
            del self._slots[lb]
            return True
        return False

    @override
    def get_index(
        self, index: int, is_reversed: bool, start_key: Optional[K] = None
    ) -> Optional[Tuple[K, V]]:
        if index < 0 or index >= len(self._slots):
            return None
        if not is_reversed:
            if start_key is None:
                return self._entry(index)
            target = self._lower_bound(start_key) + index
        else:
            if start_key is None:
                return self._entry(len(self._slots) - index - 1)
            lb = self._lower_bound(start_key)
            if (
                not self._in_bounds(lb)
                or self._comparator(self._slots[lb].key, start_key) != 0
            ):
                lb -= 1
            target = lb - index
        if not self._in_bounds(target):
            return None
        return self._entry(target)

    @override
    def items(self) -> Iterator[Tuple[K, V]]:
        for slot in self._slots:
            yield (slot.key, slot.value)
