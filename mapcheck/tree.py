"""Sorted map implementation based on weight-balanced trees.

The nodes are immutable and every update path-copies from the root, but the
map itself is a mutable handle that swaps roots in place so it can satisfy
the ``SortedMap`` interface. Each branch records the size of its subtree,
which gives logarithmic rank and select queries for ``get_index``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple, override

from mapcheck.common import Comparator, Impossible, Ordering, to_ordering
from mapcheck.sorted_map import SortedMap

__all__ = ["TreeMap"]


# sealed
class Tree[K, V]:
    def size(self) -> int:
        match self:
            case TreeEmpty():
                return 0
            case TreeBranch(_size, _, _, _, _):
                return _size
            case _:
                raise Impossible

    def null(self) -> bool:
        return isinstance(self, TreeEmpty)


@dataclass(frozen=True, eq=False)
class TreeEmpty[K, V](Tree[K, V]):
    pass


_TREE_EMPTY: Tree[Any, Any] = TreeEmpty()


@dataclass(frozen=True, eq=False)
class TreeBranch[K, V](Tree[K, V]):
    _size: int
    _left: Tree[K, V]
    _key: K
    _value: V
    _right: Tree[K, V]


class TreeMap[K, V](SortedMap[K, V]):
    """Weight-balanced tree map ordered by an arbitrary comparator."""

    def __init__(self, comparator: Comparator) -> None:
        super().__init__(comparator)
        self._root: Tree[K, V] = _TREE_EMPTY

    def _compare(self, a: K, b: K) -> Ordering:
        return to_ordering(self._comparator(a, b))

    @override
    def size(self) -> int:
        """Get the number of entries in the map.

        Time Complexity: O(1)
        """
        return self._root.size()

    @override
    def get(self, key: K) -> Optional[V]:
        """Get the value associated with a key, or None if not found.

        Time Complexity: O(log n)
        """
        return _tree_get(self._root, self._compare, key)

    @override
    def set(self, key: K, value: V) -> bool:
        """Insert or update a key-value pair.

        Time Complexity: O(log n)
        Space Complexity: O(log n) for path copying
        """
        self._root, inserted = _tree_put(self._root, self._compare, key, value)
        return inserted

    @override
    def remove(self, key: K) -> bool:
        """Remove a key-value pair if present.

        Time Complexity: O(log n)
        Space Complexity: O(log n) for path copying
        """
        self._root, removed = _tree_remove(self._root, self._compare, key)
        return removed

    @override
    def get_index(
        self, index: int, is_reversed: bool, start_key: Optional[K] = None
    ) -> Optional[Tuple[K, V]]:
        """Find the entry a number of ranks away from a starting point.

        Time Complexity: O(log n)
        """
        size = self._root.size()
        if index < 0 or index >= size:
            return None
        if start_key is None:
            rank = size - index - 1 if is_reversed else index
        else:
            bound, exact = _tree_lower_bound(self._root, self._compare, start_key)
            if not is_reversed:
                rank = bound + index
            else:
                if not exact:
                    bound -= 1
                rank = bound - index
        if rank < 0 or rank >= size:
            return None
        return _tree_at_rank(self._root, rank)

    @override
    def items(self) -> Iterator[Tuple[K, V]]:
        """Iterate over all key-value pairs in comparator order.

        Time Complexity: O(n) for complete iteration
        Space Complexity: O(log n) for recursion stack
        """
        yield from _tree_iter(self._root)

    def height(self) -> int:
        return _tree_height(self._root)


type CompareFn[K] = Callable[[K, K], Ordering]


def _tree_get[K, V](tree: Tree[K, V], compare: CompareFn[K], key: K) -> Optional[V]:
    match tree:
        case TreeEmpty():
            return None
        case TreeBranch(_, left, branch_key, branch_value, right):
            cmp = compare(key, branch_key)
            if cmp == Ordering.Eq:
                return branch_value
            elif cmp == Ordering.Lt:
                return _tree_get(left, compare, key)
            else:
                return _tree_get(right, compare, key)
        case _:
            raise Impossible


def _tree_put[K, V](
    tree: Tree[K, V], compare: CompareFn[K], key: K, value: V
) -> Tuple[Tree[K, V], bool]:
    match tree:
        case TreeEmpty():
            return (TreeBranch(1, _TREE_EMPTY, key, value, _TREE_EMPTY), True)
        case TreeBranch(size, left, branch_key, branch_value, right):
            cmp = compare(key, branch_key)
            if cmp == Ordering.Lt:
                new_left, inserted = _tree_put(left, compare, key, value)
                return (_tree_balance(new_left, branch_key, branch_value, right), inserted)
            elif cmp == Ordering.Gt:
                new_right, inserted = _tree_put(right, compare, key, value)
                return (_tree_balance(left, branch_key, branch_value, new_right), inserted)
            else:
                # Key exists, update value
                return (TreeBranch(size, left, key, value, right), False)
        case _:
            raise Impossible


def _tree_remove[K, V](
    tree: Tree[K, V], compare: CompareFn[K], key: K
) -> Tuple[Tree[K, V], bool]:
    match tree:
        case TreeEmpty():
            return (tree, False)
        case TreeBranch(_, left, branch_key, branch_value, right):
            cmp = compare(key, branch_key)
            if cmp == Ordering.Lt:
                new_left, removed = _tree_remove(left, compare, key)
                if not removed:
                    return (tree, False)
                return (_tree_balance(new_left, branch_key, branch_value, right), True)
            elif cmp == Ordering.Gt:
                new_right, removed = _tree_remove(right, compare, key)
                if not removed:
                    return (tree, False)
                return (_tree_balance(left, branch_key, branch_value, new_right), True)
            else:
                # Found the key to remove
                return (_tree_join(left, right), True)
        case _:
            raise Impossible


def _tree_join[K, V](left: Tree[K, V], right: Tree[K, V]) -> Tree[K, V]:
    """Join two trees where all keys in left are ordered before all keys in right.

    The new root is taken from the larger side.
    """
    if left.null():
        return right
    if right.null():
        return left
    if left.size() > right.size():
        key, value, rest = _tree_pop_max(left)
        return _tree_balance(rest, key, value, right)
    else:
        key, value, rest = _tree_pop_min(right)
        return _tree_balance(left, key, value, rest)


def _tree_pop_min[K, V](tree: Tree[K, V]) -> Tuple[K, V, Tree[K, V]]:
    match tree:
        case TreeBranch(_, TreeEmpty(), key, value, right):
            return (key, value, right)
        case TreeBranch(_, left, key, value, right):
            min_key, min_value, rest = _tree_pop_min(left)
            return (min_key, min_value, _tree_balance(rest, key, value, right))
        case _:
            raise Impossible


def _tree_pop_max[K, V](tree: Tree[K, V]) -> Tuple[K, V, Tree[K, V]]:
    match tree:
        case TreeBranch(_, left, key, value, TreeEmpty()):
            return (key, value, left)
        case TreeBranch(_, left, key, value, right):
            max_key, max_value, rest = _tree_pop_max(right)
            return (max_key, max_value, _tree_balance(left, key, value, rest))
        case _:
            raise Impossible


def _tree_lower_bound[K, V](
    tree: Tree[K, V], compare: CompareFn[K], key: K
) -> Tuple[int, bool]:
    """Rank of the first entry not ordered before ``key``.

    Returns:
        The rank (``size`` if every entry is ordered before ``key``) and
        whether the entry at that rank has a key equal to ``key``.
    """
    rank = 0
    node = tree
    while True:
        match node:
            case TreeEmpty():
                return (rank, False)
            case TreeBranch(_, left, branch_key, _, right):
                cmp = compare(branch_key, key)
                if cmp == Ordering.Lt:
                    rank += left.size() + 1
                    node = right
                elif cmp == Ordering.Eq:
                    return (rank + left.size(), True)
                else:
                    node = left
            case _:
                raise Impossible


def _tree_at_rank[K, V](tree: Tree[K, V], rank: int) -> Tuple[K, V]:
    match tree:
        case TreeEmpty():
            raise IndexError(rank)
        case TreeBranch(_, left, key, value, right):
            left_size = left.size()
            if rank < left_size:
                return _tree_at_rank(left, rank)
            elif rank == left_size:
                return (key, value)
            else:
                return _tree_at_rank(right, rank - left_size - 1)
        case _:
            raise Impossible


def _tree_iter[K, V](tree: Tree[K, V]) -> Iterator[Tuple[K, V]]:
    match tree:
        case TreeEmpty():
            return
        case TreeBranch(_, left, key, value, right):
            yield from _tree_iter(left)
            yield (key, value)
            yield from _tree_iter(right)
        case _:
            raise Impossible


def _tree_height[K, V](tree: Tree[K, V]) -> int:
    match tree:
        case TreeEmpty():
            return 0
        case TreeBranch(_, left, _, _, right):
            return 1 + max(_tree_height(left), _tree_height(right))
        case _:
            raise Impossible


# Weight bounds: a subtree may be at most _DELTA times its sibling, and a
# rotation is double when the inner grandchild is _RATIO times the outer one.
_DELTA = 3
_RATIO = 2


def _tree_branch[K, V](
    left: Tree[K, V], key: K, value: V, right: Tree[K, V]
) -> Tree[K, V]:
    return TreeBranch(left.size() + 1 + right.size(), left, key, value, right)


def _tree_balance[K, V](
    left: Tree[K, V], key: K, value: V, right: Tree[K, V]
) -> Tree[K, V]:
    """Build a branch, rotating once if one side has outgrown the other."""
    left_size = left.size()
    right_size = right.size()
    if left_size + right_size <= 1:
        return _tree_branch(left, key, value, right)
    elif right_size > _DELTA * left_size:
        return _tree_rotate_left(left, key, value, right)
    elif left_size > _DELTA * right_size:
        return _tree_rotate_right(left, key, value, right)
    else:
        return _tree_branch(left, key, value, right)


def _tree_rotate_left[K, V](
    left: Tree[K, V], key: K, value: V, right: Tree[K, V]
) -> Tree[K, V]:
    match right:
        case TreeBranch(_, inner, right_key, right_value, outer):
            if inner.size() < _RATIO * outer.size():
                return _tree_branch(
                    _tree_branch(left, key, value, inner), right_key, right_value, outer
                )
            match inner:
                case TreeBranch(_, inner_left, inner_key, inner_value, inner_right):
                    return _tree_branch(
                        _tree_branch(left, key, value, inner_left),
                        inner_key,
                        inner_value,
                        _tree_branch(inner_right, right_key, right_value, outer),
                    )
    raise Impossible


def _tree_rotate_right[K, V](
    left: Tree[K, V], key: K, value: V, right: Tree[K, V]
) -> Tree[K, V]:
    match left:
        case TreeBranch(_, outer, left_key, left_value, inner):
            if inner.size() < _RATIO * outer.size():
                return _tree_branch(
                    outer, left_key, left_value, _tree_branch(inner, key, value, right)
                )
            match inner:
                case TreeBranch(_, inner_left, inner_key, inner_value, inner_right):
                    return _tree_branch(
                        _tree_branch(outer, left_key, left_value, inner_left),
                        inner_key,
                        inner_value,
                        _tree_branch(inner_right, key, value, right),
                    )
    raise Impossible
