from math import log2

from hypothesis import given
from hypothesis import strategies as st

from mapcheck.common import ASCENDING, DESCENDING
from mapcheck.tree import TreeBranch, TreeEmpty, TreeMap
from tests.mapcheck.hypo import configure_hypo

configure_hypo()


def test_empty_tree():
    """Test creating an empty TreeMap and asserting it is empty"""
    tree = TreeMap(ASCENDING)
    assert tree.null()
    assert tree.size() == 0
    assert list(tree.items()) == []
    assert tree.height() == 0


def test_singleton_set():
    """Test setting a single key-value pair"""
    tree = TreeMap(ASCENDING)
    assert tree.set(42, "forty-two") is True
    assert not tree.null()
    assert tree.size() == 1
    assert tree.get(42) == "forty-two"
    assert list(tree.items()) == [(42, "forty-two")]


def test_duplicate_sets():
    """Test that setting the same key multiple times overwrites the value"""
    tree = TreeMap(ASCENDING)
    assert tree.set(42, "first") is True
    assert tree.set(42, "second") is False
    assert tree.set(42, "third") is False
    assert tree.size() == 1
    assert tree.get(42) == "third"


def test_remove_absent_keeps_root():
    """Removing a missing key must not rebuild the tree"""
    tree = TreeMap(ASCENDING)
    for key in range(10):
        tree.set(key, key)
    root = tree._root
    assert tree.remove(100) is False
    assert tree._root is root


def test_sequential_inserts_stay_balanced():
    """Sorted insertion is the worst case for an unbalanced tree"""
    tree = TreeMap(DESCENDING)
    n = 1024
    for key in range(n):
        tree.set(key, key * 2)
    assert tree.size() == n
    assert list(tree.keys()) == list(reversed(range(n)))
    assert tree.height() <= 3 * log2(n)


def test_sizes_are_consistent():
    """Every branch records the size of its subtree"""
    tree = TreeMap(ASCENDING)
    for key in [50, 20, 80, 10, 30, 70, 90, 60, 40, 25, 35]:
        tree.set(key, str(key))
    for key in [20, 80, 35]:
        tree.remove(key)

    def check(node):
        match node:
            case TreeEmpty():
                return 0
            case TreeBranch(size, left, _, _, right):
                assert size == check(left) + 1 + check(right)
                return size

    assert check(tree._root) == tree.size() == 8


def test_remove_everything():
    tree = TreeMap(ASCENDING)
    keys = [5, 3, 8, 1, 4, 7, 9, 2, 6]
    for key in keys:
        tree.set(key, key)
    for key in keys:
        assert tree.remove(key) is True
        assert tree.get(key) is None
    assert tree.null()


def test_get_index_uses_ranks():
    tree = TreeMap(ASCENDING)
    for key in range(0, 100, 2):
        tree.set(key, -key)
    for rank in range(50):
        assert tree.get_index(rank, False) == (rank * 2, -rank * 2)
        assert tree.get_index(rank, True) == (98 - rank * 2, -(98 - rank * 2))
    assert tree.get_index(0, False, 33) == (34, -34)
    assert tree.get_index(0, True, 33) == (32, -32)
    assert tree.get_index(50, False) is None


def check_weights(node) -> int:
    match node:
        case TreeEmpty():
            return 0
        case TreeBranch(size, left, _, _, right):
            left_size = check_weights(left)
            right_size = check_weights(right)
            assert size == left_size + 1 + right_size
            if left_size + right_size > 1:
                assert left_size <= 3 * right_size
                assert right_size <= 3 * left_size
            return size


@given(
    st.lists(
        st.tuples(st.booleans(), st.integers(min_value=0, max_value=60)), max_size=200
    )
)
def test_weights_stay_bounded(steps):
    """Random sets and removes keep every branch within the weight bound"""
    tree = TreeMap(ASCENDING)
    for is_set, key in steps:
        if is_set:
            tree.set(key, key)
        else:
            tree.remove(key)
        check_weights(tree._root)
