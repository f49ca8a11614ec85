import pytest

from mapcheck.common import (
    ASCENDING,
    DESCENDING,
    Ordering,
    comparator_by_name,
    comparator_name,
    to_ordering,
)


def test_comparators():
    assert ASCENDING(1, 2) == -1
    assert ASCENDING(2, 2) == 0
    assert ASCENDING(3, 2) == 1
    assert DESCENDING(1, 2) == 1
    assert DESCENDING(2, 2) == 0
    assert DESCENDING(3, 2) == -1


def test_to_ordering():
    assert to_ordering(-7) == Ordering.Lt
    assert to_ordering(0) == Ordering.Eq
    assert to_ordering(12) == Ordering.Gt


def test_comparator_names():
    assert comparator_name(ASCENDING) == "asc"
    assert comparator_name(DESCENDING) == "desc"
    assert comparator_name(lambda a, b: 0) is None
    assert comparator_by_name("desc") is DESCENDING
    with pytest.raises(KeyError):
        comparator_by_name("random")
