"""Registry of sorted map implementations that can be put under test."""

from __future__ import annotations

from typing import Callable, Dict

from mapcheck.common import Comparator
from mapcheck.reference import SortedArrayMap
from mapcheck.sorted_map import SortedMap
from mapcheck.tree import TreeMap

__all__ = ["SUBJECTS", "SubjectFactory", "create_subject"]


type SubjectFactory = Callable[[Comparator], SortedMap]

SUBJECTS: Dict[str, SubjectFactory] = {
    "tree": TreeMap,
    # Checking the reference against itself exercises the harness alone
    "array": SortedArrayMap,
}


def create_subject(name: str, comparator: Comparator) -> SortedMap:
    """Construct a registered subject for the given comparator.

    Raises:
        KeyError: If no subject is registered under ``name``.
    """
    return SUBJECTS[name](comparator)
