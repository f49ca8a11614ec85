"""Delta-debugging shrinker for failing histories.

Given a history that makes the reference and the subject disagree, search
for a shorter history that still does. Candidates are produced in a fixed
priority order and the search is greedy and depth first: the first failing
candidate is accepted and shrunk further. Every accepted candidate is
strictly shorter than its parent, so the search always terminates. The
result is locally minimal under the candidate order, not globally minimal.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterator, List, Optional

from mapcheck.common import Comparator
from mapcheck.ops import READ_COMMANDS, History
from mapcheck.reference import SortedArrayMap
from mapcheck.runner import replay
from mapcheck.subjects import SubjectFactory
from mapcheck.tree import TreeMap

__all__ = [
    "ShrinkCandidates",
    "ShrinkResult",
    "Shrinker",
    "does_fail_on_history",
    "find_shrunk_history",
    "prune_idempotent",
    "run_and_shrink",
]


def prune_idempotent(history: History) -> History:
    """Drop reads from a history, keeping its final operation.

    Reads cannot cause the two maps to diverge, but the last operation
    carries the assertion to reproduce and always stays.
    """
    last = history.last()
    if last is None:
        return history
    interior = History(history.ops[:-1])
    return interior.filter(lambda op: op.command not in READ_COMMANDS).snoc(last)


def does_fail_on_history(
    history: History, comparator: Comparator, subject_factory: SubjectFactory = TreeMap
) -> bool:
    """Replay a history on fresh maps; True if any operation mismatches."""
    reference = SortedArrayMap(comparator)
    subject = subject_factory(comparator)
    return not replay(history, reference, subject)


class ShrinkCandidates:
    """The finite sequence of smaller histories to try, in priority order.

    For a history ``H`` the order is:

    1. Suffixes of ``H`` of length ``len(H) >> 1``, then half that, down to 1.
    2. Each candidate of ``H[1:]`` with ``H[0]`` put back in front. Unrolled,
       this repeats step 1 on ``H[d:]`` for every depth ``d`` while holding the
       prefix ``H[:d]`` fixed.

    Iterating is side-effect free and every call to ``iter`` starts over.
    """

    def __init__(self, history: History) -> None:
        self._history = history

    def __iter__(self) -> Iterator[History]:
        return _CandidateIterator(self._history)

    def list(self) -> List[History]:
        return list(iter(self))


class _CandidateIterator(Iterator[History]):
    """Explicit state machine over (depth, window)."""

    def __init__(self, history: History) -> None:
        self._history = history
        self._depth = 0
        self._window = history.size() >> 1

    def __next__(self) -> History:
        total = self._history.size()
        while self._depth < total:
            if self._window > 0:
                window = self._window
                self._window >>= 1
                prefix = self._history.ops[: self._depth]
                tail = self._history.drop(self._depth).suffix(window)
                return History(prefix + tail.ops)
            self._depth += 1
            self._window = (total - self._depth) >> 1
        raise StopIteration


@dataclass(frozen=True)
class ShrinkResult:
    """Outcome of a shrink search.

    ``history`` is the smallest failing history found, or None when the
    input did not fail at all. ``num_checked`` counts replayed histories.
    """

    failed: bool
    history: Optional[History]
    num_checked: int


class Shrinker:
    """Greedy depth-first minimizer bound to a comparator and a subject."""

    def __init__(
        self, comparator: Comparator, subject_factory: SubjectFactory = TreeMap
    ) -> None:
        self._comparator = comparator
        self._subject_factory = subject_factory

    def fails(self, history: History) -> bool:
        return does_fail_on_history(history, self._comparator, self._subject_factory)

    def run_and_shrink(self, history: History) -> ShrinkResult:
        """Shrink a history as far as the candidate order allows.

        Implemented with an explicit loop: descending into the first failing
        candidate is the same as recursing on it and returning its result.
        """
        num_checked = 1
        if not self.fails(history):
            return ShrinkResult(False, None, num_checked)
        current = history
        while True:
            smaller: Optional[History] = None
            for candidate in ShrinkCandidates(current):
                num_checked += 1
                if self.fails(candidate):
                    smaller = candidate
                    break
            if smaller is None:
                return ShrinkResult(True, current, num_checked)
            current = smaller


def run_and_shrink(
    history: History, comparator: Comparator, subject_factory: SubjectFactory = TreeMap
) -> ShrinkResult:
    return Shrinker(comparator, subject_factory).run_and_shrink(history)


def find_shrunk_history(
    history: History, comparator: Comparator, subject_factory: SubjectFactory = TreeMap
) -> History:
    """Prune reads, shrink, and report statistics.

    Returns:
        The shrunk history, or the original one if the pruned history no
        longer fails.
    """
    start = time.perf_counter()
    relevant = prune_idempotent(history)
    result = run_and_shrink(relevant, comparator, subject_factory)
    elapsed = time.perf_counter() - start
    logging.info("checked %d shrunk histories", result.num_checked)
    logging.info("shrink time: %.3fs", elapsed)
    if not result.failed or result.history is None:
        return history
    return result.history
