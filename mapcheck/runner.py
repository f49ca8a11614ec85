"""Differential execution of operations against a reference and a subject.

Both sides are driven through the ``SortedMap`` interface only. Every
comparison produces an explicit ``Outcome``: an exception raised by either
map becomes ``Errored`` rather than escaping, and ``run_op`` folds it into a
mismatch so that crashing bugs are caught just like wrong answers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from mapcheck.common import Comparator
from mapcheck.ops import Command, History, HistoryLog, Operation
from mapcheck.reference import SortedArrayMap
from mapcheck.sorted_map import SortedMap

__all__ = [
    "DifferentialRunner",
    "Errored",
    "Matched",
    "Mismatched",
    "Outcome",
    "apply_op",
    "compare_op",
    "deep_equal",
    "final_result",
    "replay",
    "run_op",
]


@dataclass(frozen=True)
class Matched:
    result: Any


@dataclass(frozen=True)
class Mismatched:
    expected: Any
    actual: Any


@dataclass(frozen=True)
class Errored:
    error: BaseException
    side: str  # "reference" or "subject"


type Outcome = Union[Matched, Mismatched, Errored]


def apply_op(smap: SortedMap, op: Operation) -> Any:
    """Run a single operation against a map and return its raw result."""
    match op.command:
        case Command.GET:
            return smap.get(op.key)
        case Command.GET_INDEX:
            return smap.get_index(op.arr_index, op.reversed, op.key)
        case Command.SET:
            return smap.set(op.key, op.value)
        case Command.REMOVE:
            return smap.remove(op.key)
        case Command.SIZE:
            return smap.size()


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality that does not conflate bools with ints.

    Tuples and lists compare element-wise; scalars must have the same type
    and compare equal. Never raises.
    """
    try:
        if isinstance(a, (tuple, list)) and isinstance(b, (tuple, list)):
            return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
        if type(a) is not type(b):
            return False
        return bool(a == b)
    except Exception:
        return False


def compare_op(reference: SortedMap, subject: SortedMap, op: Operation) -> Outcome:
    """Apply an operation to both maps and classify the result."""
    try:
        expected = apply_op(reference, op)
    except Exception as e:
        return Errored(e, "reference")
    try:
        actual = apply_op(subject, op)
    except Exception as e:
        return Errored(e, "subject")
    if deep_equal(expected, actual):
        return Matched(expected)
    else:
        return Mismatched(expected, actual)


def run_op(reference: SortedMap, subject: SortedMap, op: Operation) -> bool:
    """Whether the two maps agree on an operation. Errors count as disagreement."""
    match compare_op(reference, subject, op):
        case Matched():
            return True
        case Mismatched(expected, actual):
            logging.debug("mismatch on %s: expected %r, got %r", op, expected, actual)
            return False
        case Errored(error, side):
            logging.debug("%s raised on %s: %r", side, op, error)
            return False
        case _:
            return False


def replay(history: History, reference: SortedMap, subject: SortedMap) -> bool:
    """Run every operation in order; True only if all of them match."""
    for op in history:
        if not run_op(reference, subject, op):
            return False
    return True


def final_result(history: History, comparator: Comparator) -> Any:
    """Result of the last operation when replaying on a fresh reference model."""
    result: Any = None
    reference: SortedArrayMap = SortedArrayMap(comparator)
    for op in history:
        result = apply_op(reference, op)
    return result


class DifferentialRunner:
    """Drives one trial: a reference/subject pair plus its history log."""

    def __init__(
        self,
        reference: SortedMap,
        subject: SortedMap,
        log: Optional[HistoryLog] = None,
    ) -> None:
        self._reference = reference
        self._subject = subject
        self._log = log if log is not None else HistoryLog()

    @property
    def reference(self) -> SortedMap:
        return self._reference

    @property
    def subject(self) -> SortedMap:
        return self._subject

    @property
    def log(self) -> HistoryLog:
        return self._log

    def step(self, op: Operation) -> Optional[Operation]:
        """Record and run one operation, then check integrity after mutations.

        After a matching SET or REMOVE, a GET of the same key and a SIZE are
        run against both maps. A failing check is appended to the log so the
        history always ends with the operation that exposed the divergence.

        Returns:
            The failing operation, or None if everything matched.
        """
        self._log.append(op)
        if not run_op(self._reference, self._subject, op):
            return op
        if op.command.mutating:
            for check in (op.with_command(Command.GET), op.with_command(Command.SIZE)):
                if not run_op(self._reference, self._subject, check):
                    self._log.append(check)
                    return check
        return None
