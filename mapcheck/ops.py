"""Operations against a sorted map and the histories that record them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple

from mapcheck.common import Sized

__all__ = [
    "Command",
    "History",
    "HistoryLog",
    "Operation",
    "READ_COMMANDS",
]


@unique
class Command(Enum):
    """The kinds of calls a history can make against a sorted map."""

    GET = "GET"
    GET_INDEX = "GET_INDEX"
    SET = "SET"
    REMOVE = "REMOVE"
    SIZE = "SIZE"

    @property
    def mutating(self) -> bool:
        return self in (Command.SET, Command.REMOVE)


# Commands that never change map state
READ_COMMANDS = frozenset([Command.GET, Command.GET_INDEX])


@dataclass(frozen=True)
class Operation:
    """One call against a sorted map.

    Fields are interpreted per command: GET and REMOVE use ``key``; SET uses
    ``key`` and ``value``; GET_INDEX uses ``arr_index``, ``reversed`` and
    ``key`` as an optional start key; SIZE ignores everything.
    """

    command: Command
    key: Optional[Any] = None
    value: Optional[Any] = None
    arr_index: int = 0
    reversed: bool = False

    @staticmethod
    def get(key: Any) -> Operation:
        return Operation(Command.GET, key=key)

    @staticmethod
    def get_index(
        arr_index: int, reversed: bool, start_key: Optional[Any] = None
    ) -> Operation:
        return Operation(
            Command.GET_INDEX, key=start_key, arr_index=arr_index, reversed=reversed
        )

    @staticmethod
    def set(key: Any, value: Any) -> Operation:
        return Operation(Command.SET, key=key, value=value)

    @staticmethod
    def remove(key: Any) -> Operation:
        return Operation(Command.REMOVE, key=key)

    @staticmethod
    def size() -> Operation:
        return Operation(Command.SIZE)

    def with_command(self, command: Command) -> Operation:
        """Reuse this operation's fields under a different command."""
        return Operation(command, self.key, self.value, self.arr_index, self.reversed)

    def __str__(self) -> str:
        match self.command:
            case Command.GET:
                return f"GET({self.key!r})"
            case Command.GET_INDEX:
                return f"GET_INDEX({self.arr_index}, {self.reversed}, {self.key!r})"
            case Command.SET:
                return f"SET({self.key!r}, {self.value!r})"
            case Command.REMOVE:
                return f"REMOVE({self.key!r})"
            case Command.SIZE:
                return "SIZE"


@dataclass(frozen=True)
class History(Sized):
    """An immutable, ordered sequence of operations.

    The last operation is the one whose result a reproduction asserts. Shrink
    candidates are always new histories; a history is never edited in place.
    """

    ops: Tuple[Operation, ...] = ()

    @staticmethod
    def empty() -> History:
        return _HISTORY_EMPTY

    @staticmethod
    def mk(ops: Iterable[Operation]) -> History:
        return History(tuple(ops))

    def size(self) -> int:
        return len(self.ops)

    def iter(self) -> Iterator[Operation]:
        return iter(self.ops)

    def __iter__(self) -> Iterator[Operation]:
        return self.iter()

    def __getitem__(self, ix: int) -> Operation:
        return self.ops[ix]

    def last(self) -> Optional[Operation]:
        return self.ops[-1] if self.ops else None

    def cons(self, op: Operation) -> History:
        return History((op,) + self.ops)

    def snoc(self, op: Operation) -> History:
        return History(self.ops + (op,))

    def drop(self, count: int) -> History:
        """Return the history without its first ``count`` operations."""
        return History(self.ops[count:])

    def suffix(self, length: int) -> History:
        """Return the last ``length`` operations."""
        if length <= 0:
            return _HISTORY_EMPTY
        return History(self.ops[-length:])

    def filter(self, keep: Callable[[Operation], bool]) -> History:
        return History(tuple(op for op in self.ops if keep(op)))


_HISTORY_EMPTY = History()


@dataclass
class HistoryLog:
    """Append-only record of the operations executed in one trial."""

    _ops: List[Operation] = field(default_factory=list)

    def append(self, op: Operation) -> None:
        self._ops.append(op)

    def __len__(self) -> int:
        return len(self._ops)

    def history(self) -> History:
        """Snapshot the log as an immutable history."""
        return History(tuple(self._ops))
