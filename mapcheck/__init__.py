from mapcheck.common import ASCENDING, DESCENDING, Comparator, Ordering
from mapcheck.config import ConfigError, SweepConfig
from mapcheck.generator import CommandGenerator
from mapcheck.ops import Command, History, HistoryLog, Operation
from mapcheck.reference import SortedArrayMap
from mapcheck.repro import emit_repro, produce_repro
from mapcheck.runner import DifferentialRunner, Errored, Matched, Mismatched, run_op
from mapcheck.shrink import ShrinkCandidates, Shrinker, find_shrunk_history
from mapcheck.sorted_map import SortedMap
from mapcheck.tree import TreeMap

__all__ = [
    "ASCENDING",
    "Command",
    "CommandGenerator",
    "Comparator",
    "ConfigError",
    "DESCENDING",
    "DifferentialRunner",
    "Errored",
    "History",
    "HistoryLog",
    "Matched",
    "Mismatched",
    "Operation",
    "Ordering",
    "ShrinkCandidates",
    "Shrinker",
    "SortedArrayMap",
    "SortedMap",
    "SweepConfig",
    "TreeMap",
    "emit_repro",
    "find_shrunk_history",
    "produce_repro",
    "run_op",
]
