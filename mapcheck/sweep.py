"""The differential sweep: generate, compare, and on failure shrink and emit.

For every configured key range, run ``num_repeats`` trials of ``num_ops``
generated operations, each against a fresh reference/subject pair. The sweep
is fail fast: the first mismatch stops generation.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mapcheck.common import Comparator, Impossible
from mapcheck.config import SweepConfig
from mapcheck.generator import CommandGenerator
from mapcheck.ops import History, Operation
from mapcheck.reference import SortedArrayMap
from mapcheck.repro import emit_repro
from mapcheck.runner import DifferentialRunner
from mapcheck.shrink import find_shrunk_history
from mapcheck.subjects import SUBJECTS, SubjectFactory

__all__ = ["Failure", "run_sweep", "run_trial", "report_failure"]


@dataclass(frozen=True)
class Failure:
    """A detected divergence and where it was found."""

    op: Operation  # The operation that exposed the mismatch
    history: History  # Full history of the failing trial
    key_range: int
    repeat_idx: int
    detection_time: float  # Seconds since the sweep started


def run_trial(
    generator: CommandGenerator,
    comparator: Comparator,
    subject_factory: SubjectFactory,
    key_range: int,
    num_ops: int,
) -> Optional[History]:
    """Run one trial on a fresh map pair.

    Returns:
        The history up to and including the failing operation, or None if
        all operations matched.
    """
    runner = DifferentialRunner(SortedArrayMap(comparator), subject_factory(comparator))
    for _ in range(num_ops):
        op = generator.next_op(key_range, runner.reference.size())
        failed = runner.step(op)
        if failed is not None:
            logging.info("operation failed: %s", failed.command.name)
            logging.info("size of history: %d", len(runner.log))
            return runner.log.history()
    return None


def run_sweep(
    config: SweepConfig,
    generator: Optional[CommandGenerator] = None,
    subject_factory: Optional[SubjectFactory] = None,
) -> Optional[Failure]:
    """Sweep every key range until the first failure.

    Args:
        config: The validated sweep configuration.
        generator: Optional generator; one seeded from the config otherwise.
        subject_factory: Optional subject overriding the configured name.

    Returns:
        The first failure, or None if every trial passed.
    """
    comparator = config.resolve_comparator()
    if subject_factory is None:
        subject_factory = SUBJECTS[config.subject]
    if generator is None:
        generator = CommandGenerator.seeded(
            config.num_ops, config.out_of_bounds_pct, config.seed
        )
    start = time.perf_counter()
    for key_range in config.key_ranges:
        for repeat_idx in range(config.num_repeats):
            history = run_trial(
                generator, comparator, subject_factory, key_range, config.num_ops
            )
            if history is not None:
                detection_time = time.perf_counter() - start
                logging.info("repro detection time: %.3fs", detection_time)
                last = history.last()
                if last is None:
                    raise Impossible
                return Failure(last, history, key_range, repeat_idx, detection_time)
        logging.debug("key range %d passed %d rounds", key_range, config.num_repeats)
    return None


def report_failure(
    failure: Failure,
    config: SweepConfig,
    subject_factory: Optional[SubjectFactory] = None,
) -> Optional[Path]:
    """Shrink a failure, log the statistics, and emit its repro.

    Returns:
        The written repro path, or None when printed to the console.
    """
    comparator = config.resolve_comparator()
    if subject_factory is None:
        subject_factory = SUBJECTS[config.subject]
    logging.info("attempting to shrink history...")
    shrunk = find_shrunk_history(failure.history, comparator, subject_factory)
    decrease_pct = (1 - shrunk.size() / failure.history.size()) * 100
    logging.info(
        "minimal repro of size %d (%.2g%% decrease)", shrunk.size(), decrease_pct
    )
    logging.info(
        "details of this failure: key range %d - ran %d rounds",
        failure.key_range,
        failure.repeat_idx + 1,
    )
    out_dir = None if config.ci else config.generated_dir
    return emit_repro(shrunk, comparator, subject_factory, out_dir)
