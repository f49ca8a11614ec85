"""Main entry point for the mapcheck differential sweep.

This module parses command-line arguments, sets up logging, runs the sweep,
and on the first mismatch shrinks the failing history, emits a regression
test, and exits with a non-zero status.
"""

import logging
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import List, Optional

from mapcheck.config import ConfigError, SweepConfig, load_config, parse_key_ranges
from mapcheck.subjects import SUBJECTS
from mapcheck.sweep import report_failure, run_sweep


def make_parser() -> ArgumentParser:
    """Create the command-line argument parser.

    Unset flags fall back to ``MAPCHECK_*`` environment variables and then
    to built-in defaults.
    """
    parser = ArgumentParser(prog="mapcheck")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--repeats", type=int, help="trials per key range")
    parser.add_argument("--ops", type=int, help="operations per trial")
    parser.add_argument("--key-ranges", help="comma-separated, e.g. 10,100,1000")
    parser.add_argument("--oob-pct", type=int, help="index overshoot percentage")
    parser.add_argument("--comparator", choices=["asc", "desc"])
    parser.add_argument("--subject", choices=sorted(SUBJECTS))
    parser.add_argument("--seed", type=int)
    parser.add_argument("--out-dir", type=Path, help="where repros are written")
    parser.add_argument(
        "--ci",
        action="store_true",
        default=None,
        help="print the repro instead of writing a file",
    )
    return parser


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level.

    Args:
        log_level: The logging level (e.g., 'DEBUG', 'INFO', 'WARNING').
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d -- %(message)s",
        level=log_level,
    )


def build_config(parser: ArgumentParser, argv: Optional[List[str]]) -> SweepConfig:
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        key_ranges = (
            parse_key_ranges(args.key_ranges) if args.key_ranges is not None else None
        )
        return load_config().override(
            num_repeats=args.repeats,
            num_ops=args.ops,
            key_ranges=key_ranges,
            out_of_bounds_pct=args.oob_pct,
            comparator=args.comparator,
            subject=args.subject,
            seed=args.seed,
            generated_dir=args.out_dir,
            ci=args.ci,
        )
    except ConfigError as e:
        parser.error(str(e))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the sweep and return the process exit status.

    Returns:
        0 if every trial passed, 1 if a mismatch was found and reported.
    """
    parser = make_parser()
    config = build_config(parser, argv)
    logging.info(
        "sweeping key ranges %s, %d repeats of %d ops (subject %s, comparator %s)",
        list(config.key_ranges),
        config.num_repeats,
        config.num_ops,
        config.subject,
        config.comparator,
    )
    failure = run_sweep(config)
    if failure is None:
        logging.info("done")
        return 0
    report_failure(failure, config)
    return 1


if __name__ == "__main__":
    sys.exit(main())
