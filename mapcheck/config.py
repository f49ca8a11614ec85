"""Configuration for differential sweeps.

Defaults can be overridden through ``MAPCHECK_*`` environment variables and
then through command line flags. Configuration is validated eagerly so a bad
setting fails at startup instead of silently running zero trials.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

from mapcheck.common import Comparator, comparator_by_name
from mapcheck.subjects import SUBJECTS

__all__ = [
    "ConfigError",
    "DEFAULT_GENERATED_DIR",
    "DEFAULT_KEY_RANGES",
    "DEFAULT_NUM_OPS",
    "DEFAULT_NUM_REPEATS",
    "DEFAULT_OUT_OF_BOUNDS_PCT",
    "SweepConfig",
    "is_ci",
    "load_config",
    "parse_key_ranges",
]


DEFAULT_NUM_REPEATS = 30
DEFAULT_NUM_OPS = 10000
DEFAULT_KEY_RANGES: Tuple[int, ...] = (10, 100, 1000)
DEFAULT_OUT_OF_BOUNDS_PCT = 10
DEFAULT_COMPARATOR = "desc"
DEFAULT_SUBJECT = "tree"
DEFAULT_GENERATED_DIR = Path("generated")


class ConfigError(ValueError):
    """Raised when sweep configuration is malformed."""

    pass


@dataclass(frozen=True)
class SweepConfig:
    """Tunable parameters of a differential sweep."""

    num_repeats: int = DEFAULT_NUM_REPEATS  # Trials per key range
    num_ops: int = DEFAULT_NUM_OPS  # Generated operations per trial
    key_ranges: Tuple[int, ...] = DEFAULT_KEY_RANGES  # Key ranges to sweep
    out_of_bounds_pct: int = DEFAULT_OUT_OF_BOUNDS_PCT  # Index overshoot
    comparator: str = DEFAULT_COMPARATOR  # Well-known comparator name
    subject: str = DEFAULT_SUBJECT  # Registered subject name
    seed: Optional[int] = None  # RNG seed, None for entropy
    ci: bool = False  # Console-only repro output
    generated_dir: Path = field(default=DEFAULT_GENERATED_DIR)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check every setting, raising ConfigError on the first bad one."""
        if self.num_repeats <= 0:
            raise ConfigError(f"num_repeats must be positive, got {self.num_repeats}")
        if self.num_ops <= 0:
            raise ConfigError(f"num_ops must be positive, got {self.num_ops}")
        if len(self.key_ranges) == 0:
            raise ConfigError("key_ranges must not be empty")
        for key_range in self.key_ranges:
            if key_range <= 0:
                raise ConfigError(f"key ranges must be positive, got {key_range}")
        if self.out_of_bounds_pct < 0:
            raise ConfigError(
                f"out_of_bounds_pct must not be negative, got {self.out_of_bounds_pct}"
            )
        try:
            comparator_by_name(self.comparator)
        except KeyError:
            raise ConfigError(f"unknown comparator: {self.comparator}")
        if self.subject not in SUBJECTS:
            raise ConfigError(
                f"unknown subject: {self.subject} (choose from {', '.join(SUBJECTS)})"
            )

    def resolve_comparator(self) -> Comparator:
        return comparator_by_name(self.comparator)

    def override(self, **changes: object) -> SweepConfig:
        """Return a copy with the non-None changes applied."""
        present = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **present)  # type: ignore[arg-type]


def parse_key_ranges(text: str) -> Tuple[int, ...]:
    """Parse a comma-separated list of key ranges such as ``10,100,1000``."""
    parts = [part.strip() for part in text.split(",") if part.strip()]
    try:
        return tuple(int(part) for part in parts)
    except ValueError:
        raise ConfigError(f"invalid key ranges: {text!r}")


def _env_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def is_ci(env: Optional[Mapping[str, str]] = None) -> bool:
    """Whether we are running under continuous integration."""
    env = os.environ if env is None else env
    return env.get("CI") == "true"


def load_config(env: Optional[Mapping[str, str]] = None) -> SweepConfig:
    """Build a configuration from defaults and ``MAPCHECK_*`` variables.

    Args:
        env: Environment to read, defaulting to ``os.environ``.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If any variable is malformed or out of range.
    """
    env = os.environ if env is None else env
    raw_ranges = env.get("MAPCHECK_KEY_RANGES")
    key_ranges = parse_key_ranges(raw_ranges) if raw_ranges else None
    return SweepConfig().override(
        num_repeats=_env_int(env, "MAPCHECK_REPEATS"),
        num_ops=_env_int(env, "MAPCHECK_OPS"),
        key_ranges=key_ranges,
        out_of_bounds_pct=_env_int(env, "MAPCHECK_OOB_PCT"),
        seed=_env_int(env, "MAPCHECK_SEED"),
        ci=is_ci(env),
    )
