"""Random operation generator for differential sweeps."""

from __future__ import annotations

import random
from math import floor
from typing import Optional, Sequence

from mapcheck.ops import Command, Operation

__all__ = ["GENERATED_COMMANDS", "CommandGenerator"]


# SIZE is never drawn; the runner checks it after every mutation instead
GENERATED_COMMANDS: Sequence[Command] = (
    Command.GET,
    Command.GET_INDEX,
    Command.REMOVE,
    Command.SET,
)


class CommandGenerator:
    """Draws operations with independent random fields.

    Values are not random: the generator owns a counter that advances on
    every draw and wraps at ``num_ops``, so values stay small and replays of
    the same call order produce the same values.
    """

    def __init__(
        self,
        num_ops: int,
        out_of_bounds_pct: int,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the generator.

        Args:
            num_ops: Modulus of the value counter.
            out_of_bounds_pct: How far past the map size indices may reach,
                as a percentage of the size.
            rng: Random source; a fresh unseeded one if not given.
        """
        self._num_ops = num_ops
        self._out_of_bounds_pct = out_of_bounds_pct
        self._rng = rng if rng is not None else random.Random()
        self._counter = 0

    @staticmethod
    def seeded(
        num_ops: int, out_of_bounds_pct: int, seed: Optional[int]
    ) -> CommandGenerator:
        return CommandGenerator(num_ops, out_of_bounds_pct, random.Random(seed))

    @property
    def counter(self) -> int:
        return self._counter

    def gen_command(self) -> Command:
        return GENERATED_COMMANDS[floor(self._rng.random() * len(GENERATED_COMMANDS))]

    def gen_key(self, key_range: int) -> int:
        # |u1 - u2| has a triangular density peaking at zero
        return floor(abs(self._rng.random() - self._rng.random()) * key_range)

    def gen_value(self) -> int:
        self._counter = (self._counter + 1) % self._num_ops
        return self._counter

    def gen_index(self, current_size: int) -> int:
        return floor(
            self._rng.random()
            * (current_size * (1 + self._out_of_bounds_pct / 100))
        )

    def gen_bool(self) -> bool:
        return self._rng.random() < 0.5

    def next_op(self, key_range: int, current_size: int) -> Operation:
        """Draw one operation.

        Args:
            key_range: Keys are drawn from ``[0, key_range)``.
            current_size: Size of the reference map, bounding the index.

        Returns:
            The drawn operation. Every field is populated regardless of the
            command so that the value counter advances on every call.
        """
        command = self.gen_command()
        key = self.gen_key(key_range)
        value = self.gen_value()
        arr_index = self.gen_index(current_size)
        flag = self.gen_bool()
        return Operation(command, key, value, arr_index, flag)
