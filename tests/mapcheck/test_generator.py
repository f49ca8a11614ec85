import random
from collections import Counter

from mapcheck.generator import GENERATED_COMMANDS, CommandGenerator
from mapcheck.ops import Command


def test_values_count_up_and_wrap():
    gen = CommandGenerator.seeded(num_ops=5, out_of_bounds_pct=10, seed=1)
    values = [gen.next_op(10, 0).value for _ in range(7)]
    assert values == [1, 2, 3, 4, 0, 1, 2]
    assert gen.counter == 2


def test_counter_is_per_generator():
    """Independent generators do not share the value counter"""
    first = CommandGenerator.seeded(100, 10, seed=1)
    second = CommandGenerator.seeded(100, 10, seed=2)
    for _ in range(3):
        first.next_op(10, 0)
    assert second.next_op(10, 0).value == 1
    assert first.counter == 3


def test_same_seed_same_ops():
    first = CommandGenerator.seeded(1000, 10, seed=42)
    second = CommandGenerator.seeded(1000, 10, seed=42)
    ops1 = [first.next_op(100, i) for i in range(200)]
    ops2 = [second.next_op(100, i) for i in range(200)]
    assert ops1 == ops2


def test_keys_in_range_and_biased_low():
    gen = CommandGenerator(1000, 10, random.Random(7))
    keys = [gen.gen_key(100) for _ in range(5000)]
    assert all(0 <= key < 100 for key in keys)
    low = sum(1 for key in keys if key < 50)
    # Triangular density puts three quarters of the mass in the lower half
    assert low > 0.65 * len(keys)


def test_never_draws_size():
    gen = CommandGenerator(1000, 10, random.Random(3))
    counts = Counter(gen.gen_command() for _ in range(4000))
    assert Command.SIZE not in counts
    assert set(counts) == set(GENERATED_COMMANDS)
    for command in GENERATED_COMMANDS:
        assert counts[command] > 800


def test_index_can_overshoot_size():
    gen = CommandGenerator(1000, 50, random.Random(11))
    indices = [gen.gen_index(100) for _ in range(2000)]
    assert all(0 <= ix < 150 for ix in indices)
    assert any(ix >= 100 for ix in indices)


def test_index_on_empty_map_is_zero():
    gen = CommandGenerator(1000, 10, random.Random(0))
    assert {gen.gen_index(0) for _ in range(50)} == {0}
