from hypothesis import given
from hypothesis import strategies as st

from mapcheck.common import ASCENDING, DESCENDING
from mapcheck.ops import Command, History, Operation
from mapcheck.shrink import (
    ShrinkCandidates,
    Shrinker,
    does_fail_on_history,
    find_shrunk_history,
    prune_idempotent,
    run_and_shrink,
)
from tests.mapcheck.broken import ForgetfulTree
from tests.mapcheck.hypo import configure_hypo

configure_hypo()


def labels(history):
    return [op.value for op in history]


def lettered(n: int) -> History:
    return History.mk([Operation.set(i, i) for i in range(n)])


def test_candidate_order():
    a, b, c, d = (Operation.set(k, k) for k in "abcd")
    candidates = ShrinkCandidates(History.mk([a, b, c, d])).list()
    assert [list(h) for h in candidates] == [[c, d], [d], [a, d], [a, b, d]]


def test_candidate_order_longer():
    candidates = ShrinkCandidates(lettered(8)).list()
    assert [labels(h) for h in candidates[:4]] == [
        [4, 5, 6, 7],
        [6, 7],
        [7],
        [0, 5, 6, 7],
    ]


def test_candidates_of_tiny_histories():
    assert ShrinkCandidates(History.empty()).list() == []
    assert ShrinkCandidates(lettered(1)).list() == []
    assert [labels(h) for h in ShrinkCandidates(lettered(2))] == [[1]]


def test_candidates_restart():
    candidates = ShrinkCandidates(lettered(6))
    assert list(candidates) == list(candidates)


@given(st.integers(min_value=0, max_value=40))
def test_candidates_strictly_shorter(n):
    history = lettered(n)
    for candidate in ShrinkCandidates(history):
        assert candidate.size() < history.size()
        assert candidate.last() == history.last()


def test_prune_keeps_size_and_final_read():
    history = History.mk(
        [
            Operation.get(1),
            Operation.set(1, 1),
            Operation.size(),
            Operation.get_index(0, False),
            Operation.remove(1),
            Operation.get(1),
        ]
    )
    pruned = prune_idempotent(history)
    assert [op.command for op in pruned] == [
        Command.SET,
        Command.SIZE,
        Command.REMOVE,
        Command.GET,
    ]
    assert Operation.size() in pruned.ops
    assert prune_idempotent(History.empty()) == History.empty()


def test_worked_example():
    history = History.mk(
        [
            Operation.set(1, 1),
            Operation.set(3, 2),
            Operation.set(2, 3),
            Operation.get(3),
        ]
    )
    result = run_and_shrink(history, DESCENDING, ForgetfulTree)
    assert result.failed
    assert result.history == History.mk(
        [Operation.set(1, 1), Operation.set(3, 2), Operation.get(3)]
    )
    assert result.num_checked == 7


def test_passing_history_does_not_shrink():
    history = History.mk([Operation.set(1, 1), Operation.get(1)])
    result = Shrinker(ASCENDING).run_and_shrink(history)
    assert not result.failed
    assert result.history is None
    assert result.num_checked == 1


def test_find_shrunk_history_returns_original_when_pruned_passes():
    history = History.mk([Operation.set(1, 1), Operation.get(1)])
    assert find_shrunk_history(history, ASCENDING, ForgetfulTree) is history


def test_find_shrunk_history_prunes_reads():
    history = History.mk(
        [
            Operation.set(5, 1),
            Operation.get(5),
            Operation.set(3, 2),
            Operation.size(),
            Operation.set(8, 3),
            Operation.get(3),
        ]
    )
    shrunk = find_shrunk_history(history, ASCENDING, ForgetfulTree)
    assert shrunk == History.mk(
        [Operation.set(5, 1), Operation.set(3, 2), Operation.get(3)]
    )
    assert does_fail_on_history(shrunk, ASCENDING, ForgetfulTree)


@st.composite
def forgetful_histories(draw) -> History:
    ops = draw(
        st.lists(
            st.builds(
                Operation.set,
                st.integers(min_value=0, max_value=6),
                st.integers(min_value=0, max_value=99),
            ),
            max_size=12,
        )
    )
    ops.append(Operation.set(3, 100))
    ops.append(Operation.get(3))
    return History.mk(ops)


@given(forgetful_histories())
def test_shrunk_history_still_fails(history):
    assert does_fail_on_history(history, ASCENDING, ForgetfulTree)
    result = run_and_shrink(history, ASCENDING, ForgetfulTree)
    assert result.failed
    assert result.history is not None
    assert result.history.size() <= history.size()
    assert does_fail_on_history(result.history, ASCENDING, ForgetfulTree)


@given(forgetful_histories())
def test_pruning_preserves_failure(history):
    assert does_fail_on_history(prune_idempotent(history), ASCENDING, ForgetfulTree)
