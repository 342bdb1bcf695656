"""
Tests for pyl_solver/solvers/search.py

Covers:
    - SearchOptions validation and defaults
    - depth_schedule()
    - terminal_payoff(): single winner, ties, eliminated players
    - Chance expansion: batched passed spins, self-loop renormalisation
    - Decision expansion: lead cap, third-place rule, tie merging
    - decision(), solved(), result intervals, pass history
    - Reuse of one Search across runs; generation bookkeeping; logging

Expected payoffs below are worked out by hand on the no-bonus board
(whammy 0.2, 1000 0.3, 2000 0.5), where every game ends within two spins.
"""

from __future__ import annotations

import logging

import pytest

from pyl_solver.engine.boards import BoardBuilder
from pyl_solver.engine.operators import SpinOperator
from pyl_solver.engine.state import State
from pyl_solver.solvers.nodes import Decision, NodeKind
from pyl_solver.solvers.payoff import Payoff
from pyl_solver.solvers.search import (
    MAX_PASSED_SPINS,
    Search,
    SearchOptions,
    StopCondition,
    depth_schedule,
    format_payoff,
    terminal_payoff,
)
from tests.conftest import position


# P1 to decide with one earned spin, leading the passee by 1000.
LEADER_1000 = position((0,), (3000, 1), (2000,))

# ─── SearchOptions ────────────────────────────────────────────────────────────


class TestSearchOptions:
    def test_defaults(self) -> None:
        o = SearchOptions()
        assert o.max_uncertainty == 0.03
        assert o.max_lead == 15000
        assert o.max_depth == 64
        assert o.max_passed_spins_optimized == MAX_PASSED_SPINS
        assert o.always_spin_third_place
        assert o.merge_passed_spins
        assert not o.optimize_final_spin
        assert not o.debug

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_uncertainty": -0.1},
            {"max_uncertainty": 1.5},
            {"max_lead": -1},
            {"max_passed_spins_optimized": 0},
            {"max_passed_spins_optimized": MAX_PASSED_SPINS + 1},
            {"max_depth": 4},
        ],
    )
    def test_invalid_raises(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            SearchOptions(**kwargs)

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            SearchOptions().max_lead = 0  # type: ignore[misc]


# ─── depth_schedule / StopCondition ───────────────────────────────────────────


class TestDepthSchedule:
    def test_default_ceiling(self) -> None:
        depths = list(depth_schedule(64))
        assert depths[:5] == [4, 12, 20, 28, 32]
        assert depths[-1] == 60
        assert all(b > a for a, b in zip(depths, depths[1:]))

    def test_small_ceiling(self) -> None:
        assert list(depth_schedule(5)) == [4]
        assert list(depth_schedule(13)) == [4, 12]

    def test_stop_condition_deeper(self) -> None:
        assert StopCondition(4).deeper() == StopCondition(3)


# ─── terminal_payoff ──────────────────────────────────────────────────────────


class TestTerminalPayoff:
    def test_single_winner(self) -> None:
        assert terminal_payoff(position((0,), (3000,), (2000,))).prob == (0.0, 1.0, 0.0)

    def test_tie_splits(self) -> None:
        assert terminal_payoff(position((3000,), (3000,), (0,))).prob == (0.5, 0.5, 0.0)

    def test_eliminated_player_cannot_win(self) -> None:
        s = position((5000, 0, 0, 4), (1000,), (2000,))
        assert terminal_payoff(s).prob == (0.0, 0.0, 1.0)

    def test_everyone_out_splits_evenly(self) -> None:
        s = position((0, 0, 0, 4), (0, 0, 0, 4), (0, 0, 0, 4))
        p = terminal_payoff(s)
        assert p.prob == pytest.approx((1 / 3, 1 / 3, 1 / 3))
        assert p.uncertainty() == pytest.approx(0.0, abs=1e-12)

    def test_no_uncertainty(self) -> None:
        p = terminal_payoff(position((1000,), (1000,), (1000,)))
        assert p.uncertainty() == pytest.approx(0.0, abs=1e-12)


def test_format_payoff() -> None:
    assert format_payoff(Payoff((0.25, 0.5, 0.25))) == "(0.250 0.500 0.250 )"
    assert format_payoff(Payoff.null()) == "(nil)"


# ─── Construction ─────────────────────────────────────────────────────────────


class TestConstruction:
    def test_precomposed_operators(self, test_board: SpinOperator) -> None:
        search = Search(test_board)
        assert len(search.spin_ops) == MAX_PASSED_SPINS
        assert search.spin_op(1) is test_board
        assert search.spin_op(3).approx_equal(test_board.power(3))

    def test_no_batching_without_merge(self, test_board: SpinOperator) -> None:
        search = Search(test_board, SearchOptions(merge_passed_spins=False))
        assert len(search.spin_ops) == 1

    def test_batch_cap(self, test_board: SpinOperator) -> None:
        search = Search(test_board, SearchOptions(max_passed_spins_optimized=3))
        assert len(search.spin_ops) == 3


# ─── Chance expansion ─────────────────────────────────────────────────────────


class TestChanceExpansion:
    def _children(self, search: Search, state: State) -> list[State]:
        handle = search.cache.create_chance_node(state)
        search.deepen(handle, 1)
        return [search.cache.get(h).state for _, h in search.cache.get(handle).branches]

    def test_passed_spins_resolved_in_one_batch(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        for child in self._children(search, position((0, 0, 3), (1000,), (2000,))):
            p0 = child.players[0]
            assert p0.passed == 0
            assert p0.score == 0 or p0.score >= 3000

    def test_batch_respects_cap(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board, SearchOptions(max_passed_spins_optimized=2))
        children = self._children(search, position((0, 0, 3), (1000,), (2000,)))
        assert any(child.players[0].passed == 1 for child in children)

    def test_one_spin_without_merge(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board, SearchOptions(merge_passed_spins=False))
        children = self._children(search, position((0, 0, 3), (1000,), (2000,)))
        assert len(children) == 3
        assert sorted(child.players[0].score for child in children) == [0, 1000, 2000]

    def test_branch_weights_sum_to_one(self, test_board: SpinOperator) -> None:
        search = Search(test_board)
        handle = search.cache.create_chance_node(position((0, 0, 2), (1000, 1), (2000,)))
        search.deepen(handle, 2)
        weights = [w for w, _ in search.cache.get(handle).branches]
        assert sum(weights) == pytest.approx(1.0)

    def test_self_loop_renormalised(self, test_board: SpinOperator) -> None:
        # At the score cap, 1000 + one spin leaves the state unchanged.
        search = Search(test_board)
        handle = search.cache.create_chance_node(position((20000, 1), (0,), (1000,)))
        payoff = search.deepen(handle, 2)

        weights = sorted(w for w, _ in search.cache.get(handle).branches)
        assert weights == pytest.approx([0.2 / 0.7, 0.5 / 0.7])
        assert payoff.prob == pytest.approx((0.5 / 0.7, 0.0, 0.2 / 0.7))
        assert payoff.uncertainty() == pytest.approx(0.0, abs=1e-12)


# ─── Decisions ────────────────────────────────────────────────────────────────


class TestDecisions:
    def test_leader_plays(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        root = search.run(LEADER_1000)
        assert root.state.up == 1
        assert search.decision(root) is Decision.PLAY
        assert search.payoff(root).prob == pytest.approx((0.0, 0.8, 0.2))
        assert search.payoff(search.pass_branch(root)).prob == pytest.approx((0.0, 0.35, 0.65))

    def test_big_leader_passes(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        root = search.run(position((0,), (5000, 1), (1000,)))
        assert search.decision(root) is Decision.PASS
        assert search.payoff(root).prob == pytest.approx((0.0, 1.0, 0.0))

    def test_lead_cap_forces_pass(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board, SearchOptions(max_lead=500))
        root = search.run(LEADER_1000)
        assert search.play_branch(root) is None
        assert search.pass_branch(root) is not None
        assert search.decision(root) is Decision.PASS
        assert search.payoff(root).prob == pytest.approx((0.0, 0.35, 0.65))

    def test_zero_lead_cap_disables_cap(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board, SearchOptions(max_lead=0))
        root = search.run(LEADER_1000)
        assert search.play_branch(root) is not None

    def test_third_place_must_play(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        root = search.run(position((0, 1), (2000,), (3500,)))
        assert search.pass_branch(root) is None
        assert search.decision(root) is Decision.PLAY

    def test_exact_tie_merges_to_minimum(self, no_bonus_board: SpinOperator) -> None:
        # Third place may pass here; both choices leave P0 with no chance.
        search = Search(no_bonus_board, SearchOptions(always_spin_third_place=False))
        root = search.run(position((0, 1), (2000,), (3500,)))
        assert search.pass_branch(root) is not None
        assert search.payoff(root).prob == pytest.approx((0.0, 0.0, 0.8))
        assert search.payoff(root).uncertainty() == pytest.approx(0.2)
        assert search.decision(root) is Decision.UNDECIDED

    def test_identical_branches_report_play(self) -> None:
        # Every spin is worth 500: P2 on 9000 wins whoever takes the spin.
        board = BoardBuilder().S(500).build()
        search = Search(board, SearchOptions(always_spin_third_place=False))
        root = search.run(position((0, 1), (5000,), (9000,)))
        play = search.payoff(search.play_branch(root))
        assert play == search.payoff(search.pass_branch(root))
        assert play.prob == (0.0, 0.0, 1.0)
        assert search.decision(root) is Decision.PLAY

    def test_decision_of_non_decision_node(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        root = search.run(LEADER_1000)
        assert search.decision(search.play_branch(root)) is Decision.UNDECIDED


# ─── Convergence and history ──────────────────────────────────────────────────


class TestConvergence:
    def test_disjoint_ranges_solve_in_one_pass(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        root = search.run(LEADER_1000)
        assert len(search.history) == 1
        record = search.history[0]
        assert record.depth == 4
        assert record.solved
        assert record.decision is Decision.PLAY
        assert record.cache_size == search.cache.size()
        assert search.solved(root)

    def test_result_intervals(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        search.run(LEADER_1000)
        assert search.result.play_win.min == pytest.approx(0.8)
        assert search.result.pass_win.min == pytest.approx(0.35)
        assert not search.result.play_win.overlaps(search.result.pass_win)

    def test_bonus_board_converges(self, test_board: SpinOperator) -> None:
        search = Search(test_board)
        root = search.run(position((0,), (3000, 2), (2000,)))
        assert search.history[-1].solved
        assert search.decision(root) in (Decision.PLAY, Decision.PASS)

    def test_finished_game_stops_after_one_pass(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        root = search.run(position((0,), (1000,), (2000,)))
        assert len(search.history) == 1
        assert not root.expanded()
        assert search.decision(root) is Decision.UNDECIDED
        assert not search.solved(root)


# ─── Reuse and bookkeeping ────────────────────────────────────────────────────


class TestSession:
    def test_reuse_returns_cached_root(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        first = search.run(LEADER_1000)
        size = len(search.cache)
        second = search.run(LEADER_1000)
        assert first is second
        assert len(search.cache) == size
        assert search.decision(second) is Decision.PLAY

    def test_history_reset_per_run(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        search.run(LEADER_1000)
        search.run(position((0,), (5000, 1), (1000,)))
        assert len(search.history) == 1

    def test_generation_marks_visited(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        root = search.run(LEADER_1000)
        assert root.generation == search.generation
        search.reset_visited()
        assert root.generation != search.generation

    def test_each_pass_starts_a_generation(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        handle = search.cache.create_chance_node(position((0, 0, 2), (1000,), (2000,)))
        before = search.generation
        search.deepen(handle, 1)
        assert search.generation == before + 1
        assert search.cache.get(handle).generation == search.generation

    def test_accepts_handle_or_node(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        root = search.run(LEADER_1000)
        assert search.decision(root.handle) is search.decision(root)
        assert search.payoff(root.handle) == search.payoff(root)

    def test_root_is_decision_node(self, no_bonus_board: SpinOperator) -> None:
        search = Search(no_bonus_board)
        assert search.run(LEADER_1000).kind is NodeKind.DECISION


# ─── Logging ──────────────────────────────────────────────────────────────────


class TestLogging:
    def test_info_per_run_and_pass(self, no_bonus_board, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="pyl_solver.solvers.search")
        Search(no_bonus_board).run(LEADER_1000)
        assert "Searching [P1 (0) (3000 E1) (2000) ]" in caplog.text
        assert "depth 4" in caplog.text
        assert "solved: play" in caplog.text

    def test_debug_trace(self, no_bonus_board, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="pyl_solver.solvers.search")
        Search(no_bonus_board, SearchOptions(debug=True)).run(LEADER_1000)
        assert "Scanning" in caplog.text
        assert "Decided between" in caplog.text

    def test_no_debug_trace_by_default(self, no_bonus_board, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="pyl_solver.solvers.search")
        Search(no_bonus_board).run(LEADER_1000)
        assert "Scanning" not in caplog.text


def test_custom_board_search() -> None:
    """A board without whammies: the leader cannot lose by playing."""
    board = BoardBuilder().S(500).S(1000).build()
    search = Search(board)
    root = search.run(position((0,), (3000, 1), (2000,)))
    assert search.payoff(search.play_branch(root))[1] == pytest.approx(1.0)
