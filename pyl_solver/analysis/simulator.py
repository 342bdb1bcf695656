"""
Monte Carlo simulator for Press Your Luck endgames.

Plays whole games from a starting position by sampling single spins from a
board, and accumulates each player's share of the win to estimate win
probabilities with confidence intervals.

Primary use: cross-validate Search payoffs. The search resolves batches of
passed spins with precomposed operators and renormalises away outcomes that
leave the state unchanged; the simulator does neither, so agreement within
the confidence interval is a check on both.

Policies are consulted only where passing is legal (the up player holds
earned spins and no passed spins). Everywhere else the up player must spin.

    always_play_policy        — never pass
    make_lead_policy(t)       — pass whenever the lead over the passee exceeds t
    make_search_policy(search) — follow the search decision (memoised per state)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from pyl_solver.engine.operators import SpinOperator, apply_pass, apply_spin
from pyl_solver.engine.outcomes import SpinValue
from pyl_solver.engine.state import NUM_PLAYERS, State, change_player, format_state
from pyl_solver.solvers.nodes import Decision
from pyl_solver.solvers.search import Search, terminal_payoff

logger = logging.getLogger(__name__)

Policy = Callable[[State], Decision]
"""Decides PLAY or PASS for a state in which the up player may pass."""

# ─── Result type ──────────────────────────────────────────────────────────────


@dataclass
class SimulationResult:
    """Aggregate statistics from a Monte Carlo simulation run.

    Attributes:
        n_games:          Number of games simulated.
        win_rates:        Mean win share per player (float64, shape (3,)).
                          Tied winners split a game, so rates sum to 1.
        ci_95_half_width: Half-width of the 95% confidence interval of each
                          win rate (normal approximation).
        mean_spins:       Mean number of spins taken per game.
    """

    n_games: int
    win_rates: np.ndarray
    ci_95_half_width: np.ndarray
    mean_spins: float

    def __str__(self) -> str:
        rates = " ".join(
            f"P{n}={self.win_rates[n]:.3f}±{self.ci_95_half_width[n]:.3f}" for n in range(NUM_PLAYERS)
        )
        return f"Games: {self.n_games:,} | {rates} | Spins/game: {self.mean_spins:.2f}"


# ─── Policies ─────────────────────────────────────────────────────────────────


def always_play_policy(state: State) -> Decision:
    return Decision.PLAY


def make_lead_policy(threshold: int) -> Policy:
    """Pass whenever the up player's lead over the passee exceeds ``threshold``."""

    def policy(state: State) -> Decision:
        return Decision.PASS if state.lead() > threshold else Decision.PLAY

    return policy


def make_search_policy(search: Search) -> Policy:
    """Follow ``search``'s recommendation; undecided positions play.

    Decisions are memoised per state, and the search's own node cache is
    shared by every lookup.
    """
    memo: dict[State, Decision] = {}

    def policy(state: State) -> Decision:
        decision = memo.get(state)
        if decision is None:
            decision = search.decision(search.run(state))
            if decision is Decision.UNDECIDED:
                decision = Decision.PLAY
            memo[state] = decision
        return decision

    return policy


# ─── Single game ──────────────────────────────────────────────────────────────


def _play_game(
    values: list[SpinValue],
    cumulative: np.ndarray,
    init: State,
    policy: Policy,
    rng: np.random.Generator,
) -> tuple[tuple[float, ...], int]:
    """Play one game to the end; return (win shares, spins taken)."""
    state = change_player(init)
    n_spins = 0
    while not state.terminal():
        if state.can_pass() and policy(state) is Decision.PASS:
            state = apply_pass(state)
            continue
        idx = min(int(np.searchsorted(cumulative, rng.random(), side="right")), len(values) - 1)
        state = apply_spin(values[idx], state)
        n_spins += 1
    return terminal_payoff(state).prob, n_spins


# ─── Main simulation ──────────────────────────────────────────────────────────


def simulate_games(
    board: SpinOperator,
    init: State,
    policy: Policy = always_play_policy,
    n_games: int = 10_000,
    seed: int | None = 42,
) -> SimulationResult:
    """Simulate ``n_games`` games from ``init`` and return win statistics.

    Args:
        board:   Normalised single-spin operator to sample from.
        init:    Starting position.
        policy:  Play/pass policy for the positions where passing is legal.
        n_games: Number of games to simulate (>= 1).
        seed:    Seed for numpy.random.default_rng. None for a
                 non-deterministic run.

    Returns:
        SimulationResult for the run.

    Raises:
        ValueError: If n_games < 1.
    """
    if n_games < 1:
        raise ValueError(f"n_games must be >= 1, got {n_games}.")

    rng = np.random.default_rng(seed)
    values = [value for value, _ in board.expr.items()]
    weights = np.array([weight for _, weight in board.expr.items()], dtype=np.float64)
    cumulative = np.cumsum(weights / weights.sum())

    logger.info("Simulating %d games from %s", n_games, format_state(init))

    shares = np.zeros((n_games, NUM_PLAYERS), dtype=np.float64)
    spins = np.zeros(n_games, dtype=np.int64)
    for g in range(n_games):
        shares[g], spins[g] = _play_game(values, cumulative, init, policy, rng)

    win_rates = shares.mean(axis=0)
    if n_games > 1:
        ci = 1.96 * shares.std(axis=0, ddof=1) / math.sqrt(n_games)
    else:
        ci = np.zeros(NUM_PLAYERS)

    result = SimulationResult(
        n_games=n_games,
        win_rates=win_rates,
        ci_95_half_width=ci,
        mean_spins=float(spins.mean()),
    )
    logger.info("%s", result)
    return result


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from pyl_solver.engine.boards import spin_test_board
    from pyl_solver.engine.state import make_state
    from pyl_solver.solvers.search import format_payoff

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    board = spin_test_board()
    search = Search(board)
    init = make_state([(0,), (3000, 2), (2000,)])

    root = search.run(init)
    print(f"Search payoff: {format_payoff(root.payoff)}  decision: {search.decision(root).value}")
    print(simulate_games(board, init, make_search_policy(search), n_games=20_000))
    print(simulate_games(board, init, always_play_policy, n_games=20_000))
