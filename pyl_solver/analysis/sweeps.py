"""Decision sweeps over families of endgame positions.

Three public functions run one Search over many related positions and
collect the results:

    sweep_lead(search, base, leads)          — vary the up player's lead
    sweep_spins(search, spins)               — vary the up player's earned spins
    build_decision_grid(search, leads, spins, base)
        — (len(spins), len(leads)) matrix of decisions for the plot modules

Positions share the search's node cache, so neighbouring sweep points
reuse each other's subtrees.

Grid convention:
    Shape  : (len(spins), len(leads)) — rows = earned spins, cols = lead
    Values : 1.0 = PLAY, 0.0 = PASS, np.nan = undecided
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from pyl_solver.engine.interval import Interval
from pyl_solver.engine.state import State, make_state
from pyl_solver.solvers.nodes import Decision
from pyl_solver.solvers.payoff import Payoff
from pyl_solver.solvers.search import Search

# ─── Defaults ─────────────────────────────────────────────────────────────────

DEFAULT_BASE: int = 6000
DEFAULT_LEADS: range = range(-5000, 5001, 250)
DEFAULT_SPINS: range = range(1, 13)
SPIN_SWEEP_SCORES: tuple[int, int] = (8000, 3000)


# ─── Result type ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SweepRow:
    """Outcome of one sweep point.

    Attributes:
        label:       Human-readable sweep coordinate, e.g. ``"lead -250"``.
        state:       Root state searched (after control moved to the up player).
        decision:    Recommended choice at the root.
        play_payoff: Payoff of the play branch (null if playing is not allowed).
        pass_payoff: Payoff of the pass branch (null if passing is not allowed).
        play_range:  Up player's win range when playing.
        pass_range:  Up player's win range when passing.
    """

    label: str
    state: State
    decision: Decision
    play_payoff: Payoff
    pass_payoff: Payoff
    play_range: Interval
    pass_range: Interval


def _sweep_point(search: Search, label: str, init: State) -> SweepRow:
    root = search.run(init)
    up = root.state.up
    play_node = search.play_branch(root)
    pass_node = search.pass_branch(root)
    play = search.payoff(play_node) if play_node is not None else Payoff.null()
    pass_ = search.payoff(pass_node) if pass_node is not None else Payoff.null()
    return SweepRow(
        label=label,
        state=root.state,
        decision=search.decision(root),
        play_payoff=play,
        pass_payoff=pass_,
        play_range=play.range(up),
        pass_range=pass_.range(up),
    )


def lead_state(lead: int, spins: int = 1, base: int = DEFAULT_BASE) -> State:
    """``[(0) (base+lead E<spins>) (base)]``: the second player decides."""
    return make_state([(0,), (base + lead, spins), (base,)])


# ─── Public sweeps ────────────────────────────────────────────────────────────


def sweep_lead(
    search: Search,
    base: int = DEFAULT_BASE,
    leads: Iterable[int] = DEFAULT_LEADS,
) -> list[SweepRow]:
    """Decide with one earned spin at each lead over an opponent on ``base``.

    Args:
        search: Search to run (its cache is shared across points).
        base:   Passee's score.
        leads:  Leads to try; ``base + lead`` must stay a legal score.

    Returns:
        One SweepRow per lead, in order.
    """
    return [_sweep_point(search, f"lead {lead}", lead_state(lead, 1, base)) for lead in leads]


def sweep_spins(search: Search, spins: Iterable[int] = DEFAULT_SPINS) -> list[SweepRow]:
    """Decide at ``[(0) (8000 E<n>) (3000)]`` for each spin count ``n``."""
    leader, trailer = SPIN_SWEEP_SCORES
    return [
        _sweep_point(search, f"spins {n}", make_state([(0,), (leader, n), (trailer,)]))
        for n in spins
    ]


def build_decision_grid(
    search: Search,
    leads: Sequence[int],
    spins: Sequence[int],
    base: int = DEFAULT_BASE,
) -> np.ndarray:
    """Return the (len(spins), len(leads)) decision matrix.

    Values: 1.0 = PLAY, 0.0 = PASS, np.nan = undecided.
    """
    grid = np.full((len(spins), len(leads)), np.nan)
    for r, n in enumerate(spins):
        for c, lead in enumerate(leads):
            root = search.run(lead_state(lead, n, base))
            decision = search.decision(root)
            if decision is Decision.PLAY:
                grid[r, c] = 1.0
            elif decision is Decision.PASS:
                grid[r, c] = 0.0
    return grid
