"""
Search graph nodes.

A node is one of three kinds, distinguished by ``kind``:

    TERMINAL — game over; payoff from final scores, no successors.
    CHANCE   — the up player spins; weighted branches to successor nodes.
    DECISION — the up player may play or pass; up to two successors.

Nodes never reference each other directly. Successors are integer handles
into the NodeCache arena that owns every node of a search, which keeps the
shared DAG (the same state reached along many paths) free of object cycles.

``generation`` records the last iterative-deepening pass that scanned the
node; a node is "visited this pass" when it equals the search's current
generation, so no reset sweep over the cache is needed between passes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pyl_solver.engine.state import State
from pyl_solver.solvers.payoff import Payoff

# Chance branch: (probability, successor handle).
Branch = tuple[float, int]


class NodeKind(Enum):
    TERMINAL = "end"
    CHANCE = "spin"
    DECISION = "decide"


class Decision(Enum):
    """Choice recommended at a decision node."""

    UNDECIDED = "undecided"
    PLAY = "play"
    PASS = "pass"


@dataclass(eq=False)
class Node:
    """One vertex of the search DAG.

    Attributes:
        handle:     Index of this node in its NodeCache arena.
        kind:       Node variant.
        state:      Canonical game state (the cache key).
        payoff:     Cached payoff; null until computed, reset when rescanned.
        generation: Last pass that scanned this node (-1 = never).
        branches:   CHANCE only — (probability, handle) per distinct outcome.
        if_play:    DECISION only — handle of the play branch, if legal.
        if_pass:    DECISION only — handle of the pass branch, if legal.
    """

    handle: int
    kind: NodeKind
    state: State
    payoff: Payoff = field(default_factory=Payoff.null)
    generation: int = -1
    branches: list[Branch] = field(default_factory=list)
    if_play: int | None = None
    if_pass: int | None = None

    def expanded(self) -> bool:
        """True once successors have been materialised."""
        if self.kind is NodeKind.CHANCE:
            return bool(self.branches)
        if self.kind is NodeKind.DECISION:
            return self.if_play is not None or self.if_pass is not None
        return True
