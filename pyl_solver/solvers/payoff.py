"""
Payoff — per-player win probabilities with an explicit uncertainty.

The probabilities of a payoff need not sum to 1.0: the shortfall is the
*uncertainty*, the share of outcomes the search has not resolved yet
(depth-limited or unexplored subtrees). A terminal payoff sums to exactly
1.0. A payoff that has not been computed at all is the null payoff, whose
uncertainty is 1.0.

Payoffs are immutable; nodes replace theirs when recomputing.
"""

from __future__ import annotations

import math

from pyl_solver.engine.interval import Interval
from pyl_solver.engine.state import NUM_PLAYERS


class Payoff:
    """Win probability per player, or null (not yet computed).

    Examples:
        >>> Payoff.winner(1).prob
        (0.0, 1.0, 0.0)
        >>> Payoff.null().uncertainty()
        1.0
        >>> round(Payoff((0.25, 0.25, 0.0)).uncertainty(), 3)
        0.5
    """

    __slots__ = ("prob",)

    def __init__(self, prob: tuple[float, ...] | None) -> None:
        self.prob = prob

    @classmethod
    def null(cls) -> Payoff:
        return cls(None)

    @classmethod
    def zeros(cls) -> Payoff:
        return cls((0.0,) * NUM_PLAYERS)

    @classmethod
    def winner(cls, n: int) -> Payoff:
        """Player ``n`` wins with certainty."""
        return cls(tuple(1.0 if i == n else 0.0 for i in range(NUM_PLAYERS)))

    def is_null(self) -> bool:
        return self.prob is None

    def __bool__(self) -> bool:
        return self.prob is not None

    def __getitem__(self, n: int) -> float:
        return 0.0 if self.prob is None else self.prob[n]

    def total(self) -> float:
        return 0.0 if self.prob is None else math.fsum(self.prob)

    def uncertainty(self) -> float:
        if self.prob is None:
            return 1.0
        return 1.0 - math.fsum(self.prob)

    def range(self, n: int) -> Interval:
        """Player ``n``'s win probability as ``[p, p + uncertainty)``."""
        p = self[n]
        return Interval.of(p, p + self.uncertainty())

    def scaled(self, factor: float) -> Payoff:
        if self.prob is None:
            return self
        return Payoff(tuple(p * factor for p in self.prob))

    def __add__(self, other: Payoff) -> Payoff:
        if self.prob is None:
            return other
        if other.prob is None:
            return self
        return Payoff(tuple(a + b for a, b in zip(self.prob, other.prob)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Payoff):
            return NotImplemented
        return self.prob == other.prob

    def __hash__(self) -> int:
        return hash(self.prob)

    def __repr__(self) -> str:
        return f"Payoff({self.prob!r})"


def merge_min(first: Payoff, second: Payoff) -> Payoff:
    """Per-player minimum of two payoffs.

    Used when two choices are exactly as good for the player up: the merged
    payoff claims no more than both choices agree on.
    """
    return Payoff(tuple(min(first[n], second[n]) for n in range(NUM_PLAYERS)))
