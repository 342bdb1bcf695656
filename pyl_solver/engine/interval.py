"""
Half-open interval ``[min, max)`` used for win-probability ranges.

A payoff's win probability for a player is only known up to its
uncertainty, so it is reported as the interval ``[p, p + uncertainty)``.
Two such ranges that do not overlap settle a decision outright.
"""

from __future__ import annotations

from typing import NamedTuple


class Interval(NamedTuple):
    """Half-open interval; use :meth:`of` to build one from unordered bounds.

    Examples:
        >>> Interval.of(0.4, 0.1)
        Interval(min=0.1, max=0.4)
        >>> Interval.of(1.0, 1.1) < Interval.of(1.2, 1.3)
        True
    """

    min: float
    max: float

    @classmethod
    def of(cls, a: float, b: float) -> Interval:
        return cls(a, b) if a < b else cls(b, a)

    def width(self) -> float:
        return self.max - self.min

    # Strict ordering: every element of one interval lies below every element of the other.
    def __lt__(self, other: Interval) -> bool:  # type: ignore[override]
        return self.max < other.min

    def __gt__(self, other: Interval) -> bool:  # type: ignore[override]
        return self.min > other.max

    def overlaps(self, other: Interval) -> bool:
        return not self < other and not self > other


def format_interval(interval: Interval) -> str:
    """Render as ``[min,max)`` with three decimals."""
    return f"[{interval.min:.3f},{interval.max:.3f})"
