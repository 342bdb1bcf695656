"""
Board definitions — the probability tables the search draws spins from.

A board is described space by space with BoardBuilder, the way it looks on
the show: every space carries weight 1.0, plus an optional extra weight for
the movement spaces (Pick-a-Corner, Go-Back-2, Big Bucks, ...) that can land
on it. build() normalises the weights to sum to 1.0.

Registry:
    BOARDS["spin1"]         — seven-outcome toy board.
    BOARDS["test"]          — whammy / 1000+spin / 2000.
    BOARDS["no-bonus"]      — whammy / 1000 / 2000; finite, hand-checkable trees.
    BOARDS["feb85"]         — February 1985 canonical board.
    BOARDS["feb85-spread"]  — feb85 with three values spread to shrink the alphabet.
"""

from __future__ import annotations

from collections.abc import Callable

from .operators import SpinOperator
from .outcomes import WHAMMY, spin_value
from .weighted_set import WeightedSet

PRIZE_VALUE: int = 2500
"""Prizes are valued at a flat 2500."""


# ─── Builder ──────────────────────────────────────────────────────────────────


class BoardBuilder:
    """Accumulates board spaces into a SpinOperator."""

    def __init__(self) -> None:
        self.expr: WeightedSet = WeightedSet()

    def W(self) -> BoardBuilder:
        """Whammy space."""
        self.expr.add(1.0, WHAMMY)
        return self

    def S(self, score: int, extra: float = 0.0) -> BoardBuilder:
        """Score-only space."""
        self.expr.add(1.0 + extra, spin_value(score, 0))
        return self

    def SE(self, score: int, extra: float = 0.0) -> BoardBuilder:
        """Score plus one spin."""
        self.expr.add(1.0 + extra, spin_value(score, 1))
        return self

    def P(self, extra: float = 0.0) -> BoardBuilder:
        """Prize space."""
        return self.S(PRIZE_VALUE, extra)

    def build(self) -> SpinOperator:
        expr = self.expr.copy()
        expr.normalize()
        return SpinOperator(expr)


def spread_board(board: SpinOperator) -> SpinOperator:
    """Return a copy of a feb85-style board with three values spread out.

    4000+spin → 3000+spin / 5000+spin, 1750 → 1500 / 2000, 2250 → 2000 / 2500.
    """
    expr = board.expr.copy()
    expr.spread(spin_value(4000, 1), spin_value(3000, 1), spin_value(5000, 1))
    expr.spread(spin_value(1750), spin_value(1500), spin_value(2000))
    expr.spread(spin_value(2250), spin_value(2000), spin_value(2500))
    return SpinOperator(expr)


# ─── Boards ───────────────────────────────────────────────────────────────────


def spin1_board() -> SpinOperator:
    expr: WeightedSet = WeightedSet()
    expr.add(0.1, WHAMMY)
    expr.add(0.1, spin_value(1000, 1))
    expr.add(0.1, spin_value(4000, 1))
    expr.add(0.2, spin_value(2000))
    expr.add(0.2, spin_value(500))
    expr.add(0.1, spin_value(1000))
    expr.add(0.2, spin_value(2500))
    expr.normalize()
    return SpinOperator(expr)


def spin_test_board() -> SpinOperator:
    expr: WeightedSet = WeightedSet()
    expr.add(0.2, WHAMMY)
    expr.add(0.3, spin_value(1000, 1))
    expr.add(0.5, spin_value(2000))
    return SpinOperator(expr)


def no_bonus_test_board() -> SpinOperator:
    expr: WeightedSet = WeightedSet()
    expr.add(0.2, WHAMMY)
    expr.add(0.3, spin_value(1000))
    expr.add(0.5, spin_value(2000))
    return SpinOperator(expr)


# Movement-space extras on the February 1985 board.
_PC: float = 1 / 9.0  # Pick-a-Corner
_B2: float = 1 / 3.0  # Go Back 2
_M1: float = 1 / 6.0  # Move One
_A2: float = 1 / 3.0  # Advance Two
_BB: float = 1 / 3.0  # Big Bucks


def feb85_board() -> SpinOperator:
    """One of the canonical 1983-86 boards, from February 1985."""
    b = BoardBuilder()
    b.S(1400, _PC).S(1750, _PC).S(2250, _PC)  # 1
    b.S(500).S(1250).P()  # 2
    b.S(500).S(2000).W()  # 3
    b.SE(3000, _B2 + _BB).SE(4000, _B2 + _BB).SE(5000, _B2 + _BB)  # 4
    b.S(750).P().W()  # 5
    b.SE(700)  # 6
    b.S(750).P().W()  # 7
    b.SE(500, _M1).SE(750, _M1).SE(1000, _M1)  # 8
    b.S(800).W()  # 9
    b.P(_PC + _M1).P(_PC + _M1).P(_PC + _M1)  # 10
    b.S(1500).W()  # 11
    b.S(500).W()  # 12
    b.S(1500, _A2 + _M1).S(2500, _A2 + _M1).P(_A2 + _M1)  # 13
    b.S(2000).W()  # 14
    b.SE(1000, _PC + _M1).S(2000, _PC + _M1).P(_PC + _M1)  # 15
    b.SE(750).SE(1500).W()  # 16
    b.S(600).SE(700).P()  # 17
    b.SE(750).SE(1000).W()  # 18
    return b.build()


def feb85_spread_board() -> SpinOperator:
    return spread_board(feb85_board())


BOARDS: dict[str, Callable[[], SpinOperator]] = {
    "spin1": spin1_board,
    "test": spin_test_board,
    "no-bonus": no_bonus_test_board,
    "feb85": feb85_board,
    "feb85-spread": feb85_spread_board,
}


def get_board(name: str) -> SpinOperator:
    """Build a registered board by name.

    Raises:
        ValueError: If ``name`` is not registered.
    """
    try:
        factory = BOARDS[name]
    except KeyError:
        raise ValueError(f"Unknown board {name!r}; choose from {sorted(BOARDS)}.") from None
    return factory()
