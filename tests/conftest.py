"""
Shared pytest fixtures for Press Your Luck solver tests.

Provides a compact position builder and the small boards whose search
trees are shallow enough to check by hand.
"""

from __future__ import annotations

import pytest

from pyl_solver.engine.boards import no_bonus_test_board, spin_test_board
from pyl_solver.engine.operators import SpinOperator
from pyl_solver.engine.state import State, make_state


def position(*players: tuple[int, ...], up: int = 0) -> State:
    """Build a State from ``(score, earned, passed, whammies)`` tuples.

    Examples:
        >>> position((0,), (2000, 3), (3500, 2)).players[2].earned
        2
    """
    return make_state(list(players), up)


@pytest.fixture
def pos():
    """Expose the position() helper as a fixture for convenience."""
    return position


@pytest.fixture
def test_board() -> SpinOperator:
    """Whammy 0.2, 1000 + one spin 0.3, 2000 0.5."""
    return spin_test_board()


@pytest.fixture
def no_bonus_board() -> SpinOperator:
    """Whammy 0.2, 1000 0.3, 2000 0.5: no spin ever earns another."""
    return no_bonus_test_board()
