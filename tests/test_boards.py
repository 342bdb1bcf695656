"""Tests for pyl_solver/engine/boards.py."""

from __future__ import annotations

import math

import pytest

from pyl_solver.engine.boards import (
    BOARDS,
    PRIZE_VALUE,
    BoardBuilder,
    feb85_board,
    feb85_spread_board,
    get_board,
    spin_test_board,
)
from pyl_solver.engine.outcomes import WHAMMY, spin_value

# ─── BoardBuilder ─────────────────────────────────────────────────────────────


class TestBoardBuilder:
    def test_weights_normalised(self) -> None:
        board = BoardBuilder().W().S(1000).SE(500, 1.0).build()
        assert math.isclose(board.expr.weight(WHAMMY), 0.25)
        assert math.isclose(board.expr.weight(spin_value(1000)), 0.25)
        assert math.isclose(board.expr.weight(spin_value(500, 1)), 0.5)

    def test_prize_value(self) -> None:
        board = BoardBuilder().P().build()
        assert board.expr.weight(spin_value(PRIZE_VALUE)) == 1.0

    def test_repeated_space_accumulates(self) -> None:
        board = BoardBuilder().W().W().S(500).build()
        assert len(board) == 2
        assert math.isclose(board.expr.weight(WHAMMY), 2 / 3)

    def test_build_does_not_alias_builder(self) -> None:
        builder = BoardBuilder().W()
        first = builder.build()
        builder.S(500)
        assert len(first) == 1


# ─── Registry ─────────────────────────────────────────────────────────────────


class TestRegistry:
    @pytest.mark.parametrize("name", sorted(BOARDS))
    def test_every_board_normalised(self, name: str) -> None:
        assert math.isclose(get_board(name).expr.total_weight(), 1.0)

    @pytest.mark.parametrize("name", sorted(BOARDS))
    def test_every_board_has_whammies(self, name: str) -> None:
        assert get_board(name).expr.weight(WHAMMY) > 0.0

    def test_unknown_board_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown board"):
            get_board("mar84")

    def test_test_board_weights(self) -> None:
        board = spin_test_board()
        assert board.expr.weight(WHAMMY) == 0.2
        assert board.expr.weight(spin_value(1000, 1)) == 0.3
        assert board.expr.weight(spin_value(2000)) == 0.5


# ─── feb85 ────────────────────────────────────────────────────────────────────


class TestFeb85:
    def test_scores_are_quantized(self) -> None:
        for value, _ in feb85_board().expr.items():
            assert value.score % 250 == 0

    def test_spread_removes_values(self) -> None:
        spread = feb85_spread_board()
        for value in (spin_value(4000, 1), spin_value(1750), spin_value(2250)):
            assert value not in spread.expr

    def test_spread_moves_half_the_mass(self) -> None:
        feb = feb85_board().expr
        spread = feb85_spread_board().expr
        expected = feb.weight(spin_value(3000, 1)) + feb.weight(spin_value(4000, 1)) / 2
        assert math.isclose(spread.weight(spin_value(3000, 1)), expected)

    def test_spread_shrinks_alphabet(self) -> None:
        assert len(feb85_spread_board()) == len(feb85_board()) - 3
