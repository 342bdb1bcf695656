"""
The two primitive game operations, and the spin operator algebra.

    apply_spin(value, state) — the up player takes a spin result.
    apply_pass(state)        — the up player passes all earned spins.

A SpinOperator is a weighted set of SpinValues, "the board". Applying it
to a state yields a distribution over next states. Composing it with itself
precomputes the effect of several spins at once; since spin values compose
associatively, ``board.power(n)`` is the same whichever way the products
are grouped.
"""

from __future__ import annotations

from .outcomes import MAX_SCORE, SpinValue, compose_values, format_spin_value, is_whammy
from .state import MAX_WHAMMIES, State, change_player, take_spins
from .weighted_set import WeightedSet

# ─── Primitive operations ─────────────────────────────────────────────────────


def apply_spin(value: SpinValue, state: State) -> State:
    """Return the state that follows the up player taking ``value``.

    A whammy zeroes the score, folds any passed spins back into earned
    spins and counts the whammy; a player who is now out loses all spins.
    Any other value adds score (saturating) and earned spins.

    Control then moves on if needed. Finally, if the new up player cannot
    reach MAX_WHAMMIES with the spins left in the game, their whammy count
    is irrelevant and is reset to 0 so equivalent states share one node.
    """
    n = state.up
    up = take_spins(state.up_player(), value.taken)
    if is_whammy(value):
        up = up._replace(
            score=0,
            earned=up.earned + up.passed + value.earned,
            passed=0,
            whammies=up.whammies + 1,
        )
        if up.out():
            up = up._replace(earned=0)
    else:
        up = up._replace(
            score=min(up.score + value.score, MAX_SCORE),
            earned=up.earned + value.earned,
        )

    res = change_player(state.with_player(n, up))

    next_up = res.up_player()
    if next_up.whammies and next_up.whammies + res.total_spins() < MAX_WHAMMIES:
        res = res.with_player(res.up, next_up._replace(whammies=0))
    return res


def apply_pass(state: State) -> State:
    """Return the state after the up player passes every earned spin.

    The spins go to the opponent with the higher score; on a tie, the first
    opponent in seating order. The passer has no say in the matter.
    """
    up = state.up_player()
    passee_num = state.passee_num()
    passee = state.players[passee_num]
    res = state.with_player(passee_num, passee._replace(passed=passee.passed + up.earned))
    res = res.with_player(state.up, up._replace(earned=0))
    return change_player(res)


# ─── Operators ────────────────────────────────────────────────────────────────


class SpinOperator:
    """One or more spins of a board, as a weighted set of SpinValues.

    The weights of a board handed to the search must sum to 1.0; the search
    relies on this and does not re-check it.
    """

    __slots__ = ("expr",)

    def __init__(self, expr: WeightedSet[SpinValue] | None = None) -> None:
        self.expr: WeightedSet[SpinValue] = expr if expr is not None else WeightedSet()

    def apply(self, state: State) -> WeightedSet[State]:
        """Distribution over the states that follow one application."""
        res: WeightedSet[State] = WeightedSet()
        for value, weight in self.expr.items():
            res.add(weight, apply_spin(value, state))
        return res

    def compose(self, inner: SpinOperator) -> SpinOperator:
        """Operator for ``inner``'s spins followed by this operator's spins."""
        res = SpinOperator()
        for first, first_weight in inner.expr.items():
            for second, second_weight in self.expr.items():
                res.expr.add(first_weight * second_weight, compose_values(first, second))
        return res

    def power(self, n: int) -> SpinOperator:
        """This operator applied ``n`` times in a row (n >= 1)."""
        res = self
        for _ in range(n - 1):
            res = self.compose(res)
        return res

    def approx_equal(self, other: SpinOperator, abs_tol: float = 1e-9) -> bool:
        return self.expr.isclose(other.expr, abs_tol=abs_tol)

    def __len__(self) -> int:
        return len(self.expr)

    def __repr__(self) -> str:
        body = " ".join(
            f"{weight:.3g}:{format_spin_value(value)}" for value, weight in self.expr.items()
        )
        return f"spin[{body}]"


class PassOperator:
    """The deterministic pass. Kept as an object so the search can hold one."""

    __slots__ = ()

    def apply(self, state: State) -> State:
        return apply_pass(state)

    def __repr__(self) -> str:
        return "pass[]"
