"""
Spin outcome values and their composition.

A SpinValue is the quantized result of taking one or more spins:

    (score, earned, taken)
        score  — points won, a multiple of MIN_SCORE_UNIT saturated at MAX_SCORE.
                 A score of 0 is a whammy.
        earned — additional spins earned along the way.
        taken  — spins consumed to produce this result.

Scores are quantized on construction: 1400 and 1500 are both stored as 1500.
This is lossy: fewer distinct values means far fewer distinct
outcomes once several spins are composed, and far fewer search states.

Keeping `taken` inside the value is what lets repeated spins be precomputed
into a single operator (see operators.SpinOperator.power).
"""

from __future__ import annotations

from typing import NamedTuple

# ─── Constants ────────────────────────────────────────────────────────────────

MIN_SCORE_UNIT: int = 250
"""Every stored score is a multiple of this unit."""

MAX_SCORE: int = 20000
"""Scores saturate here. Must be a multiple of MIN_SCORE_UNIT."""


# ─── SpinValue ────────────────────────────────────────────────────────────────


class SpinValue(NamedTuple):
    """Result of spinning the board one or more times.

    Use :func:`spin_value` to build a value from a raw board score; the bare
    constructor stores its fields as given and is reserved for values that
    are already quantized (composition results).

    Attributes:
        score:  Quantized score, 0 for a whammy.
        earned: Extra spins earned.
        taken:  Spins consumed.
    """

    score: int
    earned: int
    taken: int


def quantize_score(score: int) -> int:
    """Round a raw score to the nearest unit (ties up) and saturate.

    Examples:
        >>> quantize_score(1400)
        1500
        >>> quantize_score(125)
        250
        >>> quantize_score(99999)
        20000
    """
    return min(MAX_SCORE, ((score + MIN_SCORE_UNIT // 2) // MIN_SCORE_UNIT) * MIN_SCORE_UNIT)


def spin_value(score: int = 0, earned: int = 0, taken: int = 1) -> SpinValue:
    """Build a quantized SpinValue from a raw board score.

    Examples:
        >>> spin_value(700)
        SpinValue(score=750, earned=0, taken=1)
        >>> spin_value(4000, 1)
        SpinValue(score=4000, earned=1, taken=1)
    """
    return SpinValue(quantize_score(score), earned, taken)


WHAMMY: SpinValue = SpinValue(0, 0, 1)
"""The single-spin whammy."""


def is_whammy(value: SpinValue) -> bool:
    return value.score == 0


def compose_values(first: SpinValue, second: SpinValue) -> SpinValue:
    """Combine two spin results, ``first`` taken before ``second``.

    A later whammy erases everything before it, so ``second`` wins outright
    when it is a whammy. An earlier whammy keeps its zero score and absorbs
    the later result's spins. Otherwise the results simply add, with the
    score saturating at MAX_SCORE.

    The operation is associative, which is what allows N spins to be
    precomputed as repeated composition of the one-spin board. It is
    commutative only when neither operand is a whammy.

    Examples:
        >>> compose_values(spin_value(1000, 1), WHAMMY)
        SpinValue(score=0, earned=0, taken=1)
        >>> compose_values(WHAMMY, spin_value(1000, 1))
        SpinValue(score=0, earned=1, taken=2)
        >>> compose_values(spin_value(500), spin_value(750, 1))
        SpinValue(score=1250, earned=1, taken=2)
    """
    if is_whammy(second):
        return second
    if is_whammy(first):
        return SpinValue(0, first.earned + second.earned, first.taken + second.taken)
    return SpinValue(
        min(MAX_SCORE, first.score + second.score),
        first.earned + second.earned,
        first.taken + second.taken,
    )


def format_spin_value(value: SpinValue) -> str:
    """Render a value as ``(score+earned+taken)``.

    Examples:
        >>> format_spin_value(spin_value(1000, 1))
        '(1000+1+1)'
    """
    return f"({value.score}+{value.earned}+{value.taken})"
