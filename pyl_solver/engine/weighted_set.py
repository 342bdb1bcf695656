"""
WeightedSet — a mapping from items to non-negative probability mass.

Used twice in the solver:
    - over SpinValue, where it *is* the board (a spin operator);
    - over State, as the distribution of states that follows a spin.

Weights are plain floats. After normalize() they sum to 1.0 within
floating-point tolerance.
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T", bound=Hashable)


class WeightedSet(Generic[T]):
    """Set of items, each carrying an additive probability weight.

    Examples:
        >>> ws = WeightedSet()
        >>> ws.add(0.5, "a")
        >>> ws.add(0.5, "a")
        >>> ws.add(2.0, "b")
        >>> ws.total_weight()
        3.0
        >>> ws.normalize()
        >>> round(ws.weight("a"), 3)
        0.333
    """

    __slots__ = ("_terms",)

    def __init__(self, terms: dict[T, float] | None = None) -> None:
        self._terms: dict[T, float] = dict(terms) if terms else {}

    @classmethod
    def single(cls, item: T) -> WeightedSet[T]:
        """Return a set holding ``item`` with weight 1.0."""
        return cls({item: 1.0})

    def add(self, weight: float, item: T) -> None:
        """Accumulate ``weight`` onto ``item`` (created at 0.0 if absent)."""
        self._terms[item] = self._terms.get(item, 0.0) + weight

    def spread(self, value: T, low: T, high: T) -> None:
        """Move all of ``value``'s mass onto ``low`` and ``high``, half each.

        Shrinks the item alphabet at some cost in accuracy; the smaller
        alphabet lets the search reach a greater depth.

        Raises:
            KeyError: If ``value`` is not in the set.
        """
        weight = self._terms.pop(value)
        self.add(weight / 2, low)
        self.add(weight / 2, high)

    def total_weight(self) -> float:
        return math.fsum(self._terms.values())

    def normalize(self) -> None:
        """Scale all weights so that they sum to 1.0."""
        total = self.total_weight()
        for item in self._terms:
            self._terms[item] /= total

    def weight(self, item: T) -> float:
        return self._terms.get(item, 0.0)

    def items(self) -> Iterator[tuple[T, float]]:
        return iter(self._terms.items())

    def sorted_items(self) -> list[tuple[T, float]]:
        """Items ordered by ascending weight (the order reports use)."""
        return sorted(self._terms.items(), key=lambda term: term[1])

    def isclose(self, other: WeightedSet[T], abs_tol: float = 1e-9) -> bool:
        """True if both sets hold the same items with weights within ``abs_tol``."""
        if self._terms.keys() != other._terms.keys():
            return False
        return all(
            math.isclose(weight, other._terms[item], rel_tol=0.0, abs_tol=abs_tol)
            for item, weight in self._terms.items()
        )

    def copy(self) -> WeightedSet[T]:
        return WeightedSet(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, item: object) -> bool:
        return item in self._terms

    def __iter__(self) -> Iterator[T]:
        return iter(self._terms)

    def __repr__(self) -> str:
        body = " ".join(f"{weight:.3g}:{item}" for item, weight in self._terms.items())
        return f"[{body}]"
