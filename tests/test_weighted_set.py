"""Tests for pyl_solver/engine/weighted_set.py."""

from __future__ import annotations

import math

import pytest

from pyl_solver.engine.weighted_set import WeightedSet


class TestAdd:
    def test_accumulates_on_same_item(self) -> None:
        ws: WeightedSet[str] = WeightedSet()
        ws.add(0.25, "a")
        ws.add(0.5, "a")
        assert ws.weight("a") == 0.75
        assert len(ws) == 1

    def test_missing_item_weighs_zero(self) -> None:
        assert WeightedSet().weight("x") == 0.0

    def test_single(self) -> None:
        ws = WeightedSet.single("x")
        assert ws.weight("x") == 1.0
        assert "x" in ws


class TestNormalize:
    def test_weights_sum_to_one(self) -> None:
        ws = WeightedSet({"a": 1.0, "b": 3.0})
        ws.normalize()
        assert math.isclose(ws.total_weight(), 1.0)
        assert math.isclose(ws.weight("b"), 0.75)

    def test_preserves_ratios(self) -> None:
        ws = WeightedSet({"a": 2.0, "b": 4.0, "c": 6.0})
        ws.normalize()
        assert math.isclose(ws.weight("c") / ws.weight("a"), 3.0)


class TestSpread:
    def test_moves_half_to_each_neighbour(self) -> None:
        ws = WeightedSet({"mid": 0.4, "lo": 0.1})
        ws.spread("mid", "lo", "hi")
        assert "mid" not in ws
        assert math.isclose(ws.weight("lo"), 0.3)
        assert math.isclose(ws.weight("hi"), 0.2)

    def test_total_unchanged(self) -> None:
        ws = WeightedSet({"mid": 0.4, "lo": 0.6})
        ws.spread("mid", "lo", "hi")
        assert math.isclose(ws.total_weight(), 1.0)

    def test_missing_value_raises(self) -> None:
        with pytest.raises(KeyError):
            WeightedSet({"a": 1.0}).spread("b", "a", "c")


class TestAccess:
    def test_sorted_items_ascending(self) -> None:
        ws = WeightedSet({"a": 0.5, "b": 0.2, "c": 0.3})
        assert [item for item, _ in ws.sorted_items()] == ["b", "c", "a"]

    def test_isclose(self) -> None:
        a = WeightedSet({"x": 0.1 + 0.2})
        b = WeightedSet({"x": 0.3})
        assert a.isclose(b)
        assert not a.isclose(WeightedSet({"y": 0.3}))

    def test_copy_is_independent(self) -> None:
        a = WeightedSet({"x": 1.0})
        b = a.copy()
        b.add(1.0, "x")
        assert a.weight("x") == 1.0
