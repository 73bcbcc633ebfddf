"""Tests for budget rescaling and bound enforcement."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.rule import AllocationRule
from models.allocation import AllocationResult
from engine.constraints import (
    compute_distributable_amount,
    rescale_to_budget,
    compute_bounds,
    enforce_bounds,
    redistribute_surplus,
    enforce_constraints,
)


def make_result(eid="E1", amount=100.0, score=0.5):
    return AllocationResult(
        employee_id=eid,
        original_score=score,
        final_score=score,
        base_amount=round(amount * 0.6, 2),
        performance_amount=round(amount * 0.4, 2),
    )


def make_rule(**kwargs):
    return AllocationRule(id="R1", **kwargs)


class TestRescale:
    def test_within_budget_untouched(self):
        results = [make_result("E1", 400), make_result("E2", 500)]
        assert rescale_to_budget(results, 1000) == 1.0
        assert [r.total_amount for r in results] == [400, 500]

    def test_over_budget_scaled_down(self):
        results = [make_result("E1", 1200), make_result("E2", 800)]
        factor = rescale_to_budget(results, 1000)
        assert factor == pytest.approx(0.5)
        assert [r.total_amount for r in results] == pytest.approx([600, 400])
        assert sum(r.total_amount for r in results) <= 1000

    def test_rescale_keeps_parts_and_records_adjustment(self):
        results = [make_result("E1", 1200), make_result("E2", 800)]
        rescale_to_budget(results, 1000)
        assert results[0].base_amount == pytest.approx(720)
        assert results[0].performance_amount == pytest.approx(480)
        assert results[0].adjustment_amount == pytest.approx(-600)
        for r in results:
            assert r.total_amount == pytest.approx(r.base_amount + r.performance_amount + r.adjustment_amount)

    def test_rounding_never_exceeds_cap(self):
        results = [make_result(f"E{i}", 333.37) for i in range(3)]
        rescale_to_budget(results, 1000)
        assert sum(r.total_amount for r in results) <= 1000


class TestBounds:
    def test_distributable_amount_applies_limit(self):
        assert compute_distributable_amount(1000, make_rule(total_allocation_limit=0.8)) == pytest.approx(800)

    def test_unconfigured_bounds_are_none(self):
        assert compute_bounds(make_rule(), 100) == (None, None)

    def test_ratio_bounds_use_average(self):
        rule = make_rule(min_bonus_ratio=0.5, max_bonus_ratio=1.2)
        assert compute_bounds(rule, 30000) == (15000, 36000)

    def test_tightest_bound_wins(self):
        rule = make_rule(min_bonus_amount=200, min_bonus_ratio=0.5, max_bonus_amount=900, max_bonus_ratio=2.0)
        assert compute_bounds(rule, 1000) == (500, 900)

    def test_floor_and_ceiling_applied(self):
        results = [make_result("E1", 50), make_result("E2", 500), make_result("E3", 2000)]
        enforce_bounds(results, 100, 1000)
        assert [r.total_amount for r in results] == pytest.approx([100, 500, 1000])
        assert [r.min_amount_applied for r in results] == [True, False, False]
        assert [r.max_amount_applied for r in results] == [False, False, True]
        assert [r.original_calculated_amount for r in results] == pytest.approx([50, 500, 2000])

    def test_floor_wins_when_bounds_conflict(self):
        results = [make_result("E1", 50)]
        enforce_bounds(results, 300, 200)
        assert results[0].total_amount == pytest.approx(300)
        assert results[0].min_amount_applied
        assert not results[0].max_amount_applied


class TestRedistribute:
    def test_surplus_goes_to_unclamped(self):
        results = [make_result("E1", 2000), make_result("E2", 500), make_result("E3", 500)]
        enforce_bounds(results, None, 1000)
        redistribute_surplus(results, 3000, None, 1000)
        assert results[0].total_amount == pytest.approx(1000)
        assert sum(r.total_amount for r in results) == pytest.approx(3000, abs=0.05)

    def test_ceiling_respected_while_redistributing(self):
        results = [make_result("E1", 2000), make_result("E2", 900), make_result("E3", 100)]
        enforce_bounds(results, None, 1000)
        redistribute_surplus(results, 3000, None, 1000)
        assert all(r.total_amount <= 1000 + 0.01 for r in results)

    def test_deficit_taken_from_unclamped(self):
        results = [make_result("E1", 10), make_result("E2", 495), make_result("E3", 495)]
        enforce_bounds(results, 200, None)
        redistribute_surplus(results, 1000, 200, None)
        assert results[0].total_amount == pytest.approx(200)
        assert sum(r.total_amount for r in results) == pytest.approx(1000, abs=0.05)


class TestEnforceConstraints:
    def test_preserve_keeps_drift(self):
        rule = make_rule(max_bonus_ratio=1.2)
        results = [make_result("E1", 45000), make_result("E2", 30000), make_result("E3", 15000)]
        enforce_constraints(results, rule, 90000)
        assert [r.total_amount for r in results] == pytest.approx([36000, 30000, 15000])
        assert results[0].adjustment_amount == pytest.approx(-9000)
        assert results[0].original_calculated_amount == pytest.approx(45000)

    def test_redistribute_uses_whole_budget(self):
        rule = make_rule(max_bonus_ratio=1.2, bound_strategy="redistribute")
        results = [make_result("E1", 45000), make_result("E2", 30000), make_result("E3", 15000)]
        enforce_constraints(results, rule, 90000)
        assert results[0].total_amount == pytest.approx(36000)
        assert sum(r.total_amount for r in results) == pytest.approx(90000, abs=0.05)
        assert all(r.total_amount <= 36000 + 0.01 for r in results)

    def test_limit_caps_distribution(self):
        rule = make_rule(total_allocation_limit=0.5)
        results = [make_result("E1", 600), make_result("E2", 400)]
        enforce_constraints(results, rule, 1000)
        assert sum(r.total_amount for r in results) <= 500

    def test_empty_results(self):
        assert enforce_constraints([], make_rule(), 1000) == []
