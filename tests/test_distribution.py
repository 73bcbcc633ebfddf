"""Tests for score curves and allocation methods."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import math

import pytest

from models.pool import BonusPool
from models.rule import AllocationRule, TierConfig
from models.employee import EligibleEmployee
from engine.coefficients import compute_all_coefficients
from engine.distribution import (
    compute_available_amount,
    step_multiplier,
    step_percentiles,
    compute_distribution_ratios,
    normalize_tier_ratios,
    assign_employees_to_tiers,
    distribute,
)
from engine.errors import InsufficientBudgetError, NoValidScoresError, InvalidRuleError


def make_employees(scores):
    return [EligibleEmployee(employee_id=f"E{i + 1}", final_score=s) for i, s in enumerate(scores)]


def make_rule(**kwargs):
    return AllocationRule(id="R1", **kwargs)


def run_distribution(scores, rule, available=90000.0, warnings=None):
    employees = make_employees(scores)
    coefficients = compute_all_coefficients(employees, rule)
    return distribute(employees, coefficients, rule, available, warnings)


TIERS = [
    TierConfig("A", 0.5, 0.8),
    TierConfig("B", 0.3, 0.5),
    TierConfig("C", 0.2, 0.0),
]


class TestAvailableAmount:
    def test_reserve_is_withheld(self):
        pool = BonusPool(id="P1", period="2024", total_amount=100000, reserve_ratio=0.1)
        assert compute_available_amount(pool) == pytest.approx(90000)

    def test_zero_pool_raises(self):
        with pytest.raises(InsufficientBudgetError):
            compute_available_amount(BonusPool(id="P1", period="2024", total_amount=0))

    def test_full_reserve_raises(self):
        with pytest.raises(InsufficientBudgetError):
            compute_available_amount(BonusPool(id="P1", period="2024", total_amount=1000, reserve_ratio=1.0))


class TestScoreCurves:
    def test_linear(self):
        ratios = compute_distribution_ratios(make_employees([0.9, 0.6, 0.3]), make_rule())
        assert [r for r, _ in ratios] == pytest.approx([0.5, 1 / 3, 1 / 6])

    def test_exponential(self):
        rule = make_rule(score_distribution_method="exponential", exponential_factor=2.0)
        ratios = compute_distribution_ratios(make_employees([0.9, 0.6, 0.3]), rule)
        total = 0.81 + 0.36 + 0.09
        assert [r for r, _ in ratios] == pytest.approx([0.81 / total, 0.36 / total, 0.09 / total])

    def test_logarithmic(self):
        rule = make_rule(score_distribution_method="logarithmic")
        scores = [0.9, 0.6, 0.3]
        ratios = compute_distribution_ratios(make_employees(scores), rule)
        weights = [math.log(s + 1) for s in scores]
        assert [r for r, _ in ratios] == pytest.approx([w / sum(weights) for w in weights])

    @pytest.mark.parametrize("method", ["linear", "exponential", "logarithmic"])
    def test_continuous_curves_sum_to_one(self, method):
        rule = make_rule(score_distribution_method=method)
        ratios = compute_distribution_ratios(make_employees([0.95, 0.7, 0.4, 0.1]), rule)
        assert sum(r for r, _ in ratios) == pytest.approx(1.0)

    def test_exponential_overflow_raises(self):
        rule = make_rule(score_distribution_method="exponential", exponential_factor=1000.0)
        with pytest.raises(NoValidScoresError):
            compute_distribution_ratios(make_employees([1e6, 2e6]), rule)

    def test_step_multipliers(self):
        assert step_multiplier(0.95) == (2.0, "top_10")
        assert step_multiplier(0.9) == (2.0, "top_10")
        assert step_multiplier(0.75) == (1.5, "top_30")
        assert step_multiplier(0.5) == (1.0, "top_60")
        assert step_multiplier(0.2) == (0.8, "top_80")
        assert step_multiplier(0.1) == (0.6, "bottom_20")

    def test_step_percentiles_from_score_order(self):
        assert step_percentiles(make_employees([0.9, 0.6, 0.3])) == pytest.approx([1.0, 2 / 3, 1 / 3])

    def test_step_percentiles_prefer_upstream_rank(self):
        employees = [
            EligibleEmployee("E1", 0.9, percentile_rank=55.0),
            EligibleEmployee("E2", 0.6, score_rank=1),
        ]
        assert step_percentiles(employees) == pytest.approx([0.55, 1.0])

    def test_step_not_normalized_by_default(self):
        rule = make_rule(score_distribution_method="step")
        ratios = compute_distribution_ratios(make_employees([0.9, 0.6, 0.3]), rule)
        # percentiles 1.0, 0.667, 0.333 -> multipliers 2.0, 1.0, 0.8
        assert [r for r, _ in ratios] == pytest.approx([0.5 * 2.0, (1 / 3) * 1.0, (1 / 6) * 0.8])
        assert [label for _, label in ratios] == ["top_10", "top_60", "top_80"]

    def test_step_normalized_when_requested(self):
        rule = make_rule(score_distribution_method="step", normalize_step_ratios=True)
        ratios = compute_distribution_ratios(make_employees([0.9, 0.6, 0.3]), rule)
        assert sum(r for r, _ in ratios) == pytest.approx(1.0)


class TestScoreBased:
    def test_base_and_performance_split(self):
        results = run_distribution([0.9, 0.6, 0.3], make_rule())
        assert [r.base_amount for r in results] == pytest.approx([27000, 18000, 9000])
        assert [r.performance_amount for r in results] == pytest.approx([18000, 12000, 6000])
        assert [r.total_amount for r in results] == pytest.approx([45000, 30000, 15000])

    def test_coefficients_scale_amounts(self):
        rule = make_rule(department_weights={"D1": 2.0})
        employees = [
            EligibleEmployee("E1", 0.5, department_id="D1"),
            EligibleEmployee("E2", 0.5, department_id="D2"),
        ]
        coefficients = compute_all_coefficients(employees, rule)
        results = distribute(employees, coefficients, rule, 1000.0)
        assert results[0].total_amount == pytest.approx(1000.0)
        assert results[1].total_amount == pytest.approx(500.0)

    def test_non_positive_available_raises(self):
        with pytest.raises(InsufficientBudgetError):
            run_distribution([0.5], make_rule(), available=0)


class TestTierBased:
    def test_normalize_tier_ratios(self):
        warnings = []
        tiers = normalize_tier_ratios([TierConfig("A", 0.6, 0.5), TierConfig("B", 0.6, 0.0)], warnings)
        assert [t.ratio for t in tiers] == pytest.approx([0.5, 0.5])
        assert warnings

    def test_ratios_within_tolerance_untouched(self):
        warnings = []
        tiers = normalize_tier_ratios([TierConfig("A", 0.505, 0.5), TierConfig("B", 0.5, 0.0)], warnings)
        assert tiers[0].ratio == 0.505
        assert not warnings

    def test_assignment_uses_highest_reachable_tier(self):
        assignments = assign_employees_to_tiers(make_employees([0.95, 0.6, 0.2]), TIERS)
        assert [e.employee_id for e in assignments["A"]] == ["E1"]
        assert [e.employee_id for e in assignments["B"]] == ["E2"]
        assert [e.employee_id for e in assignments["C"]] == ["E3"]

    def test_below_every_minimum_falls_into_lowest_tier(self):
        tiers = [TierConfig("A", 0.6, 0.8), TierConfig("B", 0.4, 0.5)]
        assignments = assign_employees_to_tiers(make_employees([0.3]), tiers)
        assert [e.employee_id for e in assignments["B"]] == ["E1"]

    def test_tier_budget_shared_equally(self):
        rule = make_rule(allocation_method="tier_based", tier_config=TIERS)
        results = run_distribution([0.95, 0.85, 0.6], rule, available=10000.0)
        assert [r.tier_level for r in results] == ["A", "A", "B"]
        assert [r.total_amount for r in results] == pytest.approx([2500, 2500, 3000])

    def test_missing_tiers_raise(self):
        rule = make_rule(allocation_method="tier_based")
        with pytest.raises(InvalidRuleError):
            run_distribution([0.5], rule)


class TestOtherMethods:
    def test_pool_percentage_is_equal_share(self):
        rule = make_rule(allocation_method="pool_percentage")
        results = run_distribution([0.9, 0.2], rule, available=1000.0)
        assert [r.total_amount for r in results] == pytest.approx([500, 500])

    def test_fixed_amount(self):
        rule = make_rule(allocation_method="fixed_amount", fixed_amount=2000.0)
        results = run_distribution([0.9, 0.2], rule, available=100000.0)
        assert [r.total_amount for r in results] == pytest.approx([2000, 2000])
        assert results[0].base_amount == pytest.approx(1200)
        assert results[0].distribution_ratio == pytest.approx(0.02)

    def test_hybrid_blends_methods(self):
        tiers = [TierConfig("A", 0.6, 0.5), TierConfig("B", 0.4, 0.0)]
        rule = make_rule(allocation_method="hybrid", tier_config=tiers)
        results = run_distribution([0.75, 0.25], rule, available=1000.0)
        # score-based 750/250, tier-based 600/400, pool-percentage 500/500
        assert results[0].total_amount == pytest.approx(0.5 * 750 + 0.3 * 600 + 0.2 * 500)
        assert results[1].total_amount == pytest.approx(0.5 * 250 + 0.3 * 400 + 0.2 * 500)
        assert results[0].tier_level == "A"
