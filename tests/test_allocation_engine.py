"""Tests for the allocation engine."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.pool import BonusPool
from models.rule import AllocationRule, SpecialRules, TierConfig
from models.employee import EligibleEmployee
from engine.allocation_engine import (
    build_context,
    run_allocation,
    simulate_allocation,
    apply_run_to_pool,
)
from engine.errors import (
    EmptyEligibleSetError,
    InsufficientBudgetError,
    InvalidRuleError,
)


def make_pool(total=100000.0, reserve=0.1, period="2024-Q4"):
    return BonusPool(id="P1", period=period, total_amount=total, reserve_ratio=reserve)


def make_rule(**kwargs):
    return AllocationRule(id="R1", **kwargs)


def make_employee(eid, score, dept="D1", level="mid", months=24, perf=None):
    return EligibleEmployee(
        employee_id=eid,
        final_score=score,
        department_id=dept,
        position_level=level,
        work_months=months,
        performance_score=perf,
    )


def three_employees():
    return [make_employee("E1", 0.9), make_employee("E2", 0.6), make_employee("E3", 0.3)]


def population(n=30):
    levels = ["junior", "mid", "senior"]
    return [
        make_employee(
            f"E{i:03d}",
            round(0.2 + (i * 37 % 80) / 100, 2),
            dept=f"D{i % 4}",
            level=levels[i % 3],
            months=6 + i * 2,
            perf=(i * 13 % 100) / 100,
        )
        for i in range(n)
    ]


class TestRunAllocation:
    def test_linear_three_employees(self):
        run = run_allocation(make_pool(), make_rule(), three_employees())

        assert [r.employee_id for r in run.results] == ["E1", "E2", "E3"]
        assert [r.distribution_ratio for r in run.results] == pytest.approx([0.5, 1 / 3, 1 / 6])
        assert [r.total_amount for r in run.results] == pytest.approx([45000, 30000, 15000], abs=0.01)
        assert run.summary.total_allocated == pytest.approx(90000, abs=0.05)
        for r in run.results:
            assert r.applied_coefficients.final == 1.0

    def test_ceiling_drift_is_visible(self):
        rule = make_rule(max_bonus_ratio=1.2)
        run = run_allocation(make_pool(), rule, three_employees())
        top = run.results[0]

        assert top.total_amount == pytest.approx(36000)
        assert top.adjustment_amount == pytest.approx(-9000)
        assert top.max_amount_applied
        assert [r.total_amount for r in run.results[1:]] == pytest.approx([30000, 15000])
        assert run.summary.total_allocated == pytest.approx(81000)
        assert run.summary.allocation_ratio == pytest.approx(0.9)
        assert run.summary.quality.max_amount_applied_count == 1

    def test_single_employee_gets_whole_budget(self):
        run = run_allocation(make_pool(), make_rule(), [make_employee("E1", 0.4)])
        assert len(run.results) == 1
        assert run.results[0].distribution_ratio == pytest.approx(1.0)
        assert run.results[0].total_amount == pytest.approx(90000)

    def test_budget_never_exceeded_without_floors(self):
        rule = make_rule(
            score_distribution_method="exponential",
            position_level_weights={"junior": 0.9, "mid": 1.0, "senior": 1.5},
            department_weights={"D0": 1.3, "D1": 1.1},
            special_rules=SpecialRules(True, True, True),
            max_bonus_ratio=1.5,
        )
        run = run_allocation(make_pool(), rule, population())
        assert sum(r.total_amount for r in run.results) <= 90000 + 0.01

    def test_total_identity_holds(self):
        rule = make_rule(min_bonus_ratio=0.5, max_bonus_ratio=1.5, position_level_weights={"senior": 2.0})
        run = run_allocation(make_pool(), rule, population())
        for r in run.results:
            assert r.total_amount == pytest.approx(r.base_amount + r.performance_amount + r.adjustment_amount, abs=0.01)
            assert r.base_amount >= 0
            assert r.performance_amount >= 0
            assert r.total_amount >= 0
        assert run.summary.validation.is_valid

    def test_coefficients_have_lower_bound(self):
        rule = make_rule(position_level_weights={"junior": 0.01, "mid": 0.01, "senior": 0.01})
        run = run_allocation(make_pool(), rule, population())
        assert all(r.applied_coefficients.final >= 0.1 for r in run.results)

    def test_higher_score_never_gets_less(self):
        employees = [make_employee(f"E{i}", s) for i, s in enumerate([0.95, 0.8, 0.8, 0.5, 0.2])]
        for method in ["linear", "exponential", "logarithmic", "step"]:
            run = run_allocation(make_pool(), make_rule(score_distribution_method=method), employees)
            totals = [r.total_amount for r in run.results]
            assert totals == sorted(totals, reverse=True), method

    def test_idempotent(self):
        rule = make_rule(score_distribution_method="step", min_bonus_ratio=0.3, max_bonus_ratio=1.8)
        first = run_allocation(make_pool(), rule, population())
        second = run_allocation(make_pool(), rule, population())
        assert [(r.employee_id, r.total_amount) for r in first.results] == \
            [(r.employee_id, r.total_amount) for r in second.results]
        assert first.summary == second.summary

    def test_equal_scores_equal_amounts(self):
        employees = [make_employee(f"E{i}", 0.7) for i in range(5)]
        run = run_allocation(make_pool(), make_rule(), employees)
        assert len({r.total_amount for r in run.results}) == 1
        assert run.summary.fairness.gini_coefficient == pytest.approx(0.0)

    def test_parallel_coefficients_match(self):
        rule = make_rule(position_level_weights={"senior": 1.4})
        sequential = run_allocation(make_pool(), rule, population(40))
        parallel = run_allocation(make_pool(), rule, population(40), max_workers=4)
        assert [r.total_amount for r in sequential.results] == [r.total_amount for r in parallel.results]

    def test_explanations_attached(self):
        run = run_allocation(make_pool(), make_rule(max_bonus_ratio=1.2), three_employees())
        steps = run.results[0].explanation_steps
        assert steps[0].startswith("Step 1")
        assert any("Capped" in s for s in steps)
        assert steps[-1].startswith("Final")

    def test_invalid_coefficients_reported_as_warnings(self):
        rule = make_rule(department_weights={"D1": -1})
        run = run_allocation(make_pool(), rule, three_employees())
        assert len(run.warnings) == 3
        assert all(r.applied_coefficients.department == 1.0 for r in run.results)

    def test_tier_based_run(self):
        tiers = [TierConfig("A", 0.5, 0.8), TierConfig("B", 0.5, 0.0)]
        run = run_allocation(make_pool(), make_rule(allocation_method="tier_based", tier_config=tiers),
                             three_employees())
        assert [r.tier_level for r in run.results] == ["A", "B", "B"]
        assert set(run.summary.by_tier) == {"A", "B"}


class TestFatalErrors:
    def test_zero_pool(self):
        with pytest.raises(InsufficientBudgetError):
            run_allocation(make_pool(total=0), make_rule(), three_employees())

    def test_no_eligible_employees(self):
        employees = [make_employee("E1", 0), make_employee("E2", None)]
        with pytest.raises(EmptyEligibleSetError):
            run_allocation(make_pool(), make_rule(), employees)

    def test_invalid_rule(self):
        with pytest.raises(InvalidRuleError) as exc:
            run_allocation(make_pool(), make_rule(allocation_method="lottery"), three_employees())
        assert any("lottery" in e for e in exc.value.errors)

    def test_tier_method_without_tiers(self):
        with pytest.raises(InvalidRuleError):
            build_context(make_pool(), make_rule(allocation_method="hybrid"))


class TestSimulationAndPool:
    def test_simulation_flag(self):
        run = simulate_allocation(make_pool(), make_rule(), three_employees())
        assert run.is_simulation

    def test_run_does_not_touch_pool(self):
        pool = make_pool()
        run_allocation(pool, make_rule(), three_employees())
        assert pool.allocated_amount == 0.0
        assert pool.status == "active"

    def test_apply_run_to_pool(self):
        pool = make_pool()
        run = run_allocation(pool, make_rule(), three_employees())
        updated = apply_run_to_pool(pool, run)
        assert updated.status == "allocated"
        assert updated.allocated_count == 3
        assert updated.allocated_amount == pytest.approx(90000, abs=0.05)
        assert pool.status == "active"

    def test_context_budget_figures(self):
        ctx = build_context(make_pool(), make_rule(total_allocation_limit=0.8))
        assert ctx.available_amount == pytest.approx(90000)
        assert ctx.distributable_amount == pytest.approx(72000)
