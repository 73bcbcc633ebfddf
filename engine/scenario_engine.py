"""Scenario simulation engine: apply overrides to a base pool/rule, rerun, compare."""

import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from models.pool import BonusPool
from models.rule import AllocationRule
from models.employee import EligibleEmployee
from models.scenario import AllocationScenario
from engine.allocation_engine import simulate_allocation
from engine.errors import BonusAllocationError
from config.defaults import (
    AMOUNT_DECIMALS, FAIRNESS_DECIMALS, SENSITIVITY_PARAMETERS,
    DEFAULT_SENSITIVITY_CHANGES, SENSITIVITY_HIGH_RISK, SENSITIVITY_MEDIUM_RISK,
)

logger = logging.getLogger(__name__)

POOL_PARAMETERS = ("total_amount", "reserve_ratio")


@dataclass
class SensitivityResult:
    parameter: str
    base_value: float
    rows: List[dict] = field(default_factory=list)
    coefficient: float = 0.0
    recommended_range: str = "±20%"
    risk_level: str = "Low"


def _check_overrides(target, overrides: Dict, label: str):
    known = {f.name for f in fields(target)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown {label} override(s): {', '.join(unknown)}")


def apply_scenario(
    pool: BonusPool,
    rule: AllocationRule,
    scenario: AllocationScenario,
) -> Tuple[BonusPool, AllocationRule]:
    """Return modified copies of the pool and rule; the inputs are untouched."""
    _check_overrides(pool, scenario.pool_overrides, "pool")
    _check_overrides(rule, scenario.rule_overrides, "rule")
    return replace(pool, **scenario.pool_overrides), replace(rule, **scenario.rule_overrides)


def run_scenario(
    scenario: AllocationScenario,
    base_pool: BonusPool,
    base_rule: AllocationRule,
    employees: Sequence[EligibleEmployee],
    max_workers: Optional[int] = None,
) -> AllocationScenario:
    """Run a scenario simulation and store the run on the scenario."""
    pool, rule = apply_scenario(base_pool, base_rule, scenario)
    scenario.run = simulate_allocation(pool, rule, employees, max_workers)
    scenario.last_run_at = datetime.now()
    logger.info("Scenario '%s' allocated %.2f", scenario.name, scenario.run.allocated_amount)
    return scenario


def compare_scenarios(
    scenario_a: AllocationScenario,
    scenario_b: AllocationScenario,
) -> List[dict]:
    """Compare two simulated scenarios and return per-employee differences."""
    a_map = {r.employee_id: r for r in scenario_a.run.results} if scenario_a.run else {}
    b_map = {r.employee_id: r for r in scenario_b.run.results} if scenario_b.run else {}

    diffs = []
    for employee_id in sorted(set(a_map) | set(b_map)):
        a = a_map.get(employee_id)
        b = b_map.get(employee_id)
        a_total = a.total_amount if a else 0.0
        b_total = b.total_amount if b else 0.0
        diffs.append({
            "Employee": employee_id,
            "Department": (a or b).department_id or "",
            f"{scenario_a.name} Tier": a.tier_level if a else "N/A",
            f"{scenario_b.name} Tier": b.tier_level if b else "N/A",
            f"{scenario_a.name} Bonus": a_total,
            f"{scenario_b.name} Bonus": b_total,
            "Change": round(b_total - a_total, AMOUNT_DECIMALS),
            "Change %": round((b_total - a_total) / a_total, FAIRNESS_DECIMALS) if a_total > 0 else None,
        })
    return diffs


def summarize_comparison(
    scenario_a: AllocationScenario,
    scenario_b: AllocationScenario,
) -> Dict[str, float]:
    """Headline deltas (b minus a) between two simulated scenarios."""
    def headline(s: AllocationScenario) -> Dict[str, float]:
        if s.run is None:
            return {"total_allocated": 0.0, "employees": 0, "gini": 0.0, "mean": 0.0}
        summary = s.run.summary
        return {
            "total_allocated": summary.total_allocated,
            "employees": summary.total_employees,
            "gini": summary.fairness.gini_coefficient,
            "mean": summary.statistics.mean,
        }

    a, b = headline(scenario_a), headline(scenario_b)
    return {
        "total_allocated_change": round(b["total_allocated"] - a["total_allocated"], AMOUNT_DECIMALS),
        "employee_count_change": b["employees"] - a["employees"],
        "gini_change": round(b["gini"] - a["gini"], FAIRNESS_DECIMALS),
        "mean_change": round(b["mean"] - a["mean"], AMOUNT_DECIMALS),
    }


def _risk_level(coefficient: float) -> Tuple[str, str]:
    if coefficient > SENSITIVITY_HIGH_RISK:
        return "High", "±10%"
    if coefficient > SENSITIVITY_MEDIUM_RISK:
        return "Medium", "±15%"
    return "Low", "±20%"


def run_sensitivity(
    pool: BonusPool,
    rule: AllocationRule,
    employees: Sequence[EligibleEmployee],
    parameter: str,
    changes: Optional[List[float]] = None,
    max_workers: Optional[int] = None,
) -> SensitivityResult:
    """
    Vary one numeric parameter by relative changes and rerun per point.

    Impact is each point's total allocated over the unchanged run's total.
    Points whose configuration is rejected by the engine are reported with
    their error and left out of the coefficient.
    """
    if parameter not in SENSITIVITY_PARAMETERS:
        raise ValueError(f"Unsupported sensitivity parameter '{parameter}'")
    changes = list(DEFAULT_SENSITIVITY_CHANGES if changes is None else changes)
    employees = list(employees)

    target = pool if parameter in POOL_PARAMETERS else rule
    base_value = getattr(target, parameter)
    if base_value is None:
        raise ValueError(f"Parameter '{parameter}' is not configured on the base rule")

    baseline = simulate_allocation(pool, rule, employees, max_workers)
    baseline_total = baseline.summary.total_allocated

    rows = []
    for change in changes:
        value = base_value * (1 + change)
        if parameter in POOL_PARAMETERS:
            point_pool, point_rule = replace(pool, **{parameter: value}), rule
        else:
            point_pool, point_rule = pool, replace(rule, **{parameter: value})

        row = {"change": change, "value": round(value, FAIRNESS_DECIMALS)}
        try:
            run = simulate_allocation(point_pool, point_rule, employees, max_workers)
        except BonusAllocationError as e:
            logger.warning("Sensitivity point %s=%s rejected: %s", parameter, value, e)
            row.update({"total_allocated": None, "gini": None, "impact": None, "error": str(e)})
            rows.append(row)
            continue

        total = run.summary.total_allocated
        row.update({
            "total_allocated": total,
            "gini": run.summary.fairness.gini_coefficient,
            "impact": round(total / baseline_total, FAIRNESS_DECIMALS) if baseline_total > 0 else None,
            "error": "",
        })
        rows.append(row)

    span = max((abs(c) for c in changes), default=0.0)
    impacts = [abs(r["impact"] - 1) for r in rows if r["impact"] is not None]
    coefficient = round(max(impacts) / span, FAIRNESS_DECIMALS) if impacts and span > 0 else 0.0
    risk, recommended = _risk_level(coefficient)

    return SensitivityResult(
        parameter=parameter,
        base_value=base_value,
        rows=rows,
        coefficient=coefficient,
        recommended_range=recommended,
        risk_level=risk,
    )
