"""PuLP LP-based bound-aware rebalancing of a bonus distribution."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pulp

from models.allocation import AllocationResult
from config.defaults import AMOUNT_DECIMALS, AMOUNT_TOLERANCE

logger = logging.getLogger(__name__)

SHORTFALL_WEIGHT = 100.0   # use the budget before anything else
FAIRNESS_WEIGHT = 1.0      # then keep the worst relative deviation small
DEVIATION_WEIGHT = 0.001   # tiebreaker on total relative deviation
SNAP_TOLERANCE = 1e-4


@dataclass
class OptimizationResult:
    status: str  # "Optimal", "Infeasible", "Not Solved"
    objective_value: float
    amounts: Dict[str, float]       # employee_id -> optimized total
    before_after: List[dict]
    relaxed_floors: bool = False
    message: str = ""


def optimize_allocation(
    results: List[AllocationResult],
    cap: float,
    floor: Optional[float] = None,
    ceiling: Optional[float] = None,
) -> OptimizationResult:
    """
    Choose per-employee totals that respect floor/ceiling and the budget cap.

    Targets are the pre-bound amounts scaled to the cap, so the optimum
    hands out the whole budget where bounds allow and spreads the changes as
    evenly as possible in relative terms. When the floors alone exceed the
    budget they are relaxed and the problem is solved again.
    """
    ids = [r.employee_id for r in results]
    calculated = {
        r.employee_id: r.original_calculated_amount if r.original_calculated_amount is not None else r.total_amount
        for r in results
    }
    calc_total = sum(calculated.values())
    scale = cap / calc_total if calc_total > 0 else 0.0
    target = {eid: calculated[eid] * scale for eid in ids}

    prob = pulp.LpProblem("BonusRebalance", pulp.LpMinimize)

    x = {}
    for i, eid in enumerate(ids):
        x[eid] = pulp.LpVariable(
            f"x_{i}",
            lowBound=floor if floor is not None else 0,
            upBound=ceiling,
        )

    # Deviation split into positive and negative parts
    dev_pos = {eid: pulp.LpVariable(f"dp_{i}", lowBound=0) for i, eid in enumerate(ids)}
    dev_neg = {eid: pulp.LpVariable(f"dn_{i}", lowBound=0) for i, eid in enumerate(ids)}
    for i, eid in enumerate(ids):
        prob += x[eid] - target[eid] == dev_pos[eid] - dev_neg[eid], f"dev_{i}"

    worst = pulp.LpVariable("worst_relative_deviation", lowBound=0)
    relative = {}
    for i, eid in enumerate(ids):
        if target[eid] > 0:
            relative[eid] = (dev_pos[eid] + dev_neg[eid]) * (1.0 / target[eid])
            prob += worst >= relative[eid], f"worst_{i}"

    shortfall = pulp.LpVariable("shortfall", lowBound=0)
    prob += shortfall >= cap - pulp.lpSum(x.values()), "shortfall"

    prob += (
        SHORTFALL_WEIGHT * shortfall
        + FAIRNESS_WEIGHT * worst
        + DEVIATION_WEIGHT * pulp.lpSum(relative.values())
    ), "combined_objective"

    # C1: Budget cap
    prob += pulp.lpSum(x.values()) <= cap, "budget"

    prob.solve(pulp.PULP_CBC_CMD(msg=0, timeLimit=30))
    status = pulp.LpStatus[prob.status]
    relaxed = False

    if status != "Optimal" and floor is not None:
        logger.warning("Floors of %.2f exceed the budget of %.2f; relaxing them", floor, cap)
        for var in x.values():
            var.lowBound = 0
        prob.solve(pulp.PULP_CBC_CMD(msg=0, timeLimit=30))
        status = pulp.LpStatus[prob.status]
        relaxed = True

    if status != "Optimal":
        return OptimizationResult(
            status=status,
            objective_value=0,
            amounts={},
            before_after=[],
            relaxed_floors=relaxed,
            message=f"Optimization could not find a solution. Status: {status}",
        )

    amounts = {}
    for eid in ids:
        value = max(0.0, x[eid].varValue or 0.0)
        # solver noise around an active bound
        if ceiling is not None and abs(value - ceiling) < SNAP_TOLERANCE:
            value = ceiling
        elif floor is not None and not relaxed and abs(value - floor) < SNAP_TOLERANCE:
            value = floor
        amounts[eid] = int(value * 100 + 1e-6) / 100

    before_after = []
    for r in results:
        before = r.total_amount
        after = amounts[r.employee_id]
        before_after.append({
            "Employee": r.employee_id,
            "Calculated": round(calculated[r.employee_id], AMOUNT_DECIMALS),
            "Bounded": before,
            "Optimized": after,
            "Change": round(after - before, AMOUNT_DECIMALS),
        })

    msg = f"Optimization complete. Total allocated: {sum(amounts.values()):,.2f} of {cap:,.2f}."
    if relaxed:
        msg += " Note: minimum bonus floors were relaxed because they exceed the budget."

    return OptimizationResult(
        status=status,
        objective_value=pulp.value(prob.objective) or 0,
        amounts=amounts,
        before_after=before_after,
        relaxed_floors=relaxed,
        message=msg,
    )


def apply_optimization(
    results: List[AllocationResult],
    optimization: OptimizationResult,
    floor: Optional[float] = None,
    ceiling: Optional[float] = None,
) -> List[AllocationResult]:
    """Fold optimized totals back into each result's adjustment amount."""
    if not optimization.amounts:
        return results

    for r in results:
        new_total = optimization.amounts.get(r.employee_id)
        if new_total is None:
            continue
        r.adjustment_amount = round(r.adjustment_amount + (new_total - r.total_amount), AMOUNT_DECIMALS)
        r.min_amount_applied = floor is not None and abs(new_total - floor) < AMOUNT_TOLERANCE
        r.max_amount_applied = ceiling is not None and abs(new_total - ceiling) < AMOUNT_TOLERANCE
    return results
