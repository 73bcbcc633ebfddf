"""Budget rescale and per-employee floor/ceiling enforcement."""

import logging
import math
from typing import List, Optional, Tuple

from models.rule import AllocationRule
from models.allocation import AllocationResult
from config.defaults import AMOUNT_DECIMALS, AMOUNT_TOLERANCE, REDISTRIBUTION_MAX_PASSES

logger = logging.getLogger(__name__)


def _floor_cents(value: float) -> float:
    return math.floor(value * 100 + 1e-6) / 100


def _ceil_cents(value: float) -> float:
    return math.ceil(value * 100 - 1e-6) / 100


def compute_distributable_amount(available: float, rule: AllocationRule) -> float:
    """Cap on the sum of all bonuses: available budget times the allocation limit."""
    return available * rule.total_allocation_limit


def rescale_to_budget(results: List[AllocationResult], cap: float) -> float:
    """Scale everyone down proportionally when the raw total exceeds ``cap``.

    Base and performance amounts keep their calculated values; the scaling
    delta is recorded as a negative adjustment. Returns the factor used.
    """
    total = sum(r.calculated_amount for r in results)
    if total <= cap or total <= 0:
        return 1.0

    factor = cap / total
    for r in results:
        scaled = _floor_cents(r.calculated_amount * factor)
        r.adjustment_amount = round(scaled - r.calculated_amount, AMOUNT_DECIMALS)

    logger.debug("Rescaled %d results by %.6f to fit %.2f", len(results), factor, cap)
    return factor


def compute_bounds(rule: AllocationRule, avg_amount: float) -> Tuple[Optional[float], Optional[float]]:
    """Floor and ceiling for one employee; None when the side is unconfigured."""
    floors = [v for v in (
        rule.min_bonus_amount,
        avg_amount * rule.min_bonus_ratio if rule.min_bonus_ratio is not None else None,
    ) if v is not None]
    ceilings = [v for v in (
        rule.max_bonus_amount,
        avg_amount * rule.max_bonus_ratio if rule.max_bonus_ratio is not None else None,
    ) if v is not None]

    floor = round(max(floors), AMOUNT_DECIMALS) if floors else None
    ceiling = round(min(ceilings), AMOUNT_DECIMALS) if ceilings else None
    return floor, ceiling


def enforce_bounds(
    results: List[AllocationResult],
    floor: Optional[float],
    ceiling: Optional[float],
) -> None:
    """Raise totals below the floor and cap totals above the ceiling.

    The remaining budget is not renormalized afterwards.
    """
    for r in results:
        total = r.total_amount
        r.original_calculated_amount = total
        new_total = total

        if floor is not None and total < floor:
            new_total = floor
            r.min_amount_applied = True
        elif ceiling is not None and total > ceiling:
            new_total = ceiling
            r.max_amount_applied = True

        if new_total != total:
            r.adjustment_amount = round(r.adjustment_amount + (new_total - total), AMOUNT_DECIMALS)


def redistribute_surplus(
    results: List[AllocationResult],
    cap: float,
    floor: Optional[float],
    ceiling: Optional[float],
) -> int:
    """Spread the gap between ``cap`` and the bounded total over unclamped employees.

    A positive gap is handed out in proportion to current amounts up to each
    ceiling; a negative gap (floors pushed the total over budget) is taken
    back in proportion down to each floor. Returns the number of passes.
    """
    passes = 0
    for passes in range(1, REDISTRIBUTION_MAX_PASSES + 1):
        gap = cap - sum(r.total_amount for r in results)
        if abs(gap) < AMOUNT_TOLERANCE:
            break

        free = [r for r in results if not (r.min_amount_applied or r.max_amount_applied)]
        if gap > 0 and ceiling is not None:
            free = [r for r in free if r.total_amount < ceiling]
        if gap < 0:
            lower = floor if floor is not None else 0.0
            free = [r for r in free if r.total_amount > lower]
        if not free:
            break

        weight_total = sum(r.total_amount for r in free)
        moved = 0.0
        for r in free:
            weight = r.total_amount / weight_total if weight_total > 0 else 1.0 / len(free)
            current = r.total_amount
            if gap > 0:
                target = current + _floor_cents(gap * weight)
                if ceiling is not None and target >= ceiling:
                    target = ceiling
                    r.max_amount_applied = True
            else:
                target = current - _ceil_cents(-gap * weight)
                lower = floor if floor is not None else 0.0
                if target <= lower:
                    target = lower
                    r.min_amount_applied = floor is not None
            if target != current:
                r.adjustment_amount = round(r.adjustment_amount + (target - current), AMOUNT_DECIMALS)
                moved += abs(target - current)

        if moved < AMOUNT_TOLERANCE:
            break

    logger.debug("Redistribution settled after %d passes", passes)
    return passes


def enforce_constraints(
    results: List[AllocationResult],
    rule: AllocationRule,
    available: float,
    warnings: Optional[list] = None,
) -> List[AllocationResult]:
    """Rescale to the distributable budget, then apply floors and ceilings.

    What happens to the surplus or deficit left by the bounds depends on
    ``rule.bound_strategy``: "preserve" leaves it, "redistribute" spreads it
    over unclamped employees, "optimize" re-solves the amounts with an LP.
    """
    if not results:
        return results

    cap = compute_distributable_amount(available, rule)
    rescale_to_budget(results, cap)

    avg_amount = cap / len(results)
    floor, ceiling = compute_bounds(rule, avg_amount)
    enforce_bounds(results, floor, ceiling)

    if rule.bound_strategy == "redistribute":
        redistribute_surplus(results, cap, floor, ceiling)
    elif rule.bound_strategy == "optimize":
        from engine.optimizer import optimize_allocation, apply_optimization
        optimization = optimize_allocation(results, cap, floor, ceiling)
        if optimization.relaxed_floors and warnings is not None:
            warnings.append(optimization.message)
        apply_optimization(results, optimization, floor, ceiling)

    return results
