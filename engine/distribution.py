"""Turns scores and coefficients into raw monetary shares of the budget.

Amounts produced here are not required to add up to the available budget;
the constraint stage rescales and bounds them afterwards.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from models.pool import BonusPool
from models.rule import AllocationRule, TierConfig
from models.employee import EligibleEmployee
from models.allocation import AllocationResult
from engine.coefficients import CoefficientResult
from engine.errors import InsufficientBudgetError, NoValidScoresError, InvalidRuleError
from config.defaults import (
    AMOUNT_DECIMALS, STEP_TIERS, STEP_FLOOR_MULTIPLIER, STEP_FLOOR_LABEL,
    DEFAULT_TIER_LABEL, TIER_RATIO_TOLERANCE, HYBRID_SCORE_WEIGHT,
    HYBRID_TIER_WEIGHT, HYBRID_PERCENTAGE_WEIGHT,
)

logger = logging.getLogger(__name__)


def compute_available_amount(pool: BonusPool) -> float:
    """Budget after the reserve. Raises InsufficientBudgetError when not positive."""
    if pool.total_amount is None or pool.total_amount <= 0:
        raise InsufficientBudgetError(f"Bonus pool {pool.id} has no budget ({pool.total_amount})")
    available = pool.available_amount
    if available <= 0:
        raise InsufficientBudgetError(
            f"Bonus pool {pool.id} has nothing left after a {pool.reserve_ratio:.0%} reserve"
        )
    return available


def _money(value: float) -> float:
    return max(0.0, round(value, AMOUNT_DECIMALS))


def _split(amount: float, rule: AllocationRule) -> Tuple[float, float]:
    """Split a per-employee amount into its base and performance parts."""
    return (
        _money(amount * rule.base_allocation_ratio),
        _money(amount * rule.performance_allocation_ratio),
    )


# --- Score curves ---

def step_multiplier(percentile: float) -> Tuple[float, str]:
    """Multiplier and band label for a percentile in [0, 1]."""
    for min_pct, multiplier, label in STEP_TIERS:
        if percentile >= min_pct:
            return multiplier, label
    return STEP_FLOOR_MULTIPLIER, STEP_FLOOR_LABEL


def step_percentiles(employees: List[EligibleEmployee]) -> List[float]:
    """Percentile of each employee in [0, 1], higher = better.

    Uses the upstream ``percentile_rank`` (0-100) when present, otherwise
    ``(n - rank + 1) / n`` with rank from ``score_rank`` or the score order.
    """
    n = len(employees)
    order = sorted(range(n), key=lambda i: -employees[i].final_score)
    score_order_rank = {idx: pos + 1 for pos, idx in enumerate(order)}

    percentiles = []
    for i, emp in enumerate(employees):
        if emp.percentile_rank is not None:
            percentiles.append(emp.percentile_rank / 100.0)
            continue
        rank = emp.score_rank if emp.score_rank is not None else score_order_rank[i]
        percentiles.append((n - rank + 1) / n)
    return percentiles


def compute_distribution_ratios(
    employees: List[EligibleEmployee],
    rule: AllocationRule,
) -> List[Tuple[float, str]]:
    """Distribution ratio and tier label for every employee, in input order."""
    scores = [e.final_score for e in employees]
    total_score = sum(scores)
    if not total_score > 0:
        raise NoValidScoresError(f"Eligible scores sum to {total_score}")

    method = rule.score_distribution_method

    if method == "exponential":
        k = rule.exponential_factor
        try:
            weighted = [s ** k for s in scores]
        except OverflowError:
            raise NoValidScoresError(f"exponential scores overflow with factor {k}")
    elif method == "logarithmic":
        weighted = [math.log(s + 1) for s in scores]
    else:
        weighted = scores

    total_weighted = sum(weighted)
    if not (total_weighted > 0 and math.isfinite(total_weighted)):
        raise NoValidScoresError(f"{method} weighted scores sum to {total_weighted}")

    ratios = [w / total_weighted for w in weighted]

    if method != "step":
        return [(r, DEFAULT_TIER_LABEL) for r in ratios]

    stepped = []
    for ratio, pct in zip(ratios, step_percentiles(employees)):
        multiplier, label = step_multiplier(pct)
        stepped.append((ratio * multiplier, label))

    if rule.normalize_step_ratios:
        step_total = sum(r for r, _ in stepped)
        stepped = [(r / step_total, label) for r, label in stepped]
    return stepped


# --- Allocation methods ---

def score_based_allocation(
    employees: List[EligibleEmployee],
    coefficients: List[CoefficientResult],
    rule: AllocationRule,
    available: float,
) -> List[AllocationResult]:
    ratios = compute_distribution_ratios(employees, rule)
    results = []
    for emp, coeff, (ratio, label) in zip(employees, coefficients, ratios):
        final_coeff = coeff.coefficients.final
        results.append(AllocationResult(
            employee_id=emp.employee_id,
            original_score=emp.final_score,
            final_score=emp.final_score,
            base_amount=_money(available * rule.base_allocation_ratio * ratio * final_coeff),
            performance_amount=_money(available * rule.performance_allocation_ratio * ratio * final_coeff),
            applied_coefficients=coeff.coefficients,
            distribution_ratio=ratio,
            tier_level=label,
            department_id=emp.department_id,
            position_level=emp.position_level,
        ))
    return results


def normalize_tier_ratios(tiers: List[TierConfig], warnings: Optional[list] = None) -> List[TierConfig]:
    """Rescale tier ratios to sum to 1 when they drift beyond tolerance."""
    total = sum(t.ratio for t in tiers)
    if total <= 0:
        raise InvalidRuleError(["Tier ratios must sum to a positive value"])
    if abs(total - 1.0) <= TIER_RATIO_TOLERANCE:
        return list(tiers)
    msg = f"Tier ratios sum to {total:.3f}; normalizing to 1"
    logger.warning(msg)
    if warnings is not None:
        warnings.append(msg)
    return [TierConfig(t.tier, t.ratio / total, t.min_score) for t in tiers]


def assign_employees_to_tiers(
    employees: List[EligibleEmployee],
    tiers: List[TierConfig],
) -> Dict[str, List[EligibleEmployee]]:
    """Place each employee in the highest tier whose min_score they reach."""
    assignments: Dict[str, List[EligibleEmployee]] = {t.tier: [] for t in tiers}
    by_min_score = sorted(tiers, key=lambda t: t.min_score, reverse=True)
    lowest = by_min_score[-1]

    for emp in sorted(employees, key=lambda e: -e.final_score):
        tier = next((t for t in by_min_score if emp.final_score >= t.min_score), lowest)
        assignments[tier.tier].append(emp)
    return assignments


def tier_based_allocation(
    employees: List[EligibleEmployee],
    coefficients: List[CoefficientResult],
    rule: AllocationRule,
    available: float,
    warnings: Optional[list] = None,
) -> List[AllocationResult]:
    if not rule.tier_config:
        raise InvalidRuleError(["Tier-based allocation requires a tier configuration"])

    tiers = normalize_tier_ratios(rule.tier_config, warnings)
    assignments = assign_employees_to_tiers(employees, tiers)
    tier_of = {}
    for tier in tiers:
        members = assignments[tier.tier]
        if not members:
            logger.debug("Tier %s has no employees", tier.tier)
            continue
        share = tier.ratio / len(members)
        for emp in members:
            tier_of[emp.employee_id] = (tier.tier, share)

    results = []
    for emp, coeff in zip(employees, coefficients):
        label, share = tier_of[emp.employee_id]
        base, perf = _split(available * share * coeff.coefficients.final, rule)
        results.append(AllocationResult(
            employee_id=emp.employee_id,
            original_score=emp.final_score,
            final_score=emp.final_score,
            base_amount=base,
            performance_amount=perf,
            applied_coefficients=coeff.coefficients,
            distribution_ratio=share,
            tier_level=label,
            department_id=emp.department_id,
            position_level=emp.position_level,
        ))
    return results


def pool_percentage_allocation(
    employees: List[EligibleEmployee],
    coefficients: List[CoefficientResult],
    rule: AllocationRule,
    available: float,
) -> List[AllocationResult]:
    share = 1.0 / len(employees)
    results = []
    for emp, coeff in zip(employees, coefficients):
        base, perf = _split(available * share * coeff.coefficients.final, rule)
        results.append(AllocationResult(
            employee_id=emp.employee_id,
            original_score=emp.final_score,
            final_score=emp.final_score,
            base_amount=base,
            performance_amount=perf,
            applied_coefficients=coeff.coefficients,
            distribution_ratio=share,
            department_id=emp.department_id,
            position_level=emp.position_level,
        ))
    return results


def fixed_amount_allocation(
    employees: List[EligibleEmployee],
    coefficients: List[CoefficientResult],
    rule: AllocationRule,
    available: float,
) -> List[AllocationResult]:
    share = rule.fixed_amount / available
    results = []
    for emp, coeff in zip(employees, coefficients):
        base, perf = _split(rule.fixed_amount * coeff.coefficients.final, rule)
        results.append(AllocationResult(
            employee_id=emp.employee_id,
            original_score=emp.final_score,
            final_score=emp.final_score,
            base_amount=base,
            performance_amount=perf,
            applied_coefficients=coeff.coefficients,
            distribution_ratio=share,
            department_id=emp.department_id,
            position_level=emp.position_level,
        ))
    return results


def hybrid_allocation(
    employees: List[EligibleEmployee],
    coefficients: List[CoefficientResult],
    rule: AllocationRule,
    available: float,
    warnings: Optional[list] = None,
) -> List[AllocationResult]:
    """Blend of score-based, tier-based and pool-percentage totals (50/30/20)."""
    score_results = score_based_allocation(employees, coefficients, rule, available)
    tier_results = tier_based_allocation(employees, coefficients, rule, available, warnings)
    pct_results = pool_percentage_allocation(employees, coefficients, rule, available)

    results = []
    for score_r, tier_r, pct_r in zip(score_results, tier_results, pct_results):
        blended = (
            score_r.calculated_amount * HYBRID_SCORE_WEIGHT
            + tier_r.calculated_amount * HYBRID_TIER_WEIGHT
            + pct_r.calculated_amount * HYBRID_PERCENTAGE_WEIGHT
        )
        # blended totals already include the base/performance split; undo it before re-splitting
        split_total = rule.base_allocation_ratio + rule.performance_allocation_ratio
        unsplit = blended / split_total if split_total > 0 else 0.0
        base, perf = _split(unsplit, rule)
        results.append(AllocationResult(
            employee_id=score_r.employee_id,
            original_score=score_r.original_score,
            final_score=score_r.final_score,
            base_amount=base,
            performance_amount=perf,
            applied_coefficients=score_r.applied_coefficients,
            distribution_ratio=score_r.distribution_ratio,
            tier_level=tier_r.tier_level,
            department_id=score_r.department_id,
            position_level=score_r.position_level,
        ))
    return results


def distribute(
    employees: List[EligibleEmployee],
    coefficients: List[CoefficientResult],
    rule: AllocationRule,
    available: float,
    warnings: Optional[list] = None,
) -> List[AllocationResult]:
    """Route to the rule's allocation method."""
    if available <= 0:
        raise InsufficientBudgetError(f"Available amount {available} is not positive")

    method = rule.allocation_method
    if method == "score_based":
        return score_based_allocation(employees, coefficients, rule, available)
    if method == "tier_based":
        return tier_based_allocation(employees, coefficients, rule, available, warnings)
    if method == "pool_percentage":
        return pool_percentage_allocation(employees, coefficients, rule, available)
    if method == "fixed_amount":
        return fixed_amount_allocation(employees, coefficients, rule, available)
    if method == "hybrid":
        return hybrid_allocation(employees, coefficients, rule, available, warnings)
    raise InvalidRuleError([f"Unsupported allocation method: {method}"])
