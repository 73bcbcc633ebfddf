"""Generates human-readable explanations for allocation results."""

from typing import List

from models.rule import AllocationRule
from models.allocation import AllocationResult


def explain_result(result: AllocationResult, rule: AllocationRule, available: float) -> List[str]:
    """Produce step-by-step explanation for one employee's bonus."""
    steps = []
    c = result.applied_coefficients

    if rule.allocation_method == "score_based":
        steps.append(
            f"Step 1 - Distribution: score {result.final_score:.4f} under {rule.score_distribution_method} "
            f"curve => ratio {result.distribution_ratio:.4%} of {available:,.2f}"
        )
    else:
        steps.append(
            f"Step 1 - Distribution: {rule.allocation_method} method (tier {result.tier_level}) "
            f"=> share {result.distribution_ratio:.4%} of {available:,.2f}"
        )

    steps.append(
        f"Step 2 - Coefficients: base {c.base:.2f} x performance {c.performance:.2f} x "
        f"position {c.position:.2f} x department {c.department:.2f} x special {c.special:.2f} "
        f"=> final {c.final:.3f}"
    )

    steps.append(
        f"Step 3 - Amounts: base {result.base_amount:,.2f} ({rule.base_allocation_ratio:.0%}) + "
        f"performance {result.performance_amount:,.2f} ({rule.performance_allocation_ratio:.0%}) "
        f"= {result.calculated_amount:,.2f}"
    )

    pre_bound = result.original_calculated_amount
    if pre_bound is not None and pre_bound != result.calculated_amount:
        steps.append(
            f"Step 4 - Budget rescale: {result.calculated_amount:,.2f} => {pre_bound:,.2f} "
            f"to stay within the distributable budget"
        )

    if result.min_amount_applied:
        steps.append(f"Note: Raised to the minimum bonus => {result.total_amount:,.2f}")
    if result.max_amount_applied:
        steps.append(f"Note: Capped at the maximum bonus => {result.total_amount:,.2f}")
    if pre_bound is not None and result.total_amount != pre_bound and not (
        result.min_amount_applied or result.max_amount_applied
    ):
        steps.append(f"Note: Rebalanced after bounds ({rule.bound_strategy}) => {result.total_amount:,.2f}")

    steps.append(
        f"Final - Total bonus {result.total_amount:,.2f} "
        f"(adjustment {result.adjustment_amount:+,.2f})"
    )
    return steps
