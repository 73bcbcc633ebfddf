"""Bonus pool allocation pipeline: the core business engine.

Filter -> coefficients -> distribution -> constraints -> fairness analysis.
Each stage needs the previous one to be complete; only the coefficient
stage runs per employee and may use a worker pool.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional

from models.pool import BonusPool
from models.rule import AllocationRule
from models.employee import EligibleEmployee
from models.allocation import AllocationResult
from models.summary import AllocationSummary
from engine.errors import InvalidRuleError
from engine.eligibility import filter_eligible
from engine.coefficients import compute_all_coefficients
from engine.distribution import compute_available_amount, distribute
from engine.constraints import compute_distributable_amount, enforce_constraints
from engine.fairness import analyze_allocation
from engine.explainer import explain_result
from data.validator import validate_bonus_pool, validate_allocation_rule
from config.defaults import DEFAULT_MAX_WORKERS, PARALLEL_THRESHOLD, AMOUNT_DECIMALS

logger = logging.getLogger(__name__)


@dataclass
class AllocationContext:
    """Everything one run needs, passed explicitly through the stages."""
    pool: BonusPool
    rule: AllocationRule
    available_amount: float
    distributable_amount: float
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS
    parallel_threshold: int = PARALLEL_THRESHOLD
    warnings: List[str] = field(default_factory=list)


@dataclass
class AllocationRun:
    pool: BonusPool
    rule: AllocationRule
    results: List[AllocationResult]
    summary: AllocationSummary
    warnings: List[str] = field(default_factory=list)
    is_simulation: bool = False

    @property
    def allocated_amount(self) -> float:
        return round(sum(r.total_amount for r in self.results), AMOUNT_DECIMALS)

    @property
    def allocated_count(self) -> int:
        return len(self.results)


def build_context(
    pool: BonusPool,
    rule: AllocationRule,
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
    parallel_threshold: int = PARALLEL_THRESHOLD,
) -> AllocationContext:
    """Validate configuration and derive the run's budget figures."""
    available = compute_available_amount(pool)

    pool_check = validate_bonus_pool(pool)
    rule_check = validate_allocation_rule(rule)
    errors = pool_check.errors + rule_check.errors
    if errors:
        raise InvalidRuleError(errors)

    warnings = pool_check.warnings + rule_check.warnings
    for w in warnings:
        logger.warning(w)

    return AllocationContext(
        pool=pool,
        rule=rule,
        available_amount=available,
        distributable_amount=compute_distributable_amount(available, rule),
        max_workers=max_workers,
        parallel_threshold=parallel_threshold,
        warnings=list(warnings),
    )


def allocate(ctx: AllocationContext, records: Iterable[EligibleEmployee]) -> List[AllocationResult]:
    """Run the calculation stages for a prepared context."""
    eligible = filter_eligible(records, ctx.rule, ctx.pool)
    logger.debug("Stage 1 complete: %d eligible", len(eligible))

    coefficients = compute_all_coefficients(
        eligible, ctx.rule, ctx.max_workers, ctx.parallel_threshold,
    )
    for c in coefficients:
        ctx.warnings.extend(c.warnings)
    logger.debug("Stage 2 complete: coefficients for %d employees", len(coefficients))

    results = distribute(eligible, coefficients, ctx.rule, ctx.available_amount, ctx.warnings)
    logger.debug("Stage 3 complete: raw total %.2f", sum(r.calculated_amount for r in results))

    results = enforce_constraints(results, ctx.rule, ctx.available_amount, ctx.warnings)
    for r in results:
        r.explanation_steps = explain_result(r, ctx.rule, ctx.available_amount)
    return results


def run_allocation(
    pool: BonusPool,
    rule: AllocationRule,
    employees: Iterable[EligibleEmployee],
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
    is_simulation: bool = False,
) -> AllocationRun:
    """Full allocation pipeline: filter, calculate, constrain, then analyze.

    Any fatal error propagates before results exist; the pool is never
    modified (see ``apply_run_to_pool``).
    """
    ctx = build_context(pool, rule, max_workers)
    logger.info(
        "Allocating pool %s (%s) with rule %s v%s: method=%s, distributable=%.2f",
        pool.id, pool.period, rule.id, rule.version, rule.allocation_method, ctx.distributable_amount,
    )

    results = allocate(ctx, employees)
    summary = analyze_allocation(results, pool, ctx.distributable_amount)

    logger.info(
        "Allocated %.2f to %d employees (ratio %.4f, gini %.4f)",
        summary.total_allocated, summary.total_employees,
        summary.allocation_ratio, summary.fairness.gini_coefficient,
    )
    return AllocationRun(
        pool=pool,
        rule=rule,
        results=results,
        summary=summary,
        warnings=ctx.warnings,
        is_simulation=is_simulation,
    )


def simulate_allocation(
    pool: BonusPool,
    rule: AllocationRule,
    employees: Iterable[EligibleEmployee],
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
) -> AllocationRun:
    """Run the pipeline for preview; results are not meant to be persisted."""
    return run_allocation(pool, rule, employees, max_workers, is_simulation=True)


def apply_run_to_pool(pool: BonusPool, run: AllocationRun) -> BonusPool:
    """Pool record with the run's aggregates, for the caller to persist."""
    return replace(
        pool,
        allocated_amount=run.allocated_amount,
        allocated_count=run.allocated_count,
        status="allocated",
    )
