"""Validation for pools, allocation rules, results and scored-employee frames."""

import math
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from models.pool import BonusPool
from models.rule import AllocationRule, TierConfig
from models.allocation import AllocationResult
from config.defaults import (
    ALLOCATION_METHODS, SCORE_DISTRIBUTION_METHODS, BOUND_STRATEGIES,
    AMOUNT_TOLERANCE, TIER_RATIO_TOLERANCE, POOL_STATUSES,
)


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def error(self, message: str):
        self.is_valid = False
        self.errors.append(message)


EMPLOYEE_REQUIRED_COLUMNS = [
    "Employee ID",
    "Final Score",
    "Department ID",
    "Position Level",
]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_bonus_pool(pool: BonusPool) -> ValidationResult:
    result = ValidationResult()
    if not pool.period:
        result.error("Bonus pool: period is required.")
    if pool.status not in POOL_STATUSES:
        result.error(f"Bonus pool: unknown status '{pool.status}'.")
    if not _is_number(pool.total_amount):
        result.error("Bonus pool: total amount must be a number.")
    if not _is_number(pool.reserve_ratio) or not 0 <= pool.reserve_ratio < 1:
        result.error("Bonus pool: reserve ratio must be in [0, 1).")
    elif pool.reserve_ratio > 0.5:
        result.warnings.append(f"Bonus pool: reserve ratio {pool.reserve_ratio:.0%} withholds most of the pool.")
    return result


def validate_tier_config(tiers: List[TierConfig]) -> List[str]:
    errors = []
    if not tiers:
        return ["Tier configuration cannot be empty."]

    seen = set()
    for i, tier in enumerate(tiers, start=1):
        if not tier.tier:
            errors.append(f"Tier {i}: name is required.")
        elif tier.tier in seen:
            errors.append(f"Tier {i}: duplicate name '{tier.tier}'.")
        else:
            seen.add(tier.tier)
        if not _is_number(tier.ratio) or not 0 < tier.ratio <= 1:
            errors.append(f"Tier {i}: ratio must be in (0, 1].")
        if not _is_number(tier.min_score) or tier.min_score < 0:
            errors.append(f"Tier {i}: minimum score must be a non-negative number.")
    return errors


def validate_allocation_rule(rule: AllocationRule) -> ValidationResult:
    result = ValidationResult()

    if rule.allocation_method not in ALLOCATION_METHODS:
        result.error(f"Allocation rule: unsupported allocation method '{rule.allocation_method}'.")
    if rule.score_distribution_method not in SCORE_DISTRIBUTION_METHODS:
        result.error(f"Allocation rule: unsupported score distribution method '{rule.score_distribution_method}'.")
    if rule.bound_strategy not in BOUND_STRATEGIES:
        result.error(f"Allocation rule: unsupported bound strategy '{rule.bound_strategy}'.")

    for label, ratio in (("base", rule.base_allocation_ratio), ("performance", rule.performance_allocation_ratio)):
        if not _is_number(ratio) or not 0 <= ratio <= 1:
            result.error(f"Allocation rule: {label} allocation ratio must be in [0, 1].")

    if result.is_valid and rule.base_allocation_ratio + rule.performance_allocation_ratio == 0:
        result.error("Allocation rule: base and performance ratios cannot both be 0.")
    elif result.is_valid and abs(rule.base_allocation_ratio + rule.performance_allocation_ratio - 1) > AMOUNT_TOLERANCE:
        result.warnings.append("Allocation rule: base and performance ratios do not sum to 1.")

    if not _is_number(rule.exponential_factor) or rule.exponential_factor <= 0:
        result.error("Allocation rule: exponential factor must be positive.")
    if not _is_number(rule.total_allocation_limit) or not 0 < rule.total_allocation_limit <= 1:
        result.error("Allocation rule: total allocation limit must be in (0, 1].")
    if not _is_number(rule.min_score_threshold) or rule.min_score_threshold < 0:
        result.error("Allocation rule: minimum score threshold cannot be negative.")

    for label, value in (
        ("minimum bonus amount", rule.min_bonus_amount),
        ("maximum bonus amount", rule.max_bonus_amount),
        ("minimum bonus ratio", rule.min_bonus_ratio),
        ("maximum bonus ratio", rule.max_bonus_ratio),
    ):
        if value is not None and (not _is_number(value) or value < 0):
            result.error(f"Allocation rule: {label} must be a non-negative number.")

    if (rule.min_bonus_amount is not None and rule.max_bonus_amount is not None
            and rule.min_bonus_amount > rule.max_bonus_amount):
        result.warnings.append("Allocation rule: minimum bonus amount exceeds the maximum; floors win.")
    if (rule.min_bonus_ratio is not None and rule.max_bonus_ratio is not None
            and rule.min_bonus_ratio > rule.max_bonus_ratio):
        result.warnings.append("Allocation rule: minimum bonus ratio exceeds the maximum; floors win.")

    if rule.allocation_method == "fixed_amount" and (not _is_number(rule.fixed_amount) or rule.fixed_amount <= 0):
        result.error("Allocation rule: fixed amount must be positive.")

    if rule.allocation_method in ("tier_based", "hybrid"):
        for e in validate_tier_config(rule.tier_config):
            result.error(f"Allocation rule: {e}")
        if rule.tier_config:
            total = sum(t.ratio for t in rule.tier_config if _is_number(t.ratio))
            if abs(total - 1) > TIER_RATIO_TOLERANCE:
                result.warnings.append(f"Allocation rule: tier ratios sum to {total:.3f}; they will be normalized.")

    return result


def validate_allocation_result(result: AllocationResult) -> List[str]:
    """Amount sanity checks for one result; an empty list means valid."""
    errors = []
    if not result.employee_id:
        errors.append("Employee ID is required.")
    for label, value in (
        ("Base amount", result.base_amount),
        ("Performance amount", result.performance_amount),
        ("Adjustment amount", result.adjustment_amount),
    ):
        if not _is_number(value):
            errors.append(f"{label} is not a valid number.")
        elif value < 0 and label != "Adjustment amount":
            errors.append(f"{label} cannot be negative.")
    if not errors:
        expected = result.base_amount + result.performance_amount + result.adjustment_amount
        if result.total_amount < 0:
            errors.append("Total amount cannot be negative.")
        if abs(expected - result.total_amount) > AMOUNT_TOLERANCE:
            errors.append("Total amount does not equal base + performance + adjustment.")
    return errors


def validate_employee_frame(df: pd.DataFrame) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in EMPLOYEE_REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        result.error(f"Scored employees: Missing required columns: {', '.join(missing)}")
    if df.empty:
        result.error("Scored employees: File contains no data rows.")
    if not result.is_valid:
        return result

    dupes = df.duplicated(subset=["Employee ID"], keep=False)
    if dupes.any():
        result.error(f"Scored employees: Duplicate employee IDs: {df[dupes]['Employee ID'].unique().tolist()}")

    scores = pd.to_numeric(df["Final Score"], errors="coerce")
    non_positive = int((scores.isna() | (scores <= 0)).sum())
    if non_positive:
        result.warnings.append(
            f"Scored employees: {non_positive} rows have a missing or non-positive score and will be excluded."
        )
    return result
