"""Per-employee coefficient calculation.

Every term is a positive finite multiplier. A term that comes out missing,
non-numeric, NaN, infinite or non-positive is replaced by 1.0, so a broken
configuration entry can never zero out a bonus. Each employee is computed
independently, which lets large populations run on a thread pool.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from models.rule import AllocationRule
from models.employee import EligibleEmployee
from models.allocation import AppliedCoefficients
from engine.errors import InvalidCoefficientError
from config.defaults import (
    PERFORMANCE_HIGH_THRESHOLD, PERFORMANCE_LOW_THRESHOLD,
    PERFORMANCE_HIGH_COEFF, PERFORMANCE_LOW_COEFF, NEUTRAL_COEFF,
    NEW_HIRE_MONTHS, NEW_HIRE_COEFF, EXCELLENCE_SCORE_THRESHOLD,
    EXCELLENCE_COEFF, KEY_POSITION_COEFF, MIN_FINAL_COEFF,
    MIN_SPECIAL_COEFF, MAX_SPECIAL_COEFF, PARALLEL_THRESHOLD,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoefficientResult:
    employee_id: str
    coefficients: AppliedCoefficients
    warnings: Tuple[str, ...] = ()


def validate_coefficient(value, name: str, employee_id=None) -> float:
    """Return ``value`` as a positive finite float or raise InvalidCoefficientError."""
    if value is None or isinstance(value, bool):
        raise InvalidCoefficientError(name, value, employee_id)
    try:
        coeff = float(value)
    except (TypeError, ValueError):
        raise InvalidCoefficientError(name, value, employee_id)
    if not math.isfinite(coeff) or coeff <= 0:
        raise InvalidCoefficientError(name, value, employee_id)
    return coeff


def sanitize_coefficient(value, name: str, employee_id=None, warnings: Optional[list] = None) -> float:
    """Validate a coefficient, falling back to 1.0 and logging when it is malformed."""
    try:
        return validate_coefficient(value, name, employee_id)
    except InvalidCoefficientError as exc:
        logger.warning("%s; using %.1f", exc, NEUTRAL_COEFF)
        if warnings is not None:
            warnings.append(str(exc))
        return NEUTRAL_COEFF


def lookup_weight(
    weights: Mapping[str, float],
    key: Optional[str],
    name: str,
    employee_id=None,
    warnings: Optional[list] = None,
) -> float:
    """Look up a configured weight. Unconfigured keys default to 1.0."""
    if key is None or not weights or key not in weights:
        return NEUTRAL_COEFF
    return sanitize_coefficient(weights[key], name, employee_id, warnings)


def performance_coefficient(performance_score: Optional[float]) -> float:
    if performance_score is None:
        return NEUTRAL_COEFF
    if performance_score > PERFORMANCE_HIGH_THRESHOLD:
        return PERFORMANCE_HIGH_COEFF
    if performance_score < PERFORMANCE_LOW_THRESHOLD:
        return PERFORMANCE_LOW_COEFF
    return NEUTRAL_COEFF


def special_coefficient(employee: EligibleEmployee, rule: AllocationRule) -> float:
    """New-hire, excellence and key-position multipliers, clamped to [0.1, 5.0]."""
    special = rule.special_rules
    coeff = 1.0
    if special.new_employee_reduction and (employee.work_months or 0) < NEW_HIRE_MONTHS:
        coeff *= NEW_HIRE_COEFF
    if special.excellent_employee_bonus and employee.final_score > EXCELLENCE_SCORE_THRESHOLD:
        coeff *= EXCELLENCE_COEFF
    if special.key_position_bonus and employee.position_level in rule.key_position_levels:
        coeff *= KEY_POSITION_COEFF
    return max(MIN_SPECIAL_COEFF, min(MAX_SPECIAL_COEFF, coeff))


def calculate_coefficients(employee: EligibleEmployee, rule: AllocationRule) -> CoefficientResult:
    """Derive the multiplicative adjustment factor for one employee."""
    warnings: List[str] = []
    eid = employee.employee_id

    base = sanitize_coefficient(NEUTRAL_COEFF, "base", eid, warnings)
    performance = sanitize_coefficient(
        performance_coefficient(employee.performance_score), "performance", eid, warnings,
    )
    position = lookup_weight(rule.position_level_weights, employee.position_level, "position", eid, warnings)
    department = lookup_weight(rule.department_weights, employee.department_id, "department", eid, warnings)
    special = sanitize_coefficient(special_coefficient(employee, rule), "special", eid, warnings)

    final = max(MIN_FINAL_COEFF, base * performance * position * department * special)

    return CoefficientResult(
        employee_id=eid,
        coefficients=AppliedCoefficients(
            base=base,
            performance=performance,
            position=position,
            department=department,
            special=special,
            final=final,
        ),
        warnings=tuple(warnings),
    )


def compute_all_coefficients(
    employees: List[EligibleEmployee],
    rule: AllocationRule,
    max_workers: Optional[int] = None,
    parallel_threshold: int = PARALLEL_THRESHOLD,
) -> List[CoefficientResult]:
    """Coefficients for the whole eligible set, in input order."""
    if max_workers and max_workers > 1 and len(employees) >= parallel_threshold:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(lambda e: calculate_coefficients(e, rule), employees))
    return [calculate_coefficients(e, rule) for e in employees]
