"""Selects the employees that take part in an allocation run."""

import logging
import math
from dataclasses import replace
from typing import Iterable, List, Optional

from models.pool import BonusPool
from models.rule import AllocationRule
from models.employee import EligibleEmployee
from engine.errors import EmptyEligibleSetError

logger = logging.getLogger(__name__)


def coerce_score(value) -> Optional[float]:
    """Return the score as a finite float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(score):
        return None
    return score


def _in_scope(employee: EligibleEmployee, rule: AllocationRule) -> bool:
    if rule.applicable_business_lines:
        if not set(employee.business_line_ids) & set(rule.applicable_business_lines):
            return False
    if rule.applicable_departments and employee.department_id not in rule.applicable_departments:
        return False
    if rule.applicable_position_levels and employee.position_level not in rule.applicable_position_levels:
        return False
    return True


def filter_eligible(
    records: Iterable[EligibleEmployee],
    rule: AllocationRule,
    pool: Optional[BonusPool] = None,
) -> List[EligibleEmployee]:
    """Keep records with a positive numeric score inside the rule's scope.

    Returned records carry a float ``final_score`` and are ordered by score,
    best first; ties keep their input order.
    """
    threshold = rule.min_score_threshold or 0.0
    eligible = []
    skipped = 0

    for record in records:
        if pool is not None and record.period is not None and record.period != pool.period:
            skipped += 1
            continue
        score = coerce_score(record.final_score)
        if score is None or score <= 0 or score < threshold:
            skipped += 1
            continue
        if not _in_scope(record, rule):
            skipped += 1
            continue
        eligible.append(replace(record, final_score=score))

    if not eligible:
        period = pool.period if pool is not None else None
        raise EmptyEligibleSetError(
            f"No eligible employees for rule {rule.id} (period {period}, {skipped} records filtered out)"
        )

    logger.debug("Eligibility: %d eligible, %d filtered out", len(eligible), skipped)
    return sorted(eligible, key=lambda e: -e.final_score)
