"""Distribution statistics, equity metrics and quality checks over a result set.

Nothing here mutates its inputs. An empty result set yields a zeroed summary.
"""

from typing import Dict, List, Optional

import pandas as pd

from models.pool import BonusPool
from models.allocation import AllocationResult
from models.summary import (
    AllocationSummary, AmountStatistics, FairnessMetrics,
    Outlier, QualityMetrics, ValidationSummary,
)
from data.validator import validate_allocation_result
from config.defaults import (
    AMOUNT_DECIMALS, FAIRNESS_DECIMALS, OUTLIER_IQR_MULTIPLIER,
    MIN_OUTLIER_SAMPLE, MAX_VALIDATION_DETAILS, DEFAULT_TIER_LABEL,
)


def results_to_dataframe(results: List[AllocationResult]) -> pd.DataFrame:
    """One row per result with the fields reports and charts need."""
    rows = []
    for r in results:
        rows.append({
            "employee_id": r.employee_id,
            "department_id": r.department_id or "Unassigned",
            "position_level": r.position_level or "",
            "tier_level": r.tier_level or DEFAULT_TIER_LABEL,
            "final_score": r.final_score,
            "distribution_ratio": r.distribution_ratio,
            "final_coeff": r.applied_coefficients.final,
            "base_amount": r.base_amount,
            "performance_amount": r.performance_amount,
            "adjustment_amount": r.adjustment_amount,
            "total_amount": r.total_amount,
            "min_amount_applied": r.min_amount_applied,
            "max_amount_applied": r.max_amount_applied,
        })
    columns = [
        "employee_id", "department_id", "position_level", "tier_level",
        "final_score", "distribution_ratio", "final_coeff", "base_amount",
        "performance_amount", "adjustment_amount", "total_amount",
        "min_amount_applied", "max_amount_applied",
    ]
    return pd.DataFrame(rows, columns=columns)


def calculate_statistics(values: List[float]) -> AmountStatistics:
    if not values:
        return AmountStatistics()
    s = pd.Series(values, dtype="float64")
    return AmountStatistics(
        count=int(s.count()),
        sum=round(float(s.sum()), AMOUNT_DECIMALS),
        mean=round(float(s.mean()), AMOUNT_DECIMALS),
        median=round(float(s.median()), AMOUNT_DECIMALS),
        min=round(float(s.min()), AMOUNT_DECIMALS),
        max=round(float(s.max()), AMOUNT_DECIMALS),
        std_dev=round(float(s.std(ddof=0)), AMOUNT_DECIMALS),
        variance=round(float(s.var(ddof=0)), AMOUNT_DECIMALS),
    )


def gini_coefficient(values: List[float]) -> float:
    """G = sum((2i - n - 1) * x_i) / (n * sum(x)) over ascending, 1-indexed x."""
    if not values:
        return 0.0
    ordered = sorted(values)
    n = len(ordered)
    total = sum(ordered)
    if total == 0:
        return 0.0
    weighted = sum((2 * i - n - 1) * x for i, x in enumerate(ordered, start=1))
    return weighted / (n * total)


def pearson_correlation(x: List[float], y: List[float]) -> float:
    """Pearson r; 0 when either side is constant or the lengths differ."""
    if len(x) != len(y) or len(x) < 2:
        return 0.0
    r = pd.Series(x, dtype="float64").corr(pd.Series(y, dtype="float64"))
    return 0.0 if pd.isna(r) else float(r)


def detect_outliers(values: List[float]) -> List[int]:
    """Indices of values outside Q1 - 1.5 IQR .. Q3 + 1.5 IQR."""
    if len(values) < MIN_OUTLIER_SAMPLE:
        return []
    s = pd.Series(values, dtype="float64")
    q1 = s.quantile(0.25)
    q3 = s.quantile(0.75)
    iqr = q3 - q1
    lower = q1 - OUTLIER_IQR_MULTIPLIER * iqr
    upper = q3 + OUTLIER_IQR_MULTIPLIER * iqr
    return [i for i, v in enumerate(values) if v < lower or v > upper]


def lorenz_curve(values: List[float]) -> List[tuple]:
    """Cumulative (population share, amount share) points, starting at (0, 0)."""
    ordered = sorted(values)
    total = sum(ordered)
    points = [(0.0, 0.0)]
    running = 0.0
    for i, v in enumerate(ordered, start=1):
        running += v
        points.append((i / len(ordered), running / total if total > 0 else 0.0))
    return points


def _breakdown(df: pd.DataFrame, column: str) -> Dict[str, dict]:
    grouped = df.groupby(column, sort=True)["total_amount"].agg(["count", "sum"])
    return {
        str(key): {"count": int(row["count"]), "amount": round(float(row["sum"]), AMOUNT_DECIMALS)}
        for key, row in grouped.iterrows()
    }


def validate_results(results: List[AllocationResult]) -> ValidationSummary:
    details = []
    for r in results:
        errors = validate_allocation_result(r)
        if errors:
            details.append({"employee_id": r.employee_id, "errors": errors})
    return ValidationSummary(
        is_valid=not details,
        error_count=len(details),
        error_details=details[:MAX_VALIDATION_DETAILS],
        total_results=len(results),
    )


def analyze_allocation(
    results: List[AllocationResult],
    pool: Optional[BonusPool] = None,
    distributable_amount: Optional[float] = None,
) -> AllocationSummary:
    """Build the read-only summary for a final result set."""
    pool_total = pool.total_amount if pool is not None else 0.0
    if distributable_amount is None:
        distributable_amount = pool.available_amount if pool is not None else 0.0

    if not results:
        return AllocationSummary(
            distributable_amount=round(distributable_amount, AMOUNT_DECIMALS),
            remaining_amount=round(pool_total, AMOUNT_DECIMALS),
        )

    df = results_to_dataframe(results)
    amounts = df["total_amount"].tolist()
    scores = df["final_score"].tolist()

    stats = calculate_statistics(amounts)
    total_allocated = stats.sum
    variation = stats.std_dev / stats.mean if stats.mean > 0 else 0.0

    outlier_idx = detect_outliers(amounts)
    outliers = [Outlier(employee_id=results[i].employee_id, amount=amounts[i]) for i in outlier_idx]

    return AllocationSummary(
        total_employees=len(results),
        total_allocated=total_allocated,
        distributable_amount=round(distributable_amount, AMOUNT_DECIMALS),
        allocation_ratio=round(total_allocated / distributable_amount, FAIRNESS_DECIMALS)
        if distributable_amount > 0 else 0.0,
        pool_utilization=round(total_allocated / pool_total, FAIRNESS_DECIMALS) if pool_total > 0 else 0.0,
        remaining_amount=round(pool_total - total_allocated, AMOUNT_DECIMALS),
        statistics=stats,
        fairness=FairnessMetrics(
            gini_coefficient=round(gini_coefficient(amounts), FAIRNESS_DECIMALS),
            variation_coefficient=round(variation, FAIRNESS_DECIMALS),
            correlation_with_score=round(pearson_correlation(amounts, scores), FAIRNESS_DECIMALS),
        ),
        by_department=_breakdown(df, "department_id"),
        by_tier=_breakdown(df, "tier_level"),
        quality=QualityMetrics(
            min_amount_applied_count=int(df["min_amount_applied"].sum()),
            max_amount_applied_count=int(df["max_amount_applied"].sum()),
            anomaly_count=len(outliers),
            outliers=outliers,
        ),
        validation=validate_results(results),
    )
