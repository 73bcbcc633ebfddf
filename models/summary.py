from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class AmountStatistics:
    count: int = 0
    sum: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    min: float = 0.0
    max: float = 0.0
    std_dev: float = 0.0
    variance: float = 0.0


@dataclass(frozen=True)
class FairnessMetrics:
    gini_coefficient: float = 0.0
    variation_coefficient: float = 0.0
    correlation_with_score: float = 0.0


@dataclass(frozen=True)
class Outlier:
    employee_id: str
    amount: float


@dataclass(frozen=True)
class QualityMetrics:
    min_amount_applied_count: int = 0
    max_amount_applied_count: int = 0
    anomaly_count: int = 0
    outliers: List[Outlier] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationSummary:
    is_valid: bool = True
    error_count: int = 0
    error_details: List[dict] = field(default_factory=list)
    total_results: int = 0


@dataclass(frozen=True)
class AllocationSummary:
    """Derived, read-only view over one allocation result set."""
    total_employees: int = 0
    total_allocated: float = 0.0
    distributable_amount: float = 0.0
    allocation_ratio: float = 0.0     # total allocated / distributable amount
    pool_utilization: float = 0.0     # total allocated / pool total
    remaining_amount: float = 0.0
    statistics: AmountStatistics = field(default_factory=AmountStatistics)
    fairness: FairnessMetrics = field(default_factory=FairnessMetrics)
    by_department: Dict[str, dict] = field(default_factory=dict)  # {dept: {"count", "amount"}}
    by_tier: Dict[str, dict] = field(default_factory=dict)
    quality: QualityMetrics = field(default_factory=QualityMetrics)
    validation: ValidationSummary = field(default_factory=ValidationSummary)
