from dataclasses import dataclass, field
from typing import List, Optional

from config.defaults import AMOUNT_DECIMALS, DEFAULT_TIER_LABEL


@dataclass(frozen=True)
class AppliedCoefficients:
    base: float = 1.0
    performance: float = 1.0
    position: float = 1.0
    department: float = 1.0
    special: float = 1.0
    final: float = 1.0


@dataclass
class AllocationResult:
    employee_id: str
    original_score: float
    final_score: float
    base_amount: float
    performance_amount: float
    adjustment_amount: float = 0.0              # rescale + bound deltas, may be negative
    applied_coefficients: AppliedCoefficients = field(default_factory=AppliedCoefficients)
    distribution_ratio: float = 0.0
    tier_level: str = DEFAULT_TIER_LABEL
    department_id: Optional[str] = None
    position_level: Optional[str] = None
    min_amount_applied: bool = False
    max_amount_applied: bool = False
    original_calculated_amount: Optional[float] = None  # pre-bound total, for audit
    explanation_steps: List[str] = field(default_factory=list)

    @property
    def calculated_amount(self) -> float:
        """Amount produced by the distribution stage, before any adjustment."""
        return round(self.base_amount + self.performance_amount, AMOUNT_DECIMALS)

    @property
    def total_amount(self) -> float:
        return round(self.base_amount + self.performance_amount + self.adjustment_amount, AMOUNT_DECIMALS)
