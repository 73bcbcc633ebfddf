from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from config.defaults import (
    DEFAULT_ALLOCATION_METHOD, DEFAULT_SCORE_DISTRIBUTION_METHOD,
    DEFAULT_EXPONENTIAL_FACTOR, DEFAULT_BASE_ALLOCATION_RATIO,
    DEFAULT_PERFORMANCE_ALLOCATION_RATIO, DEFAULT_TOTAL_ALLOCATION_LIMIT,
    DEFAULT_MIN_SCORE_THRESHOLD, DEFAULT_FIXED_AMOUNT,
    DEFAULT_KEY_POSITION_LEVELS, DEFAULT_BOUND_STRATEGY,
)


@dataclass(frozen=True)
class SpecialRules:
    new_employee_reduction: bool = False   # halve bonus under 12 months of service
    excellent_employee_bonus: bool = False
    key_position_bonus: bool = False


@dataclass(frozen=True)
class TierConfig:
    tier: str
    ratio: float        # share of the available budget for the whole tier
    min_score: float    # lowest final score admitted to the tier


@dataclass(frozen=True)
class AllocationRule:
    id: str
    name: str = ""
    version: int = 1
    allocation_method: str = DEFAULT_ALLOCATION_METHOD
    base_allocation_ratio: float = DEFAULT_BASE_ALLOCATION_RATIO
    performance_allocation_ratio: float = DEFAULT_PERFORMANCE_ALLOCATION_RATIO
    score_distribution_method: str = DEFAULT_SCORE_DISTRIBUTION_METHOD
    exponential_factor: float = DEFAULT_EXPONENTIAL_FACTOR
    position_level_weights: Dict[str, float] = field(default_factory=dict)
    department_weights: Dict[str, float] = field(default_factory=dict)
    special_rules: SpecialRules = field(default_factory=SpecialRules)
    key_position_levels: Tuple[str, ...] = DEFAULT_KEY_POSITION_LEVELS
    min_bonus_amount: Optional[float] = None
    max_bonus_amount: Optional[float] = None
    min_bonus_ratio: Optional[float] = None    # relative to the per-employee average
    max_bonus_ratio: Optional[float] = None
    total_allocation_limit: float = DEFAULT_TOTAL_ALLOCATION_LIMIT
    min_score_threshold: float = DEFAULT_MIN_SCORE_THRESHOLD
    tier_config: List[TierConfig] = field(default_factory=list)
    fixed_amount: float = DEFAULT_FIXED_AMOUNT
    applicable_business_lines: FrozenSet[str] = frozenset()
    applicable_departments: FrozenSet[str] = frozenset()
    applicable_position_levels: FrozenSet[str] = frozenset()
    bound_strategy: str = DEFAULT_BOUND_STRATEGY     # "preserve", "redistribute", "optimize"
    normalize_step_ratios: bool = False

    @property
    def has_bounds(self) -> bool:
        return any(v is not None for v in (
            self.min_bonus_amount, self.max_bonus_amount,
            self.min_bonus_ratio, self.max_bonus_ratio,
        ))
