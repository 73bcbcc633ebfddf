from models.pool import BonusPool
from models.rule import AllocationRule, SpecialRules, TierConfig
from models.employee import EligibleEmployee
from models.allocation import AllocationResult, AppliedCoefficients
from models.summary import (
    AllocationSummary, AmountStatistics, FairnessMetrics,
    Outlier, QualityMetrics, ValidationSummary,
)
from models.scenario import AllocationScenario
