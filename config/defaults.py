"""Default configuration constants for the Bonus Pool Allocation Engine."""

# Allocation methods and score distribution curves
ALLOCATION_METHODS = [
    "score_based",
    "tier_based",
    "pool_percentage",
    "fixed_amount",
    "hybrid",
]
DEFAULT_ALLOCATION_METHOD = "score_based"

SCORE_DISTRIBUTION_METHODS = ["linear", "exponential", "logarithmic", "step"]
DEFAULT_SCORE_DISTRIBUTION_METHOD = "linear"
DEFAULT_EXPONENTIAL_FACTOR = 2.0

# Split of the available budget between base and performance parts
DEFAULT_BASE_ALLOCATION_RATIO = 0.6
DEFAULT_PERFORMANCE_ALLOCATION_RATIO = 0.4

# Share of the available budget that may be distributed at all
DEFAULT_TOTAL_ALLOCATION_LIMIT = 1.0
DEFAULT_RESERVE_RATIO = 0.0
DEFAULT_MIN_SCORE_THRESHOLD = 0.0

# Fixed-amount method
DEFAULT_FIXED_AMOUNT = 10000.0

# Hybrid method mix: score-based / tier-based / pool-percentage
HYBRID_SCORE_WEIGHT = 0.5
HYBRID_TIER_WEIGHT = 0.3
HYBRID_PERCENTAGE_WEIGHT = 0.2

# Tier ratios may drift this far from 1.0 before they are renormalized
TIER_RATIO_TOLERANCE = 0.01
DEFAULT_TIER_LABEL = "General"

# Performance coefficient
PERFORMANCE_HIGH_THRESHOLD = 0.8
PERFORMANCE_LOW_THRESHOLD = 0.4
PERFORMANCE_HIGH_COEFF = 1.2
PERFORMANCE_LOW_COEFF = 0.8

# Fallback for any missing or malformed coefficient term
NEUTRAL_COEFF = 1.0

# Special rules
NEW_HIRE_MONTHS = 12
NEW_HIRE_COEFF = 0.5
EXCELLENCE_SCORE_THRESHOLD = 0.9
EXCELLENCE_COEFF = 1.3
KEY_POSITION_COEFF = 1.1
DEFAULT_KEY_POSITION_LEVELS = ("senior",)

# Coefficient clamps
MIN_FINAL_COEFF = 0.1
MIN_SPECIAL_COEFF = 0.1
MAX_SPECIAL_COEFF = 5.0

# Step distribution: (minimum percentile, multiplier, band label), best band first
STEP_TIERS = [
    (0.9, 2.0, "top_10"),
    (0.7, 1.5, "top_30"),
    (0.4, 1.0, "top_60"),
    (0.2, 0.8, "top_80"),
]
STEP_FLOOR_MULTIPLIER = 0.6
STEP_FLOOR_LABEL = "bottom_20"

# Bound handling after floors/ceilings are applied
BOUND_STRATEGIES = ["preserve", "redistribute", "optimize"]
DEFAULT_BOUND_STRATEGY = "preserve"
REDISTRIBUTION_MAX_PASSES = 50

# Money
AMOUNT_DECIMALS = 2
AMOUNT_TOLERANCE = 0.01

# Fairness analysis
OUTLIER_IQR_MULTIPLIER = 1.5
MIN_OUTLIER_SAMPLE = 4
FAIRNESS_DECIMALS = 4
MAX_VALIDATION_DETAILS = 10

# Coefficient worker pool
DEFAULT_MAX_WORKERS = None
PARALLEL_THRESHOLD = 500

# Sensitivity analysis
SENSITIVITY_PARAMETERS = [
    "total_amount",
    "reserve_ratio",
    "base_allocation_ratio",
    "performance_allocation_ratio",
    "min_bonus_ratio",
    "max_bonus_ratio",
    "exponential_factor",
    "total_allocation_limit",
]
DEFAULT_SENSITIVITY_CHANGES = [-0.2, -0.1, 0.0, 0.1, 0.2]
SENSITIVITY_HIGH_RISK = 1.5
SENSITIVITY_MEDIUM_RISK = 1.0

# Pool status values
POOL_STATUSES = ["draft", "active", "allocated", "closed"]
