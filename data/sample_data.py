"""Generate synthetic scored-employee datasets for the bonus allocation dashboard."""

import pandas as pd
import random


DEPARTMENTS = [
    ("D01", "Engineering"),
    ("D02", "Product"),
    ("D03", "Sales"),
    ("D04", "Finance"),
    ("D05", "Operations"),
]

POSITION_LEVELS = ["junior", "mid", "senior"]

BUSINESS_LINES = ["retail", "wholesale", "digital"]


def generate_employees_df(count: int = 60, period: str = "2024-Q4", seed: int = 42) -> pd.DataFrame:
    """Generate a scored population with ranks, levels, tenure and performance."""
    rng = random.Random(seed)
    rows = []
    for i in range(1, count + 1):
        dept_id, dept_name = rng.choice(DEPARTMENTS)
        rows.append({
            "Employee ID": f"E{i:04d}",
            "Employee Name": f"Employee {i}",
            "Final Score": round(rng.uniform(0.3, 1.0), 4),
            "Department ID": dept_id,
            "Department Name": dept_name,
            "Position Level": rng.choices(POSITION_LEVELS, weights=[5, 3, 2])[0],
            "Work Months": rng.choice([3, 8, 14, 26, 40, 72]),
            "Performance Score": round(rng.uniform(0.3, 1.0), 3),
            "Business Lines": ",".join(rng.sample(BUSINESS_LINES, rng.randint(1, 2))),
            "Period": period,
        })

    df = pd.DataFrame(rows)
    ordered = df["Final Score"].rank(method="first", ascending=False).astype(int)
    df["Score Rank"] = ordered
    df["Percentile Rank"] = ((len(df) - ordered + 1) / len(df) * 100).round(2)
    return df


def default_pool_config(period: str = "2024-Q4") -> dict:
    return {
        "id": "pool-2024-q4",
        "period": period,
        "total_amount": 1_000_000.0,
        "reserve_ratio": 0.05,
    }


def default_rule_config() -> dict:
    return {
        "id": "rule-standard",
        "name": "Standard",
        "allocation_method": "score_based",
        "score_distribution_method": "linear",
        "base_allocation_ratio": 0.6,
        "performance_allocation_ratio": 0.4,
        "exponential_factor": 2.0,
        "position_level_weights": {"junior": 0.9, "mid": 1.0, "senior": 1.2},
        "department_weights": {},
        "special_rules": {
            "new_employee_reduction": True,
            "excellent_employee_bonus": True,
            "key_position_bonus": False,
        },
        "min_bonus_ratio": None,
        "max_bonus_ratio": None,
        "total_allocation_limit": 1.0,
        "min_score_threshold": 0.0,
        "tier_config": [
            {"tier": "A", "ratio": 0.4, "min_score": 0.85},
            {"tier": "B", "ratio": 0.35, "min_score": 0.6},
            {"tier": "C", "ratio": 0.25, "min_score": 0.0},
        ],
        "fixed_amount": 10000.0,
        "bound_strategy": "preserve",
        "normalize_step_ratios": False,
    }
