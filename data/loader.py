"""DataFrame and config-dict parsing into typed model objects."""

import pandas as pd
from typing import List, Optional
from models.pool import BonusPool
from models.rule import AllocationRule, SpecialRules, TierConfig
from models.employee import EligibleEmployee
from config.defaults import (
    DEFAULT_ALLOCATION_METHOD, DEFAULT_SCORE_DISTRIBUTION_METHOD,
    DEFAULT_EXPONENTIAL_FACTOR, DEFAULT_BASE_ALLOCATION_RATIO,
    DEFAULT_PERFORMANCE_ALLOCATION_RATIO, DEFAULT_TOTAL_ALLOCATION_LIMIT,
    DEFAULT_MIN_SCORE_THRESHOLD, DEFAULT_FIXED_AMOUNT,
    DEFAULT_KEY_POSITION_LEVELS, DEFAULT_BOUND_STRATEGY, DEFAULT_RESERVE_RATIO,
)


def _optional(row, df: pd.DataFrame, column: str):
    if column in df.columns and pd.notna(row.get(column)):
        return row[column]
    return None


def _text(value) -> Optional[str]:
    return str(value).strip() if value is not None else None


def parse_employees(df: pd.DataFrame) -> List[EligibleEmployee]:
    """Convert a scored-employees DataFrame into EligibleEmployee objects.

    Scores are passed through untouched; the eligibility filter decides
    what counts as a usable score.
    """
    employees = []
    for _, row in df.iterrows():
        rank = _optional(row, df, "Score Rank")
        percentile = _optional(row, df, "Percentile Rank")
        months = _optional(row, df, "Work Months")
        perf = _optional(row, df, "Performance Score")
        lines = _optional(row, df, "Business Lines")
        score = row["Final Score"]

        employees.append(EligibleEmployee(
            employee_id=str(row["Employee ID"]).strip(),
            final_score=None if pd.isna(score) else score,
            score_rank=int(rank) if rank is not None else None,
            percentile_rank=float(percentile) if percentile is not None else None,
            position_level=_text(_optional(row, df, "Position Level")),
            department_id=_text(_optional(row, df, "Department ID")),
            work_months=float(months) if months is not None else 0.0,
            performance_score=float(perf) if perf is not None else None,
            business_line_ids=tuple(s.strip() for s in str(lines).split(",") if s.strip()) if lines else (),
            period=_text(_optional(row, df, "Period")),
            employee_name=_text(_optional(row, df, "Employee Name")) or "",
            department_name=_text(_optional(row, df, "Department Name")) or "",
        ))
    return employees


def build_pool(config: dict) -> BonusPool:
    """Build a BonusPool from a plain config dict (sidebar or scenario input)."""
    return BonusPool(
        id=str(config.get("id", "pool")),
        period=str(config.get("period", "")),
        total_amount=float(config.get("total_amount", 0.0)),
        reserve_ratio=float(config.get("reserve_ratio", DEFAULT_RESERVE_RATIO)),
        status=config.get("status", "active"),
    )


def build_rule(rule_config: dict) -> AllocationRule:
    """Build an AllocationRule from a plain config dict; missing keys take defaults."""
    cfg = rule_config
    special = cfg.get("special_rules", {})
    tiers = [
        TierConfig(tier=str(t["tier"]), ratio=float(t["ratio"]), min_score=float(t.get("min_score", 0.0)))
        for t in cfg.get("tier_config", [])
    ]

    return AllocationRule(
        id=str(cfg.get("id", "rule")),
        name=cfg.get("name", ""),
        version=int(cfg.get("version", 1)),
        allocation_method=cfg.get("allocation_method", DEFAULT_ALLOCATION_METHOD),
        base_allocation_ratio=cfg.get("base_allocation_ratio", DEFAULT_BASE_ALLOCATION_RATIO),
        performance_allocation_ratio=cfg.get("performance_allocation_ratio", DEFAULT_PERFORMANCE_ALLOCATION_RATIO),
        score_distribution_method=cfg.get("score_distribution_method", DEFAULT_SCORE_DISTRIBUTION_METHOD),
        exponential_factor=cfg.get("exponential_factor", DEFAULT_EXPONENTIAL_FACTOR),
        position_level_weights=dict(cfg.get("position_level_weights", {})),
        department_weights=dict(cfg.get("department_weights", {})),
        special_rules=SpecialRules(
            new_employee_reduction=bool(special.get("new_employee_reduction", False)),
            excellent_employee_bonus=bool(special.get("excellent_employee_bonus", False)),
            key_position_bonus=bool(special.get("key_position_bonus", False)),
        ),
        key_position_levels=tuple(cfg.get("key_position_levels", DEFAULT_KEY_POSITION_LEVELS)),
        min_bonus_amount=cfg.get("min_bonus_amount"),
        max_bonus_amount=cfg.get("max_bonus_amount"),
        min_bonus_ratio=cfg.get("min_bonus_ratio"),
        max_bonus_ratio=cfg.get("max_bonus_ratio"),
        total_allocation_limit=cfg.get("total_allocation_limit", DEFAULT_TOTAL_ALLOCATION_LIMIT),
        min_score_threshold=cfg.get("min_score_threshold", DEFAULT_MIN_SCORE_THRESHOLD),
        tier_config=tiers,
        fixed_amount=cfg.get("fixed_amount", DEFAULT_FIXED_AMOUNT),
        applicable_business_lines=frozenset(cfg.get("applicable_business_lines", ())),
        applicable_departments=frozenset(cfg.get("applicable_departments", ())),
        applicable_position_levels=frozenset(cfg.get("applicable_position_levels", ())),
        bound_strategy=cfg.get("bound_strategy", DEFAULT_BOUND_STRATEGY),
        normalize_step_ratios=bool(cfg.get("normalize_step_ratios", False)),
    )
