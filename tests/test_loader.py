"""Tests for DataFrame parsing, config building and sample data."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pandas as pd
import pytest

from data.loader import parse_employees, build_pool, build_rule
from data.sample_data import generate_employees_df, default_pool_config, default_rule_config
from data.validator import validate_employee_frame, validate_allocation_rule
from engine.allocation_engine import run_allocation


class TestParseEmployees:
    def test_optional_columns(self):
        df = pd.DataFrame({
            "Employee ID": [" E1 ", "E2"],
            "Final Score": [0.8, None],
            "Department ID": ["D1", "D2"],
            "Position Level": ["mid", None],
            "Work Months": [14, None],
            "Business Lines": ["retail, digital", None],
        })
        employees = parse_employees(df)

        assert employees[0].employee_id == "E1"
        assert employees[0].business_line_ids == ("retail", "digital")
        assert employees[0].work_months == 14.0
        assert employees[1].final_score is None
        assert employees[1].position_level is None
        assert employees[1].work_months == 0.0
        assert employees[1].performance_score is None

    def test_sample_frame_round_trip(self):
        df = generate_employees_df(count=20)
        employees = parse_employees(df)
        assert len(employees) == 20
        assert all(e.period == "2024-Q4" for e in employees)
        assert all(1 <= e.score_rank <= 20 for e in employees)


class TestBuildConfig:
    def test_empty_config_takes_defaults(self):
        rule = build_rule({})
        assert rule.allocation_method == "score_based"
        assert rule.base_allocation_ratio == 0.6
        assert rule.key_position_levels == ("senior",)
        assert not rule.has_bounds

    def test_nested_fields(self):
        rule = build_rule({
            "special_rules": {"key_position_bonus": True},
            "tier_config": [{"tier": "A", "ratio": 1.0}],
            "applicable_departments": ["D1"],
            "max_bonus_ratio": 1.5,
        })
        assert rule.special_rules.key_position_bonus
        assert not rule.special_rules.new_employee_reduction
        assert rule.tier_config[0].min_score == 0.0
        assert rule.applicable_departments == frozenset({"D1"})
        assert rule.has_bounds

    def test_pool(self):
        pool = build_pool({"id": "P9", "period": "2024", "total_amount": "5000", "reserve_ratio": 0.2})
        assert pool.total_amount == 5000.0
        assert pool.available_amount == pytest.approx(4000.0)


class TestSampleData:
    def test_sample_is_valid_and_deterministic(self):
        df = generate_employees_df(count=30, seed=7)
        assert validate_employee_frame(df).is_valid
        assert df.equals(generate_employees_df(count=30, seed=7))

    def test_default_configs_run(self):
        assert validate_allocation_rule(build_rule(default_rule_config())).is_valid
        pool = build_pool(default_pool_config())
        run = run_allocation(pool, build_rule(default_rule_config()), parse_employees(generate_employees_df()))
        assert run.summary.total_employees == 60
        assert run.summary.total_allocated <= pool.available_amount + 0.01
