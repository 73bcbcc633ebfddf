"""Global sidebar controls for the pool, the allocation rule and sample data."""

import streamlit as st
from dataclasses import dataclass
from data.session_store import (
    get_pool_config, get_rule_config, set_pool_config, set_rule_config,
    set_employees, set_last_run, is_data_loaded,
)
from data.sample_data import generate_employees_df
from data.loader import parse_employees
from data.validator import validate_employee_frame
from config.defaults import ALLOCATION_METHODS, SCORE_DISTRIBUTION_METHODS, BOUND_STRATEGIES


@dataclass
class SidebarState:
    pool_config: dict
    rule_config: dict


def _optional_number(label: str, current, key: str, step: float):
    enabled = st.checkbox(label, value=current is not None, key=f"{key}_on")
    if not enabled:
        return None
    return st.number_input(
        f"{label} value", min_value=0.0, value=float(current or 0.0), step=step, key=key,
    )


def _load_sample_population(count: int, period: str):
    df = generate_employees_df(count=count, period=period)
    check = validate_employee_frame(df)
    if not check.is_valid:
        for e in check.errors:
            st.error(e)
        return
    set_employees(parse_employees(df))
    set_last_run(None)


def render_sidebar() -> SidebarState:
    """Render the global sidebar controls and return current state."""
    pool_cfg = dict(get_pool_config())
    rule_cfg = dict(get_rule_config())

    with st.sidebar:
        st.title("Bonus Pool Allocation")
        st.divider()

        # --- Population ---
        count = st.number_input("Sample employees", min_value=1, max_value=5000, value=60, step=10)
        if st.button("Generate sample population", key="btn_sample"):
            _load_sample_population(int(count), pool_cfg.get("period", ""))
        if is_data_loaded():
            st.success("Scored population loaded")
        else:
            st.warning("No scored population loaded")

        st.divider()

        # --- Pool ---
        st.subheader("Bonus Pool")
        pool_cfg["period"] = st.text_input("Period", value=pool_cfg.get("period", ""))
        pool_cfg["total_amount"] = st.number_input(
            "Total amount", min_value=0.0, value=float(pool_cfg.get("total_amount", 0.0)), step=10000.0,
        )
        pool_cfg["reserve_ratio"] = st.slider(
            "Reserve ratio", min_value=0.0, max_value=0.5,
            value=float(pool_cfg.get("reserve_ratio", 0.0)), step=0.01,
        )

        st.divider()

        # --- Rule ---
        st.subheader("Allocation Rule")
        rule_cfg["allocation_method"] = st.selectbox(
            "Allocation method", ALLOCATION_METHODS,
            index=ALLOCATION_METHODS.index(rule_cfg.get("allocation_method", ALLOCATION_METHODS[0])),
        )
        rule_cfg["score_distribution_method"] = st.selectbox(
            "Score distribution", SCORE_DISTRIBUTION_METHODS,
            index=SCORE_DISTRIBUTION_METHODS.index(
                rule_cfg.get("score_distribution_method", SCORE_DISTRIBUTION_METHODS[0])
            ),
        )
        if rule_cfg["score_distribution_method"] == "exponential":
            rule_cfg["exponential_factor"] = st.number_input(
                "Exponential factor", min_value=0.1, max_value=10.0,
                value=float(rule_cfg.get("exponential_factor", 2.0)), step=0.1,
            )
        if rule_cfg["score_distribution_method"] == "step":
            rule_cfg["normalize_step_ratios"] = st.checkbox(
                "Normalize step ratios", value=bool(rule_cfg.get("normalize_step_ratios", False)),
            )

        base_ratio = st.slider(
            "Base allocation ratio", min_value=0.0, max_value=1.0,
            value=float(rule_cfg.get("base_allocation_ratio", 0.6)), step=0.05,
        )
        rule_cfg["base_allocation_ratio"] = base_ratio
        rule_cfg["performance_allocation_ratio"] = round(1.0 - base_ratio, 4)
        st.caption(f"Performance allocation ratio: {rule_cfg['performance_allocation_ratio']:.0%}")

        rule_cfg["total_allocation_limit"] = st.slider(
            "Total allocation limit", min_value=0.5, max_value=1.0,
            value=float(rule_cfg.get("total_allocation_limit", 1.0)), step=0.05,
        )

        with st.expander("Bounds", expanded=False):
            rule_cfg["min_bonus_ratio"] = _optional_number(
                "Min bonus ratio", rule_cfg.get("min_bonus_ratio"), "min_ratio", 0.05)
            rule_cfg["max_bonus_ratio"] = _optional_number(
                "Max bonus ratio", rule_cfg.get("max_bonus_ratio"), "max_ratio", 0.05)
            rule_cfg["bound_strategy"] = st.selectbox(
                "Bound strategy", BOUND_STRATEGIES,
                index=BOUND_STRATEGIES.index(rule_cfg.get("bound_strategy", BOUND_STRATEGIES[0])),
            )

        with st.expander("Special rules", expanded=False):
            special = dict(rule_cfg.get("special_rules", {}))
            special["new_employee_reduction"] = st.checkbox(
                "New employee reduction", value=special.get("new_employee_reduction", False))
            special["excellent_employee_bonus"] = st.checkbox(
                "Excellent employee bonus", value=special.get("excellent_employee_bonus", False))
            special["key_position_bonus"] = st.checkbox(
                "Key position bonus", value=special.get("key_position_bonus", False))
            rule_cfg["special_rules"] = special

    set_pool_config(pool_cfg)
    set_rule_config(rule_cfg)
    return SidebarState(pool_config=pool_cfg, rule_config=rule_cfg)
