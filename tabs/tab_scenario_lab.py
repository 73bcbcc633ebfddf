"""Tab 3: Scenario Lab - rule/pool what-ifs and parameter sensitivity."""

import uuid

import streamlit as st
import pandas as pd

from data.session_store import get_employees, get_scenarios, add_scenario, is_data_loaded
from data.loader import build_pool, build_rule
from models.scenario import AllocationScenario
from engine.scenario_engine import run_scenario, compare_scenarios, summarize_comparison, run_sensitivity
from engine.errors import BonusAllocationError
from components.tables import render_comparison_table, render_risk_badge
from components.charts import scenario_comparison_bar, sensitivity_line
from config.defaults import SENSITIVITY_PARAMETERS, ALLOCATION_METHODS, SCORE_DISTRIBUTION_METHODS


def _render_scenario_builder(pool, rule, employees):
    st.subheader("New Scenario")
    col1, col2, col3 = st.columns(3)
    with col1:
        name = st.text_input("Scenario name", value=f"Scenario {len(get_scenarios()) + 1}")
        total = st.number_input("Pool total", min_value=0.0, value=float(pool.total_amount), step=10000.0)
    with col2:
        method = st.selectbox(
            "Allocation method", ALLOCATION_METHODS,
            index=ALLOCATION_METHODS.index(rule.allocation_method), key="scenario_method",
        )
        curve = st.selectbox(
            "Score distribution", SCORE_DISTRIBUTION_METHODS,
            index=SCORE_DISTRIBUTION_METHODS.index(rule.score_distribution_method), key="scenario_curve",
        )
    with col3:
        max_ratio = st.number_input(
            "Max bonus ratio (0 = none)", min_value=0.0,
            value=float(rule.max_bonus_ratio or 0.0), step=0.1,
        )
        description = st.text_input("Description", value="")

    if st.button("Run Scenario", type="primary", key="btn_run_scenario"):
        pool_overrides = {"total_amount": total} if total != pool.total_amount else {}
        rule_overrides = {}
        if method != rule.allocation_method:
            rule_overrides["allocation_method"] = method
        if curve != rule.score_distribution_method:
            rule_overrides["score_distribution_method"] = curve
        if (max_ratio or None) != rule.max_bonus_ratio:
            rule_overrides["max_bonus_ratio"] = max_ratio or None

        scenario = AllocationScenario(
            scenario_id=uuid.uuid4().hex[:8],
            name=name,
            description=description,
            rule_overrides=rule_overrides,
            pool_overrides=pool_overrides,
        )
        try:
            add_scenario(run_scenario(scenario, pool, rule, employees))
            st.success(f"Scenario '{name}' simulated with {len(rule_overrides) + len(pool_overrides)} overrides.")
        except BonusAllocationError as e:
            st.error(f"Scenario '{name}' failed: {e}")


def _render_comparison():
    scenarios = [s for s in get_scenarios().values() if s.run is not None]
    if len(scenarios) < 2:
        st.info("Run at least two scenarios to compare them.")
        return

    st.subheader("Compare Scenarios")
    names = {s.scenario_id: s.name for s in scenarios}
    ids = list(names)
    col1, col2 = st.columns(2)
    with col1:
        a_id = st.selectbox("Scenario A", ids, format_func=names.get, index=0, key="cmp_a")
    with col2:
        b_id = st.selectbox("Scenario B", ids, format_func=names.get, index=1, key="cmp_b")

    a = get_scenarios()[a_id]
    b = get_scenarios()[b_id]
    delta = summarize_comparison(a, b)
    st.markdown(
        f"Moving from **{a.name}** to **{b.name}** changes the total by "
        f"**{delta['total_allocated_change']:+,.2f}**, the mean bonus by "
        f"**{delta['mean_change']:+,.2f}** and the Gini by **{delta['gini_change']:+.4f}**."
    )

    diff_df = pd.DataFrame(compare_scenarios(a, b))
    render_comparison_table(diff_df)
    st.plotly_chart(scenario_comparison_bar(diff_df), use_container_width=True)


def _render_sensitivity(pool, rule, employees):
    st.subheader("Sensitivity Analysis")
    parameter = st.selectbox("Parameter", SENSITIVITY_PARAMETERS, key="sens_param")
    if not st.button("Analyze", key="btn_sensitivity"):
        return

    try:
        result = run_sensitivity(pool, rule, employees, parameter)
    except (ValueError, BonusAllocationError) as e:
        st.error(str(e))
        return

    render_risk_badge(result.risk_level, result.recommended_range)
    st.caption(f"Sensitivity coefficient {result.coefficient:.3f} around {result.base_value}")
    st.plotly_chart(sensitivity_line(result.rows, parameter), use_container_width=True)
    st.dataframe(pd.DataFrame(result.rows), use_container_width=True)


def render(sidebar_state):
    """Render the Scenario Lab tab."""
    st.header("Scenario Lab")

    if not is_data_loaded():
        st.info("No scored population loaded. Generate a sample population from the sidebar.")
        return

    pool = build_pool(sidebar_state.pool_config)
    rule = build_rule(sidebar_state.rule_config)
    employees = get_employees()

    _render_scenario_builder(pool, rule, employees)
    st.divider()
    _render_comparison()
    st.divider()
    _render_sensitivity(pool, rule, employees)
