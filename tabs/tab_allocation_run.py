"""Tab 1: Allocation Run - execute the engine and inspect per-employee results."""

import streamlit as st

from data.session_store import get_employees, get_last_run, get_last_error, set_last_run, is_data_loaded
from data.loader import build_pool, build_rule
from engine.allocation_engine import run_allocation, simulate_allocation, apply_run_to_pool
from engine.errors import BonusAllocationError
from engine.fairness import results_to_dataframe
from components.metrics_cards import render_summary_cards, render_alerts
from components.tables import render_results_table


def render(sidebar_state):
    """Render the Allocation Run tab."""
    st.header("Allocation Run")

    if not is_data_loaded():
        st.info("No scored population loaded. Generate a sample population from the sidebar.")
        return

    pool = build_pool(sidebar_state.pool_config)
    rule = build_rule(sidebar_state.rule_config)
    st.caption(
        f"Pool {pool.id} ({pool.period}): {pool.total_amount:,.2f} total, "
        f"{pool.available_amount:,.2f} available after {pool.reserve_ratio:.0%} reserve"
    )

    col1, col2 = st.columns(2)
    with col1:
        simulate = st.button("Simulate", key="btn_simulate")
    with col2:
        execute = st.button("Run Allocation", type="primary", key="btn_run")

    if simulate or execute:
        try:
            if simulate:
                run = simulate_allocation(pool, rule, get_employees())
            else:
                run = run_allocation(pool, rule, get_employees())
            set_last_run(run)
        except BonusAllocationError as e:
            set_last_run(None, error=str(e))

    error = get_last_error()
    if error:
        st.error(error)
        return

    run = get_last_run()
    if run is None:
        st.info("Press Simulate or Run Allocation to compute bonuses.")
        return

    if run.is_simulation:
        st.caption("Simulation preview - not applied to the pool.")
    else:
        updated = apply_run_to_pool(run.pool, run)
        st.success(
            f"Pool {updated.id} is {updated.status}: {updated.allocated_amount:,.2f} "
            f"to {updated.allocated_count} employees."
        )

    render_summary_cards(run.summary)
    render_alerts(run.summary, run.warnings)

    st.divider()
    st.subheader("Results")
    render_results_table(results_to_dataframe(run.results))

    st.divider()
    st.subheader("Explanation")
    ids = [r.employee_id for r in run.results]
    selected = st.selectbox("Employee", ids, key="explain_employee")
    result = next((r for r in run.results if r.employee_id == selected), None)
    if result:
        for step in result.explanation_steps:
            st.markdown(f"- {step}")
