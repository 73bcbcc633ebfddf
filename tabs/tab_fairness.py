"""Tab 2: Fairness & Quality - distribution statistics, equity and outliers."""

import streamlit as st
import pandas as pd

from data.session_store import get_last_run
from engine.fairness import results_to_dataframe, lorenz_curve
from components.metrics_cards import render_summary_cards
from components.charts import amount_histogram, lorenz_chart, score_vs_amount_scatter, department_bar


def render(sidebar_state):
    """Render the Fairness & Quality tab."""
    st.header("Fairness & Quality")

    run = get_last_run()
    if run is None or not run.results:
        st.info("No allocation results available. Run an allocation first.")
        return

    summary = run.summary
    df = results_to_dataframe(run.results)

    render_summary_cards(summary)

    stats = summary.statistics
    st.markdown(
        f"Mean **{stats.mean:,.2f}**, median **{stats.median:,.2f}**, "
        f"range **{stats.min:,.2f} - {stats.max:,.2f}**, "
        f"std dev **{stats.std_dev:,.2f}** (CV {summary.fairness.variation_coefficient:.3f})."
    )

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(amount_histogram(df), use_container_width=True)
    with col2:
        points = lorenz_curve(df["total_amount"].tolist())
        st.plotly_chart(lorenz_chart(points, summary.fairness.gini_coefficient), use_container_width=True)

    st.plotly_chart(score_vs_amount_scatter(df), use_container_width=True)
    st.plotly_chart(department_bar(summary.by_department), use_container_width=True)

    st.divider()
    st.subheader("Quality")
    q = summary.quality
    col1, col2, col3 = st.columns(3)
    col1.metric("Raised to minimum", q.min_amount_applied_count)
    col2.metric("Capped at maximum", q.max_amount_applied_count)
    col3.metric("Outliers", q.anomaly_count)

    if q.outliers:
        st.dataframe(
            pd.DataFrame([{"Employee": o.employee_id, "Bonus": o.amount} for o in q.outliers]),
            use_container_width=True,
        )

    if summary.by_tier:
        st.subheader("By Tier")
        st.dataframe(
            pd.DataFrame([
                {"Tier": tier, "Employees": v["count"], "Amount": v["amount"]}
                for tier, v in summary.by_tier.items()
            ]),
            use_container_width=True,
        )
