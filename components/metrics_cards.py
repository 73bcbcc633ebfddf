"""KPI cards and alerts for allocation summaries."""

import streamlit as st
from typing import List

from models.summary import AllocationSummary


def render_summary_cards(summary: AllocationSummary):
    """Headline figures of one allocation run."""
    metrics = [
        {"label": "Employees", "value": f"{summary.total_employees:,}"},
        {"label": "Total Allocated", "value": f"{summary.total_allocated:,.2f}"},
        {
            "label": "Allocation Ratio",
            "value": f"{summary.allocation_ratio:.1%}",
            "delta": f"{summary.remaining_amount:,.2f} remaining",
            "delta_color": "off",
        },
        {"label": "Gini", "value": f"{summary.fairness.gini_coefficient:.3f}"},
        {"label": "Score Correlation", "value": f"{summary.fairness.correlation_with_score:.3f}"},
    ]
    cols = st.columns(len(metrics))
    for col, m in zip(cols, metrics):
        with col:
            st.metric(
                label=m["label"],
                value=m["value"],
                delta=m.get("delta"),
                delta_color=m.get("delta_color", "normal"),
            )


def render_alerts(summary: AllocationSummary, warnings: List[str]):
    """Validation failures as errors, budget drift and run warnings as warnings."""
    if not summary.validation.is_valid:
        st.error(
            f"{summary.validation.error_count} results failed validation; "
            f"first issue: {summary.validation.error_details[0]['errors'][0]}",
            icon="🔴",
        )
    if summary.allocation_ratio > 1:
        st.warning(
            f"Minimum bonus floors pushed the total to {summary.allocation_ratio:.1%} "
            f"of the distributable amount.",
            icon="🟡",
        )
    for w in warnings:
        st.info(w, icon="🔵")
