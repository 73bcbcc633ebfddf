"""Styled dataframe display helpers."""

import streamlit as st
import pandas as pd


def render_results_table(df: pd.DataFrame):
    """Result rows with clamped amounts highlighted."""
    def highlight_bounds(row):
        if row.get("min_amount_applied"):
            return ["background-color: #fff3cd"] * len(row)
        if row.get("max_amount_applied"):
            return ["background-color: #ffcccc"] * len(row)
        return [""] * len(row)

    styled = df.style.apply(highlight_bounds, axis=1).format({
        "final_score": "{:.4f}",
        "distribution_ratio": "{:.4%}",
        "final_coeff": "{:.3f}",
        "base_amount": "{:,.2f}",
        "performance_amount": "{:,.2f}",
        "adjustment_amount": "{:+,.2f}",
        "total_amount": "{:,.2f}",
    })
    st.dataframe(styled, use_container_width=True)


def render_comparison_table(df: pd.DataFrame, change_column: str = "Change"):
    """Render a comparison table with positive/negative highlighting."""
    def color_change(val):
        try:
            v = float(val)
            if v > 0:
                return "color: #155724; font-weight: bold"
            elif v < 0:
                return "color: #cc0000; font-weight: bold"
        except (ValueError, TypeError):
            pass
        return ""

    if change_column in df.columns:
        styled = df.style.map(color_change, subset=[change_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)


def render_risk_badge(risk_level: str, recommended_range: str):
    colors = {"High": "red", "Medium": "orange", "Low": "green"}
    st.markdown(
        f":{colors.get(risk_level, 'gray')}[**{risk_level} sensitivity**] "
        f"- recommended adjustment range {recommended_range}"
    )
