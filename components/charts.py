"""Plotly chart builders for the bonus allocation dashboard."""

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import List, Tuple


def amount_histogram(results_df: pd.DataFrame, title: str = "Bonus Amount Distribution") -> go.Figure:
    """Histogram of final bonus totals."""
    fig = px.histogram(
        results_df, x="total_amount", nbins=20,
        labels={"total_amount": "Bonus"},
        title=title,
        color_discrete_sequence=["#4A90D9"],
    )
    fig.update_layout(yaxis_title="Employees", height=380, bargap=0.05)
    return fig


def lorenz_chart(points: List[Tuple[float, float]], gini: float) -> go.Figure:
    """Lorenz curve against the line of equality."""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=[0, 1], y=[0, 1], mode="lines",
        name="Equality", line=dict(color="#999999", dash="dash"),
    ))
    fig.add_trace(go.Scatter(
        x=xs, y=ys, mode="lines", fill="tonexty",
        name="Allocation", line=dict(color="#E8734A"),
    ))
    fig.update_layout(
        title=f"Lorenz Curve (Gini {gini:.3f})",
        xaxis_title="Share of employees",
        yaxis_title="Share of bonus",
        xaxis_tickformat=".0%",
        yaxis_tickformat=".0%",
        height=380,
    )
    return fig


def score_vs_amount_scatter(results_df: pd.DataFrame) -> go.Figure:
    """Final score against bonus, colored by tier."""
    fig = px.scatter(
        results_df, x="final_score", y="total_amount",
        color="tier_level",
        hover_data=["employee_id", "department_id", "final_coeff"],
        labels={"final_score": "Final Score", "total_amount": "Bonus", "tier_level": "Tier"},
        title="Score vs Bonus",
    )
    fig.update_layout(height=400)
    return fig


def department_bar(by_department: dict) -> go.Figure:
    """Total bonus and headcount by department."""
    df = pd.DataFrame([
        {"Department": dept, "Amount": v["amount"], "Employees": v["count"]}
        for dept, v in by_department.items()
    ])
    fig = px.bar(
        df, x="Department", y="Amount",
        text="Employees",
        title="Bonus by Department",
        color_discrete_sequence=["#4A90D9"],
    )
    fig.update_traces(texttemplate="%{text} emp", textposition="outside")
    fig.update_layout(height=400, yaxis_title="Bonus")
    return fig


def sensitivity_line(rows: List[dict], parameter: str) -> go.Figure:
    """Total allocated and Gini across the tested parameter changes."""
    df = pd.DataFrame([r for r in rows if r["total_allocated"] is not None])
    fig = go.Figure()
    if df.empty:
        fig.update_layout(title=f"Sensitivity: {parameter} (no valid points)", height=380)
        return fig

    fig.add_trace(go.Scatter(
        x=df["change"], y=df["total_allocated"], mode="lines+markers",
        name="Total allocated", line=dict(color="#4A90D9"),
    ))
    fig.add_trace(go.Scatter(
        x=df["change"], y=df["gini"], mode="lines+markers",
        name="Gini", yaxis="y2", line=dict(color="#E8734A"),
    ))
    fig.update_layout(
        title=f"Sensitivity: {parameter}",
        xaxis_title="Relative change",
        xaxis_tickformat="+.0%",
        yaxis_title="Total allocated",
        yaxis2=dict(title="Gini", overlaying="y", side="right"),
        height=380,
    )
    return fig


def scenario_comparison_bar(comparison_df: pd.DataFrame) -> go.Figure:
    """Bar chart comparing per-employee bonuses across two scenarios."""
    fig = go.Figure()

    cols = [c for c in comparison_df.columns if c.endswith(" Bonus")]
    colors = ["#4A90D9", "#E8734A"]

    for i, col in enumerate(cols[:2]):
        fig.add_trace(go.Bar(
            name=col,
            x=comparison_df["Employee"],
            y=comparison_df[col],
            marker_color=colors[i % 2],
        ))

    fig.update_layout(
        barmode="group",
        title="Scenario Bonus Comparison",
        xaxis_title="Employee",
        yaxis_title="Bonus",
        height=400,
    )
    return fig
