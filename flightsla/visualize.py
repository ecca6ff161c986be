from typing import Optional

import pandas as pd
import plotly.graph_objects as go

MET_COLOR = "seagreen"
MISSED_COLOR = "lightgrey"
TARGET_COLOR = "firebrick"


def _bar_colors(chart_df: pd.DataFrame):
    return [MET_COLOR if met else MISSED_COLOR for met in chart_df["met"]]


def _add_target_markers(fig: go.Figure, chart_df: pd.DataFrame) -> None:
    fig.add_trace(go.Scatter(
        x=chart_df["label"],
        y=chart_df["target"],
        name="SLA Target",
        mode="markers",
        marker=dict(symbol="line-ew", size=40, line=dict(color=TARGET_COLOR, width=3)),
        hovertemplate="Target: %{y}%<extra></extra>",
    ))


def plot_sla_performance(chart_df: pd.DataFrame, output_path: Optional[str] = None) -> go.Figure:
    """
    Creates a bar chart of the realized SLA score per checkpoint against its target.

    Args:
        chart_df: Output of report.sla_chart_frame (label, realized, target, met).
        output_path: When given, the chart is also saved there as HTML.

    Returns:
        The plotly Figure, so the dashboard can render it in place.
    """
    print("Generating SLA performance plot...")
    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=chart_df["label"],
        y=chart_df["realized"],
        name="Realized",
        marker_color=_bar_colors(chart_df),
        text=[f"{v:.1f}%" for v in chart_df["realized"]],
        textposition="outside",
    ))
    _add_target_markers(fig, chart_df)

    fig.update_layout(
        title_text="<b>SLA Performance by Checkpoint</b>",
        xaxis_title="Checkpoint",
        yaxis_title="Score (%)",
        yaxis=dict(range=[0, 110]),
        template="plotly_white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )

    if output_path:
        fig.write_html(output_path)
        print(f"Saved SLA performance plot to {output_path}")
    return fig


def plot_lost_found(chart_df: pd.DataFrame, output_path: Optional[str] = None) -> go.Figure:
    """Bar chart of each lost and found compliance rate against the 95% target."""
    print("Generating lost and found plot...")
    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=chart_df["label"],
        y=chart_df["realized"],
        name="Compliance",
        marker_color=_bar_colors(chart_df),
        text=[f"{v}%" for v in chart_df["realized"]],
        textposition="outside",
    ))
    _add_target_markers(fig, chart_df)

    fig.update_layout(
        title_text="<b>Lost and Found Compliance</b>",
        yaxis_title="Compliance (%)",
        yaxis=dict(range=[0, 110]),
        template="plotly_white",
    )

    if output_path:
        fig.write_html(output_path)
        print(f"Saved lost and found plot to {output_path}")
    return fig
