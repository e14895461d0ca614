from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

WEEK_COLORS = ["#3B82F6", "#10B981"]

METRIC_LABELS = {
    "enrollments": "Enrollments",
    "impressions": "Impressions",
    "revenue": "Revenue",
    "cvr": "CVR",
}
METRIC_AXIS_FORMATS = {
    "enrollments": ",",
    "impressions": "~s",
    "revenue": "$~s",
    "cvr": ".2f",
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def week_comparison_chart(providers: pd.DataFrame, metric: str = "enrollments", height: int = 384) -> alt.Chart:
    """Grouped bars per provider: week 1 next to week 2 for one metric."""
    label = METRIC_LABELS.get(metric, metric.capitalize())
    series = [f"Week 1 {label}", f"Week 2 {label}"]
    value_cols = [f"week1_{metric}", f"week2_{metric}"]

    long = providers[["name"] + value_cols].rename(columns=dict(zip(value_cols, series)))
    long = long.melt(id_vars="name", value_vars=series, var_name="series", value_name="value")
    long["value"] = pd.to_numeric(long["value"], errors="coerce")
    long = long.dropna(subset=["value"])

    hover = alt.selection_point(fields=["name"], on="mouseover", empty="all")
    return (
        alt.Chart(long)
        .mark_bar()
        .encode(
            x=alt.X(
                "name:N",
                title=None,
                sort=providers["name"].tolist(),
                axis=alt.Axis(labelAngle=-45, labelOverlap=False, grid=False),
            ),
            xOffset=alt.XOffset("series:N", sort=series),
            y=alt.Y(
                "value:Q",
                title=label,
                axis=alt.Axis(format=METRIC_AXIS_FORMATS.get(metric, "~s"), gridDash=[3, 3], domain=False, ticks=False),
            ),
            color=alt.Color(
                "series:N",
                title=None,
                scale=alt.Scale(domain=series, range=WEEK_COLORS),
                legend=alt.Legend(orient="bottom"),
            ),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[
                alt.Tooltip("name:N", title="Provider"),
                alt.Tooltip("series:N", title="Series"),
                alt.Tooltip("value:Q", title=label, format=","),
            ],
        )
        .add_params(hover)
        .properties(height=height)
    )
