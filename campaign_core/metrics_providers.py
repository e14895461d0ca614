from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from campaign_core.changes import calculate_percent_change, change_direction, percent_change
from campaign_core.charts import METRIC_LABELS, to_vega_spec, week_comparison_chart
from campaign_core.filters import DashboardFilters
from campaign_core.models import METRICS, AggregateResult


def compute_providers(
    filters: DashboardFilters,
    ctx: Dict[str, Any],
    *,
    metric: Optional[str] = None,
) -> Dict[str, Any]:
    metric = metric if metric in METRICS else filters.metric
    result: AggregateResult = ctx.get("result") or AggregateResult()
    providers_df: pd.DataFrame = ctx.get("providers", pd.DataFrame())

    q = filters.provider_query.lower()
    providers = [p for p in result.providers if q in p.name.lower()] if q else list(result.providers)

    rows = []
    for p in providers:
        week1 = p.metric(1, metric)
        week2 = p.metric(2, metric)
        change = percent_change(week1, week2)
        rows.append(
            {
                "name": p.name,
                "week1": week1,
                "week2": week2,
                "change": calculate_percent_change(week1, week2),
                "change_value": change,
                "direction": change_direction(change),
            }
        )

    charts: Dict[str, Any] = {}
    if providers and not providers_df.empty:
        names = {p.name for p in providers}
        chart_df = providers_df[providers_df["name"].isin(names)]
        charts["comparison"] = to_vega_spec(week_comparison_chart(chart_df, metric))

    return {
        "filters": asdict(filters),
        "metric": metric,
        "metric_label": METRIC_LABELS[metric],
        "options": [p.name for p in result.providers],
        "rows": rows,
        "charts": charts,
    }
