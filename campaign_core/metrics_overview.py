from __future__ import annotations

from dataclasses import asdict
from typing import Any, Callable, Dict, List, Tuple

import pandas as pd

from campaign_core.changes import (
    calculate_percent_change,
    change_direction,
    enrollment_change,
    largest_changes,
    percent_change,
    top_performers,
)
from campaign_core.charts import to_vega_spec, week_comparison_chart
from campaign_core.data import format_currency, format_cvr, format_number
from campaign_core.filters import DashboardFilters
from campaign_core.models import AggregateResult, Summary

SUMMARY_CARDS: List[Tuple[str, str, Callable[[object], str]]] = [
    ("enrollments", "Total Enrollments", format_number),
    ("impressions", "Total Impressions", format_number),
    ("revenue", "Total Revenue", format_currency),
    ("cvr", "Average CVR", format_cvr),
]


def summary_cards(summary: Summary) -> List[Dict[str, Any]]:
    cards = []
    for metric, title, fmt in SUMMARY_CARDS:
        pair = summary.for_metric(metric)
        change = percent_change(pair.week1, pair.week2)
        cards.append(
            {
                "metric": metric,
                "title": title,
                "week1": pair.week1,
                "week2": pair.week2,
                "week1_display": fmt(pair.week1),
                "week2_display": fmt(pair.week2),
                "change": calculate_percent_change(pair.week1, pair.week2),
                "direction": change_direction(change),
            }
        )
    return cards


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    result: AggregateResult = ctx.get("result") or AggregateResult()
    providers_df: pd.DataFrame = ctx.get("providers", pd.DataFrame())

    top = [
        {
            "name": p.name,
            "week2_enrollments": p.week2_enrollments,
            "week2_display": format_number(p.week2_enrollments),
            "change": calculate_percent_change(p.week1_enrollments, p.week2_enrollments),
            "direction": change_direction(enrollment_change(p)),
        }
        for p in top_performers(result.providers, filters.top_n)
    ]
    movers = [
        {
            "name": p.name,
            "change": calculate_percent_change(p.week1_enrollments, p.week2_enrollments),
            "change_value": enrollment_change(p),
            "direction": change_direction(enrollment_change(p)),
        }
        for p in largest_changes(result.providers, filters.top_n)
    ]

    charts: Dict[str, Any] = {}
    if not providers_df.empty:
        charts["enrollment_comparison"] = to_vega_spec(week_comparison_chart(providers_df, "enrollments"))

    return {
        "filters": asdict(filters),
        "source": ctx.get("source"),
        "provider_count": result.provider_count,
        "summary": asdict(result.summary),
        "cards": summary_cards(result.summary),
        "top_performers": top,
        "largest_changes": movers,
        "charts": charts,
    }
