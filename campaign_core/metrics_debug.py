from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from campaign_core.filters import DashboardFilters
from campaign_core.models import AggregateResult


def compute_debug(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    result: AggregateResult = ctx.get("result") or AggregateResult()
    providers = result.providers

    coverage = {"both_weeks": 0, "week1_only": 0, "week2_only": 0, "no_weeks": 0}
    for p in providers:
        if p.has_week(1) and p.has_week(2):
            coverage["both_weeks"] += 1
        elif p.has_week(1):
            coverage["week1_only"] += 1
        elif p.has_week(2):
            coverage["week2_only"] += 1
        else:
            coverage["no_weeks"] += 1

    return {
        "filters": asdict(filters),
        "files": list(ctx.get("files", []) or []),
        "source": ctx.get("source"),
        "row_counts": {
            "rows_read": result.quality.rows_read,
            "providers": result.provider_count,
        },
        "cleaning_checks": asdict(result.quality),
        "week_coverage": coverage,
        "single_week_providers": [p.name for p in providers if p.has_week(1) != p.has_week(2)],
    }
