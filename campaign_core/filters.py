from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from campaign_core.models import METRICS

DEFAULT_TOP_N = 5
DEFAULT_METRIC = "enrollments"


@dataclass(frozen=True)
class DashboardFilters:
    top_n: int = DEFAULT_TOP_N
    provider_query: str = ""
    metric: str = DEFAULT_METRIC


def normalize_filters(raw: Optional[dict]) -> DashboardFilters:
    raw = raw or {}

    top_n = raw.get("top_n", DEFAULT_TOP_N)
    try:
        top_n = int(top_n)
    except Exception:
        top_n = DEFAULT_TOP_N
    top_n = max(1, min(50, top_n))

    provider_query = (raw.get("provider_query") or "").strip()

    metric = str(raw.get("metric") or DEFAULT_METRIC).strip().lower()
    if metric not in METRICS:
        metric = DEFAULT_METRIC

    return DashboardFilters(top_n=top_n, provider_query=provider_query, metric=metric)
