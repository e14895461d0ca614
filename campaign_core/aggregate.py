from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from campaign_core.cells import as_metric, is_blank, is_number, parse_cvr
from campaign_core.models import (
    METRICS,
    WEEKS,
    AggregateResult,
    DataQuality,
    ProviderRecord,
    RawRow,
    Summary,
    WeekMetrics,
    WeekPair,
)

logger = logging.getLogger(__name__)


def normalize_provider_name(raw: str) -> str:
    """'Acme Health (Campaign B)' -> 'Acme Health'."""
    return str(raw).split("(", 1)[0].strip()


def as_week(value: object) -> Optional[int]:
    # Only numbers count; text such as "1" is not a week.
    if not is_number(value):
        return None
    for week in WEEKS:
        if value == week:
            return week
    return None


def _add(total: Optional[float], value: Optional[float]) -> Optional[float]:
    if total is None or value is None:
        return None
    return total + value


def aggregate_rows(rows: Iterable[RawRow]) -> AggregateResult:
    """Group rows by normalized provider and week, and total each week's metrics.

    Rows without a provider or week are skipped. A row whose week is not 1 or 2 still
    registers its provider but sets no week fields and adds nothing to the totals.
    The average CVR divides each week's CVR sum by the number of distinct providers.
    """
    providers: Dict[str, Dict[int, WeekMetrics]] = {}
    totals: Dict[int, Dict[str, Optional[float]]] = {w: {m: 0.0 for m in METRICS} for w in WEEKS}
    counts = dict(rows_read=0, missing_provider=0, missing_week=0, out_of_range_week=0, unparsable_cvr=0, unavailable_cells=0)

    for row in rows:
        counts["rows_read"] += 1
        if is_blank(row.provider):
            counts["missing_provider"] += 1
            continue
        if is_blank(row.week):
            counts["missing_week"] += 1
            continue

        name = normalize_provider_name(row.provider)
        if name not in providers:
            providers[name] = {}

        week = as_week(row.week)
        if week is None:
            counts["out_of_range_week"] += 1
            continue

        metrics = WeekMetrics(
            enrollments=as_metric(row.enrollments),
            impressions=as_metric(row.impressions),
            revenue=as_metric(row.revenue),
            cvr=parse_cvr(row.cvr),
        )
        if as_metric(row.cvr) is None:
            counts["unparsable_cvr"] += 1
        counts["unavailable_cells"] += sum(
            1 for v in (metrics.enrollments, metrics.impressions, metrics.revenue) if v is None
        )
        providers[name][week] = metrics

        week_totals = totals[week]
        for metric in METRICS:
            week_totals[metric] = _add(week_totals[metric], getattr(metrics, metric))

    provider_count = len(providers)
    records = tuple(ProviderRecord(name=name, weeks=weeks) for name, weeks in providers.items())

    def _pair(metric: str) -> WeekPair:
        return WeekPair(totals[1][metric], totals[2][metric])

    def _average(week: int) -> Optional[float]:
        total = totals[week]["cvr"]
        if not provider_count or total is None:
            return None
        return total / provider_count

    summary = Summary(
        total_enrollments=_pair("enrollments"),
        total_impressions=_pair("impressions"),
        total_revenue=_pair("revenue"),
        total_cvr=WeekPair(_average(1), _average(2)),
    )
    quality = DataQuality(**counts)
    discarded = quality.missing_provider + quality.missing_week
    if discarded or quality.out_of_range_week:
        logger.debug(
            "Skipped %d rows without provider/week and %d rows outside weeks %s",
            discarded,
            quality.out_of_range_week,
            WEEKS,
        )
    return AggregateResult(providers=records, summary=summary, provider_count=provider_count, quality=quality)
