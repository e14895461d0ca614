from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

Cell = Union[float, str, None]

WEEKS: Tuple[int, ...] = (1, 2)
METRICS: Tuple[str, ...] = ("enrollments", "impressions", "revenue", "cvr")


@dataclass(frozen=True)
class RawRow:
    """One CSV row after cell cleaning. Missing cells are None, non-numeric text stays str."""

    provider: Optional[str] = None
    week: Cell = None
    enrollments: Cell = None
    impressions: Cell = None
    revenue: Cell = None
    cvr: Cell = None


@dataclass(frozen=True)
class WeekMetrics:
    enrollments: Optional[float] = None
    impressions: Optional[float] = None
    revenue: Optional[float] = None
    cvr: float = 0.0


def _week_field(week: int, metric: str) -> property:
    def getter(self: "ProviderRecord") -> Optional[float]:
        return self.metric(week, metric)

    getter.__name__ = f"week{week}_{metric}"
    return property(getter)


@dataclass(frozen=True)
class ProviderRecord:
    name: str
    weeks: Dict[int, WeekMetrics] = field(default_factory=dict)

    def has_week(self, week: int) -> bool:
        return week in self.weeks

    def metric(self, week: int, metric: str) -> Optional[float]:
        """Value of `metric` for `week`, or None when the week was never observed."""
        metrics = self.weeks.get(week)
        if metrics is None:
            return None
        return getattr(metrics, metric)

    week1_enrollments = _week_field(1, "enrollments")
    week1_impressions = _week_field(1, "impressions")
    week1_revenue = _week_field(1, "revenue")
    week1_cvr = _week_field(1, "cvr")
    week2_enrollments = _week_field(2, "enrollments")
    week2_impressions = _week_field(2, "impressions")
    week2_revenue = _week_field(2, "revenue")
    week2_cvr = _week_field(2, "cvr")

    def to_dict(self) -> Dict[str, Any]:
        # Absent weeks produce no keys at all.
        out: Dict[str, Any] = {"name": self.name}
        for week in WEEKS:
            metrics = self.weeks.get(week)
            if metrics is None:
                continue
            for metric in METRICS:
                out[f"week{week}_{metric}"] = getattr(metrics, metric)
        return out


@dataclass(frozen=True)
class WeekPair:
    week1: Optional[float] = 0.0
    week2: Optional[float] = 0.0

    def get(self, week: int) -> Optional[float]:
        return self.week1 if week == 1 else self.week2


@dataclass(frozen=True)
class Summary:
    total_enrollments: WeekPair = field(default_factory=WeekPair)
    total_impressions: WeekPair = field(default_factory=WeekPair)
    total_revenue: WeekPair = field(default_factory=WeekPair)
    total_cvr: WeekPair = field(default_factory=lambda: WeekPair(None, None))

    def for_metric(self, metric: str) -> WeekPair:
        return getattr(self, f"total_{metric}")


@dataclass(frozen=True)
class DataQuality:
    rows_read: int = 0
    missing_provider: int = 0
    missing_week: int = 0
    out_of_range_week: int = 0
    unparsable_cvr: int = 0
    unavailable_cells: int = 0


@dataclass(frozen=True)
class AggregateResult:
    providers: Tuple[ProviderRecord, ...] = ()
    summary: Summary = field(default_factory=Summary)
    provider_count: int = 0
    quality: DataQuality = field(default_factory=DataQuality)
