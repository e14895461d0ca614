from __future__ import annotations

import math
from typing import List, Optional, Sequence

from campaign_core.cells import is_number
from campaign_core.models import ProviderRecord

NOT_AVAILABLE = "N/A"


def percent_change(previous: object, current: object) -> Optional[float]:
    """(current - previous) / previous * 100, or None when either side is unusable."""
    if not is_number(previous) or previous == 0:
        return None
    if not is_number(current):
        return None
    change = (float(current) - float(previous)) / float(previous) * 100
    if not math.isfinite(change):
        return None
    # Negative previous values give -0.0 for no change.
    return change if change != 0 else 0.0


def calculate_percent_change(previous: object, current: object) -> str:
    change = percent_change(previous, current)
    if change is None:
        return NOT_AVAILABLE
    return f"{change:.1f}"


def change_direction(change: Optional[float]) -> Optional[str]:
    if change is None:
        return None
    if change > 0:
        return "up"
    if change < 0:
        return "down"
    return "flat"


def enrollment_change(provider: ProviderRecord) -> Optional[float]:
    return percent_change(provider.week1_enrollments, provider.week2_enrollments)


def top_performers(providers: Sequence[ProviderRecord], n: int = 5) -> List[ProviderRecord]:
    """Providers with the most week 2 enrollments; missing values count as 0."""
    return sorted(providers, key=lambda p: p.week2_enrollments or 0.0, reverse=True)[:n]


def largest_changes(providers: Sequence[ProviderRecord], n: int = 5) -> List[ProviderRecord]:
    """Providers with the largest absolute week-over-week enrollment change.

    Providers whose change is N/A rank after every numeric change, in input order.
    """

    def _key(provider: ProviderRecord):
        change = enrollment_change(provider)
        if change is None:
            return (0, 0.0)
        return (1, abs(change))

    return sorted(providers, key=_key, reverse=True)[:n]
