from __future__ import annotations

import math
from typing import Optional

import pandas as pd


def clean_cell(value: object) -> object:
    """Strip thousands separators and a percent sign, then parse as a float.

    Text that still does not parse is returned unchanged; non-string values pass through.
    """
    if not isinstance(value, str):
        return value
    cleaned = value.replace(",", "").replace("%", "", 1).strip()
    try:
        number = float(cleaned)
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    return number


def is_number(value: object) -> bool:
    if value is None or isinstance(value, (bool, str)):
        return False
    if not isinstance(value, (int, float)):
        return False
    return not pd.isna(value) and math.isfinite(value)


def as_metric(value: object) -> Optional[float]:
    """Numeric metric value, or None when the cell is missing or not a number."""
    value = clean_cell(value)
    if not is_number(value):
        return None
    return float(value)


def parse_cvr(value: object) -> float:
    out = as_metric(value)
    return 0.0 if out is None else out


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if is_number(value):
        return value == 0
    return pd.isna(value)
