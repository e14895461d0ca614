from __future__ import annotations

import logging
from dataclasses import asdict
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import pandas as pd

from campaign_core.aggregate import aggregate_rows
from campaign_core.cells import clean_cell, is_number
from campaign_core.models import METRICS, WEEKS, AggregateResult, ProviderRecord, RawRow

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
SOURCE_GLOB = "Healthcare Data - Health Summary*.csv"

COLUMN_MAP = {
    "Provider": "provider",
    "Week": "week",
    "Enrollment count": "enrollments",
    "Impressions": "impressions",
    "Revenue": "revenue",
    "CVR": "cvr",
}
REQUIRED_COLUMNS = list(COLUMN_MAP)
PROVIDER_COLUMNS = ["name"] + [f"week{w}_{m}" for w in WEEKS for m in METRICS]


def get_source_files() -> List[Path]:
    return sorted(DATA_DIR.glob(SOURCE_GLOB))


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


def _cell(value: object) -> object:
    if isinstance(value, str):
        return value if value != "" else None
    if value is None or pd.isna(value):
        return None
    return value


def row_from_record(record: Mapping[str, Any]) -> RawRow:
    """Build a RawRow from a header-keyed mapping (CSV record or JSON object).

    Provider stays text; every other column goes through `clean_cell`.
    """
    provider = _cell(record.get("Provider"))
    return RawRow(
        provider=str(provider) if provider else None,
        week=clean_cell(_cell(record.get("Week"))),
        enrollments=clean_cell(_cell(record.get("Enrollment count"))),
        impressions=clean_cell(_cell(record.get("Impressions"))),
        revenue=clean_cell(_cell(record.get("Revenue"))),
        cvr=clean_cell(_cell(record.get("CVR"))),
    )


def read_source_rows(path: Union[str, Path]) -> List[RawRow]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True, encoding="utf-8-sig")
    df = df.rename(columns=lambda c: str(c).strip())
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        logger.warning("%s is missing columns %s", Path(path).name, missing)
    return [row_from_record(rec) for rec in df.to_dict(orient="records")]


def providers_frame(providers: Tuple[ProviderRecord, ...]) -> pd.DataFrame:
    if not providers:
        return pd.DataFrame(columns=PROVIDER_COLUMNS)
    return pd.DataFrame([p.to_dict() for p in providers], columns=PROVIDER_COLUMNS)


def build_context(
    result: AggregateResult,
    *,
    files: Optional[List[str]] = None,
    source: Optional[str] = None,
    rows: Optional[List[RawRow]] = None,
) -> Dict[str, object]:
    return {
        "files": files or [],
        "source": source,
        "weeks": list(WEEKS),
        "rows": rows or [],
        "result": result,
        "providers": providers_frame(result.providers),
        "quality": asdict(result.quality),
    }


def empty_context() -> Dict[str, object]:
    return build_context(AggregateResult())


# ---------------- Formatting ----------------
def format_number(value: object, decimals: int = 2) -> str:
    if not is_number(value):
        return "N/A"
    text = f"{float(value):,.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_currency(value: object) -> str:
    if not is_number(value):
        return "N/A"
    return f"${format_number(value)}"


def format_cvr(value: object) -> str:
    if not is_number(value):
        return "N/A"
    return f"{float(value):.2f}%"


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Dict[str, object]:
    source = Path(files_sig[-1][0])
    rows = read_source_rows(source)
    result = aggregate_rows(rows)
    logger.info("Loaded %s: %d rows, %d providers", source.name, len(rows), result.provider_count)
    return build_context(
        result,
        files=[Path(name).name for name, _ in files_sig],
        source=source.name,
        rows=rows,
    )


def load_dashboard_data(
    path: Optional[Union[str, Path]] = None,
    previous: Optional[Dict[str, object]] = None,
) -> Dict[str, object]:
    """Load and aggregate the newest source file (or `path`).

    Any read or parse failure is logged and `previous` (or the empty context) is
    returned unchanged.
    """
    fallback = previous if previous is not None else empty_context()
    files = [Path(path)] if path is not None else get_source_files()
    if not files:
        logger.warning("No files matching %r in %s", SOURCE_GLOB, DATA_DIR)
        return fallback
    try:
        return _load_dashboard_data_cached(file_signature(files))
    except Exception:
        logger.exception("Error processing data from %s", files[-1])
        return fallback


def clear_cache() -> None:
    _load_dashboard_data_cached.cache_clear()
