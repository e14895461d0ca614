from __future__ import annotations

import logging
import math
from typing import Dict, Literal, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from campaign_api.schemas import DashboardFiltersModel, MetaProvidersResponse, MetaSourceResponse
from campaign_core.data import load_dashboard_data
from campaign_core.filters import DashboardFilters, normalize_filters
from campaign_core.metrics_debug import compute_debug
from campaign_core.metrics_overview import compute_overview
from campaign_core.metrics_providers import compute_providers
from campaign_core.models import AggregateResult


app = FastAPI(title="Campaign Comparison API", version="0.1.0")
app.state.data_ctx = None
logger = logging.getLogger(__name__)


def _data_context() -> Dict[str, object]:
    # A failed load hands back the previous context, so this only ever moves forward.
    ctx = load_dashboard_data(previous=app.state.data_ctx)
    app.state.data_ctx = ctx
    return ctx


def _filters_from_model(model: DashboardFiltersModel) -> DashboardFilters:
    return normalize_filters(model.model_dump())


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> Optional[float]:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


@app.get("/meta/providers")
def meta_providers():
    try:
        ctx = _data_context()
        result: AggregateResult = ctx.get("result") or AggregateResult()
        return _json(MetaProvidersResponse(providers=[p.name for p in result.providers]).model_dump())
    except Exception as exc:
        logger.exception("meta_providers failed")
        return _error(exc)


@app.get("/meta/source")
def meta_source():
    try:
        ctx = _data_context()
        return _json(MetaSourceResponse(files=list(ctx.get("files", []) or []), source=ctx.get("source")).model_dump())
    except Exception as exc:
        logger.exception("meta_source failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: DashboardFiltersModel):
    try:
        ctx = _data_context()
        return _json(compute_overview(_filters_from_model(filters), ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/providers")
def providers(
    filters: DashboardFiltersModel,
    metric: Optional[Literal["enrollments", "impressions", "revenue", "cvr"]] = Query(default=None),
):
    try:
        ctx = _data_context()
        return _json(compute_providers(_filters_from_model(filters), ctx, metric=metric))
    except Exception as exc:
        logger.exception("providers failed")
        return _error(exc)


@app.post("/debug")
def debug(filters: DashboardFiltersModel):
    try:
        ctx = _data_context()
        return _json(compute_debug(_filters_from_model(filters), ctx))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str, filters: DashboardFiltersModel):
    ctx = _data_context()
    f = _filters_from_model(filters)

    export_df = None
    filename = f"{page}.csv"
    if page in {"overview", "providers"}:
        export_df = ctx.get("providers")
    else:
        export_df = pd.DataFrame()

    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    if page == "providers" and f.provider_query and not export_df.empty:
        export_df = export_df[export_df["name"].str.lower().str.contains(f.provider_query.lower(), regex=False, na=False)]
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
