import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from campaign_core.charts import METRIC_LABELS, week_comparison_chart
from campaign_core.data import SOURCE_GLOB, clear_cache, format_number, load_dashboard_data
from campaign_core.filters import normalize_filters
from campaign_core.metrics_debug import compute_debug
from campaign_core.metrics_overview import compute_overview
from campaign_core.metrics_providers import compute_providers

logging.basicConfig(level=logging.INFO)
alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .change-up {color: #16a34a;font-size: 0.9rem;}
        .change-down {color: #dc2626;font-size: 0.9rem;}
        .change-flat {color: #6b7280;font-size: 0.9rem;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(source: Optional[str], top_n: int, provider_query: str) -> str:
    chips = [
        f"Source: {source or 'none'}",
        f"Top N: {top_n}",
        f"Provider: {provider_query}" if provider_query else "Provider: All",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def change_html(change: str, direction: Optional[str]) -> str:
    css = f"change-{direction}" if direction else "change-flat"
    suffix = "%" if change != "N/A" else ""
    return f"<span class='{css}'>Change: {change}{suffix}</span>"


# ---------- UI setup ----------
st.set_page_config(page_title="Campaign Performance Comparison", layout="wide")
inject_base_styles()
st.title("Campaign Performance Comparison")
st.caption("Week 1 vs Week 2 healthcare campaign metrics by provider.")

with st.sidebar:
    st.markdown("### Navigate")
    current_page = st.radio("Navigate", ["Overview", "Providers", "Data Quality"], index=0)
    st.markdown("---")
    st.markdown("### Quick filters")
    top_n = st.slider("Top N providers", min_value=1, max_value=20, value=5, step=1)
    provider_query = st.text_input("Provider search (optional)", "")
    if st.button("Reload data"):
        clear_cache()

# Last good context survives a failed reload; errors only reach the log.
data_ctx: Dict[str, Any] = load_dashboard_data(previous=st.session_state.get("data_ctx"))
st.session_state["data_ctx"] = data_ctx

if not data_ctx.get("files"):
    st.info(f"No source file yet. Place a CSV matching '{SOURCE_GLOB}' next to app.py.")

filters = normalize_filters({"top_n": top_n, "provider_query": provider_query})
filter_summary_html = format_filter_summary(data_ctx.get("source"), filters.top_n, filters.provider_query)
providers_df: pd.DataFrame = data_ctx.get("providers", pd.DataFrame())


# ----- Page renderers -----
def render_summary_cards(cards: List[Dict[str, Any]]):
    cols = st.columns(len(cards))
    for col, c in zip(cols, cards):
        with col:
            with card(c["title"]):
                st.markdown(f"Week 1: {c['week1_display']}")
                st.markdown(f"Week 2: {c['week2_display']}")
                st.markdown(change_html(c["change"], c["direction"]), unsafe_allow_html=True)


def render_overview_page():
    payload = compute_overview(filters, data_ctx)
    render_page_header("Campaign Performance Summary", "Home / Overview", filter_summary_html, export_df=providers_df, export_name="overview.csv")
    render_summary_cards(payload["cards"])

    with card("Enrollment Comparison by Provider"):
        if providers_df.empty:
            st.info("No provider data loaded.")
        else:
            st.altair_chart(week_comparison_chart(providers_df, "enrollments"), use_container_width=True)

    left, right = st.columns(2)
    with left:
        with card("Top Performers (Week 2)"):
            if not payload["top_performers"]:
                st.info("No providers.")
            for p in payload["top_performers"]:
                st.markdown(f"**{p['name']}**")
                st.markdown(f"Enrollments: {p['week2_display']}")
                st.markdown(change_html(p["change"], p["direction"]), unsafe_allow_html=True)
    with right:
        with card("Largest Changes"):
            if not payload["largest_changes"]:
                st.info("No providers.")
            for p in payload["largest_changes"]:
                st.markdown(f"**{p['name']}**")
                st.markdown(change_html(p["change"], p["direction"]), unsafe_allow_html=True)


def render_providers_page():
    with card("Controls"):
        metric = st.selectbox(
            "Metric",
            list(METRIC_LABELS),
            format_func=lambda m: METRIC_LABELS[m],
            key="provider_metric",
        )
    payload = compute_providers(filters, data_ctx, metric=metric)
    table = pd.DataFrame(payload["rows"], columns=["name", "week1", "week2", "change"])
    render_page_header("Providers", "Home / Providers", filter_summary_html, export_df=table, export_name="providers.csv")

    label = payload["metric_label"]
    with card(f"{label} by provider"):
        if table.empty:
            st.info("No providers match the current filters.")
        else:
            display = table.rename(columns={"name": "Provider", "week1": f"Week 1 {label}", "week2": f"Week 2 {label}", "change": "Change %"})
            for col in [f"Week 1 {label}", f"Week 2 {label}"]:
                display[col] = display[col].apply(format_number)
            st.dataframe(display, use_container_width=True, hide_index=True)
    with card(f"{label} comparison"):
        chart_df = providers_df[providers_df["name"].isin(table["name"])] if not table.empty else pd.DataFrame()
        if chart_df.empty:
            st.info("No data to chart.")
        else:
            st.altair_chart(week_comparison_chart(chart_df, metric), use_container_width=True)


def render_debug_page():
    payload = compute_debug(filters, data_ctx)
    render_page_header("Data Quality", "Home / Data Quality", filter_summary_html)
    with card("Data Quality"):
        st.markdown("**Source files**")
        st.write({"files": payload["files"], "active": payload["source"]})
        st.markdown("**Row counts**")
        st.write(payload["row_counts"])
        st.markdown("**Cleaning checks**")
        st.write(payload["cleaning_checks"])
        st.markdown("**Week coverage**")
        st.write(payload["week_coverage"])
        if payload["single_week_providers"]:
            st.markdown("**Providers with only one week of data**")
            st.dataframe(pd.DataFrame({"provider": payload["single_week_providers"]}), hide_index=True)
    st.caption("Average CVR divides by every provider seen, including those with a single week of data.")


if current_page == "Overview":
    render_overview_page()
elif current_page == "Providers":
    render_providers_page()
else:
    render_debug_page()
