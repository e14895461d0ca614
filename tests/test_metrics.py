"""Tests for page payloads built from the sample source file."""

import pytest

from campaign_core.data import empty_context, load_dashboard_data
from campaign_core.filters import DashboardFilters, normalize_filters
from campaign_core.metrics_debug import compute_debug
from campaign_core.metrics_overview import compute_overview
from campaign_core.metrics_providers import compute_providers


@pytest.fixture
def ctx(sample_csv):
    return load_dashboard_data()


class TestNormalizeFilters:
    def test_defaults(self):
        assert normalize_filters({}) == DashboardFilters(top_n=5, provider_query="", metric="enrollments")
        assert normalize_filters(None) == DashboardFilters()

    def test_coerces_and_clamps(self):
        f = normalize_filters({"top_n": "500", "provider_query": "  care ", "metric": "Revenue"})
        assert f == DashboardFilters(top_n=50, provider_query="care", metric="revenue")

    def test_bad_values_fall_back(self):
        f = normalize_filters({"top_n": "many", "metric": "clicks"})
        assert f.top_n == 5
        assert f.metric == "enrollments"


class TestComputeOverview:
    def test_summary_cards(self, ctx):
        cards = {c["metric"]: c for c in compute_overview(DashboardFilters(), ctx)["cards"]}

        assert cards["enrollments"]["week1"] == 50
        assert cards["enrollments"]["change"] == "0.0"
        assert cards["enrollments"]["direction"] == "flat"
        assert cards["impressions"]["week1_display"] == "1,300"
        assert cards["impressions"]["change"] == "-7.7"
        assert cards["impressions"]["direction"] == "down"
        assert cards["revenue"]["week2_display"] == "$1,600"
        assert cards["revenue"]["change"] == "23.1"
        assert cards["cvr"]["title"] == "Average CVR"
        assert cards["cvr"]["week1_display"] == "3.00%"
        assert cards["cvr"]["week2_display"] == "4.67%"
        assert cards["cvr"]["direction"] == "up"

    def test_rankings(self, ctx):
        payload = compute_overview(DashboardFilters(), ctx)

        assert [p["name"] for p in payload["top_performers"]] == ["B Care", "A Health", "C Clinic"]
        assert payload["top_performers"][2]["week2_display"] == "N/A"
        assert [(p["name"], p["change"]) for p in payload["largest_changes"]] == [
            ("A Health", "100.0"),
            ("B Care", "-25.0"),
            ("C Clinic", "N/A"),
        ]

    def test_top_n_limits_rankings(self, ctx):
        payload = compute_overview(DashboardFilters(top_n=1), ctx)

        assert len(payload["top_performers"]) == 1
        assert len(payload["largest_changes"]) == 1

    def test_enrollment_chart_spec(self, ctx):
        chart = compute_overview(DashboardFilters(), ctx)["charts"]["enrollment_comparison"]

        assert chart["encoding"]["x"]["field"] == "name"
        assert chart["encoding"]["color"]["scale"]["range"] == ["#3B82F6", "#10B981"]

    def test_empty_context(self):
        payload = compute_overview(DashboardFilters(), empty_context())

        assert payload["provider_count"] == 0
        assert payload["top_performers"] == []
        assert payload["charts"] == {}
        cvr = next(c for c in payload["cards"] if c["metric"] == "cvr")
        assert cvr["week1_display"] == "N/A"
        assert cvr["change"] == "N/A"


class TestComputeProviders:
    def test_metric_rows(self, ctx):
        payload = compute_providers(DashboardFilters(), ctx, metric="revenue")

        assert payload["metric"] == "revenue"
        rows = {r["name"]: r for r in payload["rows"]}
        assert rows["A Health"]["week1"] == 500
        assert rows["A Health"]["week2"] == 1000
        assert rows["A Health"]["change"] == "100.0"
        assert rows["C Clinic"]["week1"] is None
        assert rows["C Clinic"]["change"] == "N/A"
        assert "comparison" in payload["charts"]

    def test_metric_defaults_to_filters(self, ctx):
        payload = compute_providers(DashboardFilters(metric="impressions"), ctx)

        assert payload["metric"] == "impressions"
        assert payload["metric_label"] == "Impressions"

    def test_provider_query(self, ctx):
        payload = compute_providers(DashboardFilters(provider_query="care"), ctx)

        assert [r["name"] for r in payload["rows"]] == ["B Care"]
        assert payload["options"] == ["A Health", "B Care", "C Clinic"]

    def test_no_match_has_no_chart(self, ctx):
        payload = compute_providers(DashboardFilters(provider_query="nobody"), ctx)

        assert payload["rows"] == []
        assert payload["charts"] == {}


class TestComputeDebug:
    def test_quality_counters(self, ctx):
        payload = compute_debug(DashboardFilters(), ctx)

        assert payload["row_counts"] == {"rows_read": 6, "providers": 3}
        assert payload["cleaning_checks"]["missing_provider"] == 1
        assert payload["cleaning_checks"]["out_of_range_week"] == 1
        assert payload["week_coverage"] == {"both_weeks": 2, "week1_only": 0, "week2_only": 0, "no_weeks": 1}
        assert payload["single_week_providers"] == []
        assert payload["source"] == "Healthcare Data - Health Summary.csv"
