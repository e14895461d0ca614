"""Tests for the campaign comparison JSON API."""

import pytest
from fastapi.testclient import TestClient

from campaign_api.main import app
from campaign_core import data as data_module


@pytest.fixture
def client():
    app.state.data_ctx = None
    yield TestClient(app)
    app.state.data_ctx = None


class TestMeta:
    def test_providers(self, client, sample_csv):
        response = client.get("/meta/providers")

        assert response.status_code == 200
        assert response.json() == {"providers": ["A Health", "B Care", "C Clinic"]}

    def test_source(self, client, sample_csv):
        body = client.get("/meta/source").json()

        assert body == {"files": [sample_csv.name], "source": sample_csv.name}

    def test_no_source_file(self, client, source_dir):
        assert client.get("/meta/providers").json() == {"providers": []}


class TestPages:
    def test_overview(self, client, sample_csv):
        response = client.post("/overview", json={"top_n": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["provider_count"] == 3
        assert body["summary"]["total_enrollments"] == {"week1": 50.0, "week2": 50.0}
        assert [p["name"] for p in body["top_performers"]] == ["B Care", "A Health"]
        assert body["largest_changes"][0]["change"] == "100.0"

    def test_overview_empty_source_has_null_cvr(self, client, source_dir):
        body = client.post("/overview", json={}).json()

        assert body["summary"]["total_cvr"] == {"week1": None, "week2": None}

    def test_providers_metric_query(self, client, sample_csv):
        body = client.post("/providers?metric=cvr", json={"provider_query": "health"}).json()

        assert body["metric"] == "cvr"
        assert body["rows"][0]["name"] == "A Health"
        assert body["rows"][0]["change"] == "60.0"

    def test_providers_rejects_unknown_metric(self, client, sample_csv):
        assert client.post("/providers?metric=clicks", json={}).status_code == 422

    def test_debug(self, client, sample_csv):
        body = client.post("/debug", json={}).json()

        assert body["row_counts"]["rows_read"] == 6

    def test_failed_reload_serves_previous_data(self, client, sample_csv, monkeypatch):
        assert client.get("/meta/providers").json()["providers"] == ["A Health", "B Care", "C Clinic"]

        def _boom(path):
            raise ValueError("corrupt source")

        data_module.clear_cache()
        monkeypatch.setattr(data_module, "read_source_rows", _boom)

        response = client.get("/meta/providers")
        assert response.status_code == 200
        assert response.json()["providers"] == ["A Health", "B Care", "C Clinic"]

    def test_handler_error_returns_500(self, client, sample_csv, monkeypatch):
        import campaign_api.main as main_module

        def _boom(filters, ctx):
            raise RuntimeError("bad payload")

        monkeypatch.setattr(main_module, "compute_overview", _boom)

        response = client.post("/overview", json={})
        assert response.status_code == 500
        assert response.json() == {"error": "bad payload", "type": "RuntimeError"}


class TestExport:
    def test_providers_csv(self, client, sample_csv):
        response = client.post("/export/providers", json={"provider_query": "care"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0].startswith("name,week1_enrollments")
        assert len(lines) == 2
        assert lines[1].startswith("B Care,")

    def test_unknown_page_is_empty(self, client, sample_csv):
        response = client.post("/export/unknown", json={})

        assert response.status_code == 200
        assert "name" not in response.text
