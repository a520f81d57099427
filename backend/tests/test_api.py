"""
API tests for the analyze routes
"""
import io
import json
from decimal import Decimal

import polars as pl
import pytest
from fastapi.testclient import TestClient

from config import settings
from main import app


@pytest.fixture
def client():
    return TestClient(app)


SCENARIO_A = [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}, {"a": 3, "b": "z"}]


class TestInfoRoutes:
    """Health and root endpoints"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["name"] == settings.APP_NAME


class TestAnalyze:
    """POST /api/analyze"""

    def test_scenario_a(self, client):
        r = client.post("/api/analyze", json={"rows": SCENARIO_A})
        assert r.status_code == 200
        data = r.json()

        assert data["summary"] == "Dataset: 3 rows, 2 columns"
        assert data["types"] == {"a": "numeric", "b": "categorical"}
        assert data["statistics"]["a"]["mean"] == 2
        assert data["statistics"]["a"]["type"] == "numeric"
        assert data["statistics"]["b"]["unique"] == 3
        # Numeric-only fields are omitted for text columns
        assert "mean" not in data["statistics"]["b"]
        assert "outliers_iqr" not in data["statistics"]["b"]
        assert data["chartData"]["column"] == "a"
        assert len(data["chartData"]["labels"]) == settings.DEFAULT_BUCKETS
        assert sum(data["chartData"]["counts"]) == 3
        assert data["insights"] == []
        assert data["recommendations"].startswith("Review missing values")

    def test_missing_values_and_outliers(self, client):
        rows = [{"v": 10} for _ in range(20)] + [{"v": 100}, {"v": None}]
        data = client.post("/api/analyze", json={"rows": rows}).json()
        stats = data["statistics"]["v"]
        assert stats["count"] == 22
        assert stats["missing"] == 1
        assert stats["outliers_iqr"] == [100]
        assert stats["outliers_z"] == [100]
        assert data["outliers"] == {"v": {"iqr": [100], "z": [100]}}
        assert data["insights"] == ["1 missing values in v", "v has 1 outliers (IQR)"]

    def test_no_numeric_column_has_no_chart(self, client):
        data = client.post("/api/analyze", json={"rows": [{"b": "x"}, {"b": "y"}]}).json()
        assert "chartData" not in data

    def test_column_and_buckets(self, client):
        rows = [{"a": i, "b": i * i} for i in range(10)]
        data = client.post("/api/analyze", json={"rows": rows, "column": "b", "buckets": 4}).json()
        assert data["chartData"]["column"] == "b"
        assert len(data["chartData"]["labels"]) == 4

    @pytest.mark.parametrize("body", [
        {"rows": []},
        {},
        {"rows": None},
        {"rows": "not rows"},
        {"rows": {"a": 1}},
    ])
    def test_invalid_rows(self, client, body):
        r = client.post("/api/analyze", json=body)
        assert r.status_code == 400
        assert r.json()["detail"]["message"] == "Invalid rows"

    def test_unknown_column(self, client):
        r = client.post("/api/analyze", json={"rows": SCENARIO_A, "column": "nope"})
        assert r.status_code == 400

    @pytest.mark.parametrize("buckets", [0, -3, 10_000])
    def test_bad_bucket_count(self, client, buckets):
        r = client.post("/api/analyze", json={"rows": SCENARIO_A, "buckets": buckets})
        assert r.status_code == 400

    def test_malformed_records_fail(self, client):
        r = client.post("/api/analyze", json={"rows": [1, 2, 3]})
        assert r.status_code == 500
        assert r.json()["detail"] == "Analysis failed"

    def test_row_limit(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_ROWS", 2)
        r = client.post("/api/analyze", json={"rows": SCENARIO_A})
        assert r.status_code == 400

    def test_oversized_integer_is_not_numeric(self, client):
        huge = "1" + "0" * 399
        body = '{"rows": [{"a": 1}, {"a": 2}, {"a": ' + huge + '}]}'
        r = client.post("/api/analyze", content=body, headers={"content-type": "application/json"})
        assert r.status_code == 200
        stats = r.json()["statistics"]["a"]
        assert stats["unique"] == 3
        assert stats["mean"] == 1.5
        assert stats["max"] == 2

    def test_idempotent(self, client):
        rows = [{"a": 1, "d": "2024-01-01"}, {"a": None, "d": "2024-02-01"}, {"a": 7, "d": ""}]
        first = client.post("/api/analyze", json={"rows": rows}).json()
        second = client.post("/api/analyze", json={"rows": rows}).json()
        assert first == second
        assert first["types"]["d"] == "date"


class TestUpload:
    """POST /api/analyze/upload"""

    CSV = b"a,b,when\n1,x,2024-01-01\n2,y,2024-02-01\n3,,2024-03-01\n"

    def test_csv_upload(self, client):
        files = {"file": ("data.csv", self.CSV, "text/csv")}
        r = client.post("/api/analyze/upload", files=files, data={"buckets": "4"})
        assert r.status_code == 200
        data = r.json()
        assert data["summary"] == "Dataset: 3 rows, 3 columns"
        assert data["types"] == {"a": "numeric", "b": "categorical", "when": "date"}
        assert data["statistics"]["b"]["missing"] == 1
        assert data["insights"] == ["1 missing values in b"]
        assert len(data["chartData"]["labels"]) == 4

    def test_json_upload(self, client):
        content = json.dumps(SCENARIO_A).encode()
        files = {"file": ("data.json", content, "application/json")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 200
        assert r.json()["types"] == {"a": "numeric", "b": "categorical"}

    def test_parquet_upload(self, client):
        buffer = io.BytesIO()
        pl.DataFrame({"x": [1.5, 2.5, 3.5]}).write_parquet(buffer)
        files = {"file": ("data.parquet", buffer.getvalue(), "application/octet-stream")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 200
        assert r.json()["statistics"]["x"]["mean"] == 2.5

    def test_parquet_decimal_column_is_numeric(self, client):
        buffer = io.BytesIO()
        pl.DataFrame(
            {"x": [Decimal("1.50"), Decimal("2.50"), Decimal("3.50")]},
            schema={"x": pl.Decimal(10, 2)},
        ).write_parquet(buffer)
        files = {"file": ("prices.parquet", buffer.getvalue(), "application/octet-stream")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 200
        data = r.json()
        assert data["types"]["x"] == "numeric"
        assert data["statistics"]["x"]["mean"] == 2.5
        assert data["chartData"]["column"] == "x"

    def test_json_upload_keeps_booleans(self, client):
        content = json.dumps([{"a": 1}, {"a": "x"}, {"a": True}]).encode()
        files = {"file": ("mixed.json", content, "application/json")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 200
        stats = r.json()["statistics"]["a"]
        assert stats["mean"] == 1
        assert (stats["min"], stats["max"]) == (1, 1)

    def test_json_upload_of_scalars_is_invalid(self, client):
        files = {"file": ("numbers.json", b"[1, 2, 3]", "application/json")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 400

    def test_header_only_csv_is_invalid(self, client):
        files = {"file": ("data.csv", b"a,b\n", "text/csv")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 400

    def test_unsupported_extension(self, client):
        files = {"file": ("data.xlsx", b"whatever", "application/octet-stream")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 415

    def test_unparseable_file(self, client):
        files = {"file": ("data.json", b"{not json", "application/json")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 400
        assert r.json()["detail"].startswith("Failed to parse file")

    def test_file_too_large(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 0)
        files = {"file": ("data.csv", self.CSV, "text/csv")}
        r = client.post("/api/analyze/upload", files=files)
        assert r.status_code == 413


class TestHistogram:
    """POST /api/analyze/histogram"""

    def test_chosen_column(self, client):
        rows = [{"a": v} for v in [1, 2, 3, 4, 5, 100]]
        r = client.post("/api/analyze/histogram", json={"rows": rows, "column": "a", "buckets": 4})
        assert r.status_code == 200
        assert r.json() == {
            "column": "a",
            "labels": ["1.00-25.75", "25.75-50.50", "50.50-75.25", "75.25-100.00"],
            "counts": [5, 0, 0, 1],
        }

    def test_text_column_is_empty(self, client):
        r = client.post("/api/analyze/histogram", json={"rows": SCENARIO_A, "column": "b"})
        assert r.status_code == 200
        assert r.json() == {"column": "b", "labels": [], "counts": []}

    def test_unknown_column(self, client):
        r = client.post("/api/analyze/histogram", json={"rows": SCENARIO_A, "column": "zzz"})
        assert r.status_code == 400

    def test_empty_rows(self, client):
        r = client.post("/api/analyze/histogram", json={"rows": [], "column": "a"})
        assert r.status_code == 400

    def test_missing_column_is_bad_request(self, client):
        r = client.post("/api/analyze/histogram", json={"rows": SCENARIO_A})
        assert r.status_code == 400
        assert r.json()["detail"] == "column is required"
