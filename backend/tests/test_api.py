"""Tests for the FastAPI application; pipeline calls are mocked unless in mock mode."""

from __future__ import annotations

import io
from pathlib import Path
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from basinscan.api.app import create_app
from basinscan.config import Settings
from basinscan.exceptions import ExtractionError, PlanProcessingError
from basinscan.factory import create_default_engine
from basinscan.models.enums import ExtractionMode
from basinscan.services.pipeline import ScanPipeline, ScanResult

# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------

_LIVE = Settings(anthropic_api_key="test-key-not-real")
_MOCK = Settings(extraction_mode=ExtractionMode.MOCK)


def _row(structure_id: str = "STR-101", **overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": structure_id,
        "diameter": 12,
        "rim": 896.80,
        "out": 895.08,
        "casting": "DOMED GRATE",
        "type": "NYLOPLAST DRAIN BASIN",
    }
    row.update(overrides)
    return row


def _make_scan_result() -> ScanResult:
    return ScanResult(
        enrichment=create_default_engine().enrich([_row()]),
        raw_response="```json\n[...]\n```",
        extraction_source="vision",
        processing_time_seconds=2.5,
        pages_analyzed=1,
    )


def _make_client(
    pipeline: ScanPipeline | None = None,
    settings: Settings = _LIVE,
) -> TestClient:
    app = create_app(pipeline=pipeline, settings=settings)
    return TestClient(app)


def _mock_pipeline() -> MagicMock:
    pipeline = MagicMock(spec=ScanPipeline)
    pipeline.analyze.return_value = _make_scan_result()
    return pipeline


def _pdf_upload(name: str = "plan.pdf") -> dict[str, tuple[str, io.BytesIO, str]]:
    return {"file": (name, io.BytesIO(b"%PDF-1.4 fake content"), "application/pdf")}


# ---------------------------------------------------------------------------
# GET /api/health
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health_returns_ok(self) -> None:
        client = _make_client()
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["extraction_mode"] == "live"
        assert "version" in data

    def test_health_reports_mock_mode(self) -> None:
        client = _make_client(settings=_MOCK)
        assert client.get("/api/health").json()["extraction_mode"] == "mock"


# ---------------------------------------------------------------------------
# GET /api/catalog
# ---------------------------------------------------------------------------


class TestCatalog:
    def test_catalog_tables(self) -> None:
        client = _make_client()
        resp = client.get("/api/catalog")
        assert resp.status_code == 200
        data = resp.json()
        assert data["tiers"] == [3, 5, 7, 10]
        assert data["base_prices"]["12"]["3"] == 600
        assert data["dome_surcharges"]["12"] == 150
        assert "36" not in data["dome_surcharges"]
        assert data["part_prefix"] == "28"


# ---------------------------------------------------------------------------
# POST /api/enrich
# ---------------------------------------------------------------------------


class TestEnrich:
    def test_enrich_prices_rows(self) -> None:
        client = _make_client()
        resp = client.post("/api/enrich", json=[_row()])
        assert resp.status_code == 200
        data = resp.json()
        assert data["structures"][0]["part"] == "2812AG3"
        assert data["structures"][0]["price"] == 750.0
        assert data["rows"][0]["Price"] == "$750.00"
        assert data["rows"][0]["Domed Grate?"] == "Yes"
        assert data["summary"]["structure_count"] == 1

    def test_enrich_reports_failures_and_exclusions(self) -> None:
        client = _make_client()
        resp = client.post(
            "/api/enrich",
            json=[
                _row("STR-1"),
                _row("STR-2", diameter="N/A"),
                _row("STR-3", type="INLINE DRAIN"),
                "not a record",
            ],
        )
        assert resp.status_code == 200
        data = resp.json()
        assert [s["id"] for s in data["structures"]] == ["STR-1"]
        assert data["failures"][0]["structure_id"] == "STR-2"
        assert data["failures"][0]["reason"] == "unparsable_diameter"
        assert data["failures"][1]["reason"] == "invalid_record"
        assert data["excluded"][0]["structure_id"] == "STR-3"
        assert data["summary"]["failure_count"] == 2
        assert data["summary"]["excluded_count"] == 1

    def test_enrich_empty_list(self) -> None:
        client = _make_client()
        data = client.post("/api/enrich", json=[]).json()
        assert data["structures"] == []
        assert data["summary"]["total_price"] == 0

    def test_enrich_rejects_non_list_body(self) -> None:
        client = _make_client()
        resp = client.post("/api/enrich", json={"id": "STR-101"})
        assert resp.status_code == 422

    def test_enrich_needs_no_api_key(self) -> None:
        client = _make_client(settings=Settings())
        assert client.post("/api/enrich", json=[_row()]).status_code == 200


# ---------------------------------------------------------------------------
# POST /api/analyze
# ---------------------------------------------------------------------------


class TestAnalyze:
    def test_analyze_success(self) -> None:
        pipeline = _mock_pipeline()
        client = _make_client(pipeline)

        resp = client.post("/api/analyze", files=_pdf_upload())

        assert resp.status_code == 200
        data = resp.json()
        assert data["structures"][0]["id"] == "STR-101"
        assert data["rows"][0]["Part Code"] == "2812AG3"
        assert data["raw_response"].startswith("```json")
        assert data["extraction_source"] == "vision"
        assert data["processing_time_seconds"] == 2.5
        assert data["pages_analyzed"] == 1

    def test_analyze_passes_saved_upload(self) -> None:
        pipeline = _mock_pipeline()
        client = _make_client(pipeline)

        client.post("/api/analyze", files=_pdf_upload("C-501 storm.pdf"))

        saved = pipeline.analyze.call_args.args[0]
        assert isinstance(saved, Path)
        assert saved.name == "C-501 storm.pdf"
        assert not saved.exists()

    def test_analyze_accepts_images(self) -> None:
        client = _make_client(_mock_pipeline())
        files = {"file": ("table.png", io.BytesIO(b"\x89PNG"), "image/png")}
        assert client.post("/api/analyze", files=files).status_code == 200

    def test_invalid_file_type(self) -> None:
        client = _make_client(_mock_pipeline())
        files = {"file": ("plan.dwg", io.BytesIO(b"binary"), "application/octet-stream")}
        resp = client.post("/api/analyze", files=files)
        assert resp.status_code == 400
        assert "Invalid file type" in resp.json()["detail"]

    def test_missing_file_in_live_mode(self) -> None:
        client = _make_client(_mock_pipeline())
        resp = client.post("/api/analyze")
        assert resp.status_code == 400
        assert "No plan file" in resp.json()["detail"]

    def test_missing_api_key(self) -> None:
        client = _make_client(settings=Settings())
        resp = client.post("/api/analyze", files=_pdf_upload())
        assert resp.status_code == 400
        assert "ANTHROPIC_API_KEY" in resp.json()["detail"]

    def test_extraction_error_returns_500(self) -> None:
        pipeline = MagicMock(spec=ScanPipeline)
        pipeline.analyze.side_effect = ExtractionError("Vision API request failed")
        client = _make_client(pipeline)

        resp = client.post("/api/analyze", files=_pdf_upload())

        assert resp.status_code == 500
        assert "Vision API request failed" in resp.json()["detail"]

    def test_plan_processing_error_returns_500(self) -> None:
        pipeline = MagicMock(spec=ScanPipeline)
        pipeline.analyze.side_effect = PlanProcessingError("Failed to open PDF")
        client = _make_client(pipeline)

        resp = client.post("/api/analyze", files=_pdf_upload())

        assert resp.status_code == 500


# ---------------------------------------------------------------------------
# Mock mode end to end
# ---------------------------------------------------------------------------


class TestMockMode:
    def test_analyze_without_file_uses_sample_structures(self) -> None:
        client = _make_client(settings=_MOCK)

        resp = client.post("/api/analyze")

        assert resp.status_code == 200
        data = resp.json()
        assert data["extraction_source"] == "fixture"
        assert data["pages_analyzed"] == 0
        assert [s["id"] for s in data["structures"]] == [
            "STR-101",
            "STR-102",
            "STR-103",
            "STR-105",
        ]
        assert data["summary"]["total_price"] == 3530.0
        assert data["summary"]["total_price_formatted"] == "$3,530.00"
        assert data["warnings"]
