"""FastAPI application: create_app factory with /api endpoints."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from fastapi import Body, FastAPI, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

# Load .env from project root (backend/../.env or backend/.env)
_backend_dir = Path(__file__).resolve().parent.parent.parent
_project_root = _backend_dir.parent
load_dotenv(_project_root / ".env")
load_dotenv(_backend_dir / ".env")

from basinscan.config import Settings
from basinscan.exceptions import BasinScanError
from basinscan.formatting import to_table_rows
from basinscan.services.plan_processor import SUPPORTED_SUFFIXES, is_supported

if TYPE_CHECKING:
    from basinscan.engine import EnrichmentEngine
    from basinscan.models.structure import EnrichmentResult
    from basinscan.services.pipeline import ScanPipeline

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def enrichment_payload(result: EnrichmentResult) -> dict[str, Any]:
    """Serialize an EnrichmentResult into the response shape the UI renders."""
    return {
        "structures": [s.model_dump(mode="json") for s in result.structures],
        "failures": [f.model_dump(mode="json") for f in result.failures],
        "excluded": [e.model_dump(mode="json") for e in result.excluded],
        "rows": to_table_rows(result),
        "summary": result.to_summary_dict(),
    }


def create_app(
    *,
    pipeline: ScanPipeline | None = None,
    engine: EnrichmentEngine | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    pipeline
        Optional pre-built pipeline for dependency injection (e.g. tests).
        If not provided, one is created from settings on first request to
        /api/analyze.
    engine
        Optional pre-built enrichment engine for /api/enrich and
        /api/catalog. If not provided, create_default_engine is used.
    settings
        Optional settings; read from the environment when omitted.
    """
    app = FastAPI(title="BasinScan", version=API_VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings or Settings.from_env()
    app.state.pipeline = pipeline
    app.state.engine = engine

    def _get_pipeline() -> ScanPipeline:
        pl: ScanPipeline | None = app.state.pipeline
        if pl is not None:
            return pl
        from basinscan.api.deps import create_pipeline

        pl = create_pipeline(app.state.settings)
        app.state.pipeline = pl
        return pl

    def _get_engine() -> EnrichmentEngine:
        eng: EnrichmentEngine | None = app.state.engine
        if eng is not None:
            return eng
        from basinscan.factory import create_default_engine

        eng = create_default_engine(height_policy=app.state.settings.height_policy)
        app.state.engine = eng
        return eng

    # ------------------------------------------------------------------
    # GET /api/health
    # ------------------------------------------------------------------

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {
            "status": "ok",
            "version": API_VERSION,
            "extraction_mode": app.state.settings.extraction_mode.value,
        }

    # ------------------------------------------------------------------
    # GET /api/catalog
    # ------------------------------------------------------------------

    @app.get("/api/catalog")
    def catalog() -> dict[str, Any]:
        return _get_engine().repository.to_dict()

    # ------------------------------------------------------------------
    # POST /api/enrich
    # ------------------------------------------------------------------

    @app.post("/api/enrich")
    def enrich(records: list[Any] = Body(...)) -> dict[str, Any]:  # noqa: B008
        result = _get_engine().enrich(records)
        return enrichment_payload(result)

    # ------------------------------------------------------------------
    # POST /api/analyze
    # ------------------------------------------------------------------

    @app.post("/api/analyze")
    async def analyze(file: UploadFile | None = None) -> dict[str, Any]:
        settings: Settings = app.state.settings

        if (
            app.state.pipeline is None
            and not settings.is_mock
            and not settings.anthropic_api_key
        ):
            raise HTTPException(
                status_code=400,
                detail=(
                    "ANTHROPIC_API_KEY is not configured. "
                    "Enable mock mode to try the sample structures instead."
                ),
            )

        if file is None:
            if not settings.is_mock:
                raise HTTPException(status_code=400, detail="No plan file uploaded.")
            return await _run_analysis(None)

        filename = Path(file.filename or "").name
        if not is_supported(filename):
            allowed = ", ".join(sorted(SUPPORTED_SUFFIXES))
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type. Accepted types: {allowed}.",
            )

        tmp_dir = Path(tempfile.mkdtemp(prefix="basinscan_"))
        tmp_path = tmp_dir / filename
        try:
            tmp_path.write_bytes(await file.read())
            return await _run_analysis(tmp_path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
            if tmp_dir.exists():
                tmp_dir.rmdir()

    async def _run_analysis(plan_path: Path | None) -> dict[str, Any]:
        try:
            pl = _get_pipeline()
            result = await run_in_threadpool(pl.analyze, plan_path)
        except BasinScanError as exc:
            logger.exception("Pipeline error during analysis")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except ValueError as exc:
            logger.exception("Pipeline configuration error")
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        payload = enrichment_payload(result.enrichment)
        payload.update(
            {
                "raw_response": result.raw_response,
                "extraction_source": result.extraction_source,
                "warnings": result.warnings,
                "processing_time_seconds": result.processing_time_seconds,
                "pages_analyzed": result.pages_analyzed,
            }
        )
        return payload

    return app
