"""Scan pipeline: orchestrates plan processing, structure extraction and enrichment."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from basinscan.exceptions import (
    BasinScanError,
    EnrichmentError,
    ExtractionError,
    PlanProcessingError,
)

if TYPE_CHECKING:
    from pathlib import Path

    from basinscan.engine import EnrichmentEngine
    from basinscan.models.structure import EnrichmentResult
    from basinscan.services.extractor import ExtractionResult, StructureExtractor
    from basinscan.services.plan_processor import (
        PageResult,
        PlanProcessingResult,
        PlanProcessor,
    )

logger = logging.getLogger(__name__)

# Words that show up in structure tables on storm sewer plan sheets
_TABLE_KEYWORDS: tuple[str, ...] = (
    "structure",
    "rim",
    "inv",
    "casting",
    "drain basin",
    "nyloplast",
)


@dataclass(frozen=True)
class ScanResult:
    """Result of the full scan pipeline."""

    enrichment: EnrichmentResult
    raw_response: str
    extraction_source: str
    processing_time_seconds: float
    pages_analyzed: int
    warnings: list[str] = field(default_factory=list)


class ScanPipeline:
    """Orchestrates plan file → page image → extracted rows → priced structures."""

    def __init__(
        self,
        plan_processor: PlanProcessor,
        extractor: StructureExtractor,
        engine: EnrichmentEngine,
    ) -> None:
        self._plan_processor = plan_processor
        self._extractor = extractor
        self._engine = engine

    def analyze(self, plan_path: Path | None) -> ScanResult:
        """Run the full scan pipeline on an uploaded plan.

        Steps:
            1. Render the plan into page images (PDF) or use the image as-is
            2. Pick the page most likely to hold the structure table
            3. Extract raw structure rows from that page
            4. Enrich the rows into priced structures
            5. Clean up temporary page images

        ``plan_path`` may be None only when the extractor does not read
        images (fixture mode).

        Raises
        ------
        PlanProcessingError
            If the plan cannot be rendered or has no pages.
        ExtractionError
            If structure extraction fails.
        EnrichmentError
            If the enrichment engine fails as a whole.
        """
        start = time.monotonic()
        plan_result: PlanProcessingResult | None = None

        try:
            page: PageResult | None = None
            if plan_path is not None:
                try:
                    plan_result = self._plan_processor.process(plan_path)
                except Exception as exc:
                    msg = f"Failed to process plan: {exc}"
                    raise PlanProcessingError(msg) from exc

                if plan_result.page_count == 0:
                    msg = "Plan has no pages to analyze"
                    raise PlanProcessingError(msg)
                page = self._select_best_page(plan_result)

            try:
                extraction = self._extract(page)
            except Exception as exc:
                if isinstance(exc, ExtractionError):
                    raise
                msg = f"Structure extraction failed: {exc}"
                raise ExtractionError(msg) from exc

            enrichment = self.enrich_records(extraction.records)

            elapsed = time.monotonic() - start
            return ScanResult(
                enrichment=enrichment,
                raw_response=extraction.raw_response,
                extraction_source=extraction.source,
                processing_time_seconds=round(elapsed, 2),
                pages_analyzed=1 if page is not None else 0,
                warnings=list(extraction.warnings),
            )

        finally:
            if plan_result is not None:
                self._plan_processor.cleanup(plan_result)

    def enrich_records(self, records: list[object] | None) -> EnrichmentResult:
        """Run only the enrichment step on already-extracted rows."""
        try:
            return self._engine.enrich(records)  # type: ignore[arg-type]
        except BasinScanError:
            raise
        except Exception as exc:
            msg = f"Enrichment failed: {exc}"
            raise EnrichmentError(msg) from exc

    def _extract(self, page: PageResult | None) -> ExtractionResult:
        if page is None:
            return self._extractor.extract(None)
        return self._extractor.extract(page.image_path, media_type=page.media_type)

    @staticmethod
    def _select_best_page(plan_result: PlanProcessingResult) -> PageResult:
        """Select the page most likely to contain the structure table.

        Heuristic:
        - Score each page by how many table keywords its text contains
        - Ties and text-less pages fall back to the largest page
        """
        pages = plan_result.pages
        if len(pages) == 1:
            return pages[0]

        def score(p: PageResult) -> tuple[int, int]:
            text = p.text_content.lower()
            hits = sum(1 for kw in _TABLE_KEYWORDS if kw in text)
            return hits, p.width_px * p.height_px

        best = max(pages, key=score)
        logger.info(
            "Selected page %d of %d (%d table keywords)",
            best.page_number,
            len(pages),
            score(best)[0],
        )
        return best
