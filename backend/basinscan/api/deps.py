"""Dependency wiring for FastAPI endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from basinscan.factory import create_default_engine
from basinscan.services.extractor import (
    FixtureStructureExtractor,
    StructureExtractor,
    VisionStructureExtractor,
)
from basinscan.services.pipeline import ScanPipeline
from basinscan.services.plan_processor import PlanProcessor

if TYPE_CHECKING:
    from basinscan.config import Settings

logger = logging.getLogger(__name__)


def create_extractor(settings: Settings) -> StructureExtractor:
    """Pick the structure extractor for the configured mode.

    Mock mode needs no credentials. Live mode raises ValueError when
    ANTHROPIC_API_KEY is not set.
    """
    if settings.is_mock:
        logger.info("Extraction mode: mock (fixture rows)")
        return FixtureStructureExtractor()

    if not settings.anthropic_api_key:
        msg = (
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Set it, or set BASINSCAN_EXTRACTION_MODE=mock for offline use."
        )
        raise ValueError(msg)

    logger.info("Extraction mode: live (%s)", settings.vision_model)
    return VisionStructureExtractor(
        api_key=settings.anthropic_api_key,
        model=settings.vision_model,
        timeout=settings.vision_timeout,
    )


def create_pipeline(settings: Settings) -> ScanPipeline:
    """Create a ScanPipeline from settings."""
    return ScanPipeline(
        plan_processor=PlanProcessor(),
        extractor=create_extractor(settings),
        engine=create_default_engine(height_policy=settings.height_policy),
    )
