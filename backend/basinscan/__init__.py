"""BasinScan drain basin pricing engine.

Usage::

    from basinscan import create_default_engine

    engine = create_default_engine()
    result = engine.enrich(
        [{"id": "STR-101", "diameter": 12, "rim": 896.80, "out": 895.08,
          "casting": "DOMED GRATE", "type": "NYLOPLAST DRAIN BASIN"}]
    )
"""

from basinscan.data.repository import CatalogRepository
from basinscan.eligibility import EligibilityFilter
from basinscan.engine import EnrichmentEngine
from basinscan.factory import create_default_engine
from basinscan.height import derive_height, round_up_tier
from basinscan.models.enums import ExtractionMode, FailureReason, HeightPolicy
from basinscan.models.structure import (
    EnrichedStructure,
    EnrichmentResult,
    RawStructure,
    StructureFailure,
)
from basinscan.pricing import generate_part_code, resolve_price

__all__ = [
    "CatalogRepository",
    "EligibilityFilter",
    "EnrichedStructure",
    "EnrichmentEngine",
    "EnrichmentResult",
    "ExtractionMode",
    "FailureReason",
    "HeightPolicy",
    "RawStructure",
    "StructureFailure",
    "create_default_engine",
    "derive_height",
    "generate_part_code",
    "resolve_price",
    "round_up_tier",
]
