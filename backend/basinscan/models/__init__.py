"""Domain models for the BasinScan pricing engine."""

from basinscan.models.enums import ExtractionMode, FailureReason, HeightPolicy
from basinscan.models.structure import (
    EnrichedStructure,
    EnrichmentResult,
    RawStructure,
    StructureFailure,
)

__all__ = [
    "EnrichedStructure",
    "EnrichmentResult",
    "ExtractionMode",
    "FailureReason",
    "HeightPolicy",
    "RawStructure",
    "StructureFailure",
]
