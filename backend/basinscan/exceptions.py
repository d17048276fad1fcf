"""Custom exception hierarchy for the BasinScan pipeline."""

from __future__ import annotations


class BasinScanError(Exception):
    """Base exception for all BasinScan errors."""


class CatalogConfigurationError(BasinScanError):
    """Raised when the static catalog tables are inconsistent."""


class PlanProcessingError(BasinScanError):
    """Raised when an uploaded plan cannot be turned into page images."""


class ExtractionError(BasinScanError):
    """Raised when structure extraction from a plan image fails."""


class EnrichmentError(BasinScanError):
    """Raised when the enrichment engine fails as a whole."""
