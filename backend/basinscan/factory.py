"""Factory functions for creating pre-configured EnrichmentEngine instances."""

from __future__ import annotations

from basinscan.data.repository import CatalogRepository
from basinscan.engine import EnrichmentEngine
from basinscan.models.enums import HeightPolicy


def create_default_engine(
    height_policy: HeightPolicy = HeightPolicy.EXCLUDE,
) -> EnrichmentEngine:
    """Create an EnrichmentEngine wired up with the built-in catalog tables.

    This is the recommended way to create an engine for typical usage. It
    wires a CatalogRepository over the shipped price and surcharge tables
    so callers don't need to understand the internal wiring.

    Example::

        from basinscan import create_default_engine

        engine = create_default_engine()
        result = engine.enrich(records)
    """
    return EnrichmentEngine(CatalogRepository(), height_policy=height_policy)
