"""Catalog data layer for the BasinScan pricing engine."""

from basinscan.data.catalog import (
    BASE_PRICES,
    DOME_SURCHARGES,
    HEIGHT_TIERS,
    PART_INFIX,
    PART_PREFIX,
)
from basinscan.data.repository import CatalogRepository

__all__ = [
    "BASE_PRICES",
    "DOME_SURCHARGES",
    "HEIGHT_TIERS",
    "PART_INFIX",
    "PART_PREFIX",
    "CatalogRepository",
]
