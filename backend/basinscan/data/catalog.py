"""Static catalog tables for the drain basin product family.

Prices are list prices in USD keyed by nominal diameter (inches) and
manufactured height tier (feet). These tables are process-wide constants
and are wrapped read-only at import time.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# Manufactured height classes in feet, ascending. The last tier also takes
# any structure taller than it.
HEIGHT_TIERS: tuple[int, ...] = (3, 5, 7, 10)

PART_PREFIX = "28"
PART_INFIX = "AG"

CATALOG_VERSION = "2024.1"

_BASE_PRICES: dict[int, dict[int, float]] = {
    8: {3: 400.0, 5: 410.0, 7: 420.0, 10: 430.0},
    10: {3: 500.0, 5: 510.0, 7: 520.0, 10: 530.0},
    12: {3: 600.0, 5: 610.0, 7: 620.0, 10: 630.0},
    15: {3: 700.0, 5: 710.0, 7: 720.0, 10: 730.0},
    18: {3: 800.0, 5: 810.0, 7: 820.0, 10: 830.0},
    24: {3: 900.0, 5: 910.0, 7: 920.0, 10: 930.0},
    30: {3: 1000.0, 5: 1010.0, 7: 1020.0, 10: 1030.0},
    36: {3: 1100.0, 5: 1110.0, 7: 1120.0, 10: 1130.0},
}

# 36" has no domed grate option; missing diameters surcharge nothing.
_DOME_SURCHARGES: dict[int, float] = {
    8: 50.0,
    10: 100.0,
    12: 150.0,
    15: 200.0,
    18: 250.0,
    24: 300.0,
    30: 350.0,
}

BASE_PRICES: Mapping[int, Mapping[int, float]] = MappingProxyType(
    {d: MappingProxyType(tiers) for d, tiers in _BASE_PRICES.items()}
)
DOME_SURCHARGES: Mapping[int, float] = MappingProxyType(_DOME_SURCHARGES)
