"""Canned structure-table rows used in mock extraction mode."""

from __future__ import annotations

from typing import Any

MOCK_STRUCTURES: tuple[dict[str, Any], ...] = (
    {
        "id": "STR-101",
        "diameter": 12,
        "rim": 896.80,
        "out": 895.08,
        "casting": "DOMED GRATE",
        "type": "NYLOPLAST DRAIN BASIN",
    },
    {
        "id": "STR-102",
        "diameter": 18,
        "rim": 897.79,
        "out": 894.43,
        "casting": "DOMED GRATE",
        "type": "NYLOPLAST DRAIN BASIN",
    },
    {
        "id": "STR-103",
        "diameter": 18,
        "rim": 899.71,
        "out": 895.19,
        "casting": "SOLID COVER",
        "type": "NYLOPLAST DRAIN BASIN",
    },
    {
        "id": "STR-105",
        "diameter": 24,
        "rim": 899.90,
        "out": 895.27,
        "casting": "SOLID COVER",
        "type": "NYLOPLAST DRAIN BASIN",
    },
)
