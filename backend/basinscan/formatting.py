"""Formatting helpers for presenting enriched structures as a table."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from basinscan.models.structure import EnrichedStructure, EnrichmentResult

TABLE_COLUMNS: tuple[str, ...] = (
    "Structure ID",
    "Diameter",
    "Height",
    "Rounded",
    "Part Code",
    "Price",
    "Domed Grate?",
)


def format_currency(amount: float) -> str:
    """Format a price as '$1,234.00' (always with cents)."""
    return f"${amount:,.2f}"


def format_height(height_ft: float) -> str:
    """Format a height in feet with two decimals, e.g. '1.72 ft'."""
    return f"{height_ft:.2f} ft"


def format_diameter(diameter_in: int) -> str:
    return f'{diameter_in}"'


def to_table_row(structure: EnrichedStructure) -> dict[str, Any]:
    """One display row keyed by TABLE_COLUMNS."""
    return {
        "Structure ID": structure.id,
        "Diameter": format_diameter(structure.diameter),
        "Height": format_height(structure.height),
        "Rounded": f"{structure.rounded} ft",
        "Part Code": structure.part,
        "Price": format_currency(structure.price),
        "Domed Grate?": "Yes" if structure.domed else "No",
    }


def to_table_rows(result: EnrichmentResult) -> list[dict[str, Any]]:
    return [to_table_row(s) for s in result.structures]
