"""Module-level pricing helpers over the default catalog."""

from __future__ import annotations

from basinscan.data.repository import CatalogRepository

_DEFAULT_CATALOG = CatalogRepository()


def resolve_price(diameter: int, tier: int, domed: bool) -> float:
    """Base price plus dome surcharge; 0 base when the pair is not in the catalog."""
    return _DEFAULT_CATALOG.resolve_price(diameter, tier, domed)


def generate_part_code(diameter: int, tier: int) -> str:
    """Catalog part code for a diameter and height tier."""
    return _DEFAULT_CATALOG.generate_part_code(diameter, tier)
