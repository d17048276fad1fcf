"""Catalog repository for price and part-code lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING

from basinscan.data.catalog import (
    BASE_PRICES,
    CATALOG_VERSION,
    DOME_SURCHARGES,
    HEIGHT_TIERS,
    PART_INFIX,
    PART_PREFIX,
)
from basinscan.exceptions import CatalogConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping


class CatalogRepository:
    """Repository for looking up catalog prices and part codes.

    Wraps the in-memory catalog tables and checks them once on construction.
    Lookups outside the declared diameters or tiers are not errors: they
    resolve to a zero price so one odd structure never stops a batch.

    Raises:
        CatalogConfigurationError: If the tables are inconsistent (a diameter
            missing a tier, a negative price, or tiers out of order).
    """

    def __init__(
        self,
        base_prices: Mapping[int, Mapping[int, float]] = BASE_PRICES,
        dome_surcharges: Mapping[int, float] = DOME_SURCHARGES,
        tiers: tuple[int, ...] = HEIGHT_TIERS,
        part_prefix: str = PART_PREFIX,
        part_infix: str = PART_INFIX,
    ) -> None:
        self._base_prices = base_prices
        self._dome_surcharges = dome_surcharges
        self._tiers = tuple(tiers)
        self._part_prefix = part_prefix
        self._part_infix = part_infix
        self._validate()

    @property
    def tiers(self) -> tuple[int, ...]:
        return self._tiers

    @property
    def diameters(self) -> tuple[int, ...]:
        return tuple(sorted(self._base_prices))

    @property
    def part_prefix(self) -> str:
        return self._part_prefix

    def has_price(self, diameter: int, tier: int) -> bool:
        """True when the catalog declares a base price for this pair."""
        tiers = self._base_prices.get(diameter)
        return tiers is not None and tier in tiers

    def get_base_price(self, diameter: int, tier: int) -> float:
        """Base price for a diameter/tier pair, or 0.0 when undeclared."""
        tiers = self._base_prices.get(diameter)
        if tiers is None:
            return 0.0
        return float(tiers.get(tier, 0.0))

    def get_dome_surcharge(self, diameter: int) -> float:
        """Domed grate surcharge for a diameter, or 0.0 when it has none."""
        return float(self._dome_surcharges.get(diameter, 0.0))

    def resolve_price(self, diameter: int, tier: int, domed: bool) -> float:
        """Total price: base price plus the dome surcharge when domed."""
        price = self.get_base_price(diameter, tier)
        if domed:
            price += self.get_dome_surcharge(diameter)
        return price

    def generate_part_code(self, diameter: int, tier: int) -> str:
        """Catalog part code, e.g. ``2812AG3`` for a 12" basin in the 3 ft tier."""
        return f"{self._part_prefix}{diameter}{self._part_infix}{tier}"

    def to_dict(self) -> dict[str, object]:
        """Plain-dict view of the tables for API responses."""
        return {
            "catalog_version": CATALOG_VERSION,
            "tiers": list(self._tiers),
            "base_prices": {
                str(d): {str(t): p for t, p in tiers.items()}
                for d, tiers in sorted(self._base_prices.items())
            },
            "dome_surcharges": {
                str(d): s for d, s in sorted(self._dome_surcharges.items())
            },
            "part_prefix": self._part_prefix,
            "part_infix": self._part_infix,
        }

    def _validate(self) -> None:
        if not self._tiers:
            msg = "Catalog declares no height tiers"
            raise CatalogConfigurationError(msg)
        if any(a >= b for a, b in zip(self._tiers, self._tiers[1:])):
            msg = f"Height tiers must be strictly ascending, got {self._tiers}"
            raise CatalogConfigurationError(msg)
        if not self._base_prices:
            msg = "Catalog declares no base prices"
            raise CatalogConfigurationError(msg)

        for diameter, tiers in self._base_prices.items():
            missing = [t for t in self._tiers if t not in tiers]
            if missing:
                msg = f'Diameter {diameter}" has no base price for tiers {missing}'
                raise CatalogConfigurationError(msg)
            for tier, price in tiers.items():
                if price < 0:
                    msg = f'Negative base price {price} for {diameter}" at tier {tier}'
                    raise CatalogConfigurationError(msg)

        for diameter, surcharge in self._dome_surcharges.items():
            if surcharge < 0:
                msg = f'Negative dome surcharge {surcharge} for {diameter}"'
                raise CatalogConfigurationError(msg)
