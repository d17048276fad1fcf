"""Basin height derivation and catalog tier rounding."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from basinscan.data.catalog import HEIGHT_TIERS

_CENTS = Decimal("0.01")


def derive_height(rim: float, out: float) -> float:
    """Return ``rim - out`` in feet, rounded half away from zero to 2 places.

    The subtraction runs on the decimal form of each elevation so that
    896.80 - 895.08 gives exactly 1.72 rather than 1.7199999999999.
    """
    diff = Decimal(str(rim)) - Decimal(str(out))
    return float(diff.quantize(_CENTS, rounding=ROUND_HALF_UP))


def round_up_tier(height: float, tiers: tuple[int, ...] = HEIGHT_TIERS) -> int:
    """Return the smallest catalog tier that is >= *height*.

    Heights above every tier clamp to the top tier. Non-positive heights
    are not rejected here and land in the smallest tier.
    """
    for tier in tiers:
        if height <= tier:
            return tier
    return tiers[-1]
