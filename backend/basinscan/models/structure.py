"""Structure records flowing in and out of the enrichment engine."""

from __future__ import annotations

import math
import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

from basinscan.models.enums import FailureReason

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class RawStructure(BaseModel):
    """A structure row as extracted from a plan's structure table.

    Field names match the JSON keys the recognition step returns, so a
    parsed response dict can be validated directly.
    """

    id: str
    diameter: int
    rim: float
    out: float
    casting: str
    type: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def id_must_be_present(cls, v: Any) -> str:
        if v is None:
            msg = "structure id is missing"
            raise ValueError(msg)
        text = str(v).strip()
        if not text:
            msg = "structure id is blank"
            raise ValueError(msg)
        return text

    @field_validator("diameter", mode="before")
    @classmethod
    def parse_diameter(cls, v: Any) -> int:
        """Accept 12, 12.0, "12", '12"' or "12 IN" the way a leading-integer parse would."""
        if isinstance(v, bool):
            msg = f"diameter {v!r} is not a number"
            raise ValueError(msg)
        if isinstance(v, int):
            value = v
        elif isinstance(v, float):
            if not math.isfinite(v):
                msg = f"diameter {v!r} is not a finite number"
                raise ValueError(msg)
            value = int(v)
        elif isinstance(v, str):
            match = _LEADING_INT.match(v)
            if match is None:
                msg = f"diameter {v!r} is not a number"
                raise ValueError(msg)
            value = int(match.group(1))
        else:
            msg = f"diameter {v!r} is not a number"
            raise ValueError(msg)
        if value <= 0:
            msg = f"diameter must be positive, got {value}"
            raise ValueError(msg)
        return value

    @field_validator("rim", "out", mode="before")
    @classmethod
    def parse_elevation(cls, v: Any) -> float:
        if v is None or isinstance(v, bool):
            msg = f"elevation {v!r} is not a number"
            raise ValueError(msg)
        try:
            value = float(v)
        except (TypeError, ValueError) as exc:
            msg = f"elevation {v!r} is not a number"
            raise ValueError(msg) from exc
        if not math.isfinite(value):
            msg = f"elevation {v!r} is not a finite number"
            raise ValueError(msg)
        return value

    @field_validator("casting", mode="before")
    @classmethod
    def casting_must_be_text(cls, v: Any) -> str:
        if not isinstance(v, str):
            msg = f"casting must be text, got {type(v).__name__}"
            raise ValueError(msg)
        return v

    @field_validator("type", mode="before")
    @classmethod
    def type_to_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        return str(v)


class EnrichedStructure(BaseModel):
    """A priced part recommendation for one drain basin."""

    id: str
    diameter: int
    height: float
    rounded: int
    part: str
    price: float = Field(ge=0)
    domed: bool
    warnings: list[str] = Field(default_factory=list)


class StructureFailure(BaseModel):
    """A record that was skipped, with the reason why."""

    structure_id: str | None
    reason: FailureReason
    detail: str


class EnrichmentResult(BaseModel):
    """Outcome of enriching one batch of raw structure records.

    ``structures`` keeps input order. ``failures`` holds eligible records
    that could not be priced; ``excluded`` holds records dropped by the
    eligibility filter.
    """

    structures: list[EnrichedStructure] = Field(default_factory=list)
    failures: list[StructureFailure] = Field(default_factory=list)
    excluded: list[StructureFailure] = Field(default_factory=list)

    @property
    def total_price(self) -> float:
        return sum(s.price for s in self.structures)

    @property
    def flagged_count(self) -> int:
        return sum(1 for s in self.structures if s.warnings)

    def to_summary_dict(self) -> dict[str, Any]:
        """Produce a flat summary dict for frontend consumption."""
        from basinscan.formatting import format_currency

        return {
            "structure_count": len(self.structures),
            "failure_count": len(self.failures),
            "excluded_count": len(self.excluded),
            "flagged_count": self.flagged_count,
            "total_price": self.total_price,
            "total_price_formatted": format_currency(self.total_price),
        }
