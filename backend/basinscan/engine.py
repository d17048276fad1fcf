"""Core enrichment engine for the BasinScan pricing library.

The EnrichmentEngine turns raw structure-table rows into priced part
recommendations:

1. **Eligibility filter**: drop rows whose type is not a drain basin of the
   supported family (inline drains, flared ends, other products).
2. **Record parsing**: validate each row into a ``RawStructure``; a bad
   field becomes a recorded failure for that row only.
3. **Height normalization**: ``rim - out`` rounded to 2 decimals, then rounded
   up to the nearest manufactured height tier.
4. **Pricing**: base price for (diameter, tier) plus the domed grate
   surcharge. Unknown pairs price at 0 and are flagged.
5. **Part code**: catalog identifier built from diameter and tier.

Rows are processed independently and output order matches input order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from basinscan.eligibility import EligibilityFilter
from basinscan.height import derive_height, round_up_tier
from basinscan.models.enums import FailureReason, HeightPolicy
from basinscan.models.structure import (
    EnrichedStructure,
    EnrichmentResult,
    RawStructure,
    StructureFailure,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from basinscan.data.repository import CatalogRepository

logger = logging.getLogger(__name__)

DOMED_MARKER = "domed"

# Field name -> failure reason for pydantic validation errors
_FIELD_REASONS: dict[str, FailureReason] = {
    "id": FailureReason.MISSING_ID,
    "diameter": FailureReason.UNPARSABLE_DIAMETER,
    "casting": FailureReason.INVALID_CASTING,
    "rim": FailureReason.INVALID_ELEVATION,
    "out": FailureReason.INVALID_ELEVATION,
}


class _RecordFailure(Exception):
    """Internal signal carrying a per-record failure out of ``_enrich_one``."""

    def __init__(self, failure: StructureFailure) -> None:
        super().__init__(failure.detail)
        self.failure = failure


class EnrichmentEngine:
    """Converts raw structure records into priced EnrichedStructures.

    Args:
        repository: Catalog repository providing prices and part codes.
        height_policy: How to treat structures whose height is zero or
            negative. Defaults to excluding them.
        eligibility: Structure-type filter. Defaults to the drain basin
            family with inline drains and flared ends excluded.

    Example::

        from basinscan.data.repository import CatalogRepository

        engine = EnrichmentEngine(CatalogRepository())
        result = engine.enrich(records)
    """

    def __init__(
        self,
        repository: CatalogRepository,
        height_policy: HeightPolicy = HeightPolicy.EXCLUDE,
        eligibility: EligibilityFilter | None = None,
    ) -> None:
        self._repository = repository
        self._height_policy = height_policy
        self._eligibility = eligibility or EligibilityFilter()

    @property
    def repository(self) -> CatalogRepository:
        return self._repository

    @property
    def height_policy(self) -> HeightPolicy:
        return self._height_policy

    def enrich(
        self, raw_records: Iterable[Mapping[str, Any] | RawStructure] | None
    ) -> EnrichmentResult:
        """Enrich a batch of raw structure records.

        Args:
            raw_records: Rows from the recognition step, as dicts or
                already-parsed RawStructures. ``None`` is treated as empty.

        Returns:
            An EnrichmentResult with priced structures in input order, plus
            per-record failures and eligibility exclusions.
        """
        result = EnrichmentResult()
        if raw_records is None:
            return result

        for index, record in enumerate(raw_records):
            structure_type = self._peek(record, "type")
            if structure_type is not None and not self._eligibility.is_eligible(
                str(structure_type)
            ):
                result.excluded.append(
                    StructureFailure(
                        structure_id=self._peek_id(record),
                        reason=FailureReason.INELIGIBLE_TYPE,
                        detail=self._eligibility.describe_rejection(str(structure_type)),
                    )
                )
                continue

            try:
                result.structures.append(self._enrich_one(record, index))
            except _RecordFailure as exc:
                failure = exc.failure
            except Exception as exc:
                logger.exception("Unexpected error enriching record #%d", index + 1)
                failure = StructureFailure(
                    structure_id=self._peek_id(record),
                    reason=FailureReason.INVALID_RECORD,
                    detail=f"Record #{index + 1} could not be enriched: {exc!r}",
                )
            else:
                continue

            logger.warning(
                "Skipping structure %s: %s",
                failure.structure_id or f"#{index + 1}",
                failure.detail,
            )
            result.failures.append(failure)

        logger.info(
            "Enriched %d structures (%d failed, %d excluded)",
            len(result.structures),
            len(result.failures),
            len(result.excluded),
        )
        return result

    def _enrich_one(
        self, record: Mapping[str, Any] | RawStructure, index: int
    ) -> EnrichedStructure:
        raw = self._parse(record, index)
        warnings: list[str] = []

        try:
            height = derive_height(raw.rim, raw.out)
        except ArithmeticError as exc:
            raise _RecordFailure(
                StructureFailure(
                    structure_id=raw.id,
                    reason=FailureReason.INVALID_ELEVATION,
                    detail=f"Rim {raw.rim} and outlet invert {raw.out} give no usable height",
                )
            ) from exc
        if height <= 0:
            if self._height_policy == HeightPolicy.EXCLUDE:
                raise _RecordFailure(
                    StructureFailure(
                        structure_id=raw.id,
                        reason=FailureReason.NON_POSITIVE_HEIGHT,
                        detail=(
                            f"Rim {raw.rim} is not above outlet invert {raw.out} "
                            f"(height {height} ft)"
                        ),
                    )
                )
            warnings.append(
                f"Height {height} ft is not positive; clamped to the "
                f"{self._repository.tiers[0]} ft tier"
            )

        tier = round_up_tier(height, self._repository.tiers)
        domed = DOMED_MARKER in raw.casting.lower()

        if not self._repository.has_price(raw.diameter, tier):
            warnings.append(
                f'No catalog price for {raw.diameter}" at the {tier} ft tier'
            )

        return EnrichedStructure(
            id=raw.id,
            diameter=raw.diameter,
            height=height,
            rounded=tier,
            part=self._repository.generate_part_code(raw.diameter, tier),
            price=self._repository.resolve_price(raw.diameter, tier, domed),
            domed=domed,
            warnings=warnings,
        )

    def _parse(
        self, record: Mapping[str, Any] | RawStructure, index: int
    ) -> RawStructure:
        if isinstance(record, RawStructure):
            return record
        if not isinstance(record, Mapping):
            raise _RecordFailure(
                StructureFailure(
                    structure_id=None,
                    reason=FailureReason.INVALID_RECORD,
                    detail=(
                        f"Record #{index + 1} is a {type(record).__name__}, "
                        "not an object"
                    ),
                )
            )
        try:
            return RawStructure.model_validate(dict(record))
        except ValidationError as exc:
            raise _RecordFailure(self._failure_from_validation(record, exc)) from exc

    @staticmethod
    def _failure_from_validation(
        record: Mapping[str, Any], exc: ValidationError
    ) -> StructureFailure:
        """Map the first pydantic error to the failure taxonomy."""
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else ""
        reason = _FIELD_REASONS.get(field, FailureReason.INVALID_RECORD)
        message = error["msg"].removeprefix("Value error, ")
        if error["type"] == "missing":
            message = f"field '{field}' is missing"

        raw_id = record.get("id")
        structure_id = None
        if raw_id is not None and str(raw_id).strip():
            structure_id = str(raw_id).strip()
        return StructureFailure(
            structure_id=structure_id,
            reason=reason,
            detail=message,
        )

    @staticmethod
    def _peek(record: object, key: str) -> Any:
        if isinstance(record, RawStructure):
            return getattr(record, key)
        if isinstance(record, Mapping):
            return record.get(key)
        return None

    @classmethod
    def _peek_id(cls, record: object) -> str | None:
        value = cls._peek(record, "id")
        return str(value) if value is not None else None
