"""Structure-type filter for the supported drain basin product family."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_FAMILY_MARKER = "NYLOPLAST DRAIN BASIN"
DEFAULT_EXCLUDED_TYPES: tuple[str, ...] = ("INLINE DRAIN", "FLARED END")


@dataclass(frozen=True)
class EligibilityFilter:
    """Decides whether a structure type belongs to the priced product family.

    The recognition prompt already asks the model to keep only drain basins.
    The engine applies this filter again, so a record only reaches pricing
    when its type carries the family marker and no excluded category.
    """

    family_marker: str = DEFAULT_FAMILY_MARKER
    excluded_types: tuple[str, ...] = DEFAULT_EXCLUDED_TYPES
    case_sensitive: bool = False

    def is_eligible(self, structure_type: str | None) -> bool:
        """Return True if *structure_type* is an eligible drain basin.

        A missing type is treated as eligible: the record is trusted to
        have been filtered upstream.
        """
        if structure_type is None:
            return True
        text = self._normalize(structure_type)
        if any(self._normalize(ex) in text for ex in self.excluded_types):
            return False
        return self._normalize(self.family_marker) in text

    def describe_rejection(self, structure_type: str) -> str:
        text = self._normalize(structure_type)
        for ex in self.excluded_types:
            if self._normalize(ex) in text:
                return f"Type '{structure_type}' is an excluded category ({ex})"
        return (
            f"Type '{structure_type}' does not contain '{self.family_marker}'"
        )

    def _normalize(self, value: str) -> str:
        value = " ".join(value.split())
        return value if self.case_sensitive else value.upper()
