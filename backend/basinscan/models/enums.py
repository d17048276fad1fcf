"""Enums for the BasinScan domain models."""

from enum import StrEnum


class FailureReason(StrEnum):
    """Why a single structure record was left out of the priced output."""

    INELIGIBLE_TYPE = "ineligible_type"
    MISSING_ID = "missing_id"
    UNPARSABLE_DIAMETER = "unparsable_diameter"
    INVALID_CASTING = "invalid_casting"
    INVALID_ELEVATION = "invalid_elevation"
    NON_POSITIVE_HEIGHT = "non_positive_height"
    INVALID_RECORD = "invalid_record"


class HeightPolicy(StrEnum):
    """What to do with a structure whose rim sits at or below its outlet invert.

    EXCLUDE drops the record with a ``non_positive_height`` failure.
    CLAMP keeps it at the smallest catalog tier and attaches a warning.
    """

    EXCLUDE = "exclude"
    CLAMP = "clamp"


class ExtractionMode(StrEnum):
    """Where raw structure records come from."""

    LIVE = "live"
    MOCK = "mock"
