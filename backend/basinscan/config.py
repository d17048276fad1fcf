"""Environment-driven settings for the BasinScan service layer."""

from __future__ import annotations

import os
from dataclasses import dataclass

from basinscan.models.enums import ExtractionMode, HeightPolicy

DEFAULT_VISION_MODEL = "claude-sonnet-4-5-20250929"


@dataclass(frozen=True)
class Settings:
    """Service settings with sensible defaults.

    The enrichment engine itself reads none of these; they only choose how
    the request layer builds its pipeline.
    """

    anthropic_api_key: str = ""
    extraction_mode: ExtractionMode = ExtractionMode.LIVE
    height_policy: HeightPolicy = HeightPolicy.EXCLUDE
    vision_model: str = DEFAULT_VISION_MODEL
    vision_timeout: float = 60.0

    @property
    def is_mock(self) -> bool:
        return self.extraction_mode == ExtractionMode.MOCK

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables.

        Raises ValueError for an unknown mode, policy or a bad timeout.
        """
        mode_raw = os.environ.get("BASINSCAN_EXTRACTION_MODE", "live").strip().lower()
        policy_raw = os.environ.get("BASINSCAN_HEIGHT_POLICY", "exclude").strip().lower()
        timeout_raw = os.environ.get("BASINSCAN_VISION_TIMEOUT", "60")

        try:
            extraction_mode = ExtractionMode(mode_raw)
        except ValueError as exc:
            msg = f"BASINSCAN_EXTRACTION_MODE must be 'live' or 'mock', got {mode_raw!r}"
            raise ValueError(msg) from exc

        try:
            height_policy = HeightPolicy(policy_raw)
        except ValueError as exc:
            msg = f"BASINSCAN_HEIGHT_POLICY must be 'exclude' or 'clamp', got {policy_raw!r}"
            raise ValueError(msg) from exc

        try:
            vision_timeout = float(timeout_raw)
        except ValueError as exc:
            msg = f"BASINSCAN_VISION_TIMEOUT must be a number, got {timeout_raw!r}"
            raise ValueError(msg) from exc
        if vision_timeout <= 0:
            msg = "BASINSCAN_VISION_TIMEOUT must be positive"
            raise ValueError(msg)

        return cls(
            anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
            extraction_mode=extraction_mode,
            height_policy=height_policy,
            vision_model=os.environ.get("BASINSCAN_VISION_MODEL", DEFAULT_VISION_MODEL),
            vision_timeout=vision_timeout,
        )
