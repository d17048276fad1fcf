"""Structure extraction services: pull structure-table rows out of plan images.

Two interchangeable extractors share the ``StructureExtractor`` protocol:
``VisionStructureExtractor`` calls the Anthropic Vision API, and
``FixtureStructureExtractor`` returns canned rows for offline use.
"""

from __future__ import annotations

import base64
import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import anthropic
from anthropic.types import ImageBlockParam, TextBlockParam

from basinscan.config import DEFAULT_VISION_MODEL
from basinscan.data.fixtures import MOCK_STRUCTURES
from basinscan.exceptions import ExtractionError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    """Raw structure rows pulled from one plan image."""

    records: list[Any]
    raw_response: str
    source: str
    warnings: list[str] = field(default_factory=list)


class StructureExtractor(Protocol):
    """Anything that can turn a plan page image into raw structure rows."""

    def extract(
        self, image_path: Path | None, media_type: str = "image/png"
    ) -> ExtractionResult:
        ...


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = (
    "You are an assistant that extracts storm drain structure information "
    "from civil engineering plan tables."
)

EXTRACTION_PROMPT = (
    "Analyze the image of a storm structure data table.\n"
    "Extract a list of structures with these properties:\n"
    "- id (e.g., STR-101)\n"
    "- casting (e.g., DOMED GRATE, SOLID COVER)\n"
    "- diameter (number only, inches)\n"
    "- rim (RIM ELEV)\n"
    "- out (PIPE INV (OUT))\n"
    "- type (e.g., NYLOPLAST DRAIN BASIN)\n\n"
    'Only include entries with "NYLOPLAST DRAIN BASIN" in the type field.\n'
    'Exclude rows labeled "INLINE DRAIN" or "FLARED END".\n\n'
    "Return the result as a JSON array of objects with the above fields, "
    "wrapped in ```json ... ``` code fences. Use numbers for diameter, rim "
    "and out. Return [] if the image has no such table."
)


# ---------------------------------------------------------------------------
# Vision extractor
# ---------------------------------------------------------------------------

_MAX_RETRIES = 1


class VisionStructureExtractor:
    """Sends plan images to the Anthropic Vision API and parses the table rows."""

    source = "vision"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_VISION_MODEL,
        timeout: float = 60.0,
        max_tokens: int = 1500,
    ) -> None:
        self._client = anthropic.Anthropic(
            api_key=api_key,
            timeout=timeout,
        )
        self._model = model
        self._max_tokens = max_tokens

    def extract(
        self, image_path: Path | None, media_type: str = "image/png"
    ) -> ExtractionResult:
        """Extract raw structure rows from a plan image.

        Parameters
        ----------
        image_path
            Path to a PNG or JPEG image of a plan sheet.
        media_type
            MIME type of the image.

        Raises
        ------
        ExtractionError
            If the image cannot be read, the API returns no content, or the
            response stays unparseable after a retry.
        """
        image_data = self._load_image(image_path)
        user_content = self._build_user_content(image_data, media_type)

        for attempt in range(_MAX_RETRIES + 1):
            raw_response = self._call_api(user_content)
            if not raw_response.strip():
                msg = "Vision model returned no content"
                raise ExtractionError(msg)

            records = self._parse_response(raw_response)
            if records is not None:
                logger.info("Vision model returned %d structure rows", len(records))
                return ExtractionResult(
                    records=records,
                    raw_response=raw_response,
                    source=self.source,
                )

            if attempt < _MAX_RETRIES:
                logger.warning(
                    "Malformed vision response, retrying (attempt %d/%d)",
                    attempt + 2,
                    _MAX_RETRIES + 1,
                )

        msg = "Vision model returned unparseable response after retries"
        raise ExtractionError(msg)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _load_image(image_path: Path | None) -> str:
        """Load image and return base64-encoded string."""
        if image_path is None:
            msg = "No plan image provided for vision extraction"
            raise ExtractionError(msg)
        image_path = Path(image_path)
        if not image_path.exists():
            msg = f"Image file not found: {image_path}"
            raise ExtractionError(msg)
        return base64.b64encode(image_path.read_bytes()).decode("utf-8")

    @staticmethod
    def _build_user_content(
        image_data: str, media_type: str
    ) -> list[ImageBlockParam | TextBlockParam]:
        return [
            ImageBlockParam(
                type="image",
                source={
                    "type": "base64",
                    "media_type": media_type,  # type: ignore[typeddict-item]
                    "data": image_data,
                },
            ),
            TextBlockParam(type="text", text=EXTRACTION_PROMPT),
        ]

    def _call_api(
        self, user_content: list[ImageBlockParam | TextBlockParam]
    ) -> str:
        """Call the Anthropic Messages API with vision."""
        try:
            response = self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": user_content}],
            )
        except anthropic.APIError as exc:
            msg = f"Vision API request failed: {exc}"
            raise ExtractionError(msg) from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        return "\n".join(text_blocks)

    def _parse_response(self, raw_response: str) -> list[Any] | None:
        """Parse the model output into a list of row dicts, or None if malformed."""
        json_str = self._extract_json(raw_response)
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError:
            logger.warning("Invalid JSON in vision response")
            return None

        if isinstance(data, dict):
            data = data.get("structures")
        if not isinstance(data, list):
            logger.warning("Vision response JSON is not a list of structures")
            return None
        return data

    @staticmethod
    def _extract_json(text: str) -> str:
        """Extract JSON from ```json ... ``` fences, falling back to the bare text."""
        start = text.find("```json")
        if start == -1:
            start = text.find("```")
            if start == -1:
                return text.strip()
            start += 3
        else:
            start += 7

        end = text.find("```", start)
        if end == -1:
            return text[start:].strip()
        return text[start:end].strip()


# ---------------------------------------------------------------------------
# Fixture extractor (mock mode)
# ---------------------------------------------------------------------------


class FixtureStructureExtractor:
    """Returns a fixed list of rows instead of calling a vision model.

    Downstream enrichment runs unchanged, so this is a pure data-source swap
    for offline development and demos.
    """

    source = "fixture"

    def __init__(self, records: Iterable[dict[str, Any]] = MOCK_STRUCTURES) -> None:
        self._records = [dict(r) for r in records]

    def extract(
        self, image_path: Path | None = None, media_type: str = "image/png"
    ) -> ExtractionResult:
        logger.info("Using fixture structure rows (%d)", len(self._records))
        records = copy.deepcopy(self._records)
        return ExtractionResult(
            records=records,
            raw_response=json.dumps(records),
            source=self.source,
            warnings=["Structure rows came from the built-in fixture, not the uploaded plan"],
        )
