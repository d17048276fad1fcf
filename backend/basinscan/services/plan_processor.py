"""Plan processing service: turns uploaded plan sheets into PNG page images."""

from __future__ import annotations

import contextlib
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import fitz  # type: ignore[import-untyped]

IMAGE_MEDIA_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}
PDF_SUFFIX = ".pdf"
SUPPORTED_SUFFIXES: frozenset[str] = frozenset({*IMAGE_MEDIA_TYPES, PDF_SUFFIX})


@dataclass(frozen=True)
class PageResult:
    """A single plan page ready for vision extraction."""

    page_number: int
    image_path: Path
    media_type: str
    width_px: int
    height_px: int
    text_content: str = ""
    owned: bool = True


@dataclass(frozen=True)
class PlanProcessingResult:
    """Result of processing an uploaded plan file."""

    pages: list[PageResult] = field(default_factory=list)
    page_count: int = 0
    file_size_bytes: int = 0
    # Set only when the processor created the render directory itself
    temp_dir: Path | None = None


_DPI = 200
_ZOOM = _DPI / 72  # fitz uses 72 DPI as baseline


def is_supported(filename: str) -> bool:
    return Path(filename).suffix.lower() in SUPPORTED_SUFFIXES


class PlanProcessor:
    """Renders PDF plan sheets to 200-DPI PNGs and passes images through."""

    def __init__(self, output_dir: Path | None = None) -> None:
        self._output_dir = output_dir

    def process(self, plan_path: Path) -> PlanProcessingResult:
        """Produce page images for *plan_path*.

        PNG and JPEG uploads become a single page that points at the
        original file. PDFs are rendered page by page into a temp directory.

        Raises
        ------
        ValueError
            If the file does not exist, has an unsupported extension,
            cannot be opened, or a PDF page fails to render.
        """
        plan_path = Path(plan_path)
        if not plan_path.exists():
            msg = f"Plan file not found: {plan_path}"
            raise ValueError(msg)

        suffix = plan_path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            msg = f"Unsupported plan file type: {suffix or '(none)'}"
            raise ValueError(msg)

        file_size = plan_path.stat().st_size
        if suffix == PDF_SUFFIX:
            return self._process_pdf(plan_path, file_size)
        return self._process_image(plan_path, suffix, file_size)

    @staticmethod
    def cleanup(result: PlanProcessingResult) -> None:
        """Delete rendered page images and the temp directory holding them.

        Uploaded images and caller-supplied output directories are left alone.
        """
        for page in result.pages:
            if page.owned:
                page.image_path.unlink(missing_ok=True)
        if result.temp_dir is not None:
            with contextlib.suppress(OSError):
                result.temp_dir.rmdir()

    @staticmethod
    def _process_image(
        image_path: Path, suffix: str, file_size: int
    ) -> PlanProcessingResult:
        try:
            pix = fitz.Pixmap(str(image_path))
        except Exception as exc:
            msg = f"Failed to open image: {image_path}"
            raise ValueError(msg) from exc

        page = PageResult(
            page_number=1,
            image_path=image_path,
            media_type=IMAGE_MEDIA_TYPES[suffix],
            width_px=pix.width,
            height_px=pix.height,
            owned=False,
        )
        return PlanProcessingResult(pages=[page], page_count=1, file_size_bytes=file_size)

    def _process_pdf(self, pdf_path: Path, file_size: int) -> PlanProcessingResult:
        try:
            doc = fitz.open(pdf_path)
        except Exception as exc:
            msg = f"Failed to open PDF: {pdf_path}"
            raise ValueError(msg) from exc

        try:
            if doc.page_count == 0:
                return PlanProcessingResult(pages=[], page_count=0, file_size_bytes=file_size)

            temp_dir: Path | None = None
            if self._output_dir:
                out_dir = Path(self._output_dir)
                out_dir.mkdir(parents=True, exist_ok=True)
            else:
                temp_dir = out_dir = Path(tempfile.mkdtemp(prefix="basinscan_pages_"))

            pages: list[PageResult] = []
            matrix = fitz.Matrix(_ZOOM, _ZOOM)
            for page_num in range(doc.page_count):
                image_path = out_dir / f"page_{page_num + 1}.png"
                try:
                    page = doc[page_num]
                    pix = page.get_pixmap(matrix=matrix)
                    pix.save(str(image_path))
                    text_content = page.get_text()
                except Exception as exc:
                    image_path.unlink(missing_ok=True)
                    self.cleanup(PlanProcessingResult(pages=pages, temp_dir=temp_dir))
                    msg = f"Failed to render page {page_num + 1} of {pdf_path}"
                    raise ValueError(msg) from exc

                pages.append(
                    PageResult(
                        page_number=page_num + 1,
                        image_path=image_path,
                        media_type="image/png",
                        width_px=pix.width,
                        height_px=pix.height,
                        text_content=text_content,
                    )
                )

            return PlanProcessingResult(
                pages=pages,
                page_count=doc.page_count,
                file_size_bytes=file_size,
                temp_dir=temp_dir,
            )
        finally:
            doc.close()
