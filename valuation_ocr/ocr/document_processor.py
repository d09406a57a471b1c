"""Page-by-page OCR of a valuation report PDF.

Rasterizes and recognizes one page at a time until the document runs out
of pages or the page limit is reached, then joins and normalizes the text.
"""

import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from valuation_ocr.ocr.rasterizer import (
    NoMorePagesError,
    RasterContext,
    RasterizationError,
    Rasterizer,
)
from valuation_ocr.ocr.tesseract_engine import OCREngineError, TesseractEngine
from valuation_ocr.preprocessing.text_normalizer import normalize
from valuation_ocr.utils.config import AppConfig
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

PAGE_SEPARATOR = "\n\n--- PAGE BREAK ---\n\n"

ProgressCallback = Callable[[int, str], None]


class ExtractionError(RuntimeError):
    """Raised when no usable text could be recognized from a document."""


class ExtractionCancelledError(ExtractionError):
    """Raised when the caller cancelled processing between pages."""


@dataclass(frozen=True)
class PageText:
    """Recognized text of a single page."""

    page_number: int
    text: str


class _MonotonicProgress:
    """Forwards progress updates, never letting the percentage go down."""

    def __init__(self, callback: ProgressCallback | None) -> None:
        self._callback = callback
        self._last = 0

    def __call__(self, percent: int, message: str) -> None:
        self._last = max(self._last, min(int(percent), 100))
        if self._callback is not None:
            self._callback(self._last, message)


class DocumentProcessor:
    """Runs the rasterize/recognize loop for one document at a time.

    Args:
        config: Application configuration object.
        rasterizer: Optional rasterizer, shared so diagnostics toggles
            apply to every document.
    """

    def __init__(
        self, config: AppConfig | None = None, rasterizer: Rasterizer | None = None
    ) -> None:
        self.config = config or AppConfig()
        self.rasterizer = rasterizer or Rasterizer(self.config.rasterizer)

    def _create_engine(self) -> TesseractEngine:
        ocr = self.config.ocr
        return TesseractEngine(
            tesseract_cmd=ocr.tesseract_cmd,
            default_lang=ocr.default_lang,
            psm=ocr.psm,
            timeout_seconds=ocr.timeout_seconds,
        )

    def recognize_document(
        self,
        pdf_bytes: bytes,
        on_progress: ProgressCallback | None = None,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> str:
        """Recognize and normalize the text of a PDF.

        Args:
            pdf_bytes: Raw PDF content.
            on_progress: Optional ``(percent, message)`` callback.
            is_cancelled: Optional callable checked between pages.

        Returns:
            Normalized text of all non-empty pages.

        Raises:
            RasterizationError: If the first page cannot be rasterized.
            ExtractionError: If OCR fails or no text is recognized.
            ExtractionCancelledError: If ``is_cancelled`` returned True.
        """
        progress = _MonotonicProgress(on_progress)
        progress(5, "Converting PDF to images...")

        with tempfile.TemporaryDirectory(prefix="valuation-ocr-") as tmp:
            work_dir = Path(tmp)
            pdf_path = work_dir / "report.pdf"
            pdf_path.write_bytes(pdf_bytes)
            context = RasterContext(pdf_path=pdf_path, work_dir=work_dir)

            progress(10, "Initializing OCR engine...")
            try:
                with self._create_engine() as engine:
                    progress(25, "OCR engine ready")
                    pages = self._recognize_pages(
                        engine, context, progress, is_cancelled
                    )
            except OCREngineError as exc:
                raise ExtractionError(str(exc)) from exc

        if not pages:
            raise ExtractionError("No text extracted from any page of the PDF")

        progress(95, "Finalizing...")
        text = normalize(PAGE_SEPARATOR.join(page.text for page in pages))
        logger.info(
            "Recognized %d pages, %d characters after normalization",
            len(pages),
            len(text),
        )
        return text

    def _recognize_pages(
        self,
        engine: TesseractEngine,
        context: RasterContext,
        progress: _MonotonicProgress,
        is_cancelled: Callable[[], bool] | None,
    ) -> list[PageText]:
        max_pages = self.config.ocr.max_pages
        pages: list[PageText] = []

        for page_number in range(1, max_pages + 1):
            if is_cancelled is not None and is_cancelled():
                logger.info("Cancelled before page %d", page_number)
                raise ExtractionCancelledError("Extraction cancelled")

            progress(
                int(25 + page_number / max_pages * 65),
                f"Processing page {page_number}...",
            )
            try:
                text = self._recognize_page(engine, context, page_number)
            except NoMorePagesError:
                if page_number == 1:
                    raise RasterizationError(
                        "PDF has no pages or could not be read"
                    ) from None
                logger.info("Reached end of document after %d pages", page_number - 1)
                break

            if not text.strip() and page_number == 1:
                logger.warning("First page produced no text, retrying once")
                text = self._recognize_page(engine, context, page_number)
                if not text.strip():
                    raise ExtractionError(
                        "No text extracted from the first page of the PDF"
                    )

            if not text.strip():
                logger.info("Page %d produced no text, skipping", page_number)
                continue
            pages.append(PageText(page_number, text))

        return pages

    def _recognize_page(
        self, engine: TesseractEngine, context: RasterContext, page_number: int
    ) -> str:
        raw_page = self.rasterizer.rasterize(context, page_number)
        if raw_page.fallback_reasons:
            logger.info(
                "Page %d rasterized with %s after %d failed strategies",
                page_number,
                raw_page.strategy,
                len(raw_page.fallback_reasons),
            )
        try:
            return engine.recognize(raw_page.image_path)
        finally:
            raw_page.discard()
