"""Tesseract OCR engine wrapper.

One engine is opened per document and closed when the document is done,
whichever way the document processing ends.
"""

from pathlib import Path
from types import TracebackType

import pytesseract
from PIL import Image

from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class OCREngineError(RuntimeError):
    """Raised when Tesseract is missing, fails, or times out."""


class TesseractEngine:
    """Wrapper around Tesseract OCR for full-page text recognition.

    Use as a context manager; the binary is verified on entry.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: OCR language code.
        psm: Tesseract page segmentation mode.
        timeout_seconds: Upper bound for a single page recognition.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
        timeout_seconds: float = 120.0,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm
        self.timeout_seconds = timeout_seconds
        self._closed = False

    def __enter__(self) -> "TesseractEngine":
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as exc:
            raise OCREngineError(
                "Tesseract is not installed or not on PATH"
            ) from exc
        logger.info("Tesseract %s ready (lang=%s)", version, self.default_lang)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the engine. Further recognition calls fail."""
        if not self._closed:
            logger.debug("Tesseract engine closed")
        self._closed = True

    def recognize(self, image_path: Path) -> str:
        """Recognize the text of one rasterized page.

        Args:
            image_path: Path to the page image.

        Returns:
            Recognized text, possibly empty.

        Raises:
            RuntimeError: If the engine was already closed.
            OCREngineError: If Tesseract fails or exceeds the timeout.
        """
        if self._closed:
            raise RuntimeError("Tesseract engine is closed")

        config = f"--psm {self.psm} -c preserve_interword_spaces=1"
        try:
            with Image.open(image_path) as image:
                text = pytesseract.image_to_string(
                    image,
                    lang=self.default_lang,
                    config=config,
                    timeout=self.timeout_seconds,
                )
        except pytesseract.TesseractError as exc:
            raise OCREngineError(f"Tesseract failed: {exc.message}") from exc
        except RuntimeError as exc:
            # pytesseract signals its own timeout with a bare RuntimeError.
            raise OCREngineError(
                f"OCR timed out after {self.timeout_seconds:g}s"
            ) from exc
        except OSError as exc:
            raise OCREngineError(f"Cannot read page image: {exc}") from exc

        logger.debug("Recognized %d characters from %s", len(text), image_path.name)
        return text
