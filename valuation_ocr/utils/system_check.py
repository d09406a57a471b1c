"""Availability checks for the external tools the extractor shells out to."""

import shutil
from dataclasses import dataclass
from pathlib import Path

import pytesseract

from valuation_ocr.utils.config import AppConfig
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ToolStatus:
    """Availability of one external tool."""

    name: str
    available: bool
    location: str | None = None
    detail: str | None = None


def _which(name: str, label: str) -> ToolStatus:
    found = shutil.which(name)
    return ToolStatus(label, found is not None, found)


def _bundled_graphicsmagick(config: AppConfig) -> ToolStatus:
    bundle_dir = config.rasterizer.bundle_dir
    if not bundle_dir:
        return ToolStatus("GraphicsMagick (bundled)", False, detail="no bundle configured")
    binary = Path(bundle_dir) / "bin" / "gm"
    if not binary.exists():
        return ToolStatus(
            "GraphicsMagick (bundled)", False, str(binary), "binary missing"
        )
    return ToolStatus("GraphicsMagick (bundled)", True, str(binary))


def _tesseract(config: AppConfig) -> ToolStatus:
    if config.ocr.tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = config.ocr.tesseract_cmd
    try:
        version = pytesseract.get_tesseract_version()
    except pytesseract.TesseractNotFoundError:
        return ToolStatus("Tesseract", False, detail="not found")
    return ToolStatus(
        "Tesseract",
        True,
        shutil.which(pytesseract.pytesseract.tesseract_cmd),
        f"version {version}",
    )


def check_system(config: AppConfig | None = None) -> list[ToolStatus]:
    """Report which rasterization and OCR tools are available.

    Args:
        config: Application configuration. Defaults are used when omitted.

    Returns:
        One status per tool, in fallback order followed by the OCR engine.
    """
    config = config or AppConfig()
    statuses = [
        _bundled_graphicsmagick(config),
        _which(config.rasterizer.system_binary, "GraphicsMagick (system)"),
        _which("gs", "Ghostscript"),
        _which("pdfinfo", "Poppler pdfinfo"),
        _tesseract(config),
    ]
    for status in statuses:
        logger.debug("%s available=%s", status.name, status.available)
    return statuses
