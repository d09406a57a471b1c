"""Valuation report vendor detection."""

import re

from valuation_ocr.extraction.models import ReportType
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

# OCR often reads the O of ONE as a zero.
_CCC_ONE_MARKER = re.compile(r"\bCCC[\s\-]*[O0]NE\b", re.IGNORECASE)


def classify(text: str) -> ReportType:
    """Detect the report vendor from normalized text.

    Args:
        text: Normalized OCR text.

    Returns:
        ``CCC_ONE`` when the CCC ONE marker appears anywhere, otherwise
        ``MITCHELL``.
    """
    if _CCC_ONE_MARKER.search(text):
        logger.info("Detected CCC One report")
        return ReportType.CCC_ONE
    logger.info("Detected Mitchell report")
    return ReportType.MITCHELL
