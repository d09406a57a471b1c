"""Post-OCR text normalization.

Repairs label and VIN corruption that is common enough in scanned
valuation reports to fix before field extraction. Every pass is a pure
string rewrite whose output is a fixed point, so normalizing twice gives
the same text as normalizing once.
"""

import re

from valuation_ocr.preprocessing.vin_correction import (
    correct_labeled_vins,
    correct_standalone_vins,
)
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

# (pattern, replacement). Each pattern is anchored at a word start so the
# repaired label cannot match again.
_LABEL_FIXES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?<![A-Za-z])(?:oss\s+vehicle|Loss\s+ehicle|oss\s+ehicle):"), "Loss vehicle:"),
    (re.compile(r"(?<![A-Za-z])S?ettle\s*ent\s+Value"), "Settlement Value"),
    (re.compile(r"(?<![A-Za-z])arket\s+Value"), "Market Value"),
)


def repair_labels(text: str) -> str:
    """Restore known corrupted field labels."""
    for pattern, replacement in _LABEL_FIXES:
        text = pattern.sub(replacement, text)
    return text


def normalize(text: str) -> str:
    """Normalize OCR output before field extraction.

    Args:
        text: Raw recognized text, pages already joined.

    Returns:
        The corrected text. Empty input returns empty output.
    """
    if not text:
        return ""
    result = repair_labels(text)
    result = correct_labeled_vins(result)
    result = correct_standalone_vins(result)
    if result != text:
        logger.debug("Normalization changed %d characters of input", _diff_size(text, result))
    return result


def _diff_size(before: str, after: str) -> int:
    changed = sum(1 for a, b in zip(before, after, strict=False) if a != b)
    return changed + abs(len(before) - len(after))
