"""OCR error correction for VINs.

Two passes: one for VINs printed after a ``VIN`` label, where the token
boundaries are known and aggressive repair is safe, and one for bare
tokens elsewhere in the text, where only documented prefix repairs apply.
"""

import re

from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

# Body is case-sensitive: lowercase runs are words, not VINs.
LABELED_VIN_PATTERN = re.compile(r"(?<![A-Za-z])VIN:?\s+([A-Z0-9]{17,25})(?![A-Za-z0-9])")

_STANDALONE_PATTERN = re.compile(r"(?<![A-Za-z0-9])[A-HJ-NPR-Z0-9]{17}(?![A-Za-z0-9])")
_LABEL_BEFORE = re.compile(r"VIN:?\s+$")

# Multi-glyph misreads of a single 9, longest first.
_MULTI_CHAR_FIXES = (("IFF", "9FF"), ("IF", "9"))

_CHAR_FIXES = str.maketrans({"I": "1", "O": "0", "Q": "0"})

# First three characters: misread WMI -> real WMI.
_WMI_FIXES = {
    "W6A": "WBA",
    "W6S": "WBS",
    "W6Y": "WBY",
}

# (prefix, index, wrong, right) for bare tokens.
_STANDALONE_FIXES = (("JH", 2, "A", "4"),)

# Extra glyphs land after the WMI + first VDS characters.
_NOISE_INDEX = 5


def correct_labeled_vin(token: str) -> str:
    """Repair a VIN token found right after a ``VIN`` label.

    Args:
        token: 17 to 25 uppercase alphanumerics.

    Returns:
        The corrected token. Tokens that would shrink below 17 characters
        skip the multi-glyph fixes.
    """
    corrected = token
    for wrong, right in _MULTI_CHAR_FIXES:
        corrected = corrected.replace(wrong, right)
    if len(corrected) < 17:
        corrected = token

    corrected = corrected.translate(_CHAR_FIXES)

    prefix = corrected[:3]
    if prefix in _WMI_FIXES:
        corrected = _WMI_FIXES[prefix] + corrected[3:]

    while len(corrected) > 17:
        corrected = corrected[:_NOISE_INDEX] + corrected[_NOISE_INDEX + 1 :]

    return corrected


def correct_labeled_vins(text: str) -> str:
    """Apply :func:`correct_labeled_vin` to every labeled VIN in the text."""

    def _replace(match: re.Match[str]) -> str:
        original = match.group(1)
        corrected = correct_labeled_vin(original)
        if corrected != original:
            logger.debug("Corrected labeled VIN %s -> %s", original, corrected)
        start = match.start(1) - match.start(0)
        return match.group(0)[:start] + corrected

    return LABELED_VIN_PATTERN.sub(_replace, text)


def correct_standalone_vins(text: str) -> str:
    """Repair bare 17-character VIN tokens not preceded by a ``VIN`` label."""

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        preceding = match.string[max(0, match.start() - 6) : match.start()]
        if _LABEL_BEFORE.search(preceding):
            return token
        for prefix, index, wrong, right in _STANDALONE_FIXES:
            if token.startswith(prefix) and token[index] == wrong:
                fixed = token[:index] + right + token[index + 1 :]
                logger.debug("Corrected standalone VIN %s -> %s", token, fixed)
                return fixed
        return token

    return _STANDALONE_PATTERN.sub(_replace, text)
