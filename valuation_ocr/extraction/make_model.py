"""Split a vehicle description into make and model."""

import re

from valuation_ocr.extraction.vehicle_tables import (
    MANUFACTURER_OCR_FRAGMENTS,
    VEHICLE_MANUFACTURERS,
)
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

_MANUFACTURER_PATTERNS = [
    (name, re.compile(rf"(?<![A-Za-z]){re.escape(name)}(?![A-Za-z])", re.IGNORECASE))
    for name in VEHICLE_MANUFACTURERS
]
_LEADING_JUNK = re.compile(r"^[^A-Za-z0-9]+")
_SPECIAL_CHARS = re.compile(r"[^A-Za-z0-9\-./ ]+")
_WHITESPACE = re.compile(r"\s+")


def clean_model(model: str) -> str:
    """Remove leading junk and collapse special characters and spaces."""
    model = _LEADING_JUNK.sub("", model)
    model = _SPECIAL_CHARS.sub(" ", model)
    return _WHITESPACE.sub(" ", model).strip(" -./")


def _until_pipe(text: str) -> str:
    return text.split("|", 1)[0]


def find_manufacturer(text: str) -> tuple[str, int, int] | None:
    """Find the earliest manufacturer name in the text.

    Ties at the same position go to the longest name, so ``Land Rover``
    wins over ``Land`` and ``Mercedes-Benz`` over ``Mercedes``.

    Returns:
        ``(canonical name, start, end)`` or ``None``.
    """
    best: tuple[str, int, int] | None = None
    for name, pattern in _MANUFACTURER_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        if (
            best is None
            or match.start() < best[1]
            or (match.start() == best[1] and len(name) > len(best[0]))
        ):
            best = (name, match.start(), match.end())
    return best


def parse_make_model(description: str) -> tuple[str, str] | None:
    """Parse ``Make Model | ...`` text into a make and a model.

    Tries the manufacturer lexicon, then known OCR fragments of
    manufacturer names, then falls back to the first token as the make.

    Args:
        description: Description text, usually everything after the year.

    Returns:
        ``(make, model)`` where the model may be empty, or ``None`` for
        text with no usable token.
    """
    text = _until_pipe(description).strip()
    if not text:
        return None

    found = find_manufacturer(text)
    if found is not None:
        make, _, end = found
        return make, clean_model(text[end:])

    tokens = text.split(None, 1)
    first = _LEADING_JUNK.sub("", tokens[0])
    rest = tokens[1] if len(tokens) > 1 else ""
    fragment_make = MANUFACTURER_OCR_FRAGMENTS.get(first.lower())
    if fragment_make is not None:
        logger.debug("Recovered make %s from fragment %r", fragment_make, first)
        return fragment_make, clean_model(rest)

    if not first or not first[0].isalpha():
        return None
    return first, clean_model(rest)
