"""Currency parsing for OCR'd valuation amounts.

Scanned reports lose decimal points and misread the dollar sign as a
digit. A run of six or more digits with no separator is treated as an
amount in cents. When no dollar sign was seen before such a run and it
has seven or more digits starting with 3, 4 or 5, the first digit is
taken to be a misread ``$`` and dropped. This is a heuristic: it can be
wrong for genuine amounts that happen to start with those digits.
"""

import re
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation

from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

_DIGIT_RUN = re.compile(r"^\d{6,}$")
_MISREAD_DOLLAR = re.compile(r"^[3-5]\d{6,}$")
_PLAIN_AMOUNT = re.compile(r"^\d+(?:\.\d+)?$")
_DOLLAR_AMOUNT = re.compile(r"\$\s*([0-9,]+\.?\d*)")


def repair_digit_run(digits: str, dollar_seen: bool = False) -> Decimal:
    """Turn a separator-less digit run into a currency value.

    Args:
        digits: Six or more digits.
        dollar_seen: Whether a dollar sign preceded the run.

    Returns:
        The repaired value.
    """
    if not dollar_seen and _MISREAD_DOLLAR.match(digits):
        digits = digits[1:]
    value = Decimal(f"{digits[:-2]}.{digits[-2:]}")
    logger.debug("Repaired digit run %s -> %s", digits, value)
    return value


def parse_amount(raw: str, dollar_seen: bool = True) -> Decimal | None:
    """Parse an OCR'd amount such as ``52,852.67`` or ``5285267``.

    Args:
        raw: Captured amount text, commas and inner spaces allowed.
        dollar_seen: Whether a dollar sign preceded the amount.

    Returns:
        A positive value, or ``None`` when the text is not an amount.
    """
    cleaned = re.sub(r"[,\s]", "", raw).rstrip(".")
    if not cleaned:
        return None
    if _DIGIT_RUN.match(cleaned):
        value = repair_digit_run(cleaned, dollar_seen)
    elif _PLAIN_AMOUNT.match(cleaned):
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return None
    else:
        return None
    return value if value > 0 else None


def amount_after_label(
    lines: Sequence[str], label: re.Pattern[str], window: int = 4
) -> Decimal | None:
    """Find a ``$`` amount on the lines following a label-only line.

    Args:
        lines: Text split into lines.
        label: Pattern that must match the whole (stripped) label line.
        window: Number of following lines to scan.

    Returns:
        The first amount found, or ``None``.
    """
    for index, line in enumerate(lines):
        if not label.match(line.strip()):
            continue
        for following in lines[index + 1 : index + 1 + window]:
            match = _DOLLAR_AMOUNT.search(following)
            if match:
                value = parse_amount(match.group(1))
                if value is not None:
                    return value
    return None


def dollar_seen_before(match: re.Match[str], group: int = 1) -> bool:
    """Whether the text matched before ``group`` ends in a dollar sign."""
    prefix = match.string[match.start() : match.start(group)].rstrip()
    return prefix.endswith(("$", "s", "S"))
