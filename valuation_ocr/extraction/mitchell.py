"""Field strategies for Mitchell valuation reports.

Mitchell reports describe the vehicle on a ``Loss vehicle:`` line of the
form ``2022 BMW M3 Competition | 4 Door Sedan | ...``, print the loss
vehicle VIN beside its ``Ext Color`` row, and give market and settlement
values next to their labels. Every strategy here is a pure function of
the normalized text.
"""

import re
from decimal import Decimal

from valuation_ocr.extraction.cascade import Strategy, first_match
from valuation_ocr.extraction.currency import (
    amount_after_label,
    dollar_seen_before,
    parse_amount,
)
from valuation_ocr.extraction.make_model import (
    clean_model,
    find_manufacturer,
    parse_make_model,
)
from valuation_ocr.extraction.models import VehicleDescription
from valuation_ocr.extraction.vehicle_tables import (
    decode_manufacturer,
    decode_year,
    is_valid_vin,
)
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

MIN_YEAR = 1990
MAX_YEAR = 2030

VIN_PATTERN = re.compile(r"\b[A-HJ-NPR-Z0-9]{17}\b")
_VIN_WITH_OCR_ERRORS = re.compile(r"\b[A-Z0-9]{17}\b")
_EXT_COLOR = re.compile(r"ext\s+color|exterior\s+color", re.IGNORECASE)
_EXT_COLOR_WINDOW = 5
_HEADER_LINES = 30

_LOSS_VEHICLE = re.compile(
    r"Loss vehicle:\s*(\d{4})\s+([^|\n]+?)\s*\|", re.IGNORECASE
)
_CORRUPTED_LOSS_VEHICLE = re.compile(
    r"(?:i\s+l|oss\s+vehicle|Loss\s+ehicle|oss\s+ehicle):\s*(\d{4})\s+([^|\n]+?)\s*\|"
)
_COLON_TO_PIPE = re.compile(r":\s*([^|\n]+?)\s*\|")
_YEAR_IN_TEXT = re.compile(r"\b(?:19|20)\d{2}\b")
_BRAND_FRAGMENT_LINE = re.compile(
    r"^\W*(oyota|ord|mw|ercedes|olkswagen|yundai|issan|azda|ubaru)\s+([^|\n]+?)\s*\|",
    re.MULTILINE,
)
_LEADING_YEAR = re.compile(r"^\s*(\d{4})\s+")

_MILEAGE = re.compile(r"(?<![\d,])(\d{1,3}(?:,\d{3})*)\s*miles", re.IGNORECASE)

_NOISE_LINES = (
    re.compile(r"^[\d\W_]+$"),
    re.compile(r"^Mileage:?$", re.IGNORECASE),
    re.compile(r"^[\d,]+\s*miles$", re.IGNORECASE),
    re.compile(r"^[A-Za-z]\s"),
)

# Scan window around the VIN when looking for the model.
_VIN_CONTEXT_LINES = 6

_MARKET_INLINE = (
    re.compile(r"Market\s+Val(?:ue|e)\s*[=:]?\s*\$\s*([0-9,]+\.?\d*)", re.IGNORECASE),
    re.compile(r"Market\s*va[lu](?:ue|e)\s*=\s*\$?\s*([0-9,]+\.?\d*)", re.IGNORECASE),
    re.compile(r"Market\s*va[lu](?:ue|a?ue?)\s*=\s*([0-9]{6,})", re.IGNORECASE),
    re.compile(
        r"[vmu]a[rliu]k[eoa]t\s*[vmu]a[lti][liuo][eoa]\s*=\s*[s$]?\s*([0-9]{6,})",
        re.IGNORECASE,
    ),
)
_MARKET_LABEL_LINE = re.compile(r"^(?:Market\s+Val(?:ue|e)|arket\s*Val(?:ue|e)):?$")

_SETTLEMENT_INLINE = (
    re.compile(r"Settlement Value\s*[=:]?\s*\$\s*([0-9,]+\.?\d*)"),
    re.compile(r"Settle\s*ment\s*va[lu](?:ue|e)\s*[=:]\s*\$?\s*([0-9,]+\.?\d*)", re.IGNORECASE),
)
_SETTLEMENT_LABEL_LINE = re.compile(r"^(?:Settlement Value|ettle\s*ent\s*Value):?$")
_BARE_AMOUNT_LINE = re.compile(r"^\$([0-9,]+\.\d+)$")
_SETTLEMENT_CONTEXT = re.compile(r"ettle|settlement", re.IGNORECASE)


def is_noise_line(line: str) -> bool:
    """Whether a line carries no description text worth scanning."""
    stripped = line.strip()
    if not stripped:
        return True
    return any(pattern.match(stripped) for pattern in _NOISE_LINES)


def _content_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if not is_noise_line(line)]


def _valid_year(raw: str) -> int | None:
    year = int(raw)
    return year if MIN_YEAR <= year <= MAX_YEAR else None


def _description(year_raw: str, rest: str) -> VehicleDescription | None:
    parsed = parse_make_model(rest)
    year = _valid_year(year_raw)
    if parsed is None:
        return VehicleDescription(year=year) if year else None
    make, model = parsed
    return VehicleDescription(year=year, make=make, model=model or None)


def _vin_in_line(line: str) -> str | None:
    for match in VIN_PATTERN.finditer(line):
        if is_valid_vin(match.group(0)):
            return match.group(0)
    # Unlabeled tokens still carry OCR's O-for-0 confusion.
    for match in _VIN_WITH_OCR_ERRORS.finditer(line):
        candidate = match.group(0).replace("O", "0")
        if is_valid_vin(candidate):
            return candidate
    return None


def find_vin(text: str) -> str | None:
    """Return the first valid VIN anywhere in the text."""
    for line in text.splitlines():
        vin = _vin_in_line(line)
        if vin is not None:
            return vin
    return None


def vin_near_ext_color(text: str) -> str | None:
    """A VIN within a few lines of the loss vehicle's ``Ext Color`` row.

    Comparable vehicles carry their own VINs, so the one printed beside the
    exterior color is the most reliable.
    """
    lines = text.splitlines()
    for index, line in enumerate(lines):
        if not _EXT_COLOR.search(line):
            continue
        for nearby in lines[index : index + _EXT_COLOR_WINDOW]:
            vin = _vin_in_line(nearby)
            if vin is not None:
                return vin
    return None


def vin_in_header(text: str) -> str | None:
    """A VIN in the vehicle information block at the top of the report."""
    return find_vin("\n".join(text.splitlines()[:_HEADER_LINES]))


VIN_STRATEGIES: list[Strategy[str]] = [
    Strategy("vin_near_ext_color", vin_near_ext_color),
    Strategy("vin_in_header", vin_in_header),
    Strategy("vin_pattern", find_vin),
]


def locate_vin(text: str) -> str | None:
    """The loss vehicle's VIN, by the first VIN strategy that finds one."""
    match = first_match(VIN_STRATEGIES, text)
    return match.value if match else None


def loss_vehicle_label(text: str) -> VehicleDescription | None:
    match = _LOSS_VEHICLE.search(text)
    if match is None:
        return None
    return _description(match.group(1), match.group(2))


def corrupted_loss_vehicle_label(text: str) -> VehicleDescription | None:
    match = _CORRUPTED_LOSS_VEHICLE.search(text)
    if match is None:
        return None
    return _description(match.group(1), match.group(2))


def _fragment_description(fragment: str) -> VehicleDescription | None:
    year_match = _YEAR_IN_TEXT.search(fragment)
    if year_match is None or _valid_year(year_match.group(0)) is None:
        return None
    rest = fragment[: year_match.start()] + fragment[year_match.end() :]
    parsed = parse_make_model(rest.strip())
    if parsed is None:
        return None
    make, model = parsed
    return VehicleDescription(
        year=int(year_match.group(0)), make=make, model=model or None
    )


def colon_to_pipe_line(text: str) -> VehicleDescription | None:
    """Any ``label: ... YYYY Make Model |`` line with a plausible year.

    The year may sit anywhere in the fragment (``Vehicle: Used 2017 Subaru
    Outback |``); it is cut out and the rest parsed as make and model.
    """
    for line in _content_lines(text):
        match = _COLON_TO_PIPE.search(line)
        if match is None:
            continue
        description = _fragment_description(match.group(1))
        if description is not None:
            return description
    return None


def _model_from_fragment(fragment: str, make_pattern: re.Pattern[str]) -> str | None:
    found = make_pattern.search(fragment)
    if found:
        return clean_model(fragment[found.end() :]) or None
    # Spelled differently from the decoded make, e.g. Mercedes for Mercedes-Benz.
    if find_manufacturer(fragment) is None:
        return None
    parsed = parse_make_model(fragment)
    if parsed is None:
        return None
    return parsed[1] or None


def _model_near_vin(lines: list[str], vin_index: int, make: str) -> str | None:
    start = max(0, vin_index - _VIN_CONTEXT_LINES)
    nearby = lines[start : vin_index + _VIN_CONTEXT_LINES + 1]
    make_pattern = re.compile(rf"(?<![A-Za-z]){re.escape(make)}(?![A-Za-z])", re.IGNORECASE)

    for line in nearby:
        match = _COLON_TO_PIPE.search(line)
        if match is None:
            continue
        fragment = _LEADING_YEAR.sub("", match.group(1))
        model = _model_from_fragment(fragment, make_pattern)
        if model:
            return model

    for line in lines:
        found = make_pattern.search(line)
        if found:
            model = clean_model(line[found.end() :].split("|", 1)[0])
            if model:
                return model
    return None


def vin_decode(text: str) -> VehicleDescription | None:
    """Recover year and make from the VIN, and the model from nearby text."""
    vin = locate_vin(text)
    if vin is None:
        return None
    year = decode_year(vin)
    make = decode_manufacturer(vin)
    model = None
    if make:
        lines = _content_lines(text)
        vin_index = next((i for i, line in enumerate(lines) if vin in line), 0)
        model = _model_near_vin(lines, vin_index, make)
    logger.debug("Decoded VIN %s: year=%s make=%s model=%s", vin, year, make, model)
    description = VehicleDescription(year=year, make=make, model=model)
    return None if description.is_empty() else description


def brand_fragment_line(text: str) -> VehicleDescription | None:
    """A description line whose make lost its first letter, e.g. ``oyota``."""
    match = _BRAND_FRAGMENT_LINE.search(text)
    if match is None:
        return None
    parsed = parse_make_model(f"{match.group(1)} {match.group(2)}")
    if parsed is None:
        return None
    make, model = parsed
    return VehicleDescription(make=make, model=model or None)


DESCRIPTION_STRATEGIES: list[Strategy[VehicleDescription]] = [
    Strategy("loss_vehicle_label", loss_vehicle_label),
    Strategy("corrupted_loss_vehicle_label", corrupted_loss_vehicle_label),
    Strategy("colon_to_pipe_line", colon_to_pipe_line),
    Strategy("vin_decode", vin_decode),
    Strategy("brand_fragment_line", brand_fragment_line),
]


def mileage_miles(text: str) -> int | None:
    for match in _MILEAGE.finditer(text):
        mileage = int(match.group(1).replace(",", ""))
        if mileage > 0:
            return mileage
    return None


MILEAGE_STRATEGIES: list[Strategy[int]] = [Strategy("miles", mileage_miles)]


def _inline_amount(patterns: tuple[re.Pattern[str], ...], text: str) -> Decimal | None:
    for pattern in patterns:
        for match in pattern.finditer(text):
            value = parse_amount(match.group(1), dollar_seen_before(match))
            if value is not None:
                return value
    return None


def market_value_inline(text: str) -> Decimal | None:
    return _inline_amount(_MARKET_INLINE, text)


def market_value_line_scan(text: str) -> Decimal | None:
    return amount_after_label(text.splitlines(), _MARKET_LABEL_LINE)


def settlement_value_inline(text: str) -> Decimal | None:
    return _inline_amount(_SETTLEMENT_INLINE, text)


def settlement_value_line_scan(text: str) -> Decimal | None:
    return amount_after_label(text.splitlines(), _SETTLEMENT_LABEL_LINE)


def settlement_value_bare_amount(text: str) -> Decimal | None:
    """A lone ``$n.nn`` line within three lines after settlement wording."""
    lines = [line.strip() for line in text.splitlines()]
    for index, line in enumerate(lines):
        match = _BARE_AMOUNT_LINE.match(line)
        if match is None:
            continue
        context = lines[max(0, index - 3) : index]
        if any(_SETTLEMENT_CONTEXT.search(previous) for previous in context):
            value = parse_amount(match.group(1))
            if value is not None:
                return value
    return None


MARKET_VALUE_STRATEGIES: list[Strategy[Decimal]] = [
    Strategy("market_value_inline", market_value_inline),
    Strategy("market_value_line_scan", market_value_line_scan),
]

SETTLEMENT_VALUE_STRATEGIES: list[Strategy[Decimal]] = [
    Strategy("settlement_value_inline", settlement_value_inline),
    Strategy("settlement_value_line_scan", settlement_value_line_scan),
    Strategy("settlement_value_bare_amount", settlement_value_bare_amount),
]
