"""Field strategies for CCC One valuation reports.

CCC One prints vehicle details as ``Label value`` rows (``Year 2021``,
``Make Volvo``, ``Odometer 45,210``) and closes with an ``Adjusted
Vehicle Value`` and a ``Total`` row.
"""

import re
from decimal import Decimal

from valuation_ocr.extraction.cascade import Strategy
from valuation_ocr.extraction.currency import parse_amount
from valuation_ocr.extraction.make_model import find_manufacturer, parse_make_model
from valuation_ocr.extraction.mitchell import (
    MAX_YEAR,
    MIN_YEAR,
    find_vin,
    mileage_miles,
    vin_decode,
)
from valuation_ocr.extraction.models import VehicleDescription
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

_YEAR = re.compile(r"^Year\s+(\d{4})", re.MULTILINE)
_MAKE = re.compile(
    r"^Make[ \t]+([A-Za-z][A-Za-z\-]*(?:[ \t]+[A-Za-z][A-Za-z\-]*)*?)"
    r"(?:[ \t]+[})(]+.*)?[ \t]*$",
    re.MULTILINE,
)
_MODEL = re.compile(
    r"^Model\s+([A-Za-z0-9\-]+(?:\s+[A-Za-z0-9]+)?(?:\s+[A-Za-z0-9]+)?)(?:\s|$)",
    re.MULTILINE,
)
_MODEL_TRAILING_SECTION = re.compile(r"\s+(?:Vehicle|Section)\b.*$")
_LOSS_VEHICLE_LINE = re.compile(r"Loss [Vv]ehicle:?\s+(\d{4})\s+([^\n|]+)")

_ODOMETER = re.compile(r"^Odometer\s+(\d{1,3}(?:,\d{3})*)", re.MULTILINE)
_LOCATION = re.compile(
    r"^Location\s+([A-Z][A-Z\s,.\-0-9]+?)(?:\s+(?:are|clot|Vehicles)|\s*$)",
    re.MULTILINE,
)
_TOTAL = re.compile(r"^Total\s+\$\s*([0-9,]+\s*\.\s*\d{2})", re.MULTILINE)
_ADJUSTED_VALUE = re.compile(
    r"^Adjusted Vehicle Value\s+\$\s*([0-9,]+\.\d{2})", re.MULTILINE
)

# (make or None for any make, wrong model pattern, replacement)
_MODEL_REPAIRS: tuple[tuple[str | None, re.Pattern[str], str], ...] = (
    ("Volvo", re.compile(r"^XG(60|90|40)\b"), r"XC\1"),
    ("Tesla", re.compile(r"^Model$"), "Model 3"),
    ("BMW", re.compile(r"^8$"), "8 Series"),
    (None, re.compile(r"^XG"), "XC"),
)


def repair_model(make: str, model: str) -> str:
    """Apply known OCR repairs to a CCC One model name."""
    for repair_make, pattern, replacement in _MODEL_REPAIRS:
        if repair_make is not None and repair_make.lower() != make.lower():
            continue
        repaired = pattern.sub(replacement, model)
        if repaired != model:
            logger.debug("Repaired model %r -> %r", model, repaired)
            return repaired
    return model


def vehicle_rows(text: str) -> VehicleDescription | None:
    """``Year``, ``Make`` and ``Model`` rows of the vehicle section."""
    year = None
    year_match = _YEAR.search(text)
    if year_match:
        candidate = int(year_match.group(1))
        year = candidate if MIN_YEAR <= candidate <= MAX_YEAR else None

    make = None
    make_match = _MAKE.search(text)
    if make_match:
        found = find_manufacturer(make_match.group(1))
        make = found[0] if found else make_match.group(1)

    model = None
    model_match = _MODEL.search(text)
    if model_match:
        model = _MODEL_TRAILING_SECTION.sub("", model_match.group(1)).strip() or None

    description = VehicleDescription(year=year, make=make, model=model)
    return None if description.is_empty() else description


def loss_vehicle_line(text: str) -> VehicleDescription | None:
    """A ``Loss Vehicle YYYY Make Model`` summary line."""
    match = _LOSS_VEHICLE_LINE.search(text)
    if match is None:
        return None
    candidate = int(match.group(1))
    year = candidate if MIN_YEAR <= candidate <= MAX_YEAR else None
    parsed = parse_make_model(match.group(2))
    if parsed is None:
        return VehicleDescription(year=year) if year else None
    make, model = parsed
    return VehicleDescription(year=year, make=make, model=model or None)


DESCRIPTION_STRATEGIES: list[Strategy[VehicleDescription]] = [
    Strategy("vehicle_rows", vehicle_rows),
    Strategy("loss_vehicle_line", loss_vehicle_line),
    Strategy("vin_decode", vin_decode),
]


VIN_STRATEGIES: list[Strategy[str]] = [Strategy("vin_pattern", find_vin)]


def odometer(text: str) -> int | None:
    match = _ODOMETER.search(text)
    if match is None:
        return None
    mileage = int(match.group(1).replace(",", ""))
    return mileage or None


def location(text: str) -> str | None:
    match = _LOCATION.search(text)
    if match is None:
        return None
    return " ".join(match.group(1).split()).strip(" ,.-") or None


def adjusted_vehicle_value(text: str) -> Decimal | None:
    match = _ADJUSTED_VALUE.search(text)
    return parse_amount(match.group(1)) if match else None


def total(text: str) -> Decimal | None:
    match = _TOTAL.search(text)
    return parse_amount(match.group(1)) if match else None


MILEAGE_STRATEGIES: list[Strategy[int]] = [
    Strategy("odometer", odometer),
    Strategy("miles", mileage_miles),
]

LOCATION_STRATEGIES: list[Strategy[str]] = [Strategy("location_row", location)]

MARKET_VALUE_STRATEGIES: list[Strategy[Decimal]] = [
    Strategy("adjusted_vehicle_value", adjusted_vehicle_value),
]

SETTLEMENT_VALUE_STRATEGIES: list[Strategy[Decimal]] = [
    Strategy("total", total),
]
