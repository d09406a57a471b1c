"""Confidence scoring and usability checks for extracted vehicle records.

The score only reflects which identifying fields were recovered; currency
values do not contribute.
"""

from valuation_ocr.extraction.models import ExtractedVehicleRecord, ReportType
from valuation_ocr.extraction.vehicle_tables import VIN_LENGTH
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

VIN_WEIGHT = 30
YEAR_WEIGHT = 20
MAKE_WEIGHT = 20
MODEL_WEIGHT = 15
MILEAGE_WEIGHT = 10
LOCATION_WEIGHT = 5

MIN_SCORED_YEAR = 1990
MAX_SCORED_YEAR = 2025


def score(record: ExtractedVehicleRecord) -> int:
    """Compute an extraction confidence between 0 and 100.

    Args:
        record: Extracted record; its current confidence is ignored.

    Returns:
        Sum of the weights of the fields that are present.
    """
    total = 0
    if len(record.vin) == VIN_LENGTH:
        total += VIN_WEIGHT
    if MIN_SCORED_YEAR < record.year <= MAX_SCORED_YEAR:
        total += YEAR_WEIGHT
    if record.make:
        total += MAKE_WEIGHT
    if record.model:
        total += MODEL_WEIGHT
    if record.mileage > 0:
        total += MILEAGE_WEIGHT
    if record.location:
        total += LOCATION_WEIGHT
    return total


def is_usable(record: ExtractedVehicleRecord) -> bool:
    """Whether a record identifies the vehicle well enough to continue.

    Mitchell records need a VIN, or a make with a plausible year. CCC One
    rows are more reliable, so any one of VIN, make or year is enough.
    """
    has_year = record.year > MIN_SCORED_YEAR
    if record.report_type == ReportType.CCC_ONE:
        usable = bool(record.vin) or bool(record.make) or has_year
    else:
        usable = bool(record.vin) or (bool(record.make) and has_year)
    if not usable:
        logger.info("Record for %s report is not usable", record.report_type)
    return usable
