"""Field extraction engine for valuation reports.

Runs the vendor's strategy cascades over normalized text and assembles an
:class:`ExtractedVehicleRecord`. Missing fields never raise; each one adds
a message to ``extraction_errors`` instead.
"""

import dataclasses
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from valuation_ocr.extraction import ccc_one, mitchell
from valuation_ocr.extraction.cascade import Strategy, first_match
from valuation_ocr.extraction.models import (
    ExtractedVehicleRecord,
    ReportType,
    VehicleDescription,
)
from valuation_ocr.utils.config import ExtractionConfig
from valuation_ocr.utils.logger import get_logger
from valuation_ocr.validation.confidence import score

logger = get_logger(__name__)

LOW_CONFIDENCE_MESSAGE = (
    "Low confidence in extracted data. This may not be a standard valuation report."
)


@dataclass(frozen=True)
class _VendorStrategies:
    vin: list[Strategy[str]]
    description: list[Strategy[VehicleDescription]]
    mileage: list[Strategy[int]]
    location: list[Strategy[str]]
    market_value: list[Strategy[Decimal]]
    settlement_value: list[Strategy[Decimal]]


_STRATEGIES: dict[ReportType, _VendorStrategies] = {
    ReportType.MITCHELL: _VendorStrategies(
        vin=mitchell.VIN_STRATEGIES,
        description=mitchell.DESCRIPTION_STRATEGIES,
        mileage=mitchell.MILEAGE_STRATEGIES,
        location=[],
        market_value=mitchell.MARKET_VALUE_STRATEGIES,
        settlement_value=mitchell.SETTLEMENT_VALUE_STRATEGIES,
    ),
    ReportType.CCC_ONE: _VendorStrategies(
        vin=ccc_one.VIN_STRATEGIES,
        description=ccc_one.DESCRIPTION_STRATEGIES,
        mileage=ccc_one.MILEAGE_STRATEGIES,
        location=ccc_one.LOCATION_STRATEGIES,
        market_value=ccc_one.MARKET_VALUE_STRATEGIES,
        settlement_value=ccc_one.SETTLEMENT_VALUE_STRATEGIES,
    ),
}


class FieldExtractor:
    """Extracts vehicle records from normalized report text.

    Args:
        config: Extraction configuration.
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()

    def extract(self, text: str, report_type: ReportType) -> ExtractedVehicleRecord:
        """Extract all fields for the given report type.

        Args:
            text: Normalized OCR text.
            report_type: Vendor layout to use.

        Returns:
            The extracted record with confidence and error notes.
        """
        strategies = _STRATEGIES[report_type]
        errors: list[str] = []
        sources: dict[str, str] = {}

        vin = self._run("vin", strategies.vin, text, sources, errors, "VIN not found")
        year, make, model = self._describe(strategies.description, text, sources)
        if report_type == ReportType.CCC_ONE and make and model:
            model = ccc_one.repair_model(make, model)
        if year is None:
            errors.append("Vehicle year not found")
        if not make:
            errors.append("Vehicle make not found")
        if not model:
            errors.append("Vehicle model not found")

        mileage = self._run(
            "mileage", strategies.mileage, text, sources, errors, "Mileage not found"
        )
        location = self._run(
            "location", strategies.location, text, sources, errors, "Location not found"
        )
        market_value = self._run(
            "market_value",
            strategies.market_value,
            text,
            sources,
            errors,
            "Market value not found",
        )
        settlement_value = self._run(
            "settlement_value",
            strategies.settlement_value,
            text,
            sources,
            errors,
            "Settlement value not found",
        )

        record = ExtractedVehicleRecord(
            vin=vin or "",
            year=year or 0,
            make=make or "",
            model=model or "",
            mileage=mileage or 0,
            location=location or "",
            market_value=market_value or Decimal("0"),
            settlement_value=settlement_value or Decimal("0"),
            report_type=report_type,
            extraction_errors=errors,
            field_sources=sources,
        )

        confidence = score(record)
        if confidence < self.config.low_confidence_threshold:
            errors.append(LOW_CONFIDENCE_MESSAGE)
            errors.append(f"Confidence score: {confidence}%")

        logger.info(
            "Extracted %s record: vin=%s year=%s make=%s model=%s confidence=%d%%",
            report_type,
            record.vin or "-",
            record.year or "-",
            record.make or "-",
            record.model or "-",
            confidence,
        )
        return dataclasses.replace(
            record, extraction_confidence=confidence, extraction_errors=errors
        )

    @staticmethod
    def _run(
        field_name: str,
        strategies: list[Strategy],
        text: str,
        sources: dict[str, str],
        errors: list[str],
        missing_message: str,
    ) -> Any:
        match = first_match(strategies, text)
        if match is None:
            errors.append(missing_message)
            return None
        sources[field_name] = match.source
        return match.value

    @staticmethod
    def _describe(
        strategies: list[Strategy[VehicleDescription]],
        text: str,
        sources: dict[str, str],
    ) -> tuple[int | None, str | None, str | None]:
        """Take year, make and model each from the first strategy that has it."""
        year: int | None = None
        make: str | None = None
        model: str | None = None

        for strategy in strategies:
            if year is not None and make and model:
                break
            description = strategy(text)
            if description is None:
                continue
            if year is None and description.year is not None:
                year = description.year
                sources["year"] = strategy.name
            if not make and description.make:
                make = description.make
                sources["make"] = strategy.name
            if not model and description.model:
                model = description.model
                sources["model"] = strategy.name

        return year, make, model
