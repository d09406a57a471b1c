"""Result types for valuation report extraction."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any


class ReportType(StrEnum):
    """Supported valuation report vendors."""

    MITCHELL = "mitchell"
    CCC_ONE = "ccc_one"


@dataclass(frozen=True)
class VehicleDescription:
    """Year, make and model as recovered by one description strategy.

    Any part may be missing; the extractor fills gaps from later strategies.
    """

    year: int | None = None
    make: str | None = None
    model: str | None = None

    def is_empty(self) -> bool:
        return self.year is None and not self.make and not self.model


@dataclass(frozen=True)
class ExtractedVehicleRecord:
    """Structured vehicle data recovered from a valuation report.

    Unknown numeric fields are 0 and unknown text fields are empty.
    ``extraction_errors`` lists a message for each missing field in the
    order fields were extracted. ``field_sources`` maps each recovered
    field to the name of the strategy that produced it.
    """

    vin: str = ""
    year: int = 0
    make: str = ""
    model: str = ""
    mileage: int = 0
    location: str = ""
    market_value: Decimal = Decimal("0")
    settlement_value: Decimal = Decimal("0")
    report_type: ReportType = ReportType.MITCHELL
    extraction_confidence: int = 0
    extraction_errors: list[str] = field(default_factory=list)
    field_sources: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain mapping, with currency values as strings."""
        return {
            "vin": self.vin,
            "year": self.year,
            "make": self.make,
            "model": self.model,
            "mileage": self.mileage,
            "location": self.location,
            "market_value": str(self.market_value),
            "settlement_value": str(self.settlement_value),
            "report_type": str(self.report_type),
            "extraction_confidence": self.extraction_confidence,
            "extraction_errors": list(self.extraction_errors),
            "field_sources": dict(self.field_sources),
        }
