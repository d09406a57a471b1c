"""Tests for the end-to-end extraction pipeline."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from valuation_ocr.extraction.models import ReportType
from valuation_ocr.ocr.document_processor import ExtractionError
from valuation_ocr.pipeline import ValuationReportExtractor, extract_vehicle_data

_RECOGNIZE = "valuation_ocr.pipeline.DocumentProcessor.recognize_document"


class TestValuationReportExtractor:
    """Tests for the ValuationReportExtractor class."""

    @patch(_RECOGNIZE)
    def test_extract_mitchell(self, mock_recognize: MagicMock, mitchell_text: str) -> None:
        mock_recognize.return_value = mitchell_text
        updates: list[tuple[int, str]] = []

        record = ValuationReportExtractor().extract(
            b"%PDF", lambda p, m: updates.append((p, m))
        )

        assert record.report_type == ReportType.MITCHELL
        assert record.vin == "WBS33AY09NFL79043"
        assert updates[-1] == (100, "Complete")
        mock_recognize.assert_called_once()

    @patch(_RECOGNIZE)
    def test_extract_ccc_one(self, mock_recognize: MagicMock, ccc_one_text: str) -> None:
        mock_recognize.return_value = ccc_one_text

        record = ValuationReportExtractor().extract(b"%PDF")

        assert record.report_type == ReportType.CCC_ONE
        assert record.settlement_value == Decimal("39120.55")

    @patch(_RECOGNIZE, side_effect=ExtractionError("No text extracted from any page"))
    def test_fatal_errors_propagate(self, mock_recognize: MagicMock) -> None:
        with pytest.raises(ExtractionError):
            ValuationReportExtractor().extract(b"%PDF")

    def test_extract_from_text_normalizes(self) -> None:
        text = "oss vehicle: 2022 BMW M3 | Sedan\nVIN: W6S33XAY09NFL79O43\n12,345 miles"

        record = ValuationReportExtractor().extract_from_text(text)

        assert record.vin == "WBS33AY09NFL79043"
        assert record.year == 2022
        assert record.field_sources["make"] == "loss_vehicle_label"

    def test_extract_from_text_land_rover_report(self) -> None:
        text = (
            "Mitchell WorkCenter Total Loss\n"
            "Loss vehicle: 2019 Land Rover Range Rover Sport | Dynamic 4 Door Utility "
            '115" WB | 3.0L 6 Cyl Gas Supercharged | A\n'
            "Ext Color: Santorini Black\n"
            "VIN: SALWR2RV5KA123456\n"
            "Mileage\n"
            "88,959 miles\n"
        )

        record = ValuationReportExtractor().extract_from_text(text)

        assert record.year == 2019
        assert record.make == "Land Rover"
        assert record.model == "Range Rover Sport"
        assert record.mileage == 88959
        assert record.vin == "SALWR2RV5KA123456"
        assert record.extraction_confidence >= 85

    def test_rasterizer_shared_with_processor(self) -> None:
        extractor = ValuationReportExtractor()
        assert extractor.processor.rasterizer is extractor.rasterizer


class TestExtractVehicleData:
    """Tests for the module-level convenience function."""

    @patch(_RECOGNIZE)
    def test_wrapper(self, mock_recognize: MagicMock, ccc_one_text: str) -> None:
        mock_recognize.return_value = ccc_one_text
        record = extract_vehicle_data(b"%PDF")
        assert record.make == "Volvo"
