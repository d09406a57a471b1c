"""End-to-end extraction of vehicle data from valuation report PDFs."""

from valuation_ocr.extraction.field_extractor import FieldExtractor
from valuation_ocr.extraction.models import ExtractedVehicleRecord
from valuation_ocr.extraction.report_classifier import classify
from valuation_ocr.ocr.document_processor import DocumentProcessor, ProgressCallback
from valuation_ocr.ocr.rasterizer import Rasterizer
from valuation_ocr.preprocessing.text_normalizer import normalize
from valuation_ocr.utils.config import AppConfig
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class ValuationReportExtractor:
    """Recognizes, classifies and extracts a valuation report.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.rasterizer = Rasterizer(self.config.rasterizer)
        self.processor = DocumentProcessor(self.config, self.rasterizer)
        self.extractor = FieldExtractor(self.config.extraction)

    def extract(
        self, pdf_bytes: bytes, on_progress: ProgressCallback | None = None
    ) -> ExtractedVehicleRecord:
        """Extract vehicle data from a PDF.

        Args:
            pdf_bytes: Raw PDF content.
            on_progress: Optional ``(percent, message)`` callback.

        Returns:
            The extracted record.

        Raises:
            RasterizationError: If the PDF cannot be rasterized.
            ExtractionError: If no text could be recognized.
        """
        text = self.processor.recognize_document(pdf_bytes, on_progress)
        record = self.extractor.extract(text, classify(text))
        if on_progress is not None:
            on_progress(100, "Complete")
        return record

    def extract_from_text(self, text: str) -> ExtractedVehicleRecord:
        """Extract vehicle data from already recognized text."""
        normalized = normalize(text)
        return self.extractor.extract(normalized, classify(normalized))


def extract_vehicle_data(
    pdf_bytes: bytes,
    on_progress: ProgressCallback | None = None,
    config: AppConfig | None = None,
) -> ExtractedVehicleRecord:
    """Convenience wrapper around :class:`ValuationReportExtractor`."""
    return ValuationReportExtractor(config).extract(pdf_bytes, on_progress)
