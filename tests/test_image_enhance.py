"""Tests for the OpenCV enhancement chain and system checks."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import numpy as np
import pytesseract
import pytest

from valuation_ocr.preprocessing.image_enhance import (
    contrast_stretch,
    enhance_for_ocr,
    parse_contrast_stretch,
    parse_sharpen,
    sharpen,
    to_gray,
)
from valuation_ocr.utils.config import AppConfig, RasterizerConfig
from valuation_ocr.utils.system_check import check_system


class TestArgumentParsing:
    """Tests for GraphicsMagick-style argument parsing."""

    def test_contrast_pair(self) -> None:
        assert parse_contrast_stretch("0.35%x0.35%") == (0.35, 0.35)

    def test_contrast_single_value(self) -> None:
        assert parse_contrast_stretch("1%") == (1.0, 1.0)

    def test_sharpen_sigma(self) -> None:
        assert parse_sharpen("0x1.0") == 1.0
        assert parse_sharpen("2") == 2.0

    @pytest.mark.parametrize("value", ["", "abc", "1%y2%"])
    def test_invalid_contrast(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_contrast_stretch(value)

    def test_invalid_sharpen(self) -> None:
        with pytest.raises(ValueError):
            parse_sharpen("radius")


class TestEnhancement:
    """Tests for the image operations."""

    def test_to_gray(self, sample_color_image: np.ndarray) -> None:
        gray = to_gray(sample_color_image)
        assert gray.shape == sample_color_image.shape[:2]
        assert to_gray(gray) is gray

    def test_contrast_stretch_expands_range(self) -> None:
        gray = np.tile(np.arange(100, 151, dtype=np.uint8), (10, 1))
        stretched = contrast_stretch(gray, 0.35, 0.35)
        assert stretched.min() == 0
        assert stretched.max() == 255

    def test_contrast_stretch_flat_image(self) -> None:
        flat = np.full((10, 10), 128, dtype=np.uint8)
        assert np.array_equal(contrast_stretch(flat, 1.0, 1.0), flat)

    def test_zero_sigma_is_identity(self) -> None:
        gray = np.full((10, 10), 50, dtype=np.uint8)
        assert sharpen(gray, 0) is gray

    def test_enhance_returns_grayscale(self, sample_color_image: np.ndarray) -> None:
        result = enhance_for_ocr(sample_color_image)
        assert result.shape == (200, 300)
        assert result.dtype == np.uint8


class TestCheckSystem:
    """Tests for external tool availability checks."""

    @patch("valuation_ocr.utils.system_check.pytesseract.get_tesseract_version")
    @patch("valuation_ocr.utils.system_check.shutil.which", return_value="/usr/bin/tool")
    def test_all_system_tools_present(
        self, mock_which: MagicMock, mock_version: MagicMock
    ) -> None:
        mock_version.return_value = "5.3.0"

        statuses = {s.name: s for s in check_system(AppConfig())}

        assert statuses["GraphicsMagick (bundled)"].available is False
        assert statuses["GraphicsMagick (system)"].available is True
        assert statuses["Ghostscript"].available is True
        assert statuses["Poppler pdfinfo"].available is True
        assert statuses["Tesseract"].detail == "version 5.3.0"

    @patch(
        "valuation_ocr.utils.system_check.pytesseract.get_tesseract_version",
        side_effect=pytesseract.TesseractNotFoundError(),
    )
    @patch("valuation_ocr.utils.system_check.shutil.which", return_value=None)
    def test_missing_tools(
        self, mock_which: MagicMock, mock_version: MagicMock, tmp_path: Path
    ) -> None:
        config = AppConfig(rasterizer=RasterizerConfig(bundle_dir=str(tmp_path)))

        statuses = check_system(config)

        assert not any(s.available for s in statuses)
        assert statuses[0].detail == "binary missing"
