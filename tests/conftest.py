"""Shared test fixtures for the valuation report extractor test suite."""

from pathlib import Path

import numpy as np
import pytest

MITCHELL_TEXT = """Mitchell WorkCenter Total Loss
Valuation Detail

Claim Number: 0000123456-01
Loss vehicle: 2022 BMW M3 Competition | 4 Door Sedan | 3.0L 6 Cyl Gas Turbocharged | A
VIN: WBS33AY09NFL79043
Mileage
12,345 miles

Base Value
Market Value = $52,852.67
Condition Adjustment -$500.00

Settlement Value:
$51,402.67
"""

CCC_ONE_TEXT = """CCC ONE Market Valuation Report
Owner Information

Loss Vehicle 2021 Volvo XC60 T5 Momentum
VIN YV1A22RK5M1234567
Year 2021
Make Volvo
Model XG60 T5 Momentum
Odometer 45,210
Location SAN DIEGO, CA 92101

Adjusted Vehicle Value $ 38,450.00
Tax $ 670.55
Total $ 39,120.55
"""


@pytest.fixture
def mitchell_text() -> str:
    """OCR text of a clean Mitchell report."""
    return MITCHELL_TEXT


@pytest.fixture
def ccc_one_text() -> str:
    """OCR text of a clean CCC One report."""
    return CCC_ONE_TEXT


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
