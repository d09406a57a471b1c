"""Configuration management for the valuation report extractor.

Loads and validates YAML configuration with sensible defaults
for rasterization, OCR, and field extraction settings.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class RasterizerConfig(BaseModel):
    """Configuration for PDF page rasterization."""

    dpi: int = 300
    width: int = 2480
    height: int = 3508
    bundle_dir: str | None = None
    system_binary: str = "gm"
    timeout_seconds: float = 60.0
    apply_enhancements: bool = True
    contrast_stretch: str = "0.35%x0.35%"
    sharpen: str = "0x1.0"


class OCRConfig(BaseModel):
    """Configuration for Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3
    max_pages: int = 20
    timeout_seconds: float = 120.0


class ExtractionConfig(BaseModel):
    """Configuration for field extraction."""

    low_confidence_threshold: int = 20


class AppConfig(BaseModel):
    """Top-level application configuration."""

    rasterizer: RasterizerConfig = Field(default_factory=RasterizerConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
