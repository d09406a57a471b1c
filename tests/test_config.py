"""Tests for configuration loading and validation."""

from pathlib import Path

import yaml

from valuation_ocr.utils.config import (
    AppConfig,
    ExtractionConfig,
    OCRConfig,
    RasterizerConfig,
    load_config,
)


class TestRasterizerConfig:
    """Tests for RasterizerConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = RasterizerConfig()
        assert cfg.dpi == 300
        assert (cfg.width, cfg.height) == (2480, 3508)
        assert cfg.bundle_dir is None
        assert cfg.system_binary == "gm"
        assert cfg.timeout_seconds == 60.0
        assert cfg.contrast_stretch == "0.35%x0.35%"
        assert cfg.sharpen == "0x1.0"

    def test_override(self) -> None:
        cfg = RasterizerConfig(dpi=200, bundle_dir="/opt/gm")
        assert cfg.dpi == 200
        assert cfg.bundle_dir == "/opt/gm"


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "eng"
        assert cfg.psm == 3
        assert cfg.max_pages == 20
        assert cfg.timeout_seconds == 120.0
        assert cfg.tesseract_cmd is None

    def test_custom_lang(self) -> None:
        cfg = OCRConfig(default_lang="fra", psm=6)
        assert cfg.default_lang == "fra"
        assert cfg.psm == 6


class TestExtractionConfig:
    """Tests for ExtractionConfig defaults."""

    def test_defaults(self) -> None:
        assert ExtractionConfig().low_confidence_threshold == 20


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.rasterizer, RasterizerConfig)
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.extraction, ExtractionConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(
            ocr=OCRConfig(max_pages=5),
            log_level="DEBUG",
        )
        assert cfg.ocr.max_pages == 5
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_project_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"
        assert cfg.rasterizer.dpi == 300

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "rasterizer": {"bundle_dir": "/opt/gm", "timeout_seconds": 30},
            "ocr": {"default_lang": "deu", "psm": 6},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.rasterizer.bundle_dir == "/opt/gm"
        assert cfg.rasterizer.timeout_seconds == 30
        assert cfg.ocr.default_lang == "deu"
        assert cfg.ocr.psm == 6
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file)
        assert isinstance(cfg, AppConfig)

    def test_load_none_defaults_to_standard_path(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, AppConfig)
