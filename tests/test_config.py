"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from ocrdoc.utils.config import (
    CONFIG_ENV_VAR,
    AppConfig,
    ExportConfig,
    IntakeConfig,
    OCRConfig,
    load_config,
)


class TestIntakeConfig:
    """Tests for IntakeConfig defaults."""

    def test_defaults(self) -> None:
        cfg = IntakeConfig()
        assert cfg.max_file_size_bytes == 10 * 1024 * 1024
        assert cfg.accepted_type_prefix == "image/"


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.model_name == "microsoft/trocr-base-printed"
        assert cfg.device is None
        assert cfg.max_dimension == 1024
        assert cfg.jpeg_quality == 80
        assert cfg.nominal_confidence == 0.8

    def test_override(self) -> None:
        cfg = OCRConfig(device="cpu", max_dimension=512)
        assert cfg.device == "cpu"
        assert cfg.max_dimension == 512

    def test_jpeg_quality_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            OCRConfig(jpeg_quality=0)


class TestExportConfig:
    """Tests for ExportConfig defaults."""

    def test_defaults(self) -> None:
        cfg = ExportConfig()
        assert cfg.default_title == "Extracted Document"
        assert cfg.default_subject == "Document extracted from images using OCR"
        assert cfg.fallback_filename == "extracted_document"


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.intake, IntakeConfig)
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.export, ExportConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(ocr=OCRConfig(jpeg_quality=90), log_level="DEBUG")
        assert cfg.ocr.jpeg_quality == 90
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_project_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.max_dimension == 1024
        assert cfg.intake.max_file_size_bytes == 10485760

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.jpeg_quality == 80

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "intake": {"max_file_size_bytes": 1024},
            "ocr": {"model_name": "microsoft/trocr-small-printed"},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.intake.max_file_size_bytes == 1024
        assert cfg.ocr.model_name == "microsoft/trocr-small-printed"
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file)
        assert isinstance(cfg, AppConfig)

    def test_env_var_selects_path(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "env.yaml"
        config_file.write_text("export:\n  default_title: From Env\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        cfg = load_config()
        assert cfg.export.default_title == "From Env"
