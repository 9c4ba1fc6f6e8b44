"""Configuration management for the image-to-document converter.

Loads and validates YAML configuration with sensible defaults
for image intake, OCR inference, and document export settings.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "OCRDOC_CONFIG"


class IntakeConfig(BaseModel):
    """Configuration for image upload validation."""

    max_file_size_bytes: int = 10 * 1024 * 1024
    accepted_type_prefix: str = "image/"


class OCRConfig(BaseModel):
    """Configuration for the transformer OCR engine."""

    model_name: str = "microsoft/trocr-base-printed"
    device: str | None = None
    max_dimension: int = 1024
    jpeg_quality: int = Field(default=80, ge=1, le=95)
    nominal_confidence: float = 0.8
    max_new_tokens: int = 128


class ExportConfig(BaseModel):
    """Configuration for PDF and text export."""

    default_title: str = "Extracted Document"
    default_subject: str = "Document extracted from images using OCR"
    fallback_filename: str = "extracted_document"
    creator: str = "ocrdoc"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    intake: IntakeConfig = Field(default_factory=IntakeConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file. Defaults to the
            ``OCRDOC_CONFIG`` environment variable, then configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path(os.environ.get(CONFIG_ENV_VAR, "configs/config.yaml"))

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
