"""
Mirror Gateway Configuration
============================

This module handles configuration loading for the gateway.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    MIRROR_GATEWAY_HOST           -> server.host
    MIRROR_GATEWAY_PORT           -> server.port
    MIRROR_GATEWAY_API_PREFIX     -> api.prefix
    MIRROR_GATEWAY_DEFAULT_FORMAT -> frame.default_format
    MIRROR_GATEWAY_OCR_ENABLED    -> ocr.enabled
    MIRROR_GATEWAY_OCR_LANGUAGE   -> ocr.language
    MIRROR_GATEWAY_TESSERACT_CMD  -> ocr.tesseract_cmd
    MIRROR_GATEWAY_LOG_LEVEL      -> logging.level

Example:
    from mirror_gateway.config import load_config, setup_logging

    settings = load_config()
    setup_logging(settings)
    print(settings.server.port)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServerConfig(BaseModel):
    """Listener configuration."""

    host: str = Field(default="127.0.0.1", description="Bind host")
    port: int = Field(default=8080, ge=0, le=65535, description="Bind port (0 = ephemeral)")
    backlog: int = Field(default=64, ge=1, description="Listen backlog")
    shutdown_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds destroy() waits for the serve thread",
    )


class ApiConfig(BaseModel):
    """HTTP surface configuration."""

    prefix: str = Field(default="/api/v1", description="Versioned route prefix")
    max_field_length: int = Field(
        default=32,
        ge=1,
        description="Maximum length of a control form field (longer values are truncated)",
    )
    max_text_length: int = Field(
        default=4096,
        ge=1,
        description="Maximum length of the /text field",
    )
    keep_alive: bool = Field(
        default=False,
        description="Allow connection reuse (otherwise Connection: close)",
    )

    @field_validator("prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value


class FrameConfig(BaseModel):
    """Snapshot encoding configuration."""

    default_format: str = Field(
        default="png",
        description="Format used when the Accept header selects nothing",
    )
    jpeg_quality: int = Field(default=90, ge=0, le=100, description="JPEG quality")
    png_compression: int = Field(default=3, ge=0, le=9, description="PNG zlib level")
    webp_quality: int = Field(default=90, ge=1, le=100, description="WebP quality")

    @field_validator("default_format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("png", "jpeg", "jpg", "bmp", "webp"):
            raise ValueError(f"Unsupported image format: {value}")
        return value


class OcrConfig(BaseModel):
    """Text extraction configuration."""

    enabled: bool = Field(default=True, description="Serve /frame/ocr")
    language: str = Field(default="eng", description="Tesseract language code(s)")
    tesseract_cmd: Optional[str] = Field(
        default=None,
        description="Path to the tesseract binary (PATH lookup if unset)",
    )
    config: str = Field(default="", description="Extra tesseract flags")
    min_confidence: float = Field(
        default=0.0,
        ge=0,
        le=100,
        description="Drop words below this confidence",
    )
    timeout: float = Field(
        default=0.0,
        ge=0,
        description="Recognition timeout in seconds (0 = none)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the gateway.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    frame: FrameConfig = Field(default_factory=FrameConfig)
    ocr: OcrConfig = Field(default_factory=OcrConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Server settings
    if env_host := os.environ.get("MIRROR_GATEWAY_HOST"):
        config_data.setdefault("server", {})["host"] = env_host
    if env_port := os.environ.get("MIRROR_GATEWAY_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # API settings
    if env_prefix := os.environ.get("MIRROR_GATEWAY_API_PREFIX"):
        config_data.setdefault("api", {})["prefix"] = env_prefix

    # Frame settings
    if env_format := os.environ.get("MIRROR_GATEWAY_DEFAULT_FORMAT"):
        config_data.setdefault("frame", {})["default_format"] = env_format

    # OCR settings
    if env_ocr := os.environ.get("MIRROR_GATEWAY_OCR_ENABLED"):
        config_data.setdefault("ocr", {})["enabled"] = env_ocr.lower() in ("1", "true", "yes", "on")
    if env_lang := os.environ.get("MIRROR_GATEWAY_OCR_LANGUAGE"):
        config_data.setdefault("ocr", {})["language"] = env_lang
    if env_cmd := os.environ.get("MIRROR_GATEWAY_TESSERACT_CMD"):
        config_data.setdefault("ocr", {})["tesseract_cmd"] = env_cmd

    # Logging settings
    if env_log := os.environ.get("MIRROR_GATEWAY_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
