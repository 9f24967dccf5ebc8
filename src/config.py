"""
Configuration management using Pydantic for print extraction.
Provides type-safe configuration with validation and environment variable support.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.constants import (
    DetectorConstants,
    ImageConstants,
    PaletteConstants,
    SystemConstants,
)

logger = logging.getLogger(__name__)


class DetectorConfig(BaseSettings):
    """Vision-model detector configuration."""

    api_key: Optional[str] = Field(default=None, description="Gemini API key")
    model_name: str = Field(
        default=DetectorConstants.DEFAULT_MODEL, description="Gemini model used for detection"
    )
    timeout_ms: int = Field(
        default=DetectorConstants.DEFAULT_TIMEOUT_MS,
        ge=1000,
        le=120000,
        description="Per-attempt request timeout in milliseconds",
    )
    max_retries: int = Field(
        default=DetectorConstants.DEFAULT_MAX_RETRIES,
        ge=1,
        le=10,
        description="Attempts for rate-limited or overloaded calls",
    )
    min_confidence: float = Field(
        default=DetectorConstants.MIN_CONFIDENCE,
        ge=0.0,
        le=1.0,
        description="Detections below this confidence count as 'no print found'",
    )

    model_config = SettingsConfigDict(env_prefix="PX_DETECTOR_", extra="ignore")


class ProcessingConfig(BaseSettings):
    """Extraction pipeline configuration."""

    palette_size: int = Field(
        default=PaletteConstants.DEFAULT_TOP_N,
        ge=1,
        le=20,
        description="Number of palette colors returned",
    )
    palette_grid: int = Field(
        default=PaletteConstants.SAMPLE_GRID,
        ge=8,
        le=256,
        description="Edge length of the palette sample grid",
    )
    png_compression: int = Field(
        default=ImageConstants.PNG_COMPRESSION_DEFAULT,
        ge=0,
        le=9,
        description="PNG compression level for processed output",
    )

    model_config = SettingsConfigDict(env_prefix="PX_PROCESSING_", extra="ignore")


class APIConfig(BaseSettings):
    """API configuration."""

    host: str = Field(default="0.0.0.0", description="API host address")
    port: int = Field(default=8000, ge=1, le=65535, description="API port")
    cors_enabled: bool = Field(default=True, description="Enable CORS")
    cors_origins: List[str] = Field(default=["*"], description="CORS allowed origins")
    max_upload_size_mb: int = Field(
        default=ImageConstants.MAX_FILE_SIZE_MB,
        ge=1,
        le=100,
        description="Maximum upload file size in MB",
    )
    accepted_mime_types: List[str] = Field(
        default=ImageConstants.ACCEPTED_MIME_TYPES, description="Accepted upload mime types"
    )

    model_config = SettingsConfigDict(env_prefix="PX_API_", extra="ignore")


class SystemConfig(BaseSettings):
    """System configuration."""

    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default=SystemConstants.LOG_LEVEL_DEFAULT, description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    model_config = SettingsConfigDict(env_prefix="PX_SYSTEM_", extra="ignore")


class Settings(BaseSettings):
    """Main application settings."""

    # Sub-configurations
    detector: DetectorConfig = Field(default_factory=DetectorConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    # Environment
    environment: str = Field(
        default="production", description="Environment (development, staging, production)"
    )

    # Config file support
    config_file: Optional[str] = Field(default=None, description="Path to YAML config file")

    @model_validator(mode="before")
    @classmethod
    def load_config_file(cls, values):
        """Load configuration from YAML file if specified."""
        if not isinstance(values, dict):
            return values

        config_file = values.get("config_file") or os.getenv("PX_CONFIG_FILE")

        if config_file and Path(config_file).exists():
            import yaml

            try:
                with open(config_file, "r") as f:
                    file_config = yaml.safe_load(f)
                if file_config:
                    # Merge file config with values (explicit values take precedence)
                    for key, value in file_config.items():
                        if key not in values or values[key] is None:
                            values[key] = value
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config file {config_file}: {e}")

        return values

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        valid_envs = ["development", "staging", "production", "test"]
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary (API key masked)."""
        data = self.model_dump(exclude_none=True)
        if data.get("detector", {}).get("api_key"):
            data["detector"]["api_key"] = "***"
        return data

    model_config = SettingsConfigDict(
        env_prefix="PX_",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings object with validated configuration
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Reload settings, clearing the cache.

    Returns:
        Fresh Settings object
    """
    get_settings.cache_clear()
    return get_settings()
