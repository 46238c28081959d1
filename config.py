"""
Configuration for Image Processing Studio.

Settings are nested Pydantic models populated from environment variables
with the IMAGE_STUDIO_ prefix:

    IMAGE_STUDIO_ENVIRONMENT       development | production | test
    IMAGE_STUDIO_LOG_LEVEL         DEBUG, INFO, WARNING, ERROR or CRITICAL
    IMAGE_STUDIO_DEBUG             true / false
    IMAGE_STUDIO_RANDOM_SEED       integer seed for k-means and component colors
    IMAGE_STUDIO_MAX_IMAGE_PIXELS  largest accepted width * height
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "IMAGE_STUDIO_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SystemSettings(BaseModel):
    """System-wide settings."""

    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Log level must be one of the standard logging names."""
        level = str(v).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level


class ProcessingSettings(BaseModel):
    """Settings for the processing service."""

    random_seed: Optional[int] = Field(
        default=None, description="Seed for randomized operations (None for fresh entropy)"
    )
    max_image_pixels: int = Field(
        default=50_000_000, ge=1, description="Largest accepted image area in pixels"
    )


class Settings(BaseModel):
    """Root application settings."""

    environment: str = Field(default="development", description="Deployment environment")
    system: SystemSettings = Field(default_factory=SystemSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)

    def to_dict(self) -> Dict[str, Any]:
        """Export settings as a plain dict."""
        return self.model_dump()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated Settings; unset variables keep their defaults
        """
        environ = os.environ if environ is None else environ

        def read(name: str) -> Optional[str]:
            value = environ.get(f"{ENV_PREFIX}{name}")
            return value if value not in (None, "") else None

        data: Dict[str, Any] = {"system": {}, "processing": {}}
        if read("ENVIRONMENT") is not None:
            data["environment"] = read("ENVIRONMENT")
        if read("LOG_LEVEL") is not None:
            data["system"]["log_level"] = read("LOG_LEVEL")
        if read("DEBUG") is not None:
            data["system"]["debug"] = read("DEBUG")
        if read("RANDOM_SEED") is not None:
            data["processing"]["random_seed"] = read("RANDOM_SEED")
        if read("MAX_IMAGE_PIXELS") is not None:
            data["processing"]["max_image_pixels"] = read("MAX_IMAGE_PIXELS")

        return cls.model_validate(data)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure root logging for a host application.

    The processing libraries only create module loggers; call this once at
    startup to attach a handler.
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.system.debug else getattr(logging, settings.system.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
