"""
Tests for configuration
"""

import logging

import pytest
from pydantic import ValidationError

from config import (
    ProcessingSettings,
    Settings,
    SystemSettings,
    configure_logging,
    get_settings,
)


class TestSettings:
    """Test settings models"""

    def test_defaults(self):
        """Test default values"""
        settings = Settings()

        assert settings.environment == "development"
        assert settings.system.log_level == "INFO"
        assert settings.system.debug is False
        assert settings.processing.random_seed is None
        assert settings.processing.max_image_pixels == 50_000_000

    def test_log_level_normalized(self):
        """Test log level is uppercased"""
        assert SystemSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Test unknown log levels are rejected"""
        with pytest.raises(ValidationError):
            SystemSettings(log_level="LOUD")

    def test_invalid_pixel_limit(self):
        """Test the pixel limit must be positive"""
        with pytest.raises(ValidationError):
            ProcessingSettings(max_image_pixels=0)

    def test_to_dict(self):
        """Test nested export"""
        data = Settings().to_dict()

        assert data["system"]["log_level"] == "INFO"
        assert data["processing"]["random_seed"] is None


class TestFromEnv:
    """Test environment loading"""

    def test_reads_prefixed_variables(self):
        """Test every supported variable"""
        environ = {
            "IMAGE_STUDIO_ENVIRONMENT": "production",
            "IMAGE_STUDIO_LOG_LEVEL": "warning",
            "IMAGE_STUDIO_DEBUG": "true",
            "IMAGE_STUDIO_RANDOM_SEED": "42",
            "IMAGE_STUDIO_MAX_IMAGE_PIXELS": "1000",
        }
        settings = Settings.from_env(environ)

        assert settings.environment == "production"
        assert settings.system.log_level == "WARNING"
        assert settings.system.debug is True
        assert settings.processing.random_seed == 42
        assert settings.processing.max_image_pixels == 1000

    def test_empty_values_keep_defaults(self):
        """Test unset and empty variables fall back to defaults"""
        settings = Settings.from_env({"IMAGE_STUDIO_RANDOM_SEED": "", "OTHER": "1"})

        assert settings.processing.random_seed is None
        assert settings.environment == "development"

    def test_invalid_value(self):
        """Test malformed values fail validation"""
        with pytest.raises(ValidationError):
            Settings.from_env({"IMAGE_STUDIO_MAX_IMAGE_PIXELS": "many"})

    def test_get_settings_cached(self, monkeypatch):
        """Test get_settings reads the process environment once"""
        monkeypatch.setenv("IMAGE_STUDIO_RANDOM_SEED", "5")
        get_settings.cache_clear()
        try:
            first = get_settings()
            assert first.processing.random_seed == 5
            assert get_settings() is first
        finally:
            get_settings.cache_clear()


class TestConfigureLogging:
    """Test logging setup"""

    def test_debug_overrides_level(self, monkeypatch):
        """Test debug mode selects DEBUG"""
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        configure_logging(Settings(system=SystemSettings(log_level="ERROR", debug=True)))

        assert calls["level"] == logging.DEBUG

    def test_configured_level(self, monkeypatch):
        """Test the configured level is applied"""
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        configure_logging(Settings(system=SystemSettings(log_level="warning")))

        assert calls["level"] == logging.WARNING
        assert "%(levelname)s" in calls["format"]
