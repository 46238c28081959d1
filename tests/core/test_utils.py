"""
Tests for core utilities (enum conversion and timing)
"""

import logging

import pytest

from core.enums import Interpolation, MorphologyOperation
from core.exceptions import ParameterOutOfRangeError
from core.utils import convert_enums_to_strings, enum_to_string, log_duration, parse_enum, timer


class TestParseEnum:
    """Test parse_enum"""

    def test_enum_instance_passes_through(self):
        """Test enum members are returned as-is"""
        assert parse_enum(Interpolation.NEAREST, Interpolation) is Interpolation.NEAREST

    def test_case_insensitive(self):
        """Test strings are matched case-insensitively"""
        assert parse_enum("BiLinear", Interpolation) is Interpolation.BILINEAR

    def test_default_for_none(self):
        """Test None falls back to the default"""
        assert parse_enum(None, Interpolation, Interpolation.NEAREST) is Interpolation.NEAREST

    def test_none_without_default(self):
        """Test None without default is an error"""
        with pytest.raises(ParameterOutOfRangeError):
            parse_enum(None, Interpolation)

    def test_invalid_value(self):
        """Test unknown values list the allowed members"""
        with pytest.raises(ParameterOutOfRangeError, match="erode, dilate, open, close"):
            parse_enum("smooth", MorphologyOperation, name="operation")


class TestEnumToString:
    """Test enum to string conversion"""

    def test_enum_to_string(self):
        """Test enums become their values and strings pass through"""
        assert enum_to_string(MorphologyOperation.OPEN) == "open"
        assert enum_to_string("close") == "close"

    def test_convert_dict(self):
        """Test every enum value in a dict is converted"""
        data = {"interpolation": Interpolation.BILINEAR, "scale": 2.0}

        assert convert_enums_to_strings(data) == {"interpolation": "bilinear", "scale": 2.0}


class TestTiming:
    """Test timer and log_duration"""

    def test_timer_fills_after_block(self):
        """Test elapsed milliseconds are available after the block"""
        with timer() as t:
            sum(range(1000))

        assert t["ms"] >= 0

    def test_log_duration(self, caplog):
        """Test decorated calls return their value and log at debug"""

        @log_duration
        def double(x):
            return 2 * x

        with caplog.at_level(logging.DEBUG, logger="core.utils.decorators"):
            assert double(21) == 42

        assert any("double" in record.message for record in caplog.records)
