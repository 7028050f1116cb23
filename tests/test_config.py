"""
Tests for LakeLevelConfig defaults, validation and environment overrides.
"""

from datetime import timedelta
from pathlib import Path

import pytest

from lakelevel.config import LakeLevelConfig, default_cache_dir
from lakelevel.exceptions import ConfigurationError


class TestDefaults:
    def test_defaults(self):
        config = LakeLevelConfig()
        assert config.request_timeout == 15.0
        assert config.resource_timeout == 30.0
        assert config.max_response_size == 10_000_000
        assert (config.min_valid_value, config.max_valid_value) == (-100.0, 15000.0)
        assert config.max_cache_age == timedelta(days=7)
        assert config.parameter_codes[0] == "00062"
        assert config.cache_dir.name == "LakeLevelCache"

    def test_default_cache_dir_honours_xdg(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
        assert default_cache_dir() == tmp_path / "lakelevel" / "LakeLevelCache"


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"request_timeout": 0},
            {"request_timeout": 40.0},
            {"max_response_size": 0},
            {"min_valid_value": 10.0, "max_valid_value": 10.0},
            {"max_cache_age": timedelta(0)},
            {"parameter_codes": ()},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            LakeLevelConfig(**kwargs)

    def test_with_cache_dir(self, tmp_path):
        config = LakeLevelConfig()
        assert config.with_cache_dir(None) is config
        assert config.with_cache_dir("") is config
        assert config.with_cache_dir(tmp_path).cache_dir == Path(tmp_path)


class TestFromEnv:
    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LAKELEVEL_CACHE_DIR", str(tmp_path / "c"))
        monkeypatch.setenv("LAKELEVEL_TIMEOUT", "5")
        monkeypatch.setenv("LAKELEVEL_MAX_RESPONSE_SIZE", "1000")
        monkeypatch.setenv("LAKELEVEL_MAX_CACHE_AGE_DAYS", "2")

        config = LakeLevelConfig.from_env()

        assert config.cache_dir == tmp_path / "c"
        assert config.request_timeout == 5.0
        assert config.resource_timeout == 30.0
        assert config.max_response_size == 1000
        assert config.max_cache_age == timedelta(days=2)

    def test_long_request_timeout_raises_resource_timeout(self, monkeypatch):
        monkeypatch.setenv("LAKELEVEL_TIMEOUT", "60")
        monkeypatch.delenv("LAKELEVEL_RESOURCE_TIMEOUT", raising=False)

        config = LakeLevelConfig.from_env()

        assert config.resource_timeout == 60.0

    @pytest.mark.parametrize(
        "name", ["LAKELEVEL_TIMEOUT", "LAKELEVEL_MAX_RESPONSE_SIZE", "LAKELEVEL_MAX_CACHE_AGE_DAYS"]
    )
    def test_invalid_number(self, monkeypatch, name):
        monkeypatch.setenv(name, "lots")
        with pytest.raises(ConfigurationError):
            LakeLevelConfig.from_env()
