"""Tests for configuration loading and validation"""
import importlib
import pytest
from datetime import timedelta

from lifexp import config
from lifexp.exceptions import ConfigurationError


@pytest.fixture
def reload_config(monkeypatch):
    """Reload lifexp.config after env changes, then restore the defaults"""
    yield lambda: importlib.reload(config)
    monkeypatch.undo()
    importlib.reload(config)


class TestConfigDefaults:
    def test_defaults(self, monkeypatch, reload_config):
        for key in ("DEFAULT_TIMEZONE", "STREAK_GRACE_PERIOD_HOURS", "DUE_SOON_WINDOW_DAYS", "LOG_LEVEL"):
            monkeypatch.delenv(key, raising=False)
        reload_config()

        assert config.DEFAULT_TIMEZONE == "UTC"
        assert config.STREAK_GRACE_PERIOD_HOURS == 6
        assert config.DUE_SOON_WINDOW == timedelta(days=3)
        assert config.LOG_LEVEL == "INFO"

    def test_env_overrides(self, monkeypatch, reload_config):
        monkeypatch.setenv("DEFAULT_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("STREAK_GRACE_PERIOD_HOURS", "2")
        monkeypatch.setenv("DUE_SOON_WINDOW_DAYS", "7")
        reload_config()

        assert config.default_tz().key == "Europe/Berlin"
        assert config.STREAK_GRACE_PERIOD_HOURS == 2
        assert config.DUE_SOON_WINDOW == timedelta(days=7)


class TestConfigValidation:
    def test_valid_configuration(self):
        config.validate_config()

    def test_unknown_timezone(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_TIMEZONE", "Mars/Olympus_Mons")
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()
        assert exc_info.value.config_key == "DEFAULT_TIMEZONE"

    def test_negative_grace_period(self, monkeypatch):
        monkeypatch.setattr(config, "STREAK_GRACE_PERIOD_HOURS", -1)
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()
        assert exc_info.value.config_key == "STREAK_GRACE_PERIOD_HOURS"

    def test_non_positive_due_soon_window(self, monkeypatch):
        monkeypatch.setattr(config, "DUE_SOON_WINDOW_DAYS", 0)
        with pytest.raises(ConfigurationError):
            config.validate_config()
