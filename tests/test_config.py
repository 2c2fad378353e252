import logging

import pytest
from pydantic import ValidationError

from lazyseq import BridgeStrategy, Settings, configure, get_settings, reset_settings


class TestSettings:
    """Test settings validation and loading"""

    def test_defaults(self):
        """Test default values"""
        settings = Settings()
        assert settings.bridge is BridgeStrategy.AUTO
        assert settings.log_level == "WARNING"
        assert settings.thread_name_prefix == "lazyseq-pull"

    def test_from_env(self):
        """Test reading LAZYSEQ_* variables"""
        settings = Settings.from_env({
            "LAZYSEQ_BRIDGE": " Thread ",
            "LAZYSEQ_LOG_LEVEL": "debug",
            "LAZYSEQ_THREAD_NAME_PREFIX": "worker",
            "UNRELATED": "x",
        })
        assert settings.bridge is BridgeStrategy.THREAD
        assert settings.log_level == "DEBUG"
        assert settings.thread_name_prefix == "worker"

    def test_invalid_values(self):
        """Test that invalid settings are rejected"""
        with pytest.raises(ValidationError):
            Settings(bridge="fiber")
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")
        with pytest.raises(ValidationError):
            Settings(thread_name_prefix="  ")

    def test_get_settings_reads_environment(self, monkeypatch):
        """Test lazy loading from the process environment"""
        monkeypatch.setenv("LAZYSEQ_BRIDGE", "thread")
        reset_settings()
        assert get_settings().bridge is BridgeStrategy.THREAD

        monkeypatch.delenv("LAZYSEQ_BRIDGE")
        assert get_settings().bridge is BridgeStrategy.THREAD, "Settings are cached until reset"
        reset_settings()
        assert get_settings().bridge is BridgeStrategy.AUTO

    def test_configure(self):
        """Test overriding single fields"""
        settings = configure(log_level="info")
        assert settings.log_level == "INFO"
        assert get_settings() is settings
        assert settings.bridge is BridgeStrategy.AUTO

        with pytest.raises(ValidationError):
            configure(bridge="nope")
        assert get_settings() is settings, "A failed configure keeps the old settings"
