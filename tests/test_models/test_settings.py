"""Tests for tool settings."""

import pytest
from pydantic import ValidationError

from dockside.models.config import DocksideSettings


class TestDocksideSettings:
    """Test DocksideSettings."""

    def test_defaults(self, monkeypatch):
        for var in ("DOCKSIDE_LOG_LEVEL", "DOCKSIDE_COMPOSE_FILE", "DOCKSIDE_STOP_TIMEOUT"):
            monkeypatch.delenv(var, raising=False)

        settings = DocksideSettings()

        assert settings.log_level == "INFO"
        assert settings.compose_file == "compose.yaml"
        assert settings.stop_timeout == 10

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DOCKSIDE_LOG_LEVEL", "debug")
        monkeypatch.setenv("DOCKSIDE_STOP_TIMEOUT", "3")

        settings = DocksideSettings()

        assert settings.log_level == "DEBUG"
        assert settings.stop_timeout == 3

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError) as exc_info:
            DocksideSettings(log_level="LOUD")

        assert "Invalid log level" in str(exc_info.value)

    def test_negative_timeout(self):
        with pytest.raises(ValidationError):
            DocksideSettings(stop_timeout=-1)
