"""Tests for settings and the command line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest
from loguru import logger

import main
from config.settings import LoggingSettings, Settings, SourceSettings, get_settings


class TestSettings:
    def test_config_url_trailing_slash_is_stripped(self) -> None:
        assert SourceSettings(config_url="http://config.test/").config_url == "http://config.test"

    def test_log_level_is_case_insensitive(self) -> None:
        assert LoggingSettings(level="debug").level.value == "DEBUG"

    def test_to_dict_masks_webhook(self) -> None:
        settings = Settings()
        settings = settings.model_copy(
            update={"alert": settings.alert.model_copy(update={"webhook_url": "https://hooks.test/secret"})}
        )
        assert settings.to_dict()["alert"]["webhook_url"] == "***"

    def test_config_url_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("CONFIG_URL", "http://config.test:8000")
        assert SourceSettings().config_url == "http://config.test:8000"


class TestCommandLine:
    def test_config_server_flags_override_settings(self) -> None:
        args = main.build_parser().parse_args(
            ["config-server", "--addr", "127.0.0.1", "--port", "8123", "--file", "endpoints.csv"]
        )
        settings = main.apply_overrides(Settings(), args)
        assert settings.server.addr == "127.0.0.1"
        assert settings.server.port == 8123
        assert settings.server.file == Path("endpoints.csv")

    def test_canary_flags_override_settings(self) -> None:
        args = main.build_parser().parse_args(["canary", "--bind", "127.0.0.1", "--port", "9100"])
        settings = main.apply_overrides(Settings(), args)
        assert settings.server.addr == "127.0.0.1"
        assert settings.server.canary_port == 9100

    def test_no_flags_keeps_settings(self) -> None:
        settings = Settings()
        args = main.build_parser().parse_args([])
        assert main.apply_overrides(settings, args) is settings

    def test_monitor_without_config_url_exits_1(self, monkeypatch) -> None:
        monkeypatch.delenv("CONFIG_URL", raising=False)
        get_settings.cache_clear()
        try:
            assert main.main(["monitor"]) == 1
        finally:
            get_settings.cache_clear()

    def test_monitor_with_unreachable_config_exits_1(self, monkeypatch) -> None:
        monkeypatch.setenv("CONFIG_URL", "http://127.0.0.1:1")
        get_settings.cache_clear()
        try:
            assert main.main([]) == 1
        finally:
            get_settings.cache_clear()

    def test_startup_failure_is_logged_with_error_details(self, monkeypatch) -> None:
        monkeypatch.delenv("CONFIG_URL", raising=False)
        monkeypatch.setattr(main, "setup_logging", lambda settings: None)
        records = []
        handler_id = logger.add(lambda message: records.append(message.record), level="ERROR")
        get_settings.cache_clear()
        try:
            assert main.main(["monitor"]) == 1
        finally:
            logger.remove(handler_id)
            get_settings.cache_clear()

        error = records[-1]["extra"]["error"]
        assert error["type"] == "ConfigurationError"
        assert error["error_code"] == 1100
        assert error["details"] == {"config_key": "CONFIG_URL"}
        assert error["recoverable"] is False
        assert error["timestamp"]
        assert "Code: 1100" in records[-1]["message"]
