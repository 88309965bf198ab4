"""Environment configuration tests."""

from pathlib import Path

import pytest

from libs.core import config as config_module
from libs.core.config import MonitorConfig, get_config, reset_config


def test_defaults() -> None:
    config = MonitorConfig()

    assert config.api_base.startswith("http")
    assert config.device_policy == "last"
    assert config.location_timeout == 15.0
    assert config.location_max_age == 60.0


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FIREWATCH_API_BASE", "http://alerts.local:9000")
    monkeypatch.setenv("FIREWATCH_SETTINGS_PATH", str(tmp_path / "settings.json"))
    monkeypatch.setenv("FIREWATCH_DEVICE_POLICY", "first")
    monkeypatch.setenv("FIREWATCH_LOG_LEVEL", "debug")

    config = MonitorConfig()

    assert config.api_base == "http://alerts.local:9000"
    assert config.settings_path == tmp_path / "settings.json"
    assert config.device_policy == "first"
    assert config.log_level == "DEBUG"


def test_get_config_is_cached_until_reset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "load_dotenv", lambda: False)
    reset_config()

    first = get_config()
    assert get_config() is first

    reset_config()
    assert get_config() is not first
    reset_config()
