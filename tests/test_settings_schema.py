import os
import sys

import pytest
import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig
from errors import ValidationError
from settings_schema import EngineSettings, load_settings, validate_settings


def test_defaults():
    settings = EngineSettings()
    assert settings.db_path == "readiness.db"
    assert settings.corrected_rolling_windows is False
    assert settings.acute_window_days == 7
    assert settings.chronic_window_days == 28
    assert settings.event_webhook_url is None


@pytest.mark.parametrize(
    "data",
    [
        {"acute_window_days": 0},
        {"chronic_window_days": -28},
        {"event_timeout": 0},
        {"corrected_rolling_windows": "sometimes"},
    ],
)
def test_invalid_settings(data):
    with pytest.raises(ValidationError):
        validate_settings(data)


def test_load_from_yaml(tmp_path, monkeypatch):
    monkeypatch.delenv("DB_PATH", raising=False)
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump({"db_path": "athletes.db", "corrected_rolling_windows": True}))
    settings = load_settings(str(path))
    assert settings.db_path == "athletes.db"
    assert settings.corrected_rolling_windows is True


def test_missing_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("DB_PATH", raising=False)
    assert load_settings(str(tmp_path / "absent.yaml")) == EngineSettings()


def test_db_path_env_override(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    YamlConfig(str(path)).save({"db_path": "athletes.db"})
    monkeypatch.setenv("DB_PATH", str(tmp_path / "override.db"))
    assert load_settings(str(path)).db_path == str(tmp_path / "override.db")


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.delenv("DB_PATH", raising=False)
    path = tmp_path / "settings.yaml"
    YamlConfig(str(path)).save({"log_level": "INFO"})
    monkeypatch.setenv("READINESS_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("READINESS_WEBHOOK_URL", "https://hooks.example.com/r")
    settings = load_settings(str(path))
    assert settings.log_level == "DEBUG"
    assert settings.event_webhook_url == "https://hooks.example.com/r"
    assert YamlConfig(str(path)).load(apply_env=False) == {"log_level": "INFO"}
