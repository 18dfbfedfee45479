import os
import sys

import pytest
import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import cli
from errors import ValidationError
from sample_data import ATHLETES
from settings_schema import load_settings


def _base(tmp_path):
    return ["--yaml", str(tmp_path / "settings.yaml"), "--db", str(tmp_path / "cli.db")]


def test_demo_then_reports(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("DB_PATH", raising=False)
    cli.main(_base(tmp_path) + ["demo"])
    assert "Seed data inserted" in capsys.readouterr().out

    cli.main(_base(tmp_path) + ["demo"])
    assert "already contains data" in capsys.readouterr().out

    cli.main(_base(tmp_path) + ["acwr", "--user", ATHLETES[0].id])
    out = capsys.readouterr().out
    assert "ACWR" in out

    cli.main(_base(tmp_path) + ["acwr", "--user", "nobody"])
    assert "No load data" in capsys.readouterr().out

    cli.main(_base(tmp_path) + ["readiness", "--user", ATHLETES[0].id, "--date", "2024-01-01"])
    assert '"readiness_score": 0' in capsys.readouterr().out


def test_prs_listing(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("DB_PATH", raising=False)
    cli.main(_base(tmp_path) + ["demo"])
    capsys.readouterr()
    from rest_api import ReadinessAPI

    api = ReadinessAPI(db_path=str(tmp_path / "cli.db"), yaml_path=str(tmp_path / "settings.yaml"))
    api.pr_service.log_set("u1", "Front Squat", weight=90, reps=3)
    cli.main(_base(tmp_path) + ["prs", "--user", "u1"])
    out = capsys.readouterr().out
    assert "Front Squat" in out
    assert "117.00" in out


def test_backup_and_restore(tmp_path, monkeypatch):
    monkeypatch.delenv("DB_PATH", raising=False)
    cli.main(_base(tmp_path) + ["demo"])
    backup = tmp_path / "backup.db"
    cli.main(_base(tmp_path) + ["backup", "--out", str(backup)])
    assert backup.exists()
    os.remove(tmp_path / "cli.db")
    cli.main(_base(tmp_path) + ["restore", "--in", str(backup)])
    assert (tmp_path / "cli.db").exists()


def test_config_command(tmp_path, capsys, monkeypatch):
    for name in ("ENCRYPT_SETTINGS", "DB_PATH", "READINESS_LOG_LEVEL", "READINESS_WEBHOOK_URL"):
        monkeypatch.delenv(name, raising=False)
    base = ["--yaml", str(tmp_path / "settings.yaml")]
    cli.main(base + ["config", "--set", "corrected_rolling_windows=true", "--set", "event_webhook_token=abc"])
    shown = yaml.safe_load(capsys.readouterr().out)
    assert shown == {"corrected_rolling_windows": True, "event_webhook_token": "****"}
    settings = load_settings(str(tmp_path / "settings.yaml"))
    assert settings.corrected_rolling_windows is True
    assert settings.event_webhook_token == "abc"

    with pytest.raises(ValidationError):
        cli.main(base + ["config", "--set", "acute_window_days=0"])
    with pytest.raises(ValidationError):
        cli.main(base + ["config", "--set", "colour=blue"])

    cli.main(base + ["config", "--set", "event_webhook_token="])
    assert yaml.safe_load(capsys.readouterr().out) == {"corrected_rolling_windows": True}
