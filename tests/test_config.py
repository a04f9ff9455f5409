import json
from pathlib import Path

from swordclick.config import SAVE_PATH_ENV, Settings, default_save_path, load_settings, save_settings


def test_missing_settings_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "settings.json")
    assert settings == Settings()
    assert settings.tick_rate_ms == 100
    assert settings.save_interval_ms == 30_000
    assert settings.max_offline_hours == 8
    assert settings.prestige_confirm_ms == 4000
    assert settings.reset_confirm_ms == 3000
    assert not settings.auto_spend_prestige


def test_settings_round_trip(tmp_path):
    path = tmp_path / "cfg" / "settings.json"
    save_settings(Settings(tick_rate_ms=50, max_offline_hours=2), path)
    loaded = load_settings(path)
    assert loaded.tick_rate_ms == 50
    assert loaded.max_offline_hours == 2
    assert loaded.save_interval_ms == 30_000


def test_bad_settings_fall_back(tmp_path, capsys):
    path = tmp_path / "settings.json"
    path.write_text("{oops", encoding="utf-8")
    assert load_settings(path) == Settings()
    path.write_text(json.dumps({"tick_rate_ms": 10, "turbo": True}), encoding="utf-8")
    assert load_settings(path) == Settings()
    assert capsys.readouterr().out.count("[config]") == 2


def test_save_path_env_override(tmp_path, monkeypatch):
    target = tmp_path / "elsewhere.json"
    monkeypatch.setenv(SAVE_PATH_ENV, str(target))
    assert default_save_path() == target.resolve()
    assert Settings(save_path="/ignored.json").resolved_save_path() == target.resolve()


def test_save_path_defaults(monkeypatch):
    monkeypatch.delenv(SAVE_PATH_ENV, raising=False)
    assert default_save_path() == Path.home() / ".swordclick" / "save.json"
    assert Settings(save_path="~/slot.json").resolved_save_path() == Path.home() / "slot.json"
