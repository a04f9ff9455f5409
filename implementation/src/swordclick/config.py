from __future__ import annotations

from dataclasses import asdict, dataclass
import json
import os
from pathlib import Path

SAVE_PATH_ENV = "SWORDCLICK_SAVE_PATH"


def _repo_root() -> Path:
    here = Path(__file__).resolve()
    # .../implementation/src/swordclick/config.py -> repo root is 3 levels up
    return here.parents[3]


def default_settings_path() -> Path:
    return _repo_root() / "implementation" / "settings.json"


def default_save_path() -> Path:
    override = os.environ.get(SAVE_PATH_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / ".swordclick" / "save.json"


@dataclass
class Settings:
    tick_rate_ms: float = 100
    save_interval_ms: float = 30_000
    max_offline_hours: float = 8
    prestige_confirm_ms: float = 4000
    reset_confirm_ms: float = 3000
    # Spend erasure points automatically during prestige (headless runs turn this on)
    auto_spend_prestige: bool = False
    save_path: str = ""

    def resolved_save_path(self) -> Path:
        override = os.environ.get(SAVE_PATH_ENV)
        if override or not self.save_path:
            return default_save_path()
        return Path(self.save_path).expanduser()


def load_settings(path: Path | None = None) -> Settings:
    if path is None:
        path = default_settings_path()
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"[config] Error reading {path}: {e}")
        return Settings()
    try:
        return Settings(**data)
    except TypeError as e:
        print(f"[config] Ignoring settings file {path}: {e}")
        return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    if path is None:
        path = default_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")
