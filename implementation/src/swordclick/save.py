"""Save/load and export/import of game state.

Auto-save: JSON written atomically to a local file.
Export: base64 of compact JSON, pasteable as a single line.
Import: accepts raw JSON or base64-JSON, in either the current snake_case
layout or the camelCase layout of the browser build. Old saves
that still own the retired passive upgrades get them converted into
artists on load.
"""
from __future__ import annotations

import base64
import binascii
import json
import math
from pathlib import Path
from typing import Dict, Optional

from swordclick import economy
from swordclick.catalog import Catalog
from swordclick.state import GameState

SAVE_VERSION = 1

# Browser build field names -> ours.
_LEGACY_KEYS = {
    "totalStrokes": "total_strokes",
    "totalClicks": "total_clicks",
    "clickPower": "click_power",
    "passiveRate": "passive_rate",
    "mediaTier": "media_tier",
    "unlockedSwords": "unlocked_swords",
    "unlockedAchievements": "unlocked_achievements",
    "erasurePoints": "erasure_points",
    "totalErasurePoints": "total_erasure_points",
    "prestigeCount": "prestige_count",
    "prestigeUpgrades": "prestige_upgrades",
    "lifetimeStrokes": "lifetime_strokes",
    "playStartTime": "play_start_time",
    "lastSave": "last_save",
}


def build_save_dict(state: GameState) -> dict:
    """Build a JSON-serializable dict from game state."""
    return {
        "version": SAVE_VERSION,
        "strokes": state.strokes,
        "total_strokes": state.total_strokes,
        "total_clicks": state.total_clicks,
        "click_power": state.click_power,
        "passive_rate": state.passive_rate,
        "upgrades": dict(state.upgrades),
        "artists": dict(state.artists),
        "media_tier": state.media_tier,
        "unlocked_swords": list(state.unlocked_swords),
        "unlocked_achievements": list(state.unlocked_achievements),
        "erasure_points": state.erasure_points,
        "total_erasure_points": state.total_erasure_points,
        "prestige_count": state.prestige_count,
        "prestige_upgrades": dict(state.prestige_upgrades),
        "lifetime_strokes": state.lifetime_strokes,
        "play_start_time": state.play_start_time,
        "last_save": state.last_save,
    }


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _number(data: dict, key: str, default: float = 0.0) -> float:
    """A finite numeric field, or ``default`` when absent. Raises ValueError otherwise."""
    value = data.get(key)
    if value is None:
        return default
    if not _is_number(value):
        raise ValueError(f"field '{key}' is not a finite number: {value!r}")
    return float(value)


def _owned(value, kind: str, entry_id: str) -> int:
    if not _is_number(value):
        raise ValueError(f"{kind} '{entry_id}' has a non-numeric count: {value!r}")
    return int(value)


def _normalize_keys(data: dict) -> dict:
    out = dict(data)
    for old, new in _LEGACY_KEYS.items():
        if old in out and new not in out:
            out[new] = out.pop(old)
    return out


def _counts(raw, kind: str, known) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    if not isinstance(raw, dict):
        return counts
    for entry_id, owned in raw.items():
        owned = _owned(owned, kind, entry_id)
        if owned <= 0:
            continue
        if not known(entry_id):
            print(f"[save] Warning: unknown {kind} '{entry_id}', skipping")
            continue
        counts[entry_id] = owned
    return counts


def _id_list(raw, kind: str, known) -> list:
    result: list = []
    if not isinstance(raw, list):
        return result
    for entry_id in raw:
        if not known(entry_id):
            print(f"[save] Warning: unknown {kind} '{entry_id}', skipping")
            continue
        if entry_id not in result:
            result.append(entry_id)
    return result


def restore_from_dict(data: dict, catalog: Catalog, now_ms: float) -> Optional[GameState]:
    """Rebuild game state from a save dict. Returns None for invalid data."""
    if not isinstance(data, dict):
        print("[save] Save data is not an object")
        return None
    data = _normalize_keys(data)
    if not _is_number(data.get("strokes")):
        print("[save] Save data has no numeric 'strokes' field")
        return None

    try:
        state = GameState(
            strokes=max(0.0, _number(data, "strokes")),
            total_strokes=max(0.0, _number(data, "total_strokes")),
            total_clicks=max(0, int(_number(data, "total_clicks"))),
            media_tier=int(_number(data, "media_tier")),
            erasure_points=max(0.0, _number(data, "erasure_points")),
            total_erasure_points=max(0.0, _number(data, "total_erasure_points")),
            prestige_count=max(0, int(_number(data, "prestige_count"))),
            lifetime_strokes=max(0.0, _number(data, "lifetime_strokes")),
            play_start_time=_number(data, "play_start_time") or now_ms,
            last_save=max(0.0, _number(data, "last_save")),
        )

        # 1. Owned counts; retired passive upgrades become artists
        raw_upgrades = dict(data.get("upgrades") or {})
        migration = catalog.legacy_migration
        migrated = 0
        for old_id in migration.upgrade_ids:
            migrated += max(0, _owned(raw_upgrades.pop(old_id, 0) or 0, "upgrade", old_id))
        state.upgrades = _counts(raw_upgrades, "upgrade", catalog.has_upgrade)
        state.artists = _counts(data.get("artists"), "artist", catalog.has_artist)
        if migrated > 0:
            target = migration.target_artist
            state.artists[target] = state.artists.get(target, 0) + migrated
            print(f"[save] Migrated {migrated} retired passive upgrade(s) to '{target}'")
        state.prestige_upgrades = _counts(
            data.get("prestige_upgrades"), "prestige upgrade", catalog.has_prestige_upgrade
        )
        for pu in catalog.prestige_upgrades:
            if state.prestige_upgrades.get(pu.id, 0) > pu.max_level:
                state.prestige_upgrades[pu.id] = pu.max_level

        # 2. Unlock lists; the base sword is always present
        state.unlocked_swords = _id_list(data.get("unlocked_swords"), "sword", catalog.has_sword)
        base = catalog.base_sword.id
        if base not in state.unlocked_swords:
            state.unlocked_swords.insert(0, base)
        state.unlocked_achievements = _id_list(
            data.get("unlocked_achievements"), "achievement", catalog.has_achievement
        )

        # 3. Clamp the media tier into the catalog's range
        if not 0 <= state.media_tier <= catalog.max_media_tier:
            print(f"[save] Warning: media tier {state.media_tier} out of range, clamping")
            state.media_tier = min(max(state.media_tier, 0), catalog.max_media_tier)

        # 4. Derived values are rebuilt, never trusted
        state.click_power = economy.base_click_power(state, catalog)
        state.passive_rate = economy.base_passive_rate(state, catalog)
        return state

    except (KeyError, TypeError, ValueError, OverflowError, AttributeError) as e:
        print(f"[save] Error restoring save data: {e}")
        return None


def _try_import_data(encoded: str) -> Optional[dict]:
    """Try to parse import data as raw JSON, then as base64 -> JSON."""
    encoded = encoded.strip()
    try:
        data = json.loads(encoded)
        if isinstance(data, dict):
            return data
    except (json.JSONDecodeError, ValueError):
        pass

    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None

    try:
        data = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(data, dict):
        return data
    return None


def export_save(state: GameState) -> str:
    """Encode the full state as one base64 line."""
    payload = json.dumps(build_save_dict(state), separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def import_save(encoded: str, catalog: Catalog, now_ms: float) -> Optional[GameState]:
    data = _try_import_data(encoded)
    if data is None:
        print("[save] Could not parse import data (not a valid save)")
        return None
    return restore_from_dict(data, catalog, now_ms)


def save_game(state: GameState, path: Path, now_ms: float) -> bool:
    """Write JSON atomically (tmp + rename). Failures are reported, not raised."""
    state.last_save = now_ms
    data = build_save_dict(state)
    tmp_path = path.with_suffix(".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(path)
    except OSError as e:
        print(f"[save] Error saving game: {e}")
        return False
    return True


def load_game(path: Path, catalog: Catalog, now_ms: float) -> Optional[GameState]:
    """Read and restore a save file. Returns None on a missing or corrupt file."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"[save] Error loading save file: {e}")
        return None
    return restore_from_dict(data, catalog, now_ms)


def delete_save(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        print(f"[save] Error deleting save file: {e}")
