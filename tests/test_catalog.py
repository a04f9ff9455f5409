import json

import pytest

from swordclick.catalog import default_catalog, default_catalog_path, load_catalog
from swordclick.errors import CatalogLoadError, CatalogValidationError, UnknownCatalogId
from swordclick.types import ConditionKind, PrestigeEffect, UpgradeKind


def _raw_catalog():
    return json.loads(default_catalog_path().read_text(encoding="utf-8"))


def _write(tmp_path, raw):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(raw), encoding="utf-8")
    return path


def test_bundled_catalog_loads():
    cat = default_catalog()
    assert len(cat.media_tiers) == 7
    assert len(cat.swords) == 10
    assert len(cat.artists) == 8
    assert len(cat.upgrades) == 3
    assert cat.base_sword.id == "butterKnife"
    assert cat.media_tier(0).cost == 0
    assert cat.max_media_tier == 6
    assert cat.head_start_artist == "doodler"
    assert cat.legacy_migration.target_artist == "doodler"


def test_default_catalog_is_cached():
    assert default_catalog() is default_catalog()


def test_catalog_entries_are_typed():
    cat = default_catalog()
    assert cat.upgrade("finePoint").effect.kind is UpgradeKind.CLICK
    assert cat.upgrade("finePoint").effect.value == 3
    assert cat.prestige_upgrade("portfolio").effect is PrestigeEffect.KEEP_SWORDS
    assert cat.achievement("drawnOut").condition.kind is ConditionKind.ELAPSED_PLAY_AT_LEAST
    assert cat.achievement("drawnOut").condition.threshold == 1800


def test_unknown_ids_raise():
    cat = default_catalog()
    with pytest.raises(UnknownCatalogId) as exc:
        cat.artist("picasso")
    assert exc.value.kind == "artist"
    assert exc.value.entry_id == "picasso"
    assert "picasso" in str(exc.value)
    # Also usable where a KeyError is expected
    with pytest.raises(KeyError):
        cat.sword("spoon")
    with pytest.raises(UnknownCatalogId):
        cat.media_tier(7)
    with pytest.raises(UnknownCatalogId):
        cat.media_tier(-1)


def test_has_predicates():
    cat = default_catalog()
    assert cat.has_artist("bobRoss")
    assert not cat.has_artist("artStudent")
    assert cat.has_prestige_upgrade("inkReserves")
    assert not cat.has_upgrade("doodler")


def test_missing_file_is_load_error(tmp_path):
    with pytest.raises(CatalogLoadError):
        load_catalog(tmp_path / "nope.json")


def test_invalid_json_is_load_error(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogLoadError):
        load_catalog(path)


def test_duplicate_id_rejected(tmp_path):
    raw = _raw_catalog()
    raw["artists"].append(dict(raw["artists"][0]))
    with pytest.raises(CatalogValidationError):
        load_catalog(_write(tmp_path, raw))


def test_unordered_swords_rejected(tmp_path):
    raw = _raw_catalog()
    raw["swords"][1], raw["swords"][2] = raw["swords"][2], raw["swords"][1]
    with pytest.raises(CatalogValidationError):
        load_catalog(_write(tmp_path, raw))


def test_first_media_tier_must_be_free(tmp_path):
    raw = _raw_catalog()
    raw["media_tiers"][0]["cost"] = 5
    with pytest.raises(CatalogValidationError):
        load_catalog(_write(tmp_path, raw))


def test_unknown_stat_field_rejected(tmp_path):
    raw = _raw_catalog()
    raw["achievements"][0]["condition"]["field"] = "vibes"
    with pytest.raises(CatalogValidationError):
        load_catalog(_write(tmp_path, raw))


def test_missing_required_key_rejected(tmp_path):
    raw = _raw_catalog()
    del raw["artists"][0]["base_rate"]
    with pytest.raises(CatalogValidationError):
        load_catalog(_write(tmp_path, raw))


def test_compound_condition_parsed(tmp_path):
    raw = _raw_catalog()
    raw["achievements"].append({
        "id": "wellRounded",
        "name": "Well Rounded",
        "condition": {
            "kind": "all",
            "conditions": [
                {"kind": "artists_owned_at_least", "threshold": 5},
                {"kind": "any", "conditions": [
                    {"kind": "stat_at_least", "field": "media_tier", "threshold": 2},
                    {"kind": "swords_unlocked_at_least", "threshold": 4},
                ]},
            ],
        },
    })
    cat = load_catalog(_write(tmp_path, raw))
    cond = cat.achievement("wellRounded").condition
    assert cond.kind is ConditionKind.ALL
    assert len(cond.conditions) == 2
    assert cond.conditions[1].kind is ConditionKind.ANY


def test_empty_compound_condition_rejected(tmp_path):
    raw = _raw_catalog()
    raw["achievements"][0]["condition"] = {"kind": "any", "conditions": []}
    with pytest.raises(CatalogValidationError):
        load_catalog(_write(tmp_path, raw))


def test_bad_migration_target_rejected(tmp_path):
    raw = _raw_catalog()
    raw["legacy_migration"]["target_artist"] = "ghost"
    with pytest.raises(CatalogValidationError):
        load_catalog(_write(tmp_path, raw))


def test_multiplicative_prestige_upgrade_needs_value(tmp_path):
    raw = _raw_catalog()
    del raw["prestige_upgrades"][0]["value"]
    with pytest.raises(CatalogValidationError):
        load_catalog(_write(tmp_path, raw))
