"""Static game content: media tiers, swords, artists, upgrades, achievements.

Everything is loaded once from ``catalog_data.json`` (or a replacement file)
and never mutated afterwards. Game state refers to entries by id only; the
lookup helpers raise :class:`UnknownCatalogId` instead of returning None.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from swordclick.errors import CatalogLoadError, CatalogValidationError, UnknownCatalogId
from swordclick.types import (
    AchievementCondition,
    AchievementDef,
    ArtistDef,
    ClickUpgradeDef,
    ConditionKind,
    EconomyConstants,
    LegacyMigration,
    MULTIPLICATIVE_EFFECTS,
    MediaTierDef,
    PrestigeEffect,
    PrestigeUpgradeDef,
    SwordDef,
    UpgradeEffect,
    UpgradeKind,
)

# GameState fields a ``stat_at_least`` condition may read.
STAT_FIELDS = (
    "strokes",
    "total_strokes",
    "total_clicks",
    "media_tier",
    "prestige_count",
    "lifetime_strokes",
    "erasure_points",
    "total_erasure_points",
)


def default_catalog_path() -> Path:
    return Path(__file__).resolve().parent / "catalog_data.json"


class Catalog:
    def __init__(
        self,
        media_tiers: Iterable[MediaTierDef],
        swords: Iterable[SwordDef],
        artists: Iterable[ArtistDef],
        upgrades: Iterable[ClickUpgradeDef],
        achievements: Iterable[AchievementDef],
        prestige_upgrades: Iterable[PrestigeUpgradeDef],
        constants: EconomyConstants = EconomyConstants(),
        head_start_artist: str = "",
        legacy_migration: LegacyMigration = LegacyMigration(),
    ) -> None:
        self.media_tiers: Tuple[MediaTierDef, ...] = tuple(media_tiers)
        self.swords: Tuple[SwordDef, ...] = tuple(swords)
        self.artists: Tuple[ArtistDef, ...] = tuple(artists)
        self.upgrades: Tuple[ClickUpgradeDef, ...] = tuple(upgrades)
        self.achievements: Tuple[AchievementDef, ...] = tuple(achievements)
        self.prestige_upgrades: Tuple[PrestigeUpgradeDef, ...] = tuple(prestige_upgrades)
        self.constants = constants
        self.legacy_migration = legacy_migration

        self._swords_by_id = _index("sword", self.swords)
        self._artists_by_id = _index("artist", self.artists)
        self._upgrades_by_id = _index("upgrade", self.upgrades)
        self._achievements_by_id = _index("achievement", self.achievements)
        self._prestige_by_id = _index("prestige upgrade", self.prestige_upgrades)
        _index("media tier", self.media_tiers)

        if not head_start_artist and self.artists:
            head_start_artist = self.artists[0].id
        self.head_start_artist = head_start_artist
        self._validate()

    # ── Lookups ──────────────────────────────────────────────────────

    def sword(self, sword_id: str) -> SwordDef:
        try:
            return self._swords_by_id[sword_id]
        except KeyError:
            raise UnknownCatalogId("sword", sword_id) from None

    def artist(self, artist_id: str) -> ArtistDef:
        try:
            return self._artists_by_id[artist_id]
        except KeyError:
            raise UnknownCatalogId("artist", artist_id) from None

    def upgrade(self, upgrade_id: str) -> ClickUpgradeDef:
        try:
            return self._upgrades_by_id[upgrade_id]
        except KeyError:
            raise UnknownCatalogId("upgrade", upgrade_id) from None

    def achievement(self, achievement_id: str) -> AchievementDef:
        try:
            return self._achievements_by_id[achievement_id]
        except KeyError:
            raise UnknownCatalogId("achievement", achievement_id) from None

    def prestige_upgrade(self, upgrade_id: str) -> PrestigeUpgradeDef:
        try:
            return self._prestige_by_id[upgrade_id]
        except KeyError:
            raise UnknownCatalogId("prestige upgrade", upgrade_id) from None

    def media_tier(self, index: int) -> MediaTierDef:
        if index < 0 or index >= len(self.media_tiers):
            raise UnknownCatalogId("media tier", str(index))
        return self.media_tiers[index]

    def has_sword(self, sword_id: str) -> bool:
        return sword_id in self._swords_by_id

    def has_artist(self, artist_id: str) -> bool:
        return artist_id in self._artists_by_id

    def has_upgrade(self, upgrade_id: str) -> bool:
        return upgrade_id in self._upgrades_by_id

    def has_achievement(self, achievement_id: str) -> bool:
        return achievement_id in self._achievements_by_id

    def has_prestige_upgrade(self, upgrade_id: str) -> bool:
        return upgrade_id in self._prestige_by_id

    @property
    def base_sword(self) -> SwordDef:
        return self.swords[0]

    @property
    def max_media_tier(self) -> int:
        return len(self.media_tiers) - 1

    # ── Validation ───────────────────────────────────────────────────

    def _validate(self) -> None:
        if not self.media_tiers:
            raise CatalogValidationError("catalog defines no media tiers")
        if not self.swords:
            raise CatalogValidationError("catalog defines no swords")
        if self.media_tiers[0].cost != 0:
            raise CatalogValidationError("the first media tier must cost 0")
        if self.swords[0].threshold != 0:
            raise CatalogValidationError("the base sword must have threshold 0")

        previous = self.media_tiers[0]
        for tier in self.media_tiers[1:]:
            if tier.multiplier < previous.multiplier or tier.cost < previous.cost:
                raise CatalogValidationError(
                    f"media tier '{tier.id}' is out of order after '{previous.id}'"
                )
            previous = tier

        thresholds = [s.threshold for s in self.swords]
        if thresholds != sorted(thresholds):
            raise CatalogValidationError("swords must be ordered by threshold")

        for artist in self.artists:
            if artist.base_cost <= 0 or artist.base_rate < 0:
                raise CatalogValidationError(f"artist '{artist.id}' has invalid cost/rate")
        for upgrade in self.upgrades:
            if upgrade.base_cost <= 0:
                raise CatalogValidationError(f"upgrade '{upgrade.id}' has invalid cost")
        for pu in self.prestige_upgrades:
            if pu.base_cost <= 0 or pu.max_level < 1:
                raise CatalogValidationError(f"prestige upgrade '{pu.id}' has invalid cost/max level")
            if pu.effect in MULTIPLICATIVE_EFFECTS and pu.value <= 0:
                raise CatalogValidationError(f"prestige upgrade '{pu.id}' needs a positive per-level value")
            if pu.effect is PrestigeEffect.STARTING_TIER and not 0 <= int(pu.value) <= self.max_media_tier:
                raise CatalogValidationError(f"prestige upgrade '{pu.id}' starts at an unknown tier")

        uses_head_start = any(pu.effect is PrestigeEffect.HEAD_START for pu in self.prestige_upgrades)
        if uses_head_start and not self.has_artist(self.head_start_artist):
            raise CatalogValidationError(
                f"head start artist '{self.head_start_artist}' is not defined"
            )
        target = self.legacy_migration.target_artist
        if self.legacy_migration.upgrade_ids and not self.has_artist(target):
            raise CatalogValidationError(f"legacy migration target '{target}' is not defined")

        c = self.constants
        if c.cost_scale <= 1 or c.artist_cost_scale <= 1 or c.prestige_cost_scale <= 1:
            raise CatalogValidationError("cost scales must be greater than 1")
        if c.prestige_threshold <= 0 or c.erasure_divisor <= 0:
            raise CatalogValidationError("prestige threshold and erasure divisor must be positive")


def _index(kind: str, entries) -> Dict[str, object]:
    result: Dict[str, object] = {}
    for entry in entries:
        if entry.id in result:
            raise CatalogValidationError(f"duplicate {kind} id '{entry.id}'")
        result[entry.id] = entry
    return result


# ── Loading ──────────────────────────────────────────────────────────

def _parse_condition(raw: dict) -> AchievementCondition:
    try:
        kind = ConditionKind(raw["kind"])
    except (KeyError, ValueError) as e:
        raise CatalogValidationError(f"invalid achievement condition {raw!r}") from e

    if kind in (ConditionKind.ALL, ConditionKind.ANY):
        children = raw.get("conditions", [])
        if not children:
            raise CatalogValidationError(f"'{kind.value}' condition needs sub-conditions")
        return AchievementCondition(
            kind=kind, conditions=tuple(_parse_condition(c) for c in children)
        )

    field_name = raw.get("field", "")
    if kind is ConditionKind.STAT_AT_LEAST and field_name not in STAT_FIELDS:
        raise CatalogValidationError(f"unknown stat field '{field_name}'")
    return AchievementCondition(
        kind=kind, threshold=float(raw.get("threshold", 0)), field=field_name
    )


def _parse_catalog(raw: dict) -> Catalog:
    consts = raw.get("constants", {})
    defaults = EconomyConstants()
    constants = EconomyConstants(
        cost_scale=float(consts.get("cost_scale", defaults.cost_scale)),
        artist_cost_scale=float(consts.get("artist_cost_scale", defaults.artist_cost_scale)),
        prestige_cost_scale=float(consts.get("prestige_cost_scale", defaults.prestige_cost_scale)),
        prestige_threshold=float(consts.get("prestige_threshold", defaults.prestige_threshold)),
        erasure_divisor=float(consts.get("erasure_divisor", defaults.erasure_divisor)),
    )

    media_tiers = [
        MediaTierDef(
            id=m["id"],
            name=m["name"],
            multiplier=float(m["multiplier"]),
            cost=float(m["cost"]),
            desc=m.get("desc", ""),
        )
        for m in raw.get("media_tiers", [])
    ]
    swords = [
        SwordDef(
            id=s["id"],
            name=s["name"],
            threshold=float(s["threshold"]),
            bonus=float(s.get("bonus", 0)),
            desc=s.get("desc", ""),
        )
        for s in raw.get("swords", [])
    ]
    artists = [
        ArtistDef(
            id=a["id"],
            name=a["name"],
            base_cost=float(a["base_cost"]),
            base_rate=float(a["base_rate"]),
            desc=a.get("desc", ""),
        )
        for a in raw.get("artists", [])
    ]
    upgrades = [
        ClickUpgradeDef(
            id=u["id"],
            name=u["name"],
            base_cost=float(u["base_cost"]),
            effect=UpgradeEffect(
                kind=UpgradeKind(u["effect"].get("kind", "click")),
                value=float(u["effect"]["value"]),
            ),
            desc=u.get("desc", ""),
        )
        for u in raw.get("upgrades", [])
    ]
    achievements = [
        AchievementDef(
            id=a["id"],
            name=a["name"],
            condition=_parse_condition(a["condition"]),
            desc=a.get("desc", ""),
        )
        for a in raw.get("achievements", [])
    ]
    prestige_upgrades = [
        PrestigeUpgradeDef(
            id=p["id"],
            name=p["name"],
            base_cost=float(p["base_cost"]),
            max_level=int(p.get("max_level", 1)),
            effect=PrestigeEffect(p["effect"]),
            value=float(p.get("value", 0)),
            desc=p.get("desc", ""),
        )
        for p in raw.get("prestige_upgrades", [])
    ]
    legacy = raw.get("legacy_migration", {})
    return Catalog(
        media_tiers=media_tiers,
        swords=swords,
        artists=artists,
        upgrades=upgrades,
        achievements=achievements,
        prestige_upgrades=prestige_upgrades,
        constants=constants,
        head_start_artist=raw.get("head_start_artist", ""),
        legacy_migration=LegacyMigration(
            upgrade_ids=tuple(legacy.get("upgrade_ids", [])),
            target_artist=legacy.get("target_artist", ""),
        ),
    )


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """Load and validate a catalog file. Raises CatalogError on bad content."""
    if path is None:
        path = default_catalog_path()
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogLoadError(f"cannot read catalog {path}: {e}") from e
    if not isinstance(raw, dict):
        raise CatalogLoadError(f"catalog {path} is not a JSON object")
    try:
        return _parse_catalog(raw)
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogValidationError(f"malformed catalog entry in {path}: {e!r}") from e


_default_catalog: Optional[Catalog] = None


def default_catalog() -> Catalog:
    """Return the bundled catalog, loading it on first use."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = load_catalog()
    return _default_catalog
