from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class UpgradeKind(str, Enum):
    CLICK = "click"
    # No current catalog entry uses this; kept for old saves and custom catalogs.
    PASSIVE = "passive"


class ConditionKind(str, Enum):
    STAT_AT_LEAST = "stat_at_least"
    ARTISTS_OWNED_AT_LEAST = "artists_owned_at_least"
    SWORDS_UNLOCKED_AT_LEAST = "swords_unlocked_at_least"
    ACHIEVEMENTS_AT_LEAST = "achievements_at_least"
    ELAPSED_PLAY_AT_LEAST = "elapsed_play_at_least"
    ALL = "all"
    ANY = "any"


class PrestigeEffect(str, Enum):
    ALL_PRODUCTION = "all_production"
    CLICK_POWER = "click_power"
    PASSIVE_OUTPUT = "passive_output"
    STARTING_TIER = "starting_tier"
    KEEP_SWORDS = "keep_swords"
    HEAD_START = "head_start"


# Effects that scale output as (1 + level * value).
MULTIPLICATIVE_EFFECTS = (
    PrestigeEffect.ALL_PRODUCTION,
    PrestigeEffect.CLICK_POWER,
    PrestigeEffect.PASSIVE_OUTPUT,
)


@dataclass(frozen=True)
class UpgradeEffect:
    kind: UpgradeKind
    value: float


@dataclass(frozen=True)
class ClickUpgradeDef:
    id: str
    name: str
    base_cost: float
    effect: UpgradeEffect
    desc: str = ""


@dataclass(frozen=True)
class ArtistDef:
    """A passive generator. Production per owned unit is ``base_rate`` strokes/s."""
    id: str
    name: str
    base_cost: float
    base_rate: float
    desc: str = ""


@dataclass(frozen=True)
class MediaTierDef:
    id: str
    name: str
    multiplier: float
    cost: float
    desc: str = ""


@dataclass(frozen=True)
class SwordDef:
    id: str
    name: str
    threshold: float
    bonus: float  # percent
    desc: str = ""


@dataclass(frozen=True)
class AchievementCondition:
    """Tagged predicate over game state.

    ``stat_at_least`` reads ``field``; the count variants compare a
    cardinality against ``threshold``; ``elapsed_play_at_least`` compares
    seconds since play start; ``all``/``any`` combine ``conditions``.
    """
    kind: ConditionKind
    threshold: float = 0.0
    field: str = ""
    conditions: Tuple["AchievementCondition", ...] = ()


@dataclass(frozen=True)
class AchievementDef:
    id: str
    name: str
    condition: AchievementCondition
    desc: str = ""


@dataclass(frozen=True)
class PrestigeUpgradeDef:
    """Permanent meta-upgrade bought with erasure points.

    ``value`` is the per-level rate for multiplicative effects, the tier
    index for ``starting_tier`` and the artists granted per level for
    ``head_start``.
    """
    id: str
    name: str
    base_cost: float
    max_level: int
    effect: PrestigeEffect
    value: float = 0.0
    desc: str = ""


@dataclass(frozen=True)
class LegacyMigration:
    """Maps retired passive upgrade ids onto an artist when loading old saves."""
    upgrade_ids: Tuple[str, ...] = ()
    target_artist: str = ""


@dataclass(frozen=True)
class EconomyConstants:
    cost_scale: float = 1.12
    artist_cost_scale: float = 1.15
    prestige_cost_scale: float = 1.5
    prestige_threshold: float = 10_000_000
    erasure_divisor: float = 1_000_000
