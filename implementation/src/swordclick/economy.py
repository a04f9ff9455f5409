"""Pure economy queries: costs, multipliers, effective rates, prestige yield.

Nothing in here mutates state. Bonus composition:

    total      = media multiplier * (1 + sword bonus% / 100) * all-production factor
    click gain = click_power  * total * click factor
    passive    = passive_rate * total * passive factor

where each prestige factor is the product of (1 + level * value) over the
prestige upgrades carrying that effect.
"""
from __future__ import annotations

import math
from typing import Union

from swordclick.catalog import Catalog
from swordclick.state import GameState
from swordclick.types import (
    ArtistDef,
    ClickUpgradeDef,
    MediaTierDef,
    PrestigeEffect,
    PrestigeUpgradeDef,
    UpgradeKind,
)

Purchasable = Union[ClickUpgradeDef, ArtistDef, MediaTierDef, PrestigeUpgradeDef]

MS_PER_HOUR = 3_600_000


# ── Costs ────────────────────────────────────────────────────────────

def upgrade_cost(upgrade: ClickUpgradeDef, state: GameState, catalog: Catalog) -> float:
    owned = state.upgrade_count(upgrade.id)
    return math.floor(upgrade.base_cost * catalog.constants.cost_scale ** owned)


def artist_cost(artist: ArtistDef, state: GameState, catalog: Catalog) -> float:
    owned = state.artist_count(artist.id)
    return math.floor(artist.base_cost * catalog.constants.artist_cost_scale ** owned)


def prestige_upgrade_cost(upgrade: PrestigeUpgradeDef, state: GameState, catalog: Catalog) -> float:
    level = state.prestige_level(upgrade.id)
    return math.floor(upgrade.base_cost * catalog.constants.prestige_cost_scale ** level)


def cost_of(entry: Purchasable, state: GameState, catalog: Catalog) -> float:
    """Next-unit cost of any purchasable catalog entry."""
    if isinstance(entry, ClickUpgradeDef):
        return upgrade_cost(entry, state, catalog)
    if isinstance(entry, ArtistDef):
        return artist_cost(entry, state, catalog)
    if isinstance(entry, PrestigeUpgradeDef):
        return prestige_upgrade_cost(entry, state, catalog)
    if isinstance(entry, MediaTierDef):
        return entry.cost
    raise TypeError(f"not a purchasable catalog entry: {entry!r}")


def next_media_tier(state: GameState, catalog: Catalog) -> MediaTierDef | None:
    if state.media_tier >= catalog.max_media_tier:
        return None
    return catalog.media_tier(state.media_tier + 1)


# ── Multipliers ──────────────────────────────────────────────────────

def media_multiplier(state: GameState, catalog: Catalog) -> float:
    return catalog.media_tier(state.media_tier).multiplier


def sword_bonus(state: GameState, catalog: Catalog) -> float:
    """Sum of the bonus percentages of every unlocked sword."""
    return sum(catalog.sword(sid).bonus for sid in state.unlocked_swords)


def prestige_factor(state: GameState, catalog: Catalog, effect: PrestigeEffect) -> float:
    factor = 1.0
    for pu in catalog.prestige_upgrades:
        if pu.effect is effect:
            factor *= 1.0 + state.prestige_level(pu.id) * pu.value
    return factor


def total_multiplier(state: GameState, catalog: Catalog) -> float:
    return (
        media_multiplier(state, catalog)
        * (1.0 + sword_bonus(state, catalog) / 100.0)
        * prestige_factor(state, catalog, PrestigeEffect.ALL_PRODUCTION)
    )


def effective_click_power(state: GameState, catalog: Catalog) -> float:
    return (
        state.click_power
        * total_multiplier(state, catalog)
        * prestige_factor(state, catalog, PrestigeEffect.CLICK_POWER)
    )


def effective_passive_rate(state: GameState, catalog: Catalog) -> float:
    return (
        state.passive_rate
        * total_multiplier(state, catalog)
        * prestige_factor(state, catalog, PrestigeEffect.PASSIVE_OUTPUT)
    )


def artist_production(artist: ArtistDef, state: GameState, catalog: Catalog) -> float:
    """Display value: what the owned units of one artist type produce per second."""
    return artist.base_rate * state.artist_count(artist.id) * total_multiplier(state, catalog)


# ── Base rates (full resummation) ────────────────────────────────────

def base_passive_rate(state: GameState, catalog: Catalog) -> float:
    rate = 0.0
    for artist in catalog.artists:
        rate += artist.base_rate * state.artist_count(artist.id)
    for upgrade in catalog.upgrades:
        if upgrade.effect.kind is UpgradeKind.PASSIVE:
            rate += upgrade.effect.value * state.upgrade_count(upgrade.id)
    return rate


def base_click_power(state: GameState, catalog: Catalog) -> float:
    power = 1.0
    for upgrade in catalog.upgrades:
        if upgrade.effect.kind is UpgradeKind.CLICK:
            power += upgrade.effect.value * state.upgrade_count(upgrade.id)
    return power


# ── Prestige ─────────────────────────────────────────────────────────

def erasure_points_for(total_strokes: float, divisor: float = 1_000_000) -> int:
    """floor(sqrt(total / divisor)); zero below one divisor's worth of strokes."""
    if total_strokes < divisor:
        return 0
    return int(math.floor(math.sqrt(total_strokes / divisor)))


def pending_erasure_points(state: GameState, catalog: Catalog) -> int:
    return erasure_points_for(state.total_strokes, catalog.constants.erasure_divisor)


def can_prestige(state: GameState, catalog: Catalog) -> bool:
    return state.total_strokes >= catalog.constants.prestige_threshold


def starting_media_tier(state: GameState, catalog: Catalog) -> int:
    tier = 0
    for pu in catalog.prestige_upgrades:
        if pu.effect is PrestigeEffect.STARTING_TIER and state.prestige_level(pu.id) > 0:
            tier = max(tier, int(pu.value))
    return tier


def keeps_swords(state: GameState, catalog: Catalog) -> bool:
    return any(
        state.prestige_level(pu.id) > 0
        for pu in catalog.prestige_upgrades
        if pu.effect is PrestigeEffect.KEEP_SWORDS
    )


def head_start_count(state: GameState, catalog: Catalog) -> int:
    count = 0.0
    for pu in catalog.prestige_upgrades:
        if pu.effect is PrestigeEffect.HEAD_START:
            count += state.prestige_level(pu.id) * (pu.value or 1.0)
    return int(count)


# ── Offline progress ─────────────────────────────────────────────────

def offline_seconds(elapsed_ms: float, max_offline_hours: float) -> float:
    capped = min(max(elapsed_ms, 0.0), max_offline_hours * MS_PER_HOUR)
    return capped / 1000.0


def offline_gain(state: GameState, catalog: Catalog, elapsed_ms: float,
                 max_offline_hours: float = 8) -> float:
    return offline_seconds(elapsed_ms, max_offline_hours) * effective_passive_rate(state, catalog)
