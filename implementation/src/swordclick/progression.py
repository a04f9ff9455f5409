"""Progression engine: every mutation of GameState goes through here.

Each operation takes the state explicitly, either applies fully or leaves
the state untouched, and reports what happened to observers through the
event bus. Time comes from the injected clock (epoch milliseconds) so the
headless simulator can run the same rules on simulated time.
"""
from __future__ import annotations

from dataclasses import fields
from enum import Enum
import time
from typing import Callable, List, Optional, Union

from swordclick import economy
from swordclick.achievements import condition_met
from swordclick.catalog import Catalog, default_catalog
from swordclick.config import Settings
from swordclick.events import (
    EVENT_ACHIEVEMENT_UNLOCKED,
    EVENT_GAIN,
    EVENT_MEDIA_UPGRADED,
    EVENT_OFFLINE_PROGRESS,
    EVENT_PRESTIGE,
    EVENT_PRESTIGE_ARMED,
    EVENT_PURCHASE,
    EVENT_RESET,
    EVENT_RESET_ARMED,
    EVENT_SWORD_UNLOCKED,
    EventBus,
)
from swordclick.formatting import describe_duration, format_number
from swordclick.state import GameState, new_game_state
from swordclick.types import ArtistDef, ClickUpgradeDef, PrestigeUpgradeDef, UpgradeKind

# Offline gaps shorter than this are treated as a page refresh.
OFFLINE_MIN_MS = 1000


class ConfirmResult(Enum):
    IGNORED = "ignored"
    ARMED = "armed"
    EXECUTED = "executed"


def wall_clock_ms() -> float:
    return time.time() * 1000.0


def _overwrite(state: GameState, source: GameState) -> None:
    for f in fields(GameState):
        setattr(state, f.name, getattr(source, f.name))


class Engine:
    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()
        self.settings = settings if settings is not None else Settings()
        self.bus = bus if bus is not None else EventBus()
        self.clock = clock if clock is not None else wall_clock_ms
        # Amount credited by the most recent manual action (floating "+N" text)
        self.last_gain = 0.0

    def new_state(self) -> GameState:
        return new_game_state(self.clock(), self.catalog.base_sword.id)

    # ── Queries ──────────────────────────────────────────────────────

    def effective_click_power(self, state: GameState) -> float:
        return economy.effective_click_power(state, self.catalog)

    def effective_passive_rate(self, state: GameState) -> float:
        return economy.effective_passive_rate(state, self.catalog)

    def total_multiplier(self, state: GameState) -> float:
        return economy.total_multiplier(state, self.catalog)

    def cost_of(self, entry: economy.Purchasable, state: GameState) -> float:
        return economy.cost_of(entry, state, self.catalog)

    def can_prestige(self, state: GameState) -> bool:
        return economy.can_prestige(state, self.catalog)

    def pending_erasure_points(self, state: GameState) -> int:
        return economy.pending_erasure_points(state, self.catalog)

    # ── Income ───────────────────────────────────────────────────────

    def click(self, state: GameState, x: Optional[float] = None, y: Optional[float] = None) -> float:
        """One manual action. Always succeeds; returns the strokes gained."""
        gain = economy.effective_click_power(state, self.catalog)
        state.add_strokes(gain)
        state.total_clicks += 1
        self.last_gain = gain
        self.bus.emit(EVENT_GAIN, amount=gain, x=x, y=y)
        self._check_unlocks(state)
        return gain

    def advance(self, state: GameState, seconds: float, actions: float = 0.0) -> float:
        """Credit ``seconds`` of passive production plus ``actions`` manual actions.

        Both gains use the rates in force before the jump; unlocks earned
        during it only apply afterwards.
        """
        passive = 0.0
        if state.passive_rate > 0 and seconds > 0:
            passive = economy.effective_passive_rate(state, self.catalog) * seconds
        clicks = 0.0
        if actions > 0:
            clicks = economy.effective_click_power(state, self.catalog) * actions
            state.total_clicks += int(actions)
        state.add_strokes(passive + clicks)
        self._check_unlocks(state)
        return passive + clicks

    def tick(self, state: GameState, seconds: float) -> float:
        """Passive production for ``seconds``. No-op without any generators."""
        if state.passive_rate <= 0 or seconds <= 0:
            return 0.0
        gain = economy.effective_passive_rate(state, self.catalog) * seconds
        state.add_strokes(gain)
        self._check_unlocks(state)
        return gain

    def update(self, state: GameState, seconds: float) -> None:
        """One scheduler period: tick, then expire stale confirmations."""
        self.tick(state, seconds)
        self.expire_confirmations(state)
        # Elapsed-time achievements unlock even when nothing is produced
        self.check_achievements(state)

    # ── Purchases ────────────────────────────────────────────────────

    def buy_upgrade(self, state: GameState, upgrade: Union[str, ClickUpgradeDef]) -> bool:
        if isinstance(upgrade, str):
            upgrade = self.catalog.upgrade(upgrade)
        cost = economy.upgrade_cost(upgrade, state, self.catalog)
        if not state.spend_strokes(cost):
            return False
        count = state.upgrade_count(upgrade.id) + 1
        state.upgrades[upgrade.id] = count
        if upgrade.effect.kind is UpgradeKind.CLICK:
            state.click_power += upgrade.effect.value
        else:
            self.recalc_passive_rate(state)
        self.bus.emit(EVENT_PURCHASE, kind="upgrade", id=upgrade.id, name=upgrade.name,
                      text=upgrade.desc, count=count, cost=cost)
        self.check_achievements(state)
        return True

    def buy_artist(self, state: GameState, artist: Union[str, ArtistDef]) -> bool:
        if isinstance(artist, str):
            artist = self.catalog.artist(artist)
        cost = economy.artist_cost(artist, state, self.catalog)
        if not state.spend_strokes(cost):
            return False
        count = state.artist_count(artist.id) + 1
        state.artists[artist.id] = count
        self.recalc_passive_rate(state)
        self.bus.emit(EVENT_PURCHASE, kind="artist", id=artist.id, name=artist.name,
                      text=artist.desc, count=count, cost=cost)
        self.check_achievements(state)
        return True

    def buy_media_tier(self, state: GameState) -> bool:
        """Advance exactly one media tier."""
        tier = economy.next_media_tier(state, self.catalog)
        if tier is None:
            return False
        if not state.spend_strokes(tier.cost):
            return False
        state.media_tier += 1
        self.bus.emit(EVENT_MEDIA_UPGRADED, tier=state.media_tier, id=tier.id, name=tier.name,
                      text=tier.desc, cost=tier.cost)
        self.check_achievements(state)
        return True

    def buy_prestige_upgrade(self, state: GameState, upgrade: Union[str, PrestigeUpgradeDef]) -> bool:
        if isinstance(upgrade, str):
            upgrade = self.catalog.prestige_upgrade(upgrade)
        level = state.prestige_level(upgrade.id)
        if level >= upgrade.max_level:
            return False
        cost = economy.prestige_upgrade_cost(upgrade, state, self.catalog)
        if state.erasure_points < cost:
            return False
        state.erasure_points -= cost
        state.prestige_upgrades[upgrade.id] = level + 1
        self.bus.emit(EVENT_PURCHASE, kind="prestige_upgrade", id=upgrade.id, name=upgrade.name,
                      text=upgrade.desc, count=level + 1, cost=cost)
        return True

    def auto_spend_erasure_points(self, state: GameState) -> float:
        """Greedy: buy the cheapest affordable prestige level until none is affordable."""
        spent = 0.0
        while True:
            best: Optional[PrestigeUpgradeDef] = None
            best_cost = 0.0
            for pu in self.catalog.prestige_upgrades:
                if state.prestige_level(pu.id) >= pu.max_level:
                    continue
                cost = economy.prestige_upgrade_cost(pu, state, self.catalog)
                if cost > state.erasure_points:
                    continue
                if best is None or cost < best_cost:
                    best, best_cost = pu, cost
            if best is None:
                return spent
            self.buy_prestige_upgrade(state, best)
            spent += best_cost

    # ── Derived rates ────────────────────────────────────────────────

    def recalc_passive_rate(self, state: GameState) -> None:
        state.passive_rate = economy.base_passive_rate(state, self.catalog)

    def recalc_click_power(self, state: GameState) -> None:
        state.click_power = economy.base_click_power(state, self.catalog)

    # ── Unlocks ──────────────────────────────────────────────────────

    def check_sword_unlocks(self, state: GameState) -> List[str]:
        unlocked: List[str] = []
        for sword in self.catalog.swords:
            if sword.id in state.unlocked_swords:
                continue
            if state.total_strokes >= sword.threshold:
                state.unlocked_swords.append(sword.id)
                unlocked.append(sword.id)
                self.bus.emit(EVENT_SWORD_UNLOCKED, id=sword.id, name=sword.name,
                              text=sword.desc, bonus=sword.bonus)
        return unlocked

    def check_achievements(self, state: GameState) -> List[str]:
        now = self.clock()
        unlocked: List[str] = []
        for ach in self.catalog.achievements:
            if ach.id in state.unlocked_achievements:
                continue
            if condition_met(ach.condition, state, now):
                state.unlocked_achievements.append(ach.id)
                unlocked.append(ach.id)
                self.bus.emit(EVENT_ACHIEVEMENT_UNLOCKED, id=ach.id, name=ach.name, text=ach.desc)
        return unlocked

    def _check_unlocks(self, state: GameState) -> None:
        self.check_sword_unlocks(state)
        self.check_achievements(state)

    # ── Prestige ─────────────────────────────────────────────────────

    def request_prestige(self, state: GameState) -> ConfirmResult:
        """First call arms the confirmation, a second call inside the window executes."""
        if not economy.can_prestige(state, self.catalog):
            return ConfirmResult.IGNORED
        now = self.clock()
        if state.prestige_confirming and now <= state.prestige_confirm_timer:
            if self.execute_prestige(state) > 0:
                return ConfirmResult.EXECUTED
            return ConfirmResult.IGNORED
        state.prestige_confirming = True
        state.prestige_confirm_timer = now + self.settings.prestige_confirm_ms
        self.bus.emit(EVENT_PRESTIGE_ARMED, expires_at=state.prestige_confirm_timer)
        return ConfirmResult.ARMED

    def cancel_prestige(self, state: GameState) -> None:
        state.prestige_confirming = False
        state.prestige_confirm_timer = 0.0

    def execute_prestige(self, state: GameState) -> int:
        """Convert this run into erasure points and start a new run.

        Returns the points earned; 0 means the prestige was aborted and the
        state is unchanged apart from the cleared confirmation flag.
        """
        earned = economy.pending_erasure_points(state, self.catalog)
        if earned <= 0:
            self.cancel_prestige(state)
            return 0

        state.erasure_points += earned
        state.total_erasure_points += earned
        spent = 0.0
        if self.settings.auto_spend_prestige:
            spent = self.auto_spend_erasure_points(state)

        base_sword = self.catalog.base_sword.id
        if economy.keeps_swords(state, self.catalog):
            swords = list(state.unlocked_swords)
        else:
            swords = [base_sword]
        start_tier = economy.starting_media_tier(state, self.catalog)
        head_start = economy.head_start_count(state, self.catalog)

        fresh = new_game_state(state.play_start_time, base_sword)
        fresh.erasure_points = state.erasure_points
        fresh.total_erasure_points = state.total_erasure_points
        fresh.prestige_count = state.prestige_count + 1
        fresh.prestige_upgrades = dict(state.prestige_upgrades)
        fresh.lifetime_strokes = state.lifetime_strokes + state.total_strokes
        fresh.unlocked_achievements = list(state.unlocked_achievements)
        fresh.unlocked_swords = swords
        fresh.last_save = state.last_save
        fresh.media_tier = start_tier
        if head_start > 0:
            fresh.artists[self.catalog.head_start_artist] = head_start
        _overwrite(state, fresh)
        self.recalc_passive_rate(state)

        self.bus.emit(EVENT_PRESTIGE, earned=earned, spent=spent, count=state.prestige_count,
                      lifetime_strokes=state.lifetime_strokes)
        self.check_achievements(state)
        return earned

    # ── Hard reset ───────────────────────────────────────────────────

    def request_reset(self, state: GameState) -> ConfirmResult:
        now = self.clock()
        if state.reset_confirming and now <= state.reset_confirm_timer:
            self.reset(state)
            return ConfirmResult.EXECUTED
        state.reset_confirming = True
        state.reset_confirm_timer = now + self.settings.reset_confirm_ms
        self.bus.emit(EVENT_RESET_ARMED, expires_at=state.reset_confirm_timer)
        return ConfirmResult.ARMED

    def cancel_reset(self, state: GameState) -> None:
        state.reset_confirming = False
        state.reset_confirm_timer = 0.0

    def reset(self, state: GameState) -> None:
        """Wipe everything, prestige progress included."""
        _overwrite(state, self.new_state())
        self.bus.emit(EVENT_RESET)

    def expire_confirmations(self, state: GameState) -> None:
        now = self.clock()
        if state.prestige_confirming and now > state.prestige_confirm_timer:
            self.cancel_prestige(state)
        if state.reset_confirming and now > state.reset_confirm_timer:
            self.cancel_reset(state)

    # ── Offline progress ─────────────────────────────────────────────

    def apply_offline_progress(self, state: GameState, elapsed_ms: float) -> float:
        if state.passive_rate <= 0 or elapsed_ms <= OFFLINE_MIN_MS:
            return 0.0
        seconds = economy.offline_seconds(elapsed_ms, self.settings.max_offline_hours)
        amount = economy.offline_gain(state, self.catalog, elapsed_ms, self.settings.max_offline_hours)
        if amount <= 0:
            return 0.0
        state.add_strokes(amount)
        text = (f"Welcome back! Earned {format_number(amount)} Strokes "
                f"while away ({describe_duration(seconds)})")
        self.bus.emit(EVENT_OFFLINE_PROGRESS, amount=amount, seconds=seconds, text=text)
        self._check_unlocks(state)
        return amount
