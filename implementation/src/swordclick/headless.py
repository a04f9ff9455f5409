"""Headless simulator: plays the game with a purchase strategy, no UI.

The simulator drives the same progression engine the interactive game
uses, on a simulated clock. It jumps analytically over waiting periods
instead of ticking, so an hour of play takes milliseconds. Every engine
event observed during the run is recorded on a timeline for the report.

Loop per step:
  1. snapshot every 5 simulated minutes
  2. prestige when eligible and under the prestige cap
  3. otherwise buy the strategy's pick among affordable candidates
  4. with nothing affordable, fast-forward toward the cheapest candidate
     (at most 10 minutes per jump); zero income halts the run
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Dict, List, Optional

from swordclick import economy
from swordclick.catalog import Catalog, default_catalog
from swordclick.config import Settings
from swordclick.events import (
    EVENT_ACHIEVEMENT_UNLOCKED,
    EVENT_MEDIA_UPGRADED,
    EVENT_PRESTIGE,
    EVENT_PURCHASE,
    EVENT_SWORD_UNLOCKED,
    EventBus,
)
from swordclick.formatting import format_number
from swordclick.progression import Engine
from swordclick.rng import DEFAULT_SEED, RNG
from swordclick.state import GameState
from swordclick.types import PrestigeEffect

STRATEGIES = ("optimal", "cheapest", "idle", "human")

IDLE_CPS = 0.5
CLOSE_CALL_ROI_DELTA = 0.15
HUMAN_REACTION_DELAY_MIN = 0.35
HUMAN_REACTION_DELAY_MAX = 1.2

SNAPSHOT_INTERVAL_SECS = 300
DEAD_ZONE_SECS = 120
MAX_FAST_FORWARD_SECS = 600
NO_TARGET_STEP_SECS = 60
MIN_WAIT_SECS = 0.001

BUY_MILESTONES = frozenset((1, 5, 10, 25, 50, 100, 200, 500))


class RunPhase(str, Enum):
    EARLY = "early"
    MID = "mid"
    LATE = "late"


PHASE_DESCRIPTIONS = {
    RunPhase.EARLY: "Minimal tools. Build rhythm with deliberate strokes.",
    RunPhase.MID: "The floor is busy. Throughput matters now.",
    RunPhase.LATE: "The run bends toward ritual and transcendence.",
}


@dataclass
class SimConfig:
    minutes: float = 60.0
    strategy: str = "optimal"
    clicks_per_second: float = 3.0
    max_prestiges: int = 1
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValueError(f"unknown strategy '{self.strategy}' (expected one of {', '.join(STRATEGIES)})")
        if self.minutes < 0 or self.clicks_per_second < 0 or self.max_prestiges < 0:
            raise ValueError("minutes, clicks per second and prestiges must not be negative")


@dataclass
class Candidate:
    kind: str  # "upgrade" | "artist" | "media"
    id: str
    name: str
    cost: float
    roi: float  # added strokes/sec per stroke spent


@dataclass
class SimEvent:
    sim_time: float
    tag: str
    label: str
    detail: str = ""
    ref: str = ""  # catalog id the event is about, if any
    data: Dict[str, object] = field(default_factory=dict)


@dataclass
class Snapshot:
    time: float
    strokes: float
    click_power: float
    effective_click_power: float
    passive_rate: float
    effective_passive_rate: float
    total_income: float
    passive_fraction: float
    media_tier: int
    artist_count: int
    phase: RunPhase
    prestige_count: int


@dataclass
class DeadZone:
    start: float
    end: float
    waiting_for: str


@dataclass
class SimResult:
    config: SimConfig
    events: List[SimEvent]
    snapshots: List[Snapshot]
    dead_zones: List[DeadZone]
    final_state: GameState
    duration_secs: float
    decision_moments: int
    close_call_moments: int
    purchases: int
    prestige_times: List[float]
    stalled: bool = False


# ── Pure helpers ─────────────────────────────────────────────────────

def run_phase(state: GameState, catalog: Catalog) -> RunPhase:
    late = (
        state.total_strokes >= catalog.constants.prestige_threshold
        or state.media_tier >= 4
        or state.total_strokes >= 1_000_000
        or state.prestige_count > 0
    )
    if late:
        return RunPhase.LATE
    if state.total_strokes >= 20_000 or state.total_clicks >= 250 or state.media_tier >= 2:
        return RunPhase.MID
    return RunPhase.EARLY


def clicks_per_second(config: SimConfig, sim_time: float) -> float:
    if config.strategy == "idle":
        return IDLE_CPS
    base = config.clicks_per_second
    if config.strategy == "human":
        # Slow deterministic rhythm around the target rate
        return max(0.1, base * (0.9 + 0.2 * math.sin(sim_time / 45)))
    return base


def total_income_rate(state: GameState, catalog: Catalog, cps: float) -> float:
    return (economy.effective_passive_rate(state, catalog)
            + economy.effective_click_power(state, catalog) * cps)


def passive_fraction(state: GameState, catalog: Catalog, cps: float) -> float:
    total = total_income_rate(state, catalog, cps)
    if total == 0:
        return 0.0
    return economy.effective_passive_rate(state, catalog) / total


def purchase_candidates(state: GameState, catalog: Catalog, cps: float) -> List[Candidate]:
    """Every upgrade and artist plus the next media tier, with its ROI."""
    candidates: List[Candidate] = []
    mult = economy.total_multiplier(state, catalog)
    click_factor = economy.prestige_factor(state, catalog, PrestigeEffect.CLICK_POWER)
    passive_factor = economy.prestige_factor(state, catalog, PrestigeEffect.PASSIVE_OUTPUT)

    for upgrade in catalog.upgrades:
        cost = economy.upgrade_cost(upgrade, state, catalog)
        added = upgrade.effect.value * mult * click_factor * cps
        candidates.append(Candidate("upgrade", upgrade.id, upgrade.name, cost,
                                    added / cost if cost > 0 else 0.0))

    for artist in catalog.artists:
        cost = economy.artist_cost(artist, state, catalog)
        added = artist.base_rate * mult * passive_factor
        candidates.append(Candidate("artist", artist.id, artist.name, cost,
                                    added / cost if cost > 0 else 0.0))

    tier = economy.next_media_tier(state, catalog)
    if tier is not None:
        current = economy.media_multiplier(state, catalog)
        added = total_income_rate(state, catalog, cps) * (tier.multiplier / current - 1)
        candidates.append(Candidate("media", tier.id, tier.name, tier.cost,
                                    added / tier.cost if tier.cost > 0 else 0.0))
    return candidates


def _cheapest(candidates: List[Candidate]) -> Candidate:
    best = candidates[0]
    for c in candidates[1:]:
        if c.cost < best.cost:
            best = c
    return best


def select_candidate(affordable: List[Candidate], strategy: str, rng: RNG) -> Candidate:
    if strategy == "cheapest":
        return _cheapest(affordable)
    if strategy == "human":
        ranked = sorted(affordable, key=lambda c: (-c.roi, c.cost))
        best = ranked[0]
        floor = best.roi * (1 - CLOSE_CALL_ROI_DELTA) if best.roi > 0 else -math.inf
        near_best = [c for c in ranked if c.roi >= floor]
        if len(near_best) == 1:
            return near_best[0]
        roll = rng.random()
        if roll < 0.6:
            return near_best[0]
        if roll < 0.85:
            return near_best[1]
        return _cheapest(near_best)
    # optimal / idle: highest ROI, first wins ties
    best = affordable[0]
    for c in affordable[1:]:
        if c.roi > best.roi:
            best = c
    return best


def is_buy_milestone(count: int) -> bool:
    return count in BUY_MILESTONES or (count >= 1000 and count % 500 == 0)


def is_close_call(affordable: List[Candidate]) -> bool:
    ranked = sorted(affordable, key=lambda c: -c.roi)
    top, second = ranked[0], ranked[1]
    gap = abs(top.roi - second.roi) / max(abs(top.roi), 1e-9)
    return gap <= CLOSE_CALL_ROI_DELTA


class SimulatedClock:
    """Engine clock reading simulated seconds as epoch milliseconds."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self.start_ms = start_ms
        self.sim_time = 0.0

    def __call__(self) -> float:
        return self.start_ms + self.sim_time * 1000.0

    def advance(self, secs: float) -> None:
        self.sim_time += secs


# ── Simulator ────────────────────────────────────────────────────────

class Simulator:
    def __init__(self, config: SimConfig, catalog: Optional[Catalog] = None) -> None:
        self.config = config
        self.catalog = catalog if catalog is not None else default_catalog()
        self.clock = SimulatedClock()
        self.rng = RNG(config.seed)
        self.engine = Engine(self.catalog, Settings(auto_spend_prestige=True), EventBus(), self.clock)
        self.state = self.engine.new_state()

        self.events: List[SimEvent] = []
        self.snapshots: List[Snapshot] = []
        self.dead_zones: List[DeadZone] = []
        self.prestige_times: List[float] = []

        bus = self.engine.bus
        bus.subscribe(EVENT_PURCHASE, self._on_purchase)
        bus.subscribe(EVENT_MEDIA_UPGRADED, self._on_media)
        bus.subscribe(EVENT_SWORD_UNLOCKED, self._on_sword)
        bus.subscribe(EVENT_ACHIEVEMENT_UNLOCKED, self._on_achievement)
        bus.subscribe(EVENT_PRESTIGE, self._on_prestige)

    @property
    def sim_time(self) -> float:
        return self.clock.sim_time

    def _log(self, tag: str, label: str, detail: str = "", ref: str = "", **data) -> None:
        self.events.append(SimEvent(self.sim_time, tag, label, detail, ref, dict(data)))

    # ── Event recording ──────────────────────────────────────────────

    def _on_purchase(self, sender, kind, id, name, text, count, cost) -> None:
        if not is_buy_milestone(count):
            return
        if kind == "upgrade":
            self._log("BUY", f"{name} ×{count}",
                      f"cost {format_number(cost)} · click power now {format_number(self.state.click_power)}",
                      ref=id)
        elif kind == "artist":
            rate = self.catalog.artist(id).base_rate
            self._log("HIRE", f"{name} ×{count}",
                      f"cost {format_number(cost)} · passive +{format_number(rate)}/s"
                      f" · total {format_number(self.state.passive_rate)}/s base",
                      ref=id)

    def _on_media(self, sender, tier, id, name, text, cost) -> None:
        multiplier = self.catalog.media_tier(tier).multiplier
        self._log("MEDIA", f"{name} (tier {tier})",
                  f"cost {format_number(cost)} · multiplier ×{format_number(multiplier)}",
                  ref=id, tier=tier)

    def _on_sword(self, sender, id, name, text, bonus) -> None:
        threshold = self.catalog.sword(id).threshold
        if threshold <= 0:
            return
        self._log("SWORD", name,
                  f"unlocked at {format_number(threshold)} total strokes · +{bonus:g}% production",
                  ref=id)

    def _on_achievement(self, sender, id, name, text) -> None:
        self._log("ACHIEVE", name, text, ref=id)

    def _on_prestige(self, sender, earned, spent, count, lifetime_strokes) -> None:
        summary = prestige_upgrade_summary(self.state, self.catalog)
        self._log("PRESTIGE", f"Ascension #{count}",
                  f"+{earned} EP earned · {spent:g} EP spent · Upgrades: {summary or 'none'}",
                  keeps_swords=economy.keeps_swords(self.state, self.catalog),
                  start_tier=self.state.media_tier)

    # ── Main loop ────────────────────────────────────────────────────

    def _snapshot(self, cps: float) -> None:
        s, cat = self.state, self.catalog
        self.snapshots.append(Snapshot(
            time=self.sim_time,
            strokes=s.strokes,
            click_power=s.click_power,
            effective_click_power=economy.effective_click_power(s, cat),
            passive_rate=s.passive_rate,
            effective_passive_rate=economy.effective_passive_rate(s, cat),
            total_income=total_income_rate(s, cat, cps),
            passive_fraction=passive_fraction(s, cat, cps),
            media_tier=s.media_tier,
            artist_count=s.total_artists(),
            phase=run_phase(s, cat),
            prestige_count=s.prestige_count,
        ))

    def _advance(self, secs: float, cps: float) -> None:
        """Credit ``secs`` of passive production and clicking, then move the clock."""
        self.clock.advance(secs)
        self.engine.advance(self.state, secs, cps * secs)

    def _buy(self, candidate: Candidate) -> bool:
        if candidate.kind == "upgrade":
            return self.engine.buy_upgrade(self.state, candidate.id)
        if candidate.kind == "artist":
            return self.engine.buy_artist(self.state, candidate.id)
        return self.engine.buy_media_tier(self.state)

    def _start_label(self) -> str:
        cfg = self.config
        if cfg.strategy == "idle":
            return f"{IDLE_CPS:g} clicks/sec (idle — minimal engagement)"
        if cfg.strategy == "human":
            return (f"{cfg.clicks_per_second:g} clicks/sec target "
                    "(human profile: variance + reaction delay + near-best ROI)")
        return f"{cfg.clicks_per_second:g} clicks/sec"

    def run(self) -> SimResult:
        cfg = self.config
        cat = self.catalog
        max_time = cfg.minutes * 60.0

        self._log("START", "Game begins", f"strategy: {cfg.strategy} · {self._start_label()}")
        self.engine.check_sword_unlocks(self.state)

        prev_phase = run_phase(self.state, cat)
        dead_zone_start: Optional[float] = None
        dead_zone_target = ""
        decision_moments = 0
        close_calls = 0
        purchases = 0
        last_snapshot = -math.inf
        stalled = False

        while self.sim_time < max_time:
            cps = clicks_per_second(cfg, self.sim_time)
            if self.sim_time - last_snapshot >= SNAPSHOT_INTERVAL_SECS:
                self._snapshot(cps)
                last_snapshot = self.sim_time

            if economy.can_prestige(self.state, cat) and self.state.prestige_count < cfg.max_prestiges:
                started = self.sim_time
                if self.engine.execute_prestige(self.state) > 0:
                    self.prestige_times.append(started)
                    dead_zone_start = None
                    prev_phase = run_phase(self.state, cat)
                    continue

            candidates = purchase_candidates(self.state, cat, cps)
            affordable = [c for c in candidates if c.cost <= self.state.strokes]

            if affordable:
                if dead_zone_start is not None:
                    if self.sim_time - dead_zone_start > DEAD_ZONE_SECS:
                        self.dead_zones.append(DeadZone(dead_zone_start, self.sim_time, dead_zone_target))
                    dead_zone_start = None

                if len(affordable) >= 2:
                    decision_moments += 1
                    if is_close_call(affordable):
                        close_calls += 1
                purchases += 1

                self._buy(select_candidate(affordable, cfg.strategy, self.rng))
                if cfg.strategy == "human":
                    delay = self.rng.uniform(HUMAN_REACTION_DELAY_MIN, HUMAN_REACTION_DELAY_MAX)
                    delay = min(delay, max(0.0, max_time - self.sim_time))
                    if delay > 0:
                        self._advance(delay, clicks_per_second(cfg, self.sim_time))
            else:
                reachable = [c for c in candidates if c.cost > 0]
                if not reachable:
                    self.clock.advance(NO_TARGET_STEP_SECS)
                    continue

                target = _cheapest(reachable)
                rate = total_income_rate(self.state, cat, cps)
                if rate <= 0:
                    self._log("STUCK", "No income — cannot progress",
                              "needs at least one click or artist")
                    stalled = True
                    break

                wait = max((target.cost - self.state.strokes) / rate, MIN_WAIT_SECS)
                if dead_zone_start is None and wait > DEAD_ZONE_SECS:
                    dead_zone_start = self.sim_time
                    dead_zone_target = target.name

                step = min(wait, max_time - self.sim_time, MAX_FAST_FORWARD_SECS)
                self._advance(step, cps)
                if step < wait:
                    continue

            phase = run_phase(self.state, cat)
            if phase is not prev_phase:
                self._log("PHASE", f"Phase → {phase.value.upper()}", PHASE_DESCRIPTIONS[phase],
                          phase=phase.value)
                prev_phase = phase

        self._snapshot(clicks_per_second(cfg, self.sim_time))
        return SimResult(
            config=cfg,
            events=self.events,
            snapshots=self.snapshots,
            dead_zones=self.dead_zones,
            final_state=self.state,
            duration_secs=self.sim_time,
            decision_moments=decision_moments,
            close_call_moments=close_calls,
            purchases=purchases,
            prestige_times=self.prestige_times,
            stalled=stalled,
        )


def prestige_upgrade_summary(state: GameState, catalog: Catalog) -> str:
    parts = []
    for pu in catalog.prestige_upgrades:
        level = state.prestige_level(pu.id)
        if level > 0:
            parts.append(f"{pu.name} ×{level}")
    return ", ".join(parts)


def simulate(config: SimConfig, catalog: Optional[Catalog] = None) -> SimResult:
    return Simulator(config, catalog).run()
