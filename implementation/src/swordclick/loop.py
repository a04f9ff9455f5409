from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from swordclick.catalog import Catalog
from swordclick.config import load_settings
from swordclick.events import (
    EVENT_MEDIA_UPGRADED,
    EVENT_PRESTIGE,
    EVENT_PURCHASE,
    EVENT_RESET,
    EVENT_SAVE_IMPORTED,
)
from swordclick.progression import Engine
from swordclick.save import delete_save, import_save, load_game, save_game
from swordclick.state import GameState

Action = Callable[[GameState], object]


class GameLoop:
    """Drives an engine in real time for an interactive front end.

    ``step(dt)`` is called once per frame with the elapsed wall time in
    seconds. Ticks fire at the engine's fixed tick rate; actions submitted
    by the UI are applied after the ticks of the same step. The state is
    auto-saved periodically and after purchases, prestige and reset.
    """

    def __init__(self, engine: Engine, save_path: Optional[Path] = None) -> None:
        self.engine = engine
        self.save_path = save_path if save_path is not None else engine.settings.resolved_save_path()
        self.state: GameState = engine.new_state()
        self._tick_accumulator = 0.0
        self._save_accumulator = 0.0
        self._pending: List[Action] = []
        self._save_requested = False
        self._reset_requested = False

        bus = engine.bus
        bus.subscribe(EVENT_PURCHASE, self._on_progress)
        bus.subscribe(EVENT_MEDIA_UPGRADED, self._on_progress)
        bus.subscribe(EVENT_PRESTIGE, self._on_progress)
        bus.subscribe(EVENT_RESET, self._on_reset)

    @classmethod
    def from_settings(
        cls,
        settings_path: Optional[Path] = None,
        catalog: Optional[Catalog] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "GameLoop":
        """Build a loop whose engine uses the settings file (defaults when missing)."""
        return cls(Engine(catalog, load_settings(settings_path), clock=clock))

    @property
    def tick_interval(self) -> float:
        return self.engine.settings.tick_rate_ms / 1000.0

    def start(self) -> GameState:
        """Load the save (or start fresh) and credit offline production."""
        now = self.engine.clock()
        loaded = load_game(self.save_path, self.engine.catalog, now)
        if loaded is not None:
            self.state = loaded
            if loaded.last_save > 0:
                self.engine.apply_offline_progress(loaded, now - loaded.last_save)
            self.engine.check_sword_unlocks(self.state)
            self.engine.check_achievements(self.state)
        else:
            self.state = self.engine.new_state()
        return self.state

    def submit(self, action: Action) -> None:
        """Queue a UI action; it runs after the next step's ticks."""
        self._pending.append(action)

    def step(self, dt: float) -> None:
        """Accumulate time and fire ticks at the configured rate."""
        interval = self.tick_interval
        self._tick_accumulator += dt
        while self._tick_accumulator >= interval:
            self._tick_accumulator -= interval
            self.engine.update(self.state, interval)

        pending, self._pending = self._pending, []
        for action in pending:
            action(self.state)

        self._save_accumulator += dt * 1000.0
        if self._save_accumulator >= self.engine.settings.save_interval_ms:
            self._save_accumulator = 0.0
            self._save_requested = True
        self._flush_saves()

    def import_text(self, encoded: str) -> bool:
        """Replace the current state with an imported save. False if rejected."""
        imported = import_save(encoded, self.engine.catalog, self.engine.clock())
        if imported is None:
            return False
        self.state = imported
        self.engine.bus.emit(EVENT_SAVE_IMPORTED)
        self._save_requested = True
        self._flush_saves()
        return True

    def save(self) -> bool:
        return save_game(self.state, self.save_path, self.engine.clock())

    def shutdown(self) -> None:
        self.save()

    def _flush_saves(self) -> None:
        if self._reset_requested:
            self._reset_requested = False
            delete_save(self.save_path)
            self._save_requested = True
        if self._save_requested:
            self._save_requested = False
            self._save_accumulator = 0.0
            self.save()

    def _on_progress(self, sender, **payload) -> None:
        self._save_requested = True

    def _on_reset(self, sender, **payload) -> None:
        self._reset_requested = True
