from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class GameState:
    """The single mutable aggregate for one save slot.

    Only the progression engine mutates it; UI and simulator read fields
    and call engine operations.
    """
    strokes: float = 0.0
    total_strokes: float = 0.0
    total_clicks: int = 0
    click_power: float = 1.0
    passive_rate: float = 0.0

    upgrades: Dict[str, int] = field(default_factory=dict)
    artists: Dict[str, int] = field(default_factory=dict)
    media_tier: int = 0
    unlocked_swords: List[str] = field(default_factory=list)
    unlocked_achievements: List[str] = field(default_factory=list)

    erasure_points: float = 0.0
    total_erasure_points: float = 0.0
    prestige_count: int = 0
    prestige_upgrades: Dict[str, int] = field(default_factory=dict)
    lifetime_strokes: float = 0.0

    # Epoch milliseconds
    play_start_time: float = 0.0
    last_save: float = 0.0

    prestige_confirming: bool = False
    prestige_confirm_timer: float = 0.0
    reset_confirming: bool = False
    reset_confirm_timer: float = 0.0

    def add_strokes(self, amount: float) -> None:
        if amount <= 0.0:
            return
        self.strokes += amount
        self.total_strokes += amount

    def spend_strokes(self, amount: float) -> bool:
        if amount > self.strokes:
            return False
        self.strokes -= amount
        return True

    def upgrade_count(self, upgrade_id: str) -> int:
        return self.upgrades.get(upgrade_id, 0)

    def artist_count(self, artist_id: str) -> int:
        return self.artists.get(artist_id, 0)

    def prestige_level(self, upgrade_id: str) -> int:
        return self.prestige_upgrades.get(upgrade_id, 0)

    def total_artists(self) -> int:
        return sum(self.artists.values())


def new_game_state(now_ms: float, base_sword: str) -> GameState:
    """A fresh run: everything zero, base sword unlocked, play clock started."""
    return GameState(
        unlocked_swords=[base_sword],
        play_start_time=now_ms,
        last_save=now_ms,
    )
