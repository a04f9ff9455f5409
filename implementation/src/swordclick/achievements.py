from __future__ import annotations

from swordclick.state import GameState
from swordclick.types import AchievementCondition, ConditionKind


def condition_met(condition: AchievementCondition, state: GameState, now_ms: float) -> bool:
    """Evaluate a tagged achievement condition against the current state."""
    kind = condition.kind
    if kind is ConditionKind.STAT_AT_LEAST:
        return float(getattr(state, condition.field)) >= condition.threshold
    if kind is ConditionKind.ARTISTS_OWNED_AT_LEAST:
        return state.total_artists() >= condition.threshold
    if kind is ConditionKind.SWORDS_UNLOCKED_AT_LEAST:
        return len(state.unlocked_swords) >= condition.threshold
    if kind is ConditionKind.ACHIEVEMENTS_AT_LEAST:
        return len(state.unlocked_achievements) >= condition.threshold
    if kind is ConditionKind.ELAPSED_PLAY_AT_LEAST:
        return (now_ms - state.play_start_time) / 1000.0 >= condition.threshold
    if kind is ConditionKind.ALL:
        return all(condition_met(c, state, now_ms) for c in condition.conditions)
    if kind is ConditionKind.ANY:
        return any(condition_met(c, state, now_ms) for c in condition.conditions)
    raise ValueError(f"unhandled condition kind {kind!r}")
