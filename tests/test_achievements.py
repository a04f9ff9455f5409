import pytest

from swordclick.achievements import condition_met
from swordclick.state import new_game_state
from swordclick.types import AchievementCondition, ConditionKind

START = 1_000_000.0


def _state():
    return new_game_state(START, "butterKnife")


def _cond(kind, threshold=0.0, field="", conditions=()):
    return AchievementCondition(kind=kind, threshold=threshold, field=field, conditions=conditions)


def test_stat_threshold():
    cond = _cond(ConditionKind.STAT_AT_LEAST, 1000, "total_strokes")
    state = _state()
    state.add_strokes(999)
    assert not condition_met(cond, state, START)
    state.add_strokes(1)
    assert condition_met(cond, state, START)


def test_counts():
    state = _state()
    state.artists = {"doodler": 4, "sketchArtist": 6}
    state.unlocked_swords.append("letterOpener")
    state.unlocked_achievements = ["firstStroke"]
    assert condition_met(_cond(ConditionKind.ARTISTS_OWNED_AT_LEAST, 10), state, START)
    assert condition_met(_cond(ConditionKind.SWORDS_UNLOCKED_AT_LEAST, 2), state, START)
    assert not condition_met(_cond(ConditionKind.SWORDS_UNLOCKED_AT_LEAST, 3), state, START)
    assert condition_met(_cond(ConditionKind.ACHIEVEMENTS_AT_LEAST, 1), state, START)


def test_elapsed_play_time():
    cond = _cond(ConditionKind.ELAPSED_PLAY_AT_LEAST, 1800)
    state = _state()
    assert not condition_met(cond, state, START + 1_799_000)
    assert condition_met(cond, state, START + 1_800_000)


def test_compound_conditions():
    state = _state()
    state.media_tier = 2
    tier = _cond(ConditionKind.STAT_AT_LEAST, 2, "media_tier")
    clicks = _cond(ConditionKind.STAT_AT_LEAST, 50, "total_clicks")
    assert not condition_met(_cond(ConditionKind.ALL, conditions=(tier, clicks)), state, START)
    assert condition_met(_cond(ConditionKind.ANY, conditions=(tier, clicks)), state, START)
    state.total_clicks = 50
    assert condition_met(_cond(ConditionKind.ALL, conditions=(tier, clicks)), state, START)


def test_unhandled_kind_raises():
    with pytest.raises(ValueError):
        condition_met(_cond("bogus"), _state(), START)
