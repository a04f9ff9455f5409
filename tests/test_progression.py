import pytest

from swordclick.errors import UnknownCatalogId
from swordclick.events import (
    EVENT_ACHIEVEMENT_UNLOCKED,
    EVENT_GAIN,
    EVENT_MEDIA_UPGRADED,
    EVENT_PURCHASE,
    EVENT_SWORD_UNLOCKED,
)
from swordclick.save import build_save_dict
from tests.helpers import record_events


def test_new_state_defaults(engine, clock):
    state = engine.new_state()
    assert state.strokes == 0
    assert state.click_power == 1
    assert state.passive_rate == 0
    assert state.unlocked_swords == ["butterKnife"]
    assert state.play_start_time == clock()


def test_clicks_then_first_upgrade(engine, state):
    events = record_events(engine.bus, EVENT_GAIN, EVENT_ACHIEVEMENT_UNLOCKED)
    for _ in range(10):
        engine.click(state)
    assert state.strokes == 10
    assert state.total_strokes == 10
    assert state.total_clicks == 10
    assert "firstStroke" in state.unlocked_achievements
    assert sum(1 for name, _ in events if name == EVENT_ACHIEVEMENT_UNLOCKED) == 1

    assert engine.buy_upgrade(state, "pencilSharpener")
    assert state.strokes == 0
    assert state.upgrade_count("pencilSharpener") == 1
    assert state.click_power == 2

    assert engine.click(state) == 2
    assert state.strokes == 2
    assert engine.last_gain == 2


def test_click_reports_position(engine, state):
    events = record_events(engine.bus, EVENT_GAIN)
    engine.click(state, x=12.0, y=34.0)
    assert events == [(EVENT_GAIN, {"amount": 1.0, "x": 12.0, "y": 34.0})]


def test_hire_and_tick(engine, state):
    state.add_strokes(15)
    assert engine.buy_artist(state, "doodler")
    assert state.strokes == 0
    assert state.passive_rate == 1
    for _ in range(10):
        engine.tick(state, 0.1)
    assert state.strokes == pytest.approx(1.0)
    assert state.total_strokes == pytest.approx(16.0)


def test_tick_without_generators_is_noop(engine, state):
    assert engine.tick(state, 5.0) == 0
    assert state.strokes == 0
    assert state.total_strokes == 0


def test_failed_purchase_leaves_state_unchanged(engine, state):
    state.add_strokes(9)
    before = build_save_dict(state)
    events = record_events(engine.bus, EVENT_PURCHASE, EVENT_MEDIA_UPGRADED)
    assert not engine.buy_upgrade(state, "pencilSharpener")
    assert not engine.buy_artist(state, "doodler")
    assert not engine.buy_media_tier(state)
    assert build_save_dict(state) == before
    assert events == []


def test_purchase_event_payload(engine, state):
    events = record_events(engine.bus, EVENT_PURCHASE)
    state.add_strokes(100)
    engine.buy_artist(state, "doodler")
    engine.buy_artist(state, "doodler")
    name, payload = events[-1]
    assert payload["kind"] == "artist"
    assert payload["id"] == "doodler"
    assert payload["count"] == 2
    assert payload["cost"] == 17
    assert state.strokes == 100 - 15 - 17


def test_passive_rate_matches_owned_artists(engine, state):
    state.add_strokes(10_000)
    for artist_id in ("doodler", "doodler", "sketchArtist", "caricaturist", "doodler"):
        assert engine.buy_artist(state, artist_id)
    assert state.passive_rate == 3 * 1 + 5 + 25


def test_unknown_id_raises(engine, state):
    state.add_strokes(1_000)
    with pytest.raises(UnknownCatalogId):
        engine.buy_artist(state, "artStudent")
    with pytest.raises(UnknownCatalogId):
        engine.buy_upgrade(state, "sketchPad")
    assert state.strokes == 1_000


def test_media_tier_purchase(engine, state):
    state.add_strokes(99)
    assert not engine.buy_media_tier(state)
    assert state.media_tier == 0

    events = record_events(engine.bus, EVENT_MEDIA_UPGRADED)
    state.add_strokes(1)
    assert engine.buy_media_tier(state)
    assert state.media_tier == 1
    assert state.strokes == 0
    assert "cuttingEdge" in state.unlocked_achievements
    assert engine.effective_click_power(state) == pytest.approx(3.0)
    assert events[0][1]["tier"] == 1
    assert events[0][1]["id"] == "charcoal"


def test_media_tier_stops_at_max(engine, state):
    state.media_tier = 6
    state.add_strokes(1e12)
    assert not engine.buy_media_tier(state)
    assert state.media_tier == 6
    assert state.strokes == 1e12


def test_sword_unlocks_are_idempotent(engine, state):
    events = record_events(engine.bus, EVENT_SWORD_UNLOCKED)
    state.add_strokes(600)
    assert engine.check_sword_unlocks(state) == ["letterOpener", "broadsword"]
    assert engine.check_sword_unlocks(state) == []
    assert state.unlocked_swords == ["butterKnife", "letterOpener", "broadsword"]
    assert [payload["id"] for _, payload in events] == ["letterOpener", "broadsword"]
    assert events[1][1]["bonus"] == 5


def test_sword_unlocks_follow_lifetime_not_balance(engine, state):
    state.add_strokes(60)
    state.spend_strokes(60)
    engine.check_sword_unlocks(state)
    assert "letterOpener" in state.unlocked_swords


def test_achievements_are_idempotent(engine, state):
    engine.click(state)
    assert engine.check_achievements(state) == []
    assert state.unlocked_achievements.count("firstStroke") == 1


def test_time_played_achievement_uses_engine_clock(engine, state, clock):
    clock.advance(1799)
    engine.update(state, 0.1)
    assert "drawnOut" not in state.unlocked_achievements
    clock.advance(1)
    engine.update(state, 0.1)
    assert "drawnOut" in state.unlocked_achievements


def test_artist_count_achievement(engine, state):
    state.add_strokes(1e6)
    for _ in range(9):
        engine.buy_artist(state, "doodler")
    assert "artOfWar" not in state.unlocked_achievements
    engine.buy_artist(state, "sketchArtist")
    assert "artOfWar" in state.unlocked_achievements


def test_advance_counts_whole_actions(engine, state):
    gain = engine.advance(state, 0, 7.5)
    assert gain == pytest.approx(7.5)
    assert state.total_clicks == 7
    assert engine.advance(state, 5.0) == 0


def test_advance_uses_rates_from_before_the_jump(engine, state):
    state.artists = {"doodler": 1}
    engine.recalc_passive_rate(state)
    state.add_strokes(45)
    # 10 passive + 10 clicks crosses the Letter Opener threshold (50, +2%)
    gain = engine.advance(state, 10.0, 10)
    assert gain == pytest.approx(20.0)
    assert state.total_strokes == pytest.approx(65.0)
    assert "letterOpener" in state.unlocked_swords
    assert engine.advance(state, 1.0, 1) == pytest.approx(2 * 1.02)


def test_recalc_click_power_resums_upgrades(engine, state):
    state.upgrades = {"pencilSharpener": 2, "calligraphy": 1}
    engine.recalc_click_power(state)
    assert state.click_power == 13


def test_strokes_never_negative_across_mixed_actions(engine, state):
    actions = [
        lambda: engine.click(state),
        lambda: engine.buy_artist(state, "doodler"),
        lambda: engine.buy_upgrade(state, "pencilSharpener"),
        lambda: engine.tick(state, 0.1),
        lambda: engine.buy_media_tier(state),
        lambda: engine.buy_upgrade(state, "calligraphy"),
        lambda: engine.advance(state, 0.5, 4),
        lambda: engine.buy_artist(state, "sketchArtist"),
        lambda: engine.tick(state, 2.5),
    ]
    for round_no in range(60):
        for action in actions:
            action()
            assert state.strokes >= 0
            assert state.total_strokes >= state.strokes
        if round_no % 10 == 0:
            state.spend_strokes(state.strokes)
            assert state.strokes == 0
    assert state.total_artists() > 0
