from swordclick.events import EventBus


def test_emit_reaches_subscribers():
    bus = EventBus()
    seen = []
    bus.subscribe("ping", lambda sender, **payload: seen.append((sender, payload)))
    bus.emit("ping", value=3)
    assert seen == [(bus, {"value": 3})]


def test_emit_without_subscribers_is_noop():
    EventBus().emit("nobody_listens", value=1)


def test_unsubscribe():
    bus = EventBus()
    seen = []

    def handler(sender, **payload):
        seen.append(payload)

    bus.subscribe("ping", handler)
    bus.unsubscribe("ping", handler)
    bus.unsubscribe("never_subscribed", handler)
    bus.emit("ping", value=1)
    assert seen == []


def test_bound_methods_stay_connected():
    bus = EventBus()
    seen = []

    class Listener:
        def on_ping(self, sender, **payload):
            seen.append(payload["value"])

    bus.subscribe("ping", Listener().on_ping)
    bus.emit("ping", value=5)
    assert seen == [5]


def test_payload_may_carry_a_name_key():
    bus = EventBus()
    seen = []
    bus.subscribe("purchase", lambda sender, **payload: seen.append(payload))
    bus.emit("purchase", id="doodler", name="Doodler", count=1)
    assert seen == [{"id": "doodler", "name": "Doodler", "count": 1}]
