from __future__ import annotations

from typing import Callable, Dict

from blinker import Signal


class EventBus:
    """Named blinker signals between the engine and its observers.

    Subscribers are called as ``fn(sender, **payload)`` where sender is the bus.
    """

    def __init__(self) -> None:
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn: Callable) -> None:
        sig = self._signals.setdefault(name, Signal(name))
        # Strong reference so lambdas and bound methods of short-lived objects stay connected.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn: Callable) -> None:
        sig = self._signals.get(name)
        if sig is not None:
            sig.disconnect(fn)

    def emit(self, name: str, /, **payload) -> None:
        # ``name`` is positional-only: payloads carry their own ``name`` key.
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ── Gains & purchases ────────────────────────────────────────────────
EVENT_GAIN = "gain"                          # payload: amount=float, x, y
EVENT_PURCHASE = "purchase"                  # payload: kind=str, id, name, text, count=int, cost=float
EVENT_MEDIA_UPGRADED = "media_upgraded"      # payload: tier=int, id, name, text, cost=float

# ── Unlocks ──────────────────────────────────────────────────────────
EVENT_SWORD_UNLOCKED = "sword_unlocked"              # payload: id, name, text, bonus=float
EVENT_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"  # payload: id, name, text

# ── Prestige & reset ─────────────────────────────────────────────────
EVENT_PRESTIGE_ARMED = "prestige_armed"      # payload: expires_at=float
EVENT_PRESTIGE = "prestige"                  # payload: earned=int, spent=float, count=int, lifetime_strokes=float
EVENT_RESET_ARMED = "reset_armed"            # payload: expires_at=float
EVENT_RESET = "reset"                        # payload: (none)

# ── Persistence ──────────────────────────────────────────────────────
EVENT_OFFLINE_PROGRESS = "offline_progress"  # payload: amount=float, seconds=float, text=str
EVENT_SAVE_IMPORTED = "save_imported"        # payload: (none)
