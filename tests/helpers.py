from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from swordclick.catalog import Catalog, default_catalog
from swordclick.config import Settings
from swordclick.events import EventBus
from swordclick.progression import Engine
from swordclick.types import EconomyConstants

START_MS = 1_700_000_000_000.0


class FakeClock:
    """Manually advanced engine clock in epoch milliseconds."""

    def __init__(self, now_ms: float = START_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, secs: float) -> None:
        self.now_ms += secs * 1000.0


def make_engine(clock: Optional[FakeClock] = None, catalog: Optional[Catalog] = None,
                **settings) -> Engine:
    return Engine(
        catalog if catalog is not None else default_catalog(),
        Settings(**settings),
        EventBus(),
        clock if clock is not None else FakeClock(),
    )


def record_events(bus: EventBus, *names: str) -> List[Tuple[str, Dict]]:
    """Subscribe to ``names`` and collect (name, payload) pairs as they fire."""
    captured: List[Tuple[str, Dict]] = []
    for name in names:
        def _capture(sender, _name=name, **payload):
            captured.append((_name, payload))
        bus.subscribe(name, _capture)
    return captured


def catalog_with_constants(**overrides) -> Catalog:
    """The bundled catalog with some economy constants replaced."""
    base = default_catalog()
    consts = base.constants
    values = {
        "cost_scale": consts.cost_scale,
        "artist_cost_scale": consts.artist_cost_scale,
        "prestige_cost_scale": consts.prestige_cost_scale,
        "prestige_threshold": consts.prestige_threshold,
        "erasure_divisor": consts.erasure_divisor,
    }
    values.update(overrides)
    return Catalog(
        media_tiers=base.media_tiers,
        swords=base.swords,
        artists=base.artists,
        upgrades=base.upgrades,
        achievements=base.achievements,
        prestige_upgrades=base.prestige_upgrades,
        constants=EconomyConstants(**values),
        head_start_artist=base.head_start_artist,
        legacy_migration=base.legacy_migration,
    )
