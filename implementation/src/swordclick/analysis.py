"""Pacing analytics over a finished simulation run."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from swordclick.catalog import Catalog
from swordclick.formatting import format_clock, format_number, format_pct
from swordclick.headless import SimEvent, SimResult

MAJOR_BEAT_TAGS = ("MEDIA", "SWORD", "ACHIEVE")
BURST_WINDOW_SECS = 120


@dataclass
class MajorBeat:
    sim_time: float
    tag: str
    label: str
    key: str


@dataclass
class CadenceSummary:
    beat_count: int
    first_beat_time: Optional[float]
    avg_gap: Optional[float]
    median_gap: Optional[float]
    longest_drought: float
    drought_start: float
    drought_end: float
    burst_window_secs: float
    peak_burst_count: int
    peak_burst_start: Optional[float]
    peak_burst_end: Optional[float]


@dataclass
class RecoverySummary:
    first_prestige_time: Optional[float] = None
    pre_prestige_max_media_tier: int = 0
    pre_prestige_max_sword_index: int = 0
    keeps_swords: bool = False
    post_prestige_start_media_tier: int = 0
    media_recovery_secs: Optional[float] = None
    sword_recovery_secs: Optional[float] = None


@dataclass
class BalanceFlag:
    warn: bool
    message: str


def median(values: List[float]) -> Optional[float]:
    if not values:
        return None
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def first_time_major_beats(events: List[SimEvent]) -> List[MajorBeat]:
    """The first occurrence of each media tier, sword and achievement."""
    beats: List[MajorBeat] = []
    seen = set()
    for e in events:
        if e.tag not in MAJOR_BEAT_TAGS:
            continue
        key = f"{e.tag}:{e.ref or e.label}"
        if key in seen:
            continue
        seen.add(key)
        beats.append(MajorBeat(e.sim_time, e.tag, e.label, key))
    beats.sort(key=lambda b: b.sim_time)
    return beats


def summarize_cadence(beats: List[MajorBeat], session_end: float,
                      burst_window_secs: float = BURST_WINDOW_SECS) -> CadenceSummary:
    if not beats:
        return CadenceSummary(0, None, None, None, session_end, 0.0, session_end,
                              burst_window_secs, 0, None, None)

    times = [b.sim_time for b in beats]
    gaps = [b - a for a, b in zip(times, times[1:])]

    drought_start, drought_end = 0.0, times[0]
    longest = drought_end - drought_start
    for a, b in zip(times, times[1:]):
        if b - a > longest:
            longest, drought_start, drought_end = b - a, a, b
    tail = max(0.0, session_end - times[-1])
    if tail > longest:
        longest, drought_start, drought_end = tail, times[-1], session_end

    peak_count, peak_start, peak_end = 1, times[0], times[0]
    for i, start in enumerate(times):
        count, end = 0, start
        for t in times[i:]:
            if t > start + burst_window_secs:
                break
            count += 1
            end = t
        if count > peak_count:
            peak_count, peak_start, peak_end = count, start, end

    return CadenceSummary(
        beat_count=len(beats),
        first_beat_time=times[0],
        avg_gap=sum(gaps) / len(gaps) if gaps else None,
        median_gap=median(gaps),
        longest_drought=longest,
        drought_start=drought_start,
        drought_end=drought_end,
        burst_window_secs=burst_window_secs,
        peak_burst_count=peak_count,
        peak_burst_start=peak_start,
        peak_burst_end=peak_end,
    )


def _sword_index(catalog: Catalog, sword_id: str) -> int:
    for i, sword in enumerate(catalog.swords):
        if sword.id == sword_id:
            return i
    return -1


def summarize_recovery(events: List[SimEvent], catalog: Catalog) -> RecoverySummary:
    """How long the first post-prestige run takes to regain its best tier and sword."""
    prestige = next((e for e in events if e.tag == "PRESTIGE"), None)
    if prestige is None:
        return RecoverySummary()

    at = prestige.sim_time
    before = [e for e in events if e.sim_time < at]
    after = [e for e in events if e.sim_time > at]

    summary = RecoverySummary(
        first_prestige_time=at,
        keeps_swords=bool(prestige.data.get("keeps_swords", False)),
        post_prestige_start_media_tier=int(prestige.data.get("start_tier", 0)),
    )
    for e in before:
        if e.tag == "MEDIA":
            summary.pre_prestige_max_media_tier = max(
                summary.pre_prestige_max_media_tier, int(e.data.get("tier", 0)))
        elif e.tag == "SWORD":
            summary.pre_prestige_max_sword_index = max(
                summary.pre_prestige_max_sword_index, _sword_index(catalog, e.ref))

    if summary.pre_prestige_max_media_tier <= summary.post_prestige_start_media_tier:
        summary.media_recovery_secs = 0.0
    else:
        for e in after:
            if e.tag == "MEDIA" and int(e.data.get("tier", 0)) >= summary.pre_prestige_max_media_tier:
                summary.media_recovery_secs = e.sim_time - at
                break

    if summary.pre_prestige_max_sword_index <= 0 or summary.keeps_swords:
        summary.sword_recovery_secs = 0.0
    else:
        for e in after:
            if e.tag == "SWORD" and _sword_index(catalog, e.ref) >= summary.pre_prestige_max_sword_index:
                summary.sword_recovery_secs = e.sim_time - at
                break
    return summary


def phase_durations(result: SimResult) -> List[Tuple[str, float, float]]:
    """(phase, start, end) spans in timeline order."""
    spans: List[Tuple[str, float, float]] = []
    current, start = "early", 0.0
    for e in result.events:
        if e.tag != "PHASE":
            continue
        spans.append((current, start, e.sim_time))
        current, start = str(e.data.get("phase", current)), e.sim_time
    spans.append((current, start, result.duration_secs))
    return spans


def dead_time(result: SimResult) -> Tuple[float, float]:
    """Total dead-zone seconds and their share of the session."""
    total = sum(dz.end - dz.start for dz in result.dead_zones)
    share = total / result.duration_secs if result.duration_secs > 0 else 0.0
    return total, share


def balance_flags(result: SimResult, catalog: Catalog) -> List[BalanceFlag]:
    cfg = result.config
    state = result.final_state
    flags: List[BalanceFlag] = []

    _, dead_pct = dead_time(result)
    if dead_pct > 0.2:
        flags.append(BalanceFlag(True, f"High dead time: {format_pct(dead_pct)} of session spent "
                                       "waiting — pacing may feel slow"))
    elif dead_pct < 0.05:
        flags.append(BalanceFlag(False, f"Low dead time ({format_pct(dead_pct)}) — always something "
                                        "to buy, good purchase density"))
    else:
        flags.append(BalanceFlag(False, f"Dead time: {format_pct(dead_pct)} — reasonable pacing"))

    if result.snapshots:
        pf = result.snapshots[-1].passive_fraction
        if pf < 0.5:
            flags.append(BalanceFlag(True, f"Clicking dominates at end ({format_pct(pf)} passive) — "
                                           "passive income may be too weak"))
        elif pf > 0.98:
            flags.append(BalanceFlag(False, f"Passive income dominates ({format_pct(pf)}) at end — "
                                            "idle-friendly, clicking is supplemental"))
        else:
            flags.append(BalanceFlag(False, f"Healthy click/passive split: {format_pct(pf)} passive "
                                            "at end of session"))

    if result.prestige_times:
        first = result.prestige_times[0]
        share = first / result.duration_secs if result.duration_secs > 0 else 0.0
        if share < 0.4:
            flags.append(BalanceFlag(True, f"First prestige at {format_pct(share)} of session "
                                           f"({format_clock(first)}) — may feel rushed"))
        else:
            flags.append(BalanceFlag(False, f"First prestige at {format_clock(first)} "
                                            f"({format_pct(share)} of session) — feels paced"))
    elif cfg.max_prestiges > 0:
        flags.append(BalanceFlag(True, f"Prestige not reached in {cfg.minutes:g} min — threshold is "
                                       f"{format_number(catalog.constants.prestige_threshold)} total strokes"))

    if cfg.strategy in ("optimal", "idle"):
        share = (format_pct(result.close_call_moments / result.decision_moments)
                 if result.decision_moments > 0 else "0%")
        flags.append(BalanceFlag(False, "ROI strategy note: decision moments are constrained by "
                                        f"immediate spending; close-call share is {share}"))

    for artist in catalog.artists:
        if state.artist_count(artist.id) == 0:
            flags.append(BalanceFlag(True, f"Artist never hired: {artist.name} (base cost "
                                           f"{format_number(artist.base_cost)}) — may be unreachable"))

    first_hire = next((e for e in result.events if e.tag == "HIRE"), None)
    if first_hire is not None:
        when = format_clock(first_hire.sim_time)
        if first_hire.sim_time > 120:
            flags.append(BalanceFlag(True, f"First artist hired at {when} — early game may feel slow"))
        else:
            flags.append(BalanceFlag(False, f"First artist hired at {when} — early game has quick "
                                            "first milestone"))

    tiers = catalog.media_tiers
    for current, following in zip(tiers[1:], tiers[2:]):
        ratio = following.cost / max(current.cost, 1)
        if ratio > 100:
            flags.append(BalanceFlag(True, f"Large cost gap: {current.name} ({format_number(current.cost)}) "
                                           f"→ {following.name} ({format_number(following.cost)})  "
                                           f"ratio: ×{round(ratio)}"))

    if result.snapshots:
        reached = max(s.media_tier for s in result.snapshots)
        if reached < catalog.max_media_tier:
            nxt = tiers[reached + 1]
            flags.append(BalanceFlag(False, f"{catalog.max_media_tier - reached} media tier(s) not "
                                            f"reached — next: {nxt.name} at {format_number(nxt.cost)} strokes"))
    return flags
