from __future__ import annotations

from typing import List

from swordclick.analysis import (
    balance_flags,
    dead_time,
    first_time_major_beats,
    phase_durations,
    summarize_cadence,
    summarize_recovery,
)
from swordclick.catalog import Catalog
from swordclick.formatting import format_clock, format_number, format_pct
from swordclick.headless import CLOSE_CALL_ROI_DELTA, IDLE_CPS, SimResult, prestige_upgrade_summary

HR = "─" * 60
HR2 = "═" * 60


def _section(lines: List[str], title: str) -> None:
    lines.extend([HR, f"  {title}", HR])


def _strategy_label(result: SimResult) -> str:
    cfg = result.config
    if cfg.strategy == "idle":
        return f"idle ({IDLE_CPS:g} cps — minimal engagement)"
    if cfg.strategy == "human":
        return f"human (~{cfg.clicks_per_second:g} cps target, imperfect choices, reaction delays)"
    return f"{cfg.strategy} · {cfg.clicks_per_second:g} clicks/sec"


def _timeline(lines: List[str], result: SimResult) -> None:
    _section(lines, "TIMELINE")
    for e in result.events:
        detail = f"  ·  {e.detail}" if e.detail else ""
        lines.append(f"  {format_clock(e.sim_time):>8}  {'[' + e.tag + ']':<10}  {e.label}{detail}")
    lines.append("")


def _snapshots(lines: List[str], result: SimResult, catalog: Catalog) -> None:
    _section(lines, "INCOME SNAPSHOTS (every 5 minutes)")
    lines.append("  Time       Effective Click  Passive/s   Total/s    Idle%  Media  "
                 "Artists  Phase     Prestige")
    lines.append("  " + "─" * 95)
    for snap in result.snapshots:
        tier = catalog.media_tier(snap.media_tier).name[:11]
        prestige = f"#{snap.prestige_count}" if snap.prestige_count > 0 else "-"
        lines.append(
            f"  {format_clock(snap.time):>8}  {format_number(snap.effective_click_power):>8}/click "
            f"{format_number(snap.effective_passive_rate):>11}   {format_number(snap.total_income):>10}   "
            f"{format_pct(snap.passive_fraction):>6}  {tier:<11}  {snap.artist_count:>7}  "
            f"{snap.phase.value:<9}  {prestige}"
        )
    lines.append("")


def _content(lines: List[str], result: SimResult, catalog: Catalog) -> None:
    s = result.final_state
    events = result.events
    _section(lines, "CONTENT REACHED")

    media_events = {}
    for e in events:
        if e.tag == "MEDIA":
            media_events.setdefault(int(e.data.get("tier", 0)), e)
    reached = sorted({0, *media_events})
    lines.append("  Media tiers:")
    for idx in reached:
        tier = catalog.media_tier(idx)
        event = media_events.get(idx)
        when = f"@ {format_clock(event.sim_time)}" if event else "@ start"
        lines.append(f"    Tier {idx}: {tier.name:<18} {when}  ×{format_number(tier.multiplier)} multiplier")
    for idx in range(max(reached) + 1, len(catalog.media_tiers)):
        tier = catalog.media_tiers[idx]
        lines.append(f"    Tier {idx}: {tier.name:<18} NOT REACHED  (costs {format_number(tier.cost)})")
    lines.append("")

    lines.append("  Swords unlocked:")
    for sword in catalog.swords:
        event = next((e for e in events if e.tag == "SWORD" and e.ref == sword.id), None)
        if sword.id in s.unlocked_swords:
            when = f"@ {format_clock(event.sim_time)}" if event else "@ start"
            lines.append(f"    ✓ {sword.name:<22} {when}  +{sword.bonus:g}%")
        else:
            lines.append(f"    ✗ {sword.name:<22} NOT REACHED  (needs {format_number(sword.threshold)} strokes)")
    lines.append("")

    lines.append("  Achievements unlocked:")
    for ach in catalog.achievements:
        event = next((e for e in events if e.tag == "ACHIEVE" and e.ref == ach.id), None)
        mark = "✓" if ach.id in s.unlocked_achievements else "✗"
        when = f"@ {format_clock(event.sim_time)}" if event else ""
        lines.append(f"    {mark} {ach.name:<38} {when}".rstrip())
    lines.append("")

    lines.append("  Artists hired (final state):")
    for artist in catalog.artists:
        count = s.artist_count(artist.id)
        lines.append(f"    {artist.name:<22} ×{count:>3}  {'█' * min(count, 20)}".rstrip())
    lines.append("")

    if result.prestige_times:
        lines.append("  Prestige timeline:")
        for i, t in enumerate(result.prestige_times, start=1):
            lines.append(f"    Prestige #{i} @ {format_clock(t)}")
        lines.append("")


def _pacing(lines: List[str], result: SimResult) -> None:
    _section(lines, "PACING ANALYSIS")
    lines.append("  Phase durations:")
    for phase, start, end in phase_durations(result):
        lines.append(f"    {phase.upper():<8} : {format_clock(start)} → {format_clock(end)}  "
                     f"({format_clock(end - start)})")
    lines.append("")

    total_dead, dead_pct = dead_time(result)
    lines.append(f"  Dead zones (waiting >120s with nothing to buy): {len(result.dead_zones)}")
    for dz in result.dead_zones:
        lines.append(f"    {format_clock(dz.start)} → {format_clock(dz.end)}  "
                     f"({format_clock(dz.end - dz.start)})  waiting for: {dz.waiting_for}")
    if result.dead_zones:
        lines.append(f"  Total dead time: {format_clock(total_dead)}  ({format_pct(dead_pct)} of session)")
    lines.append("")

    lines.append(f"  Total purchases made     : {result.purchases:,}")
    if result.duration_secs > 0 and result.purchases > 0:
        lines.append(f"  Avg time between buys    : {format_clock(result.duration_secs / result.purchases)}")
    lines.append(f"  Decision moments (≥2 affordable options): {result.decision_moments}")
    if result.duration_secs > 0 and result.decision_moments > 0:
        lines.append(f"  Avg decision frequency   : every "
                     f"{format_clock(result.duration_secs / result.decision_moments)}")
    lines.append(f"  Close-call moments (top-2 ROI within {round(CLOSE_CALL_ROI_DELTA * 100)}%): "
                 f"{result.close_call_moments}")
    if result.decision_moments > 0:
        lines.append(f"  Close-call share         : "
                     f"{format_pct(result.close_call_moments / result.decision_moments)}")
    lines.append("")


def _optional_clock(value, missing: str) -> str:
    return format_clock(value) if value is not None else missing


def _cadence(lines: List[str], result: SimResult, catalog: Catalog) -> None:
    _section(lines, "EXPERIENCE CADENCE")
    cadence = summarize_cadence(first_time_major_beats(result.events), result.duration_secs)
    lines.append(f"  First-time major beats  : {cadence.beat_count}")
    lines.append(f"  Time to first major beat: {_optional_clock(cadence.first_beat_time, 'none')}")
    lines.append(f"  Avg beat gap            : {_optional_clock(cadence.avg_gap, 'n/a')}")
    lines.append(f"  Median beat gap         : {_optional_clock(cadence.median_gap, 'n/a')}")
    lines.append(f"  Longest novelty drought : {format_clock(cadence.longest_drought)} "
                 f"({format_clock(cadence.drought_start)} -> {format_clock(cadence.drought_end)})")
    if cadence.peak_burst_count > 0 and cadence.peak_burst_start is not None:
        lines.append(f"  Peak novelty burst      : {cadence.peak_burst_count} beats in "
                     f"{format_clock(cadence.burst_window_secs)} window "
                     f"({format_clock(cadence.peak_burst_start)} -> {format_clock(cadence.peak_burst_end)})")
    else:
        lines.append("  Peak novelty burst      : none")

    recovery = summarize_recovery(result.events, catalog)
    if recovery.first_prestige_time is None:
        lines.append("  Post-prestige recovery  : no prestige in this session")
        lines.append("")
        return

    media_name = catalog.media_tier(recovery.pre_prestige_max_media_tier).name
    sword_name = catalog.swords[recovery.pre_prestige_max_sword_index].name
    lines.append(f"  Pre-prestige peaks      : media {media_name}, sword {sword_name}")
    if recovery.media_recovery_secs == 0:
        lines.append("  Post-prestige media recovery: instant")
    elif recovery.media_recovery_secs is not None:
        lines.append(f"  Post-prestige media recovery: {format_clock(recovery.media_recovery_secs)}")
    else:
        lines.append("  Post-prestige media recovery: not recovered this run")
    if recovery.sword_recovery_secs == 0:
        reason = "instant (kept swords)" if recovery.keeps_swords else "instant"
        lines.append(f"  Post-prestige sword recovery: {reason}")
    elif recovery.sword_recovery_secs is not None:
        lines.append(f"  Post-prestige sword recovery: {format_clock(recovery.sword_recovery_secs)}")
    else:
        lines.append("  Post-prestige sword recovery: not recovered this run")
    lines.append("")


def _summary(lines: List[str], result: SimResult, catalog: Catalog) -> None:
    s = result.final_state
    _section(lines, "FINAL STATE SUMMARY")
    if result.snapshots:
        final = result.snapshots[-1]
        lines.append(f"  Time elapsed    : {format_clock(result.duration_secs)}  "
                     f"({result.config.minutes:g} min simulated)")
        lines.append(f"  Total strokes   : {format_number(s.total_strokes + s.lifetime_strokes)} lifetime")
        lines.append(f"  Media tier      : {s.media_tier} ({catalog.media_tier(s.media_tier).name})")
        lines.append(f"  Swords          : {len(s.unlocked_swords)}/{len(catalog.swords)}")
        lines.append(f"  Achievements    : {len(s.unlocked_achievements)}/{len(catalog.achievements)}")
        lines.append(f"  Total artists   : {s.total_artists()}")
        lines.append(f"  Prestige count  : {s.prestige_count}")
        if s.prestige_count > 0:
            lines.append(f"  Prestige upgrades: {prestige_upgrade_summary(s, catalog) or 'none'}")
        lines.append(f"  Effective click : {format_number(final.effective_click_power)}/click")
        lines.append(f"  Effective passive: {format_number(final.effective_passive_rate)}/sec")
        lines.append(f"  Total income    : {format_number(final.total_income)}/sec")
    lines.append("")


def build_report(result: SimResult, catalog: Catalog) -> str:
    """Render the full evaluation report for one simulation run."""
    cfg = result.config
    lines: List[str] = ["", HR2, "  SWORD ART CLICK — GAME EVALUATION REPORT", HR2,
                        f"  Strategy : {_strategy_label(result)}",
                        f"  Duration : {cfg.minutes:g} min simulated",
                        f"  Max prestiges : {cfg.max_prestiges}",
                        f"  Seed : {cfg.seed:#x}",
                        ""]
    _timeline(lines, result)
    _snapshots(lines, result, catalog)
    _content(lines, result, catalog)
    _pacing(lines, result)
    _cadence(lines, result, catalog)

    _section(lines, "BALANCE FLAGS")
    for flag in balance_flags(result, catalog):
        lines.append(f"  {'⚠' if flag.warn else '✓'} {flag.message}")
    lines.append("")

    _summary(lines, result, catalog)
    lines.extend([HR2, ""])
    return "\n".join(lines)
