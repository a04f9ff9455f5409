from __future__ import annotations

import math

_SUFFIXES = ["", "K", "M", "B", "T", "Qa", "Qi"]


def format_number(n: float) -> str:
    """Compact display: 999, 1.23K, 45.6M, 789B, then e-notation past Qi."""
    if n == 0:
        return "0"
    if abs(n) < 1_000:
        return str(int(math.floor(n)))
    tier = int(math.floor(math.log10(abs(n)) / 3))
    suffix = _SUFFIXES[tier] if tier < len(_SUFFIXES) else f"e{tier * 3}"
    scaled = n / 10 ** (tier * 3)
    digits = 2 if abs(scaled) < 10 else 1 if abs(scaled) < 100 else 0
    return f"{scaled:.{digits}f}{suffix}"


def format_clock(secs: float) -> str:
    """h:mm:ss, or mm:ss under an hour."""
    secs = max(0.0, secs)
    h = int(secs // 3600)
    m = int((secs % 3600) // 60)
    s = int(secs % 60)
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"


def format_pct(fraction: float) -> str:
    return f"{round(fraction * 100)}%"


def describe_duration(seconds: float) -> str:
    if seconds >= 3600:
        return f"{seconds / 3600:.1f} hours"
    if seconds >= 60:
        return f"{int(seconds // 60)} minutes"
    return f"{int(seconds)} seconds"
