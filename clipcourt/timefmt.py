"""Human-readable time strings for timeline display."""

import math


def _split(seconds: float) -> tuple[int, int, int]:
    total = int(seconds)
    return total // 3600, (total % 3600) // 60, total % 60


def _usable(seconds: float) -> bool:
    return math.isfinite(seconds) and seconds >= 0


def format_time(seconds: float) -> str:
    """65.3 -> "1:05", 3661.7 -> "1:01:01"."""
    if not _usable(seconds):
        return "0:00"
    h, m, s = _split(seconds)
    if h:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"


def format_precise(seconds: float) -> str:
    """Like :func:`format_time` with tenths: 65.3 -> "1:05.3"."""
    if not _usable(seconds):
        return "0:00.0"
    # Nudge so 65.3 is not read as 65.2999...
    total_tenths = int(seconds * 10 + 1e-6)
    h, m, s = _split(total_tenths // 10)
    tenths = total_tenths % 10
    if h:
        return f"{h}:{m:02d}:{s:02d}.{tenths}"
    return f"{m}:{s:02d}.{tenths}"


def format_compact(seconds: float) -> str:
    if not _usable(seconds):
        return "0s"
    h, m, s = _split(seconds)
    if h:
        return f"{h}h {m}m" if m else f"{h}h"
    if m:
        return f"{m}m {s}s" if s else f"{m}m"
    return f"{s}s"
