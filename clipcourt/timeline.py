"""Interval algebra over keep/cut partitions.

Everything here is pure: inputs are never mutated, results are fresh lists.
The engine composes these helpers and always finishes with :func:`cleanup`.
"""

from dataclasses import replace
from typing import Iterable

from clipcourt.models import EPSILON, Segment


def cleanup(
    segments: Iterable[Segment], video_duration: float | None = None
) -> list[Segment]:
    """Restore the legal partition form.

    Sorts by start, caps every end at *video_duration* (when given), drops
    zero-length segments, then merges neighbours that touch or overlap and
    share the same ``included`` flag. The earlier segment's id survives a
    merge. A segment overlapping a neighbour with the other flag is trimmed
    to start where that neighbour ends.

    Running it on its own output returns an equal list.
    """
    capped: list[Segment] = []
    for seg in sorted(segments, key=lambda s: s.start):
        end = seg.end if video_duration is None else min(seg.end, video_duration)
        seg = replace(seg, end=end)
        if seg.is_valid:
            capped.append(seg)

    merged: list[Segment] = []
    for seg in capped:
        if not merged:
            merged.append(seg)
            continue

        prev = merged[-1]
        if seg.included == prev.included and seg.start <= prev.end + EPSILON:
            prev.end = max(prev.end, seg.end)
        elif seg.start < prev.end:
            if seg.end > prev.end:
                merged.append(replace(seg, start=prev.end))
        else:
            merged.append(seg)

    return merged


def fill_gaps(segments: Iterable[Segment], video_duration: float) -> list[Segment]:
    """Cover every hole in ``[0, video_duration)`` with a cut segment."""
    filled: list[Segment] = []
    cursor = 0.0
    for seg in sorted(segments, key=lambda s: s.start):
        if seg.start > cursor:
            filled.append(Segment(start=cursor, end=seg.start, included=False))
        filled.append(replace(seg))
        cursor = max(cursor, seg.end)

    if cursor < video_duration:
        filled.append(Segment(start=cursor, end=video_duration, included=False))
    return filled


def replace_range(
    segments: Iterable[Segment], start: float, end: float, included: bool = True
) -> list[Segment]:
    """Overwrite ``[start, end)`` with one segment flagged *included*.

    Segments entirely outside the range are copied unchanged. Segments that
    straddle a range boundary are cut back to the part outside it, and those
    fully inside are removed. The result is unsorted; pass it to
    :func:`cleanup`. A range with ``end <= start`` leaves the input as is.
    """
    lo, hi = min(start, end), max(start, end)
    if hi <= lo:
        return [replace(s) for s in segments]

    out: list[Segment] = []
    for seg in segments:
        if seg.end <= lo or seg.start >= hi:
            out.append(replace(seg))
            continue
        # Remnants get fresh ids: the old segment no longer exists as such.
        if seg.start < lo:
            out.append(Segment(start=seg.start, end=lo, included=seg.included))
        if seg.end > hi:
            out.append(Segment(start=hi, end=seg.end, included=seg.included))

    out.append(Segment(start=lo, end=hi, included=included))
    return out


def absorb_included(
    segments: Iterable[Segment], start: float, end: float
) -> tuple[float, float] | None:
    """Find the kept span a new keep over ``[start, end]`` swallows.

    Returns ``(lowest start, highest end)`` over the included segments that
    overlap the range by a positive amount, or ``None`` when there are none.
    Segments that merely touch a range boundary do not count.
    """
    lo, hi = min(start, end), max(start, end)
    hits = [s for s in segments if s.included and s.start < hi and s.end > lo]
    if not hits:
        return None
    return min(s.start for s in hits), max(s.end for s in hits)


def included_ranges(segments: Iterable[Segment]) -> list[tuple[float, float]]:
    """Return ``(start, end)`` pairs of the kept segments, in order."""
    return [(s.start, s.end) for s in sorted(segments, key=lambda s: s.start) if s.included]
