"""Timeline engine — owns the keep/cut partition and the in-flight keep gesture."""

import logging
from dataclasses import dataclass, replace

from clipcourt.models import EPSILON, Segment
from clipcourt.timeline import absorb_included, cleanup, fill_gaps, replace_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordingTransaction:
    """State captured when a keep gesture begins."""

    snapshot: tuple[Segment, ...]
    start: float
    duration: float


class TimelineEngine:
    """Mutable partition of a video's duration into kept and cut segments.

    The engine is handed the video duration per call and never stores it
    outside a recording transaction. Reads return copies, so callers cannot
    change the partition without going through an operation.

    Every mutating operation returns the resulting partition.
    """

    def __init__(self) -> None:
        self._segments: list[Segment] = []
        self._recording: RecordingTransaction | None = None

    # --- Queries ---

    @property
    def segments(self) -> list[Segment]:
        return _copy(self._segments)

    @property
    def total_included_duration(self) -> float:
        return sum(s.duration for s in self._segments if s.included)

    @property
    def included_segment_count(self) -> int:
        return sum(1 for s in self._segments if s.included)

    @property
    def is_recording(self) -> bool:
        return self._recording is not None

    def segment_at(self, time: float) -> Segment | None:
        """Return the segment whose ``[start, end)`` holds *time*.

        The end of the last segment is not covered, so asking for the exact
        video end returns None.
        """
        for seg in self._segments:
            if seg.contains(time):
                return replace(seg)
        return None

    # --- Keep gesture ---

    def begin_including(self, time: float, video_duration: float) -> list[Segment]:
        """Start a keep gesture at *time*.

        Until the matching stop, ``[time, video_duration)`` is shown as kept.
        Calling this again while a gesture is open starts a new gesture from
        the current (previewed) partition.
        """
        if video_duration <= 0:
            logger.debug("begin_including ignored: video duration %s", video_duration)
            return self.segments

        t = min(max(time, 0.0), video_duration)
        snapshot = tuple(_copy(self._segments))

        preview = replace_range(fill_gaps(self._segments, video_duration), t, video_duration)
        self._segments = cleanup(preview, video_duration)
        self._recording = RecordingTransaction(
            snapshot=snapshot, start=t, duration=video_duration
        )
        logger.debug("Keep gesture started at %.3f (duration %.3f)", t, video_duration)
        return self.segments

    def stop_including(self, time: float) -> list[Segment]:
        """Close the keep gesture at *time* and commit the kept range.

        The partition is rebuilt from the snapshot taken at begin, so preview
        edits never leak into the result. Kept segments overlapping the
        gesture are absorbed: the new keep starts at the earliest of them and
        ends at the stop point. Without an open gesture this falls back to
        ending the kept segment under *time*.
        """
        t = max(time, 0.0)
        recording = self._recording
        if recording is None:
            return self._stop_at_point(t)

        lo, hi = sorted((recording.start, t))
        base = fill_gaps(recording.snapshot, recording.duration)
        if hi > lo:
            absorbed = absorb_included(base, lo, hi)
            if absorbed is not None:
                lo = min(lo, absorbed[0])
                base = replace_range(base, lo, max(hi, absorbed[1]), included=False)
            base = replace_range(base, lo, hi, included=True)

        self._segments = cleanup(base, recording.duration)
        self._recording = None
        logger.debug("Keep gesture committed: [%.3f, %.3f)", lo, hi)
        return self.segments

    def _stop_at_point(self, time: float) -> list[Segment]:
        index = self._index_containing(time)
        if index is None:
            return self.segments

        seg = self._segments[index]
        if not seg.included or not seg.start < time < seg.end:
            return self.segments

        self._segments[index:index + 1] = [
            replace(seg, end=time),
            Segment(start=time, end=seg.end, included=False),
        ]
        self._segments = cleanup(self._segments)
        logger.debug("Stop without open gesture: cut from %.3f", time)
        return self.segments

    # --- Point edits ---

    def toggle_segment(self, segment_id: str) -> list[Segment]:
        """Flip kept/cut on the segment with *segment_id*, keeping its id."""
        for seg in self._segments:
            if seg.id == segment_id:
                seg.included = not seg.included
                break
        else:
            logger.debug("toggle_segment ignored: unknown id %s", segment_id)
            return self.segments

        self._segments = cleanup(self._segments)
        return self.segments

    def split_segment(self, time: float) -> list[Segment]:
        """Split the segment strictly containing *time* into two like pieces.

        The first piece keeps the original id; the second gets a new one.
        Splitting exactly at a boundary does nothing.
        """
        index = self._index_containing(time)
        if index is None:
            return self.segments

        seg = self._segments[index]
        if not seg.start < time < seg.end:
            logger.debug("split_segment ignored: %.3f is on a boundary", time)
            return self.segments

        self._segments[index:index + 1] = [
            replace(seg, end=time),
            Segment(start=time, end=seg.end, included=seg.included),
        ]
        return self.segments

    # --- Bulk ---

    def replace_segments(
        self, segments: list[Segment], video_duration: float | None = None
    ) -> list[Segment]:
        """Install *segments* (any order) as the partition, e.g. on restore."""
        self._recording = None
        self._segments = cleanup(segments, video_duration)
        return self.segments

    def finalize_segments(self, video_duration: float) -> list[Segment]:
        """Fit the partition to the authoritative *video_duration*.

        Segments running past the end are capped, emptied ones dropped, and
        any uncovered stretch below the duration becomes cut. An empty
        partition stays empty. An open keep gesture stays open but commits
        against the new duration.
        """
        if self._recording is not None:
            self._recording = replace(
                self._recording,
                start=min(self._recording.start, video_duration),
                duration=video_duration,
            )
        if not self._segments:
            return self.segments

        capped = cleanup(self._segments, video_duration)
        self._segments = cleanup(fill_gaps(capped, video_duration), video_duration)
        logger.debug("Finalized %d segments to %.3f", len(self._segments), video_duration)
        return self.segments

    def reset(self) -> None:
        self._segments = []
        self._recording = None

    def _index_containing(self, time: float) -> int | None:
        # Unlike segment_at, the exact end of the last segment counts.
        for i, seg in enumerate(self._segments):
            if seg.contains(time):
                return i
        if self._segments and abs(time - self._segments[-1].end) < EPSILON:
            return len(self._segments) - 1
        return None


def _copy(segments) -> list[Segment]:
    return [replace(s) for s in segments]
