"""Shared data types used across ClipCourt."""

import uuid
from dataclasses import dataclass, field

# Tolerance (seconds) for treating two boundaries as touching.
EPSILON = 0.001


@dataclass
class TimeRange:
    """A start/end time pair in seconds."""

    start: float
    end: float


@dataclass
class Segment:
    """A half-open ``[start, end)`` slice of the video, kept or cut.

    Negative bounds are clamped to 0. An end that falls before the start
    collapses the segment to zero length instead of swapping the bounds.
    """

    start: float
    end: float
    included: bool
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        self.start = max(0.0, float(self.start))
        self.end = max(self.start, float(self.end))

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def is_valid(self) -> bool:
        return self.duration > 0

    def contains(self, time: float) -> bool:
        return self.start <= time < self.end

    def overlaps(self, other: "Segment") -> bool:
        """True when the two ranges share a positive-length stretch."""
        return self.start < other.end and self.end > other.start

    def is_adjacent(self, other: "Segment") -> bool:
        return (
            abs(self.end - other.start) < EPSILON
            or abs(other.end - self.start) < EPSILON
        )

    def __lt__(self, other: "Segment") -> bool:
        return self.start < other.start


@dataclass
class ProbeResult:
    """Metadata extracted from a media file via ffprobe."""

    duration: float
    width: int
    height: int
    fps: float
    codec_video: str
    codec_audio: str | None = None
    audio_sample_rate: int | None = None

    @property
    def has_audio(self) -> bool:
        return self.codec_audio is not None
