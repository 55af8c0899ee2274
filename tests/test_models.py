"""Tests for the Segment value type."""

from clipcourt.models import ProbeResult, Segment


class TestSegmentConstruction:
    def test_negative_bounds_clamped(self):
        seg = Segment(start=-3.0, end=-1.0, included=True)
        assert seg.start == 0.0
        assert seg.end == 0.0
        assert not seg.is_valid

    def test_reversed_bounds_collapse(self):
        seg = Segment(start=5.0, end=2.0, included=False)
        assert seg.start == 5.0
        assert seg.end == 5.0
        assert seg.duration == 0.0
        assert not seg.is_valid

    def test_ids_are_unique(self):
        a = Segment(start=0, end=1, included=True)
        b = Segment(start=0, end=1, included=True)
        assert a.id != b.id

    def test_explicit_id_kept(self):
        assert Segment(start=0, end=1, included=True, id="abc").id == "abc"

    def test_duration(self):
        assert Segment(start=2.5, end=4.0, included=True).duration == 1.5


class TestSegmentRelations:
    def test_contains_is_half_open(self):
        seg = Segment(start=2.0, end=4.0, included=True)
        assert seg.contains(2.0)
        assert seg.contains(3.999)
        assert not seg.contains(4.0)
        assert not seg.contains(1.999)

    def test_overlap_needs_positive_measure(self):
        a = Segment(start=0, end=5, included=True)
        assert a.overlaps(Segment(start=4, end=6, included=False))
        assert not a.overlaps(Segment(start=5, end=6, included=False))
        assert not a.overlaps(Segment(start=6, end=7, included=True))

    def test_adjacent_either_side(self):
        a = Segment(start=2, end=5, included=True)
        assert a.is_adjacent(Segment(start=5, end=7, included=False))
        assert a.is_adjacent(Segment(start=0, end=2, included=True))
        assert not a.is_adjacent(Segment(start=6, end=7, included=True))

    def test_ordering_by_start(self):
        segs = [
            Segment(start=5, end=6, included=True),
            Segment(start=0, end=5, included=False),
            Segment(start=6, end=9, included=False),
        ]
        assert [s.start for s in sorted(segs)] == [0, 5, 6]


class TestProbeResult:
    def test_has_audio(self):
        r = ProbeResult(duration=1.0, width=2, height=2, fps=30.0, codec_video="h264")
        assert not r.has_audio
        r = ProbeResult(
            duration=1.0, width=2, height=2, fps=30.0,
            codec_video="h264", codec_audio="aac", audio_sample_rate=44100,
        )
        assert r.has_audio
