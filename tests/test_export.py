"""Tests for exporting the kept segments."""

from pathlib import Path
from unittest.mock import patch

import pytest

from clipcourt.export import can_export, export_included, keep_ranges
from clipcourt.models import ProbeResult, Segment, TimeRange


def _make_probe(has_audio: bool = True) -> ProbeResult:
    return ProbeResult(
        duration=10.0,
        width=1920,
        height=1080,
        fps=30.0,
        codec_video="h264",
        codec_audio="aac" if has_audio else None,
        audio_sample_rate=44100 if has_audio else None,
    )


SEGMENTS = [
    Segment(start=0, end=2, included=False),
    Segment(start=2, end=5, included=True),
    Segment(start=5, end=7, included=False),
    Segment(start=7, end=9, included=True),
    Segment(start=9, end=10, included=False),
]


class TestKeepRanges:
    def test_only_kept(self):
        assert keep_ranges(SEGMENTS) == [TimeRange(start=2, end=5), TimeRange(start=7, end=9)]

    def test_can_export(self):
        assert can_export(SEGMENTS)
        assert not can_export([Segment(start=0, end=10, included=False)])
        assert not can_export([])


class TestExportIncluded:
    @patch("clipcourt.export.ffutil.concat_segments")
    @patch("clipcourt.export.ffutil.probe")
    @patch("clipcourt.export.ffutil.check_ffmpeg")
    def test_concats_kept_ranges(self, mock_check, mock_probe, mock_concat):
        mock_probe.return_value = _make_probe()
        out = export_included(Path("in.mp4"), SEGMENTS, Path("out.mp4"))

        assert out == Path("out.mp4")
        mock_concat.assert_called_once_with(
            Path("in.mp4"),
            [TimeRange(start=2, end=5), TimeRange(start=7, end=9)],
            Path("out.mp4"),
            with_audio=True,
        )

    @patch("clipcourt.export.ffutil.concat_segments")
    @patch("clipcourt.export.ffutil.probe")
    @patch("clipcourt.export.ffutil.check_ffmpeg")
    def test_silent_video(self, mock_check, mock_probe, mock_concat):
        mock_probe.return_value = _make_probe(has_audio=False)
        export_included(Path("in.mp4"), SEGMENTS, Path("out.mp4"))
        assert mock_concat.call_args.kwargs["with_audio"] is False

    def test_nothing_kept_raises(self):
        with pytest.raises(ValueError, match="No kept segments"):
            export_included(
                Path("in.mp4"), [Segment(start=0, end=10, included=False)], Path("out.mp4")
            )
