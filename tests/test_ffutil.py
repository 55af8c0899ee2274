"""Unit tests for ffutil — probing and concat command construction."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from clipcourt.ffutil import (
    FFmpegNotFoundError,
    check_ffmpeg,
    concat_segments,
    probe,
)
from clipcourt.models import TimeRange

VIDEO_STREAM = {
    "codec_type": "video",
    "codec_name": "h264",
    "width": 1920,
    "height": 1080,
    "r_frame_rate": "30/1",
}

AUDIO_STREAM = {
    "codec_type": "audio",
    "codec_name": "aac",
    "sample_rate": "44100",
}


def _probe_output(*streams, duration="60.0"):
    return MagicMock(
        returncode=0,
        stdout=json.dumps({"format": {"duration": duration}, "streams": list(streams)}),
    )


# ---------------------------------------------------------------------------
# check_ffmpeg
# ---------------------------------------------------------------------------

class TestCheckFFmpeg:
    @patch("clipcourt.ffutil.shutil.which", return_value="/usr/bin/tool")
    def test_found(self, mock_which):
        check_ffmpeg()
        assert mock_which.call_count == 2

    @patch("clipcourt.ffutil.shutil.which", return_value=None)
    def test_missing(self, mock_which):
        with pytest.raises(FFmpegNotFoundError, match="ffmpeg not found"):
            check_ffmpeg()


# ---------------------------------------------------------------------------
# probe (mocked subprocess)
# ---------------------------------------------------------------------------

class TestProbe:
    @patch("clipcourt.ffutil.subprocess.run")
    def test_basic(self, mock_run):
        mock_run.return_value = _probe_output(VIDEO_STREAM, AUDIO_STREAM)
        result = probe(Path("video.mp4"))
        assert result.duration == 60.0
        assert result.width == 1920
        assert result.fps == 30.0
        assert result.codec_audio == "aac"
        assert result.audio_sample_rate == 44100

    @patch("clipcourt.ffutil.subprocess.run")
    def test_fractional_duration(self, mock_run):
        mock_run.return_value = _probe_output(VIDEO_STREAM, duration="12.345")
        assert probe(Path("video.mp4")).duration == 12.345

    @patch("clipcourt.ffutil.subprocess.run")
    def test_no_audio_stream(self, mock_run):
        mock_run.return_value = _probe_output(VIDEO_STREAM)
        result = probe(Path("video.mp4"))
        assert result.codec_audio is None
        assert not result.has_audio

    @patch("clipcourt.ffutil.subprocess.run")
    def test_no_video_stream(self, mock_run):
        mock_run.return_value = _probe_output(AUDIO_STREAM)
        with pytest.raises(ValueError, match="No video stream"):
            probe(Path("video.mp4"))


# ---------------------------------------------------------------------------
# concat_segments (mocked subprocess — just verify the command shape)
# ---------------------------------------------------------------------------

class TestConcatSegments:
    @patch("clipcourt.ffutil.subprocess.run")
    def test_builds_filter_complex(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        segments = [TimeRange(start=0, end=5), TimeRange(start=8, end=12)]
        concat_segments(Path("in.mp4"), segments, Path("out.mp4"))

        mock_run.assert_called_once()
        cmd = mock_run.call_args[0][0]
        assert "-filter_complex" in cmd
        fc_idx = cmd.index("-filter_complex")
        fc = cmd[fc_idx + 1]
        assert "concat=n=2" in fc
        assert "trim=start=8:end=12" in fc
        assert "[outv]" in fc
        assert "[outa]" in fc
        assert cmd[-1] == "out.mp4"

    @patch("clipcourt.ffutil.subprocess.run")
    def test_video_only(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        concat_segments(Path("in.mp4"), [TimeRange(start=1, end=2)], Path("out.mp4"), with_audio=False)

        cmd = mock_run.call_args[0][0]
        fc = cmd[cmd.index("-filter_complex") + 1]
        assert "atrim" not in fc
        assert "a=0" in fc
        assert "[outa]" not in cmd

    def test_empty_segments_raises(self):
        with pytest.raises(ValueError, match="empty segment list"):
            concat_segments(Path("in.mp4"), [], Path("out.mp4"))
