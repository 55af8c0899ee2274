"""FFmpeg/ffprobe subprocess helpers."""

import json
import logging
import shutil
import subprocess
from pathlib import Path

from clipcourt.models import ProbeResult, TimeRange

logger = logging.getLogger(__name__)


class FFmpegNotFoundError(RuntimeError):
    pass


def check_ffmpeg() -> None:
    """Raise FFmpegNotFoundError if ffmpeg/ffprobe are not on PATH."""
    for cmd in ("ffmpeg", "ffprobe"):
        if shutil.which(cmd) is None:
            raise FFmpegNotFoundError(f"{cmd} not found on PATH")


def probe(input_path: Path) -> ProbeResult:
    """Extract media metadata via ffprobe.

    The returned duration is the authoritative length used to finalize a
    timeline. Audio is optional.
    """
    cmd = [
        "ffprobe",
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(input_path),
    ]
    result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    data = json.loads(result.stdout)

    video_stream = next(
        (s for s in data["streams"] if s["codec_type"] == "video"), None
    )
    audio_stream = next(
        (s for s in data["streams"] if s["codec_type"] == "audio"), None
    )

    if video_stream is None:
        raise ValueError(f"No video stream found in {input_path}")

    # Parse fps from r_frame_rate (e.g. "30/1")
    num, den = video_stream["r_frame_rate"].split("/")
    fps = int(num) / int(den) if int(den) else 0.0

    return ProbeResult(
        duration=float(data["format"]["duration"]),
        width=int(video_stream["width"]),
        height=int(video_stream["height"]),
        fps=fps,
        codec_video=video_stream["codec_name"],
        codec_audio=audio_stream["codec_name"] if audio_stream else None,
        audio_sample_rate=int(audio_stream["sample_rate"]) if audio_stream else None,
    )


def concat_segments(
    input_path: Path,
    segments: list[TimeRange],
    output_path: Path,
    with_audio: bool = True,
) -> None:
    """Concatenate kept ranges using a single ffmpeg filter_complex call.

    Uses trim/atrim + concat filters so no intermediate files are needed and
    the approach works regardless of the input codec/container.
    """
    if not segments:
        raise ValueError("concat_segments called with empty segment list")

    n = len(segments)
    filter_parts: list[str] = []
    stream_labels: list[str] = []

    for i, seg in enumerate(segments):
        filter_parts.append(
            f"[0:v]trim=start={seg.start}:end={seg.end},setpts=PTS-STARTPTS[v{i}]"
        )
        if with_audio:
            filter_parts.append(
                f"[0:a]atrim=start={seg.start}:end={seg.end},asetpts=PTS-STARTPTS[a{i}]"
            )
            stream_labels.append(f"[v{i}][a{i}]")
        else:
            stream_labels.append(f"[v{i}]")

    concat_input = "".join(stream_labels)
    if with_audio:
        filter_parts.append(f"{concat_input}concat=n={n}:v=1:a=1[outv][outa]")
        maps = ["-map", "[outv]", "-map", "[outa]"]
    else:
        filter_parts.append(f"{concat_input}concat=n={n}:v=1:a=0[outv]")
        maps = ["-map", "[outv]"]

    filter_complex = ";\n".join(filter_parts)

    cmd = [
        "ffmpeg", "-y",
        "-i", str(input_path),
        "-filter_complex", filter_complex,
        *maps,
        str(output_path),
    ]
    logger.debug("Concatenating %d ranges into %s", n, output_path)
    subprocess.run(cmd, capture_output=True, check=True)
