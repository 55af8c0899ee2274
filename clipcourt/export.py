"""Export — renders only the kept segments of the source video."""

from pathlib import Path

from clipcourt import ffutil
from clipcourt.models import Segment, TimeRange
from clipcourt.timeline import included_ranges


def keep_ranges(segments: list[Segment]) -> list[TimeRange]:
    return [TimeRange(start=s, end=e) for s, e in included_ranges(segments)]


def can_export(segments: list[Segment]) -> bool:
    return any(s.included and s.is_valid for s in segments)


def export_included(
    input_path: Path,
    segments: list[Segment],
    output_path: Path,
) -> Path:
    """Keep only segments marked included and concatenate them."""
    ranges = keep_ranges(segments)
    if not ranges:
        raise ValueError("No kept segments found — entire video would be removed")

    ffutil.check_ffmpeg()
    probe_result = ffutil.probe(input_path)
    ffutil.concat_segments(
        input_path, ranges, output_path, with_audio=probe_result.has_audio
    )
    return output_path
