"""Thin CLI entry point — loads a project, drives the timeline engine, saves."""

import argparse
import logging
import math
import subprocess
import sys
from pathlib import Path

from clipcourt import ffutil
from clipcourt.engine import TimelineEngine
from clipcourt.export import export_included
from clipcourt.project import (
    Project,
    ProjectFormatError,
    delete_project,
    load_project,
    save_project,
)
from clipcourt.timefmt import format_compact, format_precise, format_time


def _seconds(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"{text!r} is not a finite number of seconds")
    return value


def _open(path: Path) -> tuple[Project, TimelineEngine]:
    project = load_project(path)
    if project is None:
        raise FileNotFoundError(f"No project at {path}; run 'clipcourt init' first")
    engine = TimelineEngine()
    engine.replace_segments(project.segments)
    return project, engine


def _save(project: Project, engine: TimelineEngine, path: Path) -> None:
    project.segments = engine.segments
    project.touch()
    save_project(project, path)


def _print_timeline(engine: TimelineEngine) -> None:
    segments = engine.segments
    if not segments:
        print("  (nothing marked yet)")
    for seg in segments:
        mark = "KEEP" if seg.included else "cut "
        print(
            f"  {mark}  {format_precise(seg.start):>9} - {format_precise(seg.end):>9}"
            f"  ({format_compact(seg.duration)})  {seg.id}"
        )
    print()
    print(
        f"  Kept: {format_precise(engine.total_included_duration)}"
        f" in {engine.included_segment_count} segment(s)"
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="clipcourt",
        description="ClipCourt — mark the parts of a video to keep, then export them.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    init = sub.add_parser("init", help="Create an empty project file")
    init.add_argument("project", type=Path, help="Project file to create")
    init.add_argument("--asset", required=True, help="Source video reference")

    show = sub.add_parser("show", help="Print the project's timeline")
    show.add_argument("project", type=Path)

    keep = sub.add_parser("keep", help="Keep the range between two times")
    keep.add_argument("project", type=Path)
    keep.add_argument("start", type=_seconds, help="Gesture start (seconds)")
    keep.add_argument("stop", type=_seconds, help="Gesture stop (seconds)")
    keep.add_argument("--duration", "-d", type=_seconds, required=True, help="Video duration (seconds)")

    toggle = sub.add_parser("toggle", help="Flip a segment between kept and cut")
    toggle.add_argument("project", type=Path)
    toggle.add_argument("segment_id", help="Segment id as printed by 'show'")

    finalize = sub.add_parser("finalize", help="Fit the timeline to the real video duration")
    finalize.add_argument("project", type=Path)
    src = finalize.add_mutually_exclusive_group(required=True)
    src.add_argument("--duration", "-d", type=_seconds, help="Video duration (seconds)")
    src.add_argument("--video", type=Path, help="Probe the duration from this file")

    export = sub.add_parser("export", help="Render the kept segments to a new file")
    export.add_argument("project", type=Path)
    export.add_argument("video", type=Path, help="Source video file")
    export.add_argument("--output", "-o", type=Path, help="Output file path")

    delete = sub.add_parser("delete", help="Remove a project file")
    delete.add_argument("project", type=Path)

    serve = sub.add_parser("serve", help="Launch the web API")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from clipcourt.web import create_app
        app = create_app()
        print(f"ClipCourt web API: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    try:
        _run(args)
    except (FileNotFoundError, ProjectFormatError, ffutil.FFmpegNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except subprocess.CalledProcessError as e:
        stderr = e.stderr if isinstance(e.stderr, str) else (e.stderr or b"").decode(errors="replace")
        print(f"Error: ffmpeg failed: {stderr[-500:] or e}", file=sys.stderr)
        sys.exit(1)


def _run(args: argparse.Namespace) -> None:
    if args.command == "init":
        if args.project.exists():
            raise ValueError(f"{args.project} already exists")
        save_project(Project(asset=args.asset), args.project)
        print(f"Created {args.project}")
        return

    if args.command == "delete":
        if not args.project.exists():
            raise FileNotFoundError(f"No project at {args.project}")
        delete_project(args.project)
        print(f"Deleted {args.project}")
        return

    project, engine = _open(args.project)

    if args.command == "show":
        print(f"{project.asset}  (playhead {format_time(project.last_playback_time)})")
        _print_timeline(engine)
        return

    if args.command == "keep":
        engine.begin_including(args.start, args.duration)
        engine.stop_including(args.stop)
        project.last_playback_time = min(max(args.stop, 0.0), args.duration)
    elif args.command == "toggle":
        engine.toggle_segment(args.segment_id)
    elif args.command == "finalize":
        duration = args.duration
        if args.video is not None:
            duration = ffutil.probe(args.video).duration
        engine.finalize_segments(duration)
    elif args.command == "export":
        output = args.output or args.video.with_stem(args.video.stem + "_kept")
        export_included(args.video, engine.segments, output)
        print(f"Done! Output: {output}")
        print(f"  Kept: {format_precise(engine.total_included_duration)}")
        return

    _save(project, engine, args.project)
    _print_timeline(engine)
