"""Project file — the persisted form of an editing session.

Saved as JSON inside a versioned envelope::

    {"version": 1, "project": {"id": ..., "asset": ..., "segments": [...], ...}}

Segments are stored as ``{id, startTime, endTime, isIncluded}`` records in
any order; the engine re-sorts them on load.
"""

import json
import math
import os
import tempfile
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from clipcourt.models import Segment

CURRENT_VERSION = 1


class ProjectFormatError(ValueError):
    """Raised when a project file cannot be understood."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Project:
    """One editing session over a single source video."""

    asset: str
    segments: list[Segment] = field(default_factory=list)
    last_playback_time: float = 0.0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=_now)
    modified_at: datetime = field(default_factory=_now)

    @property
    def included_segments(self) -> list[Segment]:
        return sorted((s for s in self.segments if s.included), key=lambda s: s.start)

    @property
    def included_duration(self) -> float:
        return sum(s.duration for s in self.segments if s.included)

    def touch(self) -> None:
        self.modified_at = _now()


def segment_to_dict(seg: Segment) -> dict:
    return {
        "id": seg.id,
        "startTime": seg.start,
        "endTime": seg.end,
        "isIncluded": seg.included,
    }


def _seconds(value) -> float:
    # JSON true/false would otherwise pass as 1.0/0.0.
    if isinstance(value, bool):
        raise TypeError(f"expected a number, got {value!r}")
    seconds = float(value)
    if not math.isfinite(seconds):
        raise ValueError(f"expected a finite number, got {value!r}")
    return seconds


def segment_from_dict(data: dict) -> Segment:
    try:
        included = data["isIncluded"]
        if not isinstance(included, bool):
            raise TypeError(f"isIncluded must be true or false, got {included!r}")
        return Segment(
            id=str(data["id"]),
            start=_seconds(data["startTime"]),
            end=_seconds(data["endTime"]),
            included=included,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ProjectFormatError(f"Invalid segment record {data!r}: {e}") from e


def project_to_dict(project: Project) -> dict:
    return {
        "id": project.id,
        "asset": project.asset,
        "segments": [segment_to_dict(s) for s in project.segments],
        "lastPlaybackTime": project.last_playback_time,
        "createdAt": project.created_at.isoformat(),
        "modifiedAt": project.modified_at.isoformat(),
    }


def project_from_dict(data: dict) -> Project:
    if not isinstance(data, dict) or "asset" not in data:
        raise ProjectFormatError("Project must contain an 'asset' field")

    try:
        created = datetime.fromisoformat(data["createdAt"]) if "createdAt" in data else _now()
        modified = datetime.fromisoformat(data["modifiedAt"]) if "modifiedAt" in data else created
    except (TypeError, ValueError) as e:
        raise ProjectFormatError(f"Invalid timestamp: {e}") from e

    records = data.get("segments", [])
    if not isinstance(records, list):
        raise ProjectFormatError(f"'segments' must be a list, got {records!r}")
    try:
        last_playback_time = _seconds(data.get("lastPlaybackTime", 0.0))
    except (TypeError, ValueError) as e:
        raise ProjectFormatError(f"Invalid lastPlaybackTime: {e}") from e

    return Project(
        id=str(data.get("id") or uuid.uuid4().hex),
        asset=str(data["asset"]),
        segments=[segment_from_dict(s) for s in records],
        last_playback_time=last_playback_time,
        created_at=created,
        modified_at=modified,
    )


def load_project(path: str | Path) -> Project | None:
    """Load a project file, or return None if it does not exist.

    Files written before the envelope existed (a bare project object) are
    still accepted.
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ProjectFormatError(f"{path} is not valid JSON: {e}") from e

    if isinstance(data, dict) and "version" in data and "project" in data:
        version = data["version"]
        if version != CURRENT_VERSION:
            raise ProjectFormatError(
                f"Unsupported project version {version}; expected {CURRENT_VERSION}"
            )
        return project_from_dict(data["project"])

    return project_from_dict(data)


def save_project(project: Project, path: str | Path) -> Path:
    """Write *project* to *path*, replacing any previous file atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    envelope = {"version": CURRENT_VERSION, "project": project_to_dict(project)}
    text = json.dumps(envelope, indent=2, sort_keys=True)

    fd, tmp_name = tempfile.mkstemp(prefix=".project_", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def delete_project(path: str | Path) -> None:
    Path(path).unlink(missing_ok=True)
