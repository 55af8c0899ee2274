"""Web API routes — forward timeline gestures to a per-session engine."""

import logging
import math
import uuid
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request

from clipcourt.engine import TimelineEngine
from clipcourt.project import (
    Project,
    ProjectFormatError,
    save_project,
    segment_from_dict,
    segment_to_dict,
)

logger = logging.getLogger(__name__)

bp = Blueprint("web", __name__)

# In-memory session store: session_id -> {"project": Project, "engine": TimelineEngine}
_sessions: dict[str, dict] = {}


def _state(session_id: str) -> dict:
    session = _sessions[session_id]
    engine: TimelineEngine = session["engine"]
    return {
        "session_id": session_id,
        "asset": session["project"].asset,
        "last_playback_time": session["project"].last_playback_time,
        "segments": [segment_to_dict(s) for s in engine.segments],
        "total_included_duration": engine.total_included_duration,
        "included_segment_count": engine.included_segment_count,
        "recording": engine.is_recording,
        "can_export": engine.total_included_duration > 0,
    }


def _number(data: dict, key: str) -> float | None:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _parse_segments(data: dict) -> list:
    records = data.get("segments", [])
    if not isinstance(records, list):
        raise ProjectFormatError("'segments' must be a list")
    return [segment_from_dict(r) for r in records]


@bp.route("/api/sessions", methods=["POST"])
def create_session():
    data = request.get_json(silent=True) or {}
    asset = data.get("asset")
    if not asset:
        return jsonify({"error": "Missing 'asset'"}), 400

    engine = TimelineEngine()
    try:
        engine.replace_segments(_parse_segments(data), _number(data, "duration"))
    except ProjectFormatError as e:
        return jsonify({"error": str(e)}), 400

    session_id = uuid.uuid4().hex[:12]
    project = Project(
        asset=str(asset),
        last_playback_time=max(_number(data, "playback_time") or 0.0, 0.0),
    )
    _sessions[session_id] = {"project": project, "engine": engine}
    logger.info("Created session %s for %s", session_id, asset)
    return jsonify(_state(session_id)), 201


@bp.route("/api/sessions/<session_id>")
def get_session(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404
    return jsonify(_state(session_id))


@bp.route("/api/sessions/<session_id>", methods=["DELETE"])
def delete_session(session_id: str):
    if _sessions.pop(session_id, None) is None:
        return jsonify({"error": "Session not found"}), 404
    return jsonify({"status": "deleted"})


@bp.route("/api/sessions/<session_id>/segment")
def segment_at(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    time = request.args.get("time", type=float)
    if time is None or not math.isfinite(time):
        return jsonify({"error": "Missing 'time'"}), 400

    seg = _sessions[session_id]["engine"].segment_at(time)
    return jsonify({"segment": segment_to_dict(seg) if seg else None})


@bp.route("/api/sessions/<session_id>/begin", methods=["POST"])
def begin(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    data = request.get_json(silent=True) or {}
    time = _number(data, "time")
    duration = _number(data, "duration")
    if time is None or duration is None:
        return jsonify({"error": "'time' and 'duration' are required numbers"}), 400

    _sessions[session_id]["engine"].begin_including(time, duration)
    return jsonify(_state(session_id))


@bp.route("/api/sessions/<session_id>/stop", methods=["POST"])
def stop(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    data = request.get_json(silent=True) or {}
    time = _number(data, "time")
    if time is None:
        return jsonify({"error": "'time' is a required number"}), 400

    _sessions[session_id]["engine"].stop_including(time)
    return jsonify(_state(session_id))


@bp.route("/api/sessions/<session_id>/toggle", methods=["POST"])
def toggle(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    data = request.get_json(silent=True) or {}
    segment_id = data.get("segment_id")
    if not isinstance(segment_id, str):
        return jsonify({"error": "'segment_id' is required"}), 400

    _sessions[session_id]["engine"].toggle_segment(segment_id)
    return jsonify(_state(session_id))


@bp.route("/api/sessions/<session_id>/split", methods=["POST"])
def split(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    data = request.get_json(silent=True) or {}
    time = _number(data, "time")
    if time is None:
        return jsonify({"error": "'time' is a required number"}), 400

    _sessions[session_id]["engine"].split_segment(time)
    return jsonify(_state(session_id))


@bp.route("/api/sessions/<session_id>/finalize", methods=["POST"])
def finalize(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    data = request.get_json(silent=True) or {}
    duration = _number(data, "duration")
    if duration is None:
        return jsonify({"error": "'duration' is a required number"}), 400

    _sessions[session_id]["engine"].finalize_segments(duration)
    return jsonify(_state(session_id))


@bp.route("/api/sessions/<session_id>/segments", methods=["PUT"])
def replace_segments(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    data = request.get_json(silent=True) or {}
    try:
        segments = _parse_segments(data)
    except ProjectFormatError as e:
        return jsonify({"error": str(e)}), 400

    _sessions[session_id]["engine"].replace_segments(segments, _number(data, "duration"))
    return jsonify(_state(session_id))


@bp.route("/api/sessions/<session_id>/reset", methods=["POST"])
def reset(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    _sessions[session_id]["engine"].reset()
    return jsonify(_state(session_id))


@bp.route("/api/sessions/<session_id>/save", methods=["POST"])
def save(session_id: str):
    if session_id not in _sessions:
        return jsonify({"error": "Session not found"}), 404

    session = _sessions[session_id]
    engine: TimelineEngine = session["engine"]
    if engine.is_recording:
        return jsonify({"error": "Stop the keep gesture before saving"}), 409

    project: Project = session["project"]
    playback_time = _number(request.get_json(silent=True) or {}, "playback_time")
    if playback_time is not None:
        project.last_playback_time = max(playback_time, 0.0)
    project.segments = engine.segments
    project.touch()
    path = save_project(project, Path(current_app.config["WORK_DIR"]) / f"{session_id}.json")
    logger.info("Saved session %s to %s", session_id, path)
    return jsonify({"path": str(path)})
