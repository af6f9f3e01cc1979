from flask import Blueprint, jsonify, Response, stream_with_context, request
from system import services
from system.log_utils import verbose, debug, info, warn, error
from system.utils import format_duration
from salesboard.sse.utils import SseDeltaTracker

from salesboard.sse.live_status_service import (
    get_live_snapshots,
    get_staged_snapshot,
    get_summary,
)

import time, json

salesboard_bp = Blueprint("salesboard", __name__)

# retry may run a full fetch before answering
ACTION_TIMEOUT = 30.0
SSE_POLL_SECONDS = 0.5
SSE_KEEPALIVE_SECONDS = 10


def _with_labels(progress: dict) -> dict:
    progress["countdown_label"] = format_duration(progress.get("seconds_remaining"))
    progress["next_reveal_label"] = format_duration(progress.get("next_reveal_seconds"))
    return progress


def _run_action(action: str) -> tuple[Response, int]:
    try:
        engine = services.engine_service
        ok, msg = services.runtime.call(engine.refresh.perform_action(action), timeout=ACTION_TIMEOUT)
        return jsonify({"ok": ok, "message": msg}), 200

    except Exception as e:
        error(f"[BOARD] {action} failed: {e}")
        return jsonify({"ok": False, "error": str(e)}), 500

# ----------------------------------------------------------------------
# Readouts
# ----------------------------------------------------------------------
@salesboard_bp.route("/api/state")
def board_state() -> tuple[Response, int]:
    """Current phase, countdowns and load state."""
    progress, _ = get_live_snapshots()
    return jsonify(_with_labels(progress)), 200

@salesboard_bp.route("/api/snapshot")
def board_snapshot() -> tuple[Response, int]:
    """Active snapshot; ?staged=1 peeks at the one waiting for the next reveal."""
    if request.args.get("staged") == "1":
        snapshot = get_staged_snapshot()
    else:
        _, snapshot = get_live_snapshots()

    if snapshot is None:
        return jsonify({"ok": False, "error": "No snapshot available"}), 404
    return jsonify(snapshot), 200

@salesboard_bp.route("/api/summary")
def board_summary() -> tuple[Response, int]:
    summary = get_summary()
    if summary is None:
        return jsonify({"ok": False, "error": "No completed interval yet"}), 404
    return jsonify(summary), 200

# ----------------------------------------------------------------------
# Actions
# ----------------------------------------------------------------------
@salesboard_bp.route("/api/refresh", methods=["POST"])
def board_refresh() -> tuple[Response, int]:
    info("[BOARD] Refresh requested")
    return _run_action("refresh")

@salesboard_bp.route("/api/retry", methods=["POST"])
def board_retry() -> tuple[Response, int]:
    info("[BOARD] Retry requested")
    return _run_action("retry")

# ----------------------------------------------------------------------
# Server-Sent Events
# ----------------------------------------------------------------------
@salesboard_bp.route("/api/events")
def sse_events() -> Response:
    """SSE stream: progress on every change, the snapshot only when it changed."""
    def event_stream():
        last_payload = None
        last_beat = time.monotonic()
        tracker = SseDeltaTracker()

        while True:
            try:
                _progress, _snapshot = get_live_snapshots()

                state = tracker.build(_with_labels(_progress), _snapshot)
                payload = json.dumps(state, sort_keys=True)
                if payload != last_payload:
                    yield f"data: {payload}\n\n"
                    last_payload = payload
                    last_beat = time.monotonic()
                    verbose(f"[SSE] sent update: phase={state.get('phase')}")
                elif time.monotonic() - last_beat > SSE_KEEPALIVE_SECONDS:
                    yield ": keep-alive\n\n"
                    last_beat = time.monotonic()
                    verbose("[SSE] sent keep-alive")

                time.sleep(SSE_POLL_SECONDS)

            except GeneratorExit:
                debug("[SSE] client disconnected")
                break
            except Exception as e:
                warn(f"[SSE] stream error: {e}")
                time.sleep(1)

    return Response(stream_with_context(event_stream()), mimetype="text/event-stream")
