from flask import Blueprint, jsonify, Response

from system.log_utils import error
from system import services
from system.preferences import DEFAULTS
from system.utils import format_duration, get_formatted_timestamp
from salesboard.sse.live_status_service import get_live_snapshots

import time

system_bp = Blueprint("system", __name__)

_STARTED_AT = time.monotonic()

# ----------------------------------------------------------------------
# GET effective configuration
# ----------------------------------------------------------------------
@system_bp.route("/api/config", methods=["GET"])
def get_config() -> tuple[Response, int]:
    """
    Returns the merged dictionary of defaults and loaded prefs.
    Always includes all known keys.
    """
    merged = {**DEFAULTS, **services.preferences_service.as_dict()}
    return jsonify(merged), 200


@system_bp.route("/api/config/defaults", methods=["GET"])
def get_defaults() -> tuple[Response, int]:
    """Return the factory default configuration values."""
    return jsonify(DEFAULTS), 200

# ----------------------------------------------------------------------
# Health
# ----------------------------------------------------------------------
@system_bp.route("/api/health", methods=["GET"])
def get_health() -> tuple[Response, int]:
    try:
        runtime = services.runtime
        engine = services.engine_service
        progress, _ = get_live_snapshots()
        return jsonify({
            "ok": True,
            "runtime": bool(runtime is not None and runtime.running),
            "phase": progress.get("phase"),
            "load_state": progress.get("load_state"),
            "pinned": bool(engine is not None and engine.pinned),
            "uptime": format_duration(time.monotonic() - _STARTED_AT),
            "timestamp": get_formatted_timestamp(),
        }), 200
    except Exception as e:
        error(f"[SYSTEM] health check error: {e}")
        return jsonify({"ok": False, "error": str(e)}), 500
