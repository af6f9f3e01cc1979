from flask import Flask, jsonify
import os
import sys
from pathlib import Path

from system.service_init import init_preferences_service, init_logging, apply_source_override
init_preferences_service()
init_logging(Path(os.environ["SALESBOARD_LOG_FILE"]) if os.environ.get("SALESBOARD_LOG_FILE") else None)

from system.log_utils import debug, info
debug("starting service", version="1.0.0")

# Use CLI arg if provided, else the configured sales endpoint
if len(sys.argv) > 1 and sys.argv[1]:
    apply_source_override(sys.argv[1])

from system.service_init import init_sales_source, init_engine, init_live_status_service, start_runtime
init_sales_source()
init_engine()
init_live_status_service()
start_runtime()

from system import services
from system.routes import system_bp
from salesboard.routes import salesboard_bp
from salesboard.sse.live_status_service import get_live_snapshots


def create_app() -> Flask:
    app = Flask(__name__)

    app.register_blueprint(salesboard_bp, url_prefix="/board")
    app.register_blueprint(system_bp, url_prefix="/system")

    @app.route('/')
    def index():
        progress, _ = get_live_snapshots()
        return jsonify(progress)

    return app


app = create_app()
info("[APP] sales board ready", pinned=services.engine_service.pinned)


# runtime shutdown is registered with atexit in start_runtime()
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5001, debug=False, use_reloader=False)
