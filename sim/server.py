"""
Development sales endpoint.

Serves GET /api/sales in the same JSON shape as the production endpoint, built
from salesboard.mock_data. Failure modes can be requested per call:
  ?fail=1   -> HTTP 500 with {"error": ...}
  ?empty=1  -> HTTP 200 with no branches (upstream has no rows yet)
  ?delay=N  -> sleep N seconds before answering (slow upstream)
"""
import os
import random
import time
from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from salesboard.mock_data import generate_snapshot
from salesboard.snapshot import METRICS

# Network config
HOST = "0.0.0.0"
PORT = 8890

MAX_DELAY_SEC = 60.0


def create_sim_app(metric: str = "gmv", seed: Optional[int] = None) -> Flask:
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric!r}")

    app = Flask(__name__)
    rng = random.Random(seed)

    @app.route("/api/sales")
    def sales():
        if request.args.get("delay"):
            try:
                time.sleep(min(float(request.args["delay"]), MAX_DELAY_SEC))
            except ValueError:
                return jsonify({"error": "delay must be a number"}), 400

        if request.args.get("fail") == "1":
            return jsonify({"error": "Simulated upstream failure"}), 500

        now = datetime.now()
        if request.args.get("empty") == "1":
            return jsonify({"data": [], "latestInterval": None, "metric": metric,
                            "lastUpdated": now.isoformat(), "mock": True}), 200

        snapshot = generate_snapshot(now, metric=metric, rng=rng)
        return jsonify(snapshot.to_dict()), 200

    return app


def start_server(host: str = HOST, port: int = PORT):
    from waitress import serve

    metric = os.environ.get("SALESBOARD_SIM_METRIC", "gmv")
    seed = os.environ.get("SALESBOARD_SIM_SEED")
    app = create_sim_app(metric=metric, seed=int(seed) if seed else None)
    print(f"[SIMULATOR] Listening on {host}:{port} | metric={metric}")
    serve(app, host=host, port=port, threads=4)


if __name__ == "__main__":
    start_server()
