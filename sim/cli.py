import os
import sys
import threading
import time

from sim.server import HOST, PORT, start_server
from system.utils import get_primary_ip

USAGE = "usage: python -m sim.cli [port]"


def _parse_port(argv) -> int:
    if len(argv) < 2:
        return PORT
    try:
        return int(argv[1])
    except ValueError:
        print(USAGE)
        sys.exit(2)


def main(argv=None):
    port = _parse_port(argv if argv is not None else sys.argv)
    metric = os.environ.get("SALESBOARD_SIM_METRIC", "gmv")
    seed = os.environ.get("SALESBOARD_SIM_SEED") or "random"
    url = f"http://{get_primary_ip()}:{port}/api/sales"

    print(f"[SIMULATOR CLI] Sales endpoint: {url}  (metric={metric}, seed={seed})")
    print("[SIMULATOR CLI] Failure knobs: ?fail=1  ?empty=1  ?delay=<seconds>")
    print(f"[SIMULATOR CLI] Start the board with:  python app.py {url}")
    print("[SIMULATOR CLI] Ctrl+C to stop")

    server = threading.Thread(target=start_server, args=(HOST, port), daemon=True)
    server.start()
    try:
        while server.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n[SIMULATOR CLI] Shutting down...")


if __name__ == "__main__":
    main()
