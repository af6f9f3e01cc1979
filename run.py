# run.py

from app import app
from waitress import serve
from system.log_utils import info
from system.utils import get_primary_ip

info(f"Serving via Waitress on http://{get_primary_ip()}:5001")
# Each kiosk SSE client holds a thread; default is 4 threads
# Using threads=10 provides headroom for concurrent API requests
serve(app, host='0.0.0.0', port=5001, threads=10)
