from datetime import datetime
import socket


def get_primary_ip() -> str:
    """Best-effort detection of the primary IPv4 address for outbound traffic."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # Doesn't need to be reachable; no packets are sent
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError:
        try:
            return socket.gethostbyname(socket.gethostname())
        except OSError:
            return "127.0.0.1"


def get_formatted_timestamp(now=None):
    return (now or datetime.now()).strftime("%d.%m.%Y %H:%M:%S")


def format_duration(seconds, fixed=False):
    """Format seconds as duration.
    - If fixed=False: MM:SS for <1h, HH:MM:SS for >=1h
    - If fixed=True: always HH:MM:SS
    """
    if not isinstance(seconds, (int, float)) or isinstance(seconds, bool) or seconds < 0:
        return "--:--"
    elapsed = int(seconds)
    hours = elapsed // 3600
    minutes = (elapsed % 3600) // 60
    secs = elapsed % 60
    if fixed or hours > 0:
        return f"{hours:02}:{minutes:02}:{secs:02}"
    return f"{minutes:02}:{secs:02}"
