# system/service_init.py
from pathlib import Path
from typing import Optional

from system import services
from system.log_utils import info, debug


def init_preferences_service(filename: Optional[str] = None):
    from system.preferences import Preferences
    services.preferences_service = Preferences(filename)


def init_logging(log_file: Optional[Path] = None):
    from system.log_utils import configure_logging
    from system.preferences import KEY_LOG_LEVEL
    level = services.preferences_service.get(KEY_LOG_LEVEL, "INFO")
    configure_logging(level, log_file)
    debug(f"[INIT] log level {level}")


def apply_source_override(url: str):
    from system.preferences import KEY_SALES_SOURCE_URL
    services.preferences_service.override(KEY_SALES_SOURCE_URL, url)
    info(f"[INIT] sales source overridden from command line: {url}")


def init_sales_source():
    from salesboard.composition import build_source
    services.sales_source = build_source(services.preferences_service)


def init_engine():
    from salesboard.composition import build_engine
    services.engine_service = build_engine(services.preferences_service, services.sales_source)


def init_live_status_service():
    from salesboard.sse.live_status_service import LiveStatusService
    services.live_status_service = LiveStatusService()

    if services.engine_service is not None:
        services.live_status_service.attach_engine(services.engine_service)


def start_runtime():
    from system.runtime import AsyncRuntime
    import atexit

    services.runtime = AsyncRuntime()
    services.runtime.start(services.engine_service)
    atexit.register(services.runtime.shutdown, services.engine_service)
    info("[INIT] board runtime started")
