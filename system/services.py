# services.py
from salesboard.engine import DashboardEngine
from salesboard.source import SalesSource
from salesboard.sse.live_status_service import LiveStatusService
from system.preferences import Preferences
from system.runtime import AsyncRuntime

# ------------------------------------------------------------------------------
# Service singletons (initialized in order in service_init.py)
# ------------------------------------------------------------------------------

preferences_service: Preferences = None

sales_source: SalesSource = None

engine_service: DashboardEngine = None

runtime: AsyncRuntime = None

live_status_service: LiveStatusService = None
