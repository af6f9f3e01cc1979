# salesboard/composition.py
from datetime import datetime
from typing import Callable, Optional

from salesboard.clock import CadenceConfig
from salesboard.controller import PhaseController
from salesboard.engine import DashboardEngine
from salesboard.refresh import RefreshTrigger
from salesboard.scheduler import Scheduler
from salesboard.source import HttpSalesSource, MockSalesSource, SalesSource
from salesboard.store import DataStore
from system.log_utils import info, warn
from system.preferences import (
    Preferences,
    KEY_FORCE_PHASE,
    KEY_SALES_SOURCE_URL,
    KEY_USE_MOCK_DATA,
    KEY_METRIC,
    KEY_PRIMARY_BRANCH,
    KEY_FETCH_TIMEOUT,
)


def build_source(prefs: Preferences, clock: Callable[[], datetime] = datetime.now) -> SalesSource:
    primary = prefs.get(KEY_PRIMARY_BRANCH, "cdon")

    if prefs.get_bool(KEY_USE_MOCK_DATA, False):
        warn("[BOARD] using in-process mock sales data")
        return MockSalesSource(metric=prefs.get(KEY_METRIC, "gmv"), primary_branch=primary, clock=clock)

    url = prefs.get(KEY_SALES_SOURCE_URL)
    info(f"[BOARD] sales source: {url}")
    return HttpSalesSource(
        url,
        timeout=prefs.get_float(KEY_FETCH_TIMEOUT, 20.0),
        primary_branch=primary,
        clock=clock,
    )


def build_engine(
    prefs: Preferences,
    source: Optional[SalesSource] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> DashboardEngine:
    cadence = CadenceConfig.from_preferences(prefs)
    ok, msg = cadence.validate()
    if not ok:
        raise ValueError(f"Invalid cadence configuration: {msg}")

    if source is None:
        source = build_source(prefs, clock)

    store = DataStore(source.fetch_snapshot)
    controller = PhaseController(store, cadence, clock)

    forced = prefs.get(KEY_FORCE_PHASE)
    if forced:
        controller.pin(str(forced).upper())

    scheduler = Scheduler(store, controller, cadence, clock, frozen=controller.pinned)
    refresh = RefreshTrigger(controller, clock, enabled=not controller.pinned)

    return DashboardEngine(store, controller, scheduler, refresh)
