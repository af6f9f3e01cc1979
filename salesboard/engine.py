# salesboard/engine.py
from __future__ import annotations

import asyncio
from typing import Callable

from salesboard.controller import PhaseController
from salesboard.progress import DashboardProgress
from salesboard.refresh import RefreshTrigger
from salesboard.scheduler import Scheduler
from salesboard.store import DataStore
from system.log_utils import info


class DashboardEngine:
    """Owns the board components and their run/shutdown lifecycle."""

    def __init__(
        self,
        store: DataStore,
        controller: PhaseController,
        scheduler: Scheduler,
        refresh: RefreshTrigger,
    ):
        self.store = store
        self.controller = controller
        self.scheduler = scheduler
        self.refresh = refresh

    # ------------------------------------------------------------------
    # Readouts
    # ------------------------------------------------------------------
    @property
    def progress(self) -> DashboardProgress:
        return self.controller.progress

    @property
    def pinned(self) -> bool:
        return self.controller.pinned

    def subscribe(self, cb: Callable[[DashboardProgress], None]) -> None:
        self.controller.subscribe(cb)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def run(self) -> None:
        """First fetch and ticker start together; the first tick never reveals."""
        info("[ENGINE] starting", pinned=self.pinned)
        await asyncio.gather(self.controller.boot(), self.scheduler.run())

    async def shutdown(self) -> None:
        info("[ENGINE] shutting down")
        self.scheduler.stop()
        await self.scheduler.drain()
