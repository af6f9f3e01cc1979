# salesboard/scheduler.py
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, Optional, Set

from salesboard.clock import (
    CadenceConfig,
    DEFAULT_CADENCE,
    current_cycle_key,
    is_preload_boundary,
    is_reveal_boundary,
    seconds_until_reveal_boundary,
)
from salesboard.controller import PhaseController
from salesboard.errors import SnapshotError
from salesboard.phase import Phase
from salesboard.store import DataStore
from system.log_utils import verbose, debug, info, warn, error

# how long one tick waits for the controller step before moving on
STEP_WAIT_SECONDS = 0.5


class Scheduler:
    """
    The one recurring driver. Every second:
      1. publish seconds until the next reveal boundary
      2. at the preload boundary, stage data once per cycle key
      3. at the reveal boundary, start the anticipation sequence
      4. advance the phase countdown

    A reveal commit waiting on a slow fetch keeps running as a background
    task. Later ticks still publish, and the controller ignores them until
    the commit resolves.
    """

    def __init__(
        self,
        store: DataStore,
        controller: PhaseController,
        cadence: CadenceConfig = DEFAULT_CADENCE,
        clock: Callable[[], datetime] = datetime.now,
        frozen: bool = False,
    ):
        self.store = store
        self.controller = controller
        self.cadence = cadence
        self._clock = clock
        self.frozen = frozen

        self.preloaded_key: Optional[str] = None
        self._first_tick = True
        self._running = False
        self._tasks: Set[asyncio.Task] = set()
        self.step_wait = STEP_WAIT_SECONDS

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    async def tick(self, now: Optional[datetime] = None) -> None:
        """One scheduler step. Never raises: a dead tick would stop the board."""
        now = now or self._clock()
        try:
            await self._step(now)
        except Exception as e:
            error(f"[SCHED] tick failed at {now:%H:%M:%S}: {e}")
        finally:
            self._first_tick = False

    async def _step(self, now: datetime) -> None:
        self.controller.publish_next_reveal(seconds_until_reveal_boundary(now, self.cadence))

        if self.frozen:
            await self._advance(now)
            return

        if is_preload_boundary(now, self.cadence):
            key = current_cycle_key(now, self.cadence)
            if key != self.preloaded_key:
                self.preloaded_key = key
                self.controller.note_preload(key)
                info("[SCHED] preload", cycle=key)
                self._spawn(self._preload(key))

        if (
            not self._first_tick
            and is_reveal_boundary(now, self.cadence)
            and self.controller.phase == Phase.CHARTS
            and self.store.active is not None
        ):
            if self.controller.request_reveal(now):
                info("[SCHED] reveal boundary", at=f"{now:%H:%M:%S}")

        await self._advance(now)

    async def _advance(self, now: datetime) -> None:
        step = self._spawn(self._controller_tick(now))
        await asyncio.wait({step}, timeout=self.step_wait)
        if not step.done():
            debug("[SCHED] reveal commit still waiting on data, ticking on")

    async def _controller_tick(self, now: datetime) -> None:
        try:
            await self.controller.tick(now)
        except Exception as e:
            error(f"[SCHED] controller tick failed at {now:%H:%M:%S}: {e}")

    async def _preload(self, key: str) -> None:
        try:
            await self.store.stage()
        except SnapshotError as e:
            # commit_staged() fetches on its own if nothing got staged
            warn(f"[SCHED] preload for {key} failed: {e}")

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------
    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for outstanding preloads and reveal commits."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Tick now, then on every whole second until stop()."""
        self._running = True
        info("[SCHED] started", frozen=self.frozen)
        while self._running:
            await self.tick()
            now = self._clock()
            delay = 1.0 - now.microsecond / 1_000_000
            verbose(f"[SCHED] next tick in {delay:.3f}s")
            await asyncio.sleep(delay)
        info("[SCHED] stopped")

    def stop(self) -> None:
        self._running = False
