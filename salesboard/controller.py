# salesboard/controller.py
# Phase state machine for the sales board.
#
# Notes:
# - Transitions come from salesboard.phase.next_phase(); this class only runs
#   the side effects attached to them (countdown reset, commit, notify).
# - All methods run on the board's event loop. The only await inside the state
#   machine is the commit between ANTICIPATION and INTERVAL_SUMMARY.
from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional

from salesboard.clock import CadenceConfig, DEFAULT_CADENCE
from salesboard.errors import SnapshotError
from salesboard.phase import Phase, PhaseEvent, next_phase
from salesboard.progress import DashboardProgress
from salesboard.store import DataStore
from system.log_utils import debug, info, warn, error


class PhaseController:
    """
    Owns the current phase and its countdown:
    CHARTS -> ANTICIPATION -> INTERVAL_SUMMARY -> CUMULATIVE_SUMMARY -> CHARTS
    plus ERROR while the initial load has not succeeded.
    """

    def __init__(
        self,
        store: DataStore,
        cadence: CadenceConfig = DEFAULT_CADENCE,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.cadence = cadence
        self._clock = clock

        self.progress = DashboardProgress()
        self._progress_subs: List[Callable] = []

        self._durations = {
            Phase.ANTICIPATION: cadence.anticipation_seconds,
            Phase.INTERVAL_SUMMARY: cadence.interval_view_seconds,
            Phase.CUMULATIVE_SUMMARY: cadence.cumulative_view_seconds,
        }
        # wall-clock second that last consumed a countdown step
        self._last_tick_key: Optional[datetime] = None
        self._committing = False
        self._pinned = False

    # -----------------------------
    # Observers
    # -----------------------------
    def subscribe(self, cb: Callable[[DashboardProgress], None]) -> None:
        self._progress_subs.append(cb)

    def _emit_progress_event(self) -> None:
        self._refresh_derived_progress()
        for cb in self._progress_subs:
            try:
                cb(self.progress)
            except Exception as e:
                warn(f"[PHASE] notify error: {e}")

    def _refresh_derived_progress(self) -> None:
        active = self.store.active
        self.progress.has_staged = self.store.staged is not None
        self.progress.active_fetched_at = active.fetched_at.isoformat() if active else None
        self.progress.committing = self._committing

    # -----------------------------
    # Readouts
    # -----------------------------
    @property
    def phase(self) -> str:
        return self.progress.phase

    @property
    def seconds_remaining(self) -> int:
        return self.progress.seconds_remaining

    @property
    def pinned(self) -> bool:
        return self._pinned

    @property
    def committing(self) -> bool:
        return self._committing

    def publish_next_reveal(self, seconds: int) -> None:
        self.progress.next_reveal_seconds = seconds

    def note_preload(self, cycle_key: str) -> None:
        self.progress.preloaded_cycle = cycle_key

    # -----------------------------
    # Transitions
    # -----------------------------
    @staticmethod
    def _second_key(now: datetime) -> datetime:
        return now.replace(microsecond=0)

    def _enter(self, phase: str, now: datetime) -> None:
        previous = self.progress.phase
        self.progress.phase = phase
        self.progress.seconds_remaining = self._durations.get(phase, 0)
        # the entering second never counts down
        self._last_tick_key = self._second_key(now)
        info(f"[PHASE] {previous} -> {phase}", countdown=self.progress.seconds_remaining)
        self._emit_progress_event()

    def _apply(self, event: PhaseEvent, now: datetime) -> bool:
        target = next_phase(self.progress.phase, event)
        if target is None:
            debug(f"[PHASE] {event.name} ignored in {self.progress.phase}")
            return False
        self._enter(target, now)
        return True

    def pin(self, phase: str) -> None:
        """Development override: hold `phase` forever. Applied once, at startup."""
        if phase not in Phase.ALL:
            raise ValueError(f"Unknown phase: {phase!r}")
        self._pinned = True
        self.progress.pinned = True
        self.progress.phase = phase
        self.progress.seconds_remaining = self._durations.get(phase, 0)
        warn(f"[PHASE] pinned to {phase}; clock-driven transitions disabled")
        self._emit_progress_event()

    async def boot(self) -> bool:
        """Initial load. Failure parks the board in ERROR until recover()."""
        self.progress.load_state = "loading"
        self._emit_progress_event()

        try:
            await self.store.load_initial()
        except SnapshotError as e:
            error(f"[PHASE] initial load failed: {e}")
            self.progress.load_state = "error"
            self.progress.error = str(e)
            if self._pinned or not self._apply(PhaseEvent.LOAD_FAILED, self._clock()):
                self._emit_progress_event()
            return False

        self.progress.load_state = "loaded"
        self.progress.error = None
        if self._pinned or not self._apply(PhaseEvent.LOADED, self._clock()):
            self._emit_progress_event()
        return True

    def request_reveal(self, now: datetime) -> bool:
        """CHARTS -> ANTICIPATION. Shared by the clock trigger and manual refresh."""
        if self._pinned or self._committing:
            return False
        return self._apply(PhaseEvent.REVEAL, now)

    async def tick(self, now: datetime) -> None:
        """Advance the active countdown by at most one step per wall-clock second."""
        if self._pinned or self._committing:
            self._emit_progress_event()
            return

        key = self._second_key(now)
        if key == self._last_tick_key:
            self._emit_progress_event()
            return
        self._last_tick_key = key

        if self.progress.phase not in Phase.TIMED:
            self._emit_progress_event()
            return

        self.progress.seconds_remaining = max(0, self.progress.seconds_remaining - 1)
        if self.progress.seconds_remaining > 0:
            self._emit_progress_event()
            return

        if self.progress.phase == Phase.ANTICIPATION:
            await self._reveal(now)
        else:
            self._apply(PhaseEvent.COUNTDOWN_EXPIRED, now)

    async def _reveal(self, now: datetime) -> None:
        # The summary must not show before its data is in place.
        self._committing = True
        self._emit_progress_event()
        try:
            await self.store.commit_staged()
            self.progress.error = None
        except SnapshotError as e:
            error(f"[PHASE] reveal fetch failed, keeping previous data: {e}")
            self.progress.error = str(e)
        finally:
            self._committing = False

        self._apply(PhaseEvent.COUNTDOWN_EXPIRED, now)

    # -----------------------------
    # Recovery
    # -----------------------------
    async def recover(self) -> tuple[bool, str]:
        if self.progress.phase == Phase.ERROR:
            ok = await self.boot()
            return (True, "Dashboard loaded") if ok else (False, self.progress.error or "Load failed")

        if self.progress.error:
            try:
                await self.store.refresh_now()
            except SnapshotError as e:
                warn(f"[PHASE] retry failed: {e}")
                self.progress.error = str(e)
                self._emit_progress_event()
                return False, str(e)

            info("[PHASE] retry succeeded")
            self.progress.error = None
            self._emit_progress_event()
            return True, "Data refreshed"

        return False, "Nothing to retry"
