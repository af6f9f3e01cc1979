# salesboard/store.py
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from salesboard.errors import FetchFailed, SnapshotError
from salesboard.snapshot import Snapshot
from system.log_utils import debug, info, warn

FetchFn = Callable[[], Awaitable[Snapshot]]


class DataStore:
    """
    Holds the displayed snapshot (`active`) and the one fetched ahead of the
    next reveal (`staged`).

    - all mutation happens on the board's event loop
    - at most one fetch is in flight; concurrent callers share it
    - a failed fetch never touches `active`, and never clears `staged`
    - `staged` is never older than `active`
    """

    def __init__(self, fetch: FetchFn):
        self._fetch = fetch
        self.active: Optional[Snapshot] = None
        self.staged: Optional[Snapshot] = None
        self._inflight: Optional[asyncio.Future] = None

    # ------------------------------------------------------------------
    # Fetch plumbing
    # ------------------------------------------------------------------
    @property
    def fetch_in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def _fetch_once(self) -> Snapshot:
        try:
            return await self._fetch()
        except SnapshotError:
            raise
        except Exception as e:
            raise FetchFailed(str(e) or e.__class__.__name__) from e

    async def _fetch_shared(self) -> Snapshot:
        if not self.fetch_in_flight:
            self._inflight = asyncio.ensure_future(self._fetch_once())
        else:
            debug("[STORE] joining in-flight fetch")
        return await asyncio.shield(self._inflight)

    def _set_active(self, snapshot: Snapshot) -> None:
        self.active = snapshot
        staged = self.staged
        if staged is snapshot or (staged is not None and staged.fetched_at < snapshot.fetched_at):
            if staged is not snapshot:
                warn(f"[STORE] dropping staged snapshot from {staged.fetched_at:%H:%M:%S}, active is newer")
            self.staged = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def load_initial(self) -> Snapshot:
        snapshot = await self._fetch_shared()
        self._set_active(snapshot)
        info(f"[STORE] initial snapshot loaded ({len(snapshot.branches)} branches)")
        return snapshot

    async def stage(self) -> Snapshot:
        snapshot = await self._fetch_shared()
        if snapshot is self.active:
            # a commit sharing this fetch already showed it
            return snapshot
        if self.active is not None and snapshot.fetched_at < self.active.fetched_at:
            warn("[STORE] stage result is older than the displayed snapshot, not staged")
            return snapshot
        self.staged = snapshot
        info(f"[STORE] snapshot staged (fetched {snapshot.fetched_at:%H:%M:%S})")
        return snapshot

    async def commit_staged(self) -> Snapshot:
        staged, active = self.staged, self.active
        if staged is not None and active is not None and staged.fetched_at < active.fetched_at:
            warn("[STORE] staged snapshot is older than the displayed one, discarded")
            self.staged = None

        if self.staged is not None:
            snapshot = self.staged
            self.active, self.staged = snapshot, None
            info("[STORE] staged snapshot committed")
            return snapshot

        warn("[STORE] nothing staged, fetching before reveal")
        snapshot = await self._fetch_shared()
        self._set_active(snapshot)
        info("[STORE] fallback snapshot committed")
        return snapshot

    async def refresh_now(self) -> Snapshot:
        snapshot = await self._fetch_shared()
        self._set_active(snapshot)
        info("[STORE] active snapshot refreshed")
        return snapshot

    def discard_staged(self) -> None:
        if self.staged is not None:
            debug("[STORE] staged snapshot discarded")
        self.staged = None
