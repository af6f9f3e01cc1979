# live_status_service.py
from __future__ import annotations
import threading
from typing import Dict, Any, Optional, Tuple

from system.log_utils import verbose, warn
from system import services
from salesboard.progress import DashboardProgress
from salesboard.summary_view import SummaryView


class LiveStatusService:
    """
    Readout cache for HTTP threads, fed by engine progress events on the board loop.
    Snapshots are serialised only when the store hands out a different object.
    """

    def __init__(self):
        self.latest_progress_snapshot: Dict[str, Any] = DashboardProgress().to_dict()
        self.latest_board_snapshot: Optional[Dict[str, Any]] = None
        self.latest_staged_snapshot: Optional[Dict[str, Any]] = None
        self.latest_summary: Optional[Dict[str, Any]] = None

        self._lock = threading.Lock()
        self._engine = None
        # identity of the snapshots last serialised (touched on the board loop only)
        self._active_ref = None
        self._staged_ref = None

    def attach_engine(self, engine) -> None:
        self._engine = engine
        engine.subscribe(self._on_progress)
        self._on_progress(engine.progress)

    def _on_progress(self, progress: DashboardProgress) -> None:
        try:
            progress_snapshot = progress.to_dict()
            store = self._engine.store if self._engine is not None else None
            active = store.active if store is not None else None
            staged = store.staged if store is not None else None

            updates: Dict[str, Any] = {"latest_progress_snapshot": progress_snapshot}
            if active is not self._active_ref:
                self._active_ref = active
                if active is None:
                    updates["latest_board_snapshot"] = None
                    updates["latest_summary"] = None
                else:
                    updates["latest_board_snapshot"] = active.to_dict()
                    view = SummaryView(active)
                    updates["latest_summary"] = view.to_dict() if view.available else None
                verbose("[live] active snapshot changed")

            if staged is not self._staged_ref:
                self._staged_ref = staged
                updates["latest_staged_snapshot"] = staged.to_dict() if staged is not None else None

            with self._lock:
                for name, value in updates.items():
                    setattr(self, name, value)
        except Exception as e:
            warn(f"[live] progress update error: {e}")

    def get_live_snapshots(self) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
        with self._lock:
            board = self.latest_board_snapshot
            return self.latest_progress_snapshot.copy(), (board.copy() if board is not None else None)

    def get_staged_snapshot(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            staged = self.latest_staged_snapshot
            return staged.copy() if staged is not None else None

    def get_summary(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            summary = self.latest_summary
            return summary.copy() if summary is not None else None


# -----------------------------------------------------------------------------
# Module-level delegates to instance in system.services
# -----------------------------------------------------------------------------

def _get_service() -> LiveStatusService | None:
    return getattr(services, "live_status_service", None)


def get_live_snapshots() -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    svc = _get_service()
    if svc is None:
        return {}, None
    return svc.get_live_snapshots()


def get_staged_snapshot() -> Optional[Dict[str, Any]]:
    svc = _get_service()
    if svc is None:
        return None
    return svc.get_staged_snapshot()


def get_summary() -> Optional[Dict[str, Any]]:
    svc = _get_service()
    if svc is None:
        return None
    return svc.get_summary()
