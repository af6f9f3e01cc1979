from __future__ import annotations
from typing import Dict, Any


class SseDeltaTracker:
    """
    Tracks the last-sent board snapshot so SSE payloads only carry it when it changed.

    Usage:
        tracker = SseDeltaTracker()
        state = tracker.build(progress, snapshot)
    """

    def __init__(self) -> None:
        self._last_snapshot: Dict[str, Any] | None = None

    def build(
        self,
        progress: Dict[str, Any] | None,
        snapshot: Dict[str, Any] | None,
    ) -> Dict[str, Any]:
        """Return SSE state: current progress, plus the snapshot only when it changed."""
        snapshot_changed = snapshot is not None and snapshot != self._last_snapshot
        if snapshot_changed:
            self._last_snapshot = snapshot

        return SseDeltaTracker.build_state(progress, snapshot if snapshot_changed else None)

    @staticmethod
    def build_state(
        progress: Dict[str, Any] | None,
        snapshot: Dict[str, Any] | None,
    ) -> Dict[str, Any]:
        """
        Assemble SSE state payload.

        Progress (phase, countdowns) changes every second and is always sent.
        The snapshot changes once per cycle and is only included when new.
        Frontend keeps the last snapshot it received when the field is missing.
        """
        # progress is already a copy from get_live_snapshots()
        state = progress or {}

        if snapshot is not None:
            state["snapshot"] = snapshot

        return state
