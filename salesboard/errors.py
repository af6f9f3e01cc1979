"""Snapshot fetch error types."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class SnapshotError(Exception):
    """Base class for every failure to obtain a sales snapshot.

    Orchestration code only distinguishes success from failure; the subclass
    and message exist for logging and for the UI error line.
    """


class FetchFailed(SnapshotError):
    """Network, transport or upstream failure while fetching a snapshot."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoDataForBucket(SnapshotError):
    """Upstream answered, but has no rows for the expected cutoff yet."""

    def __init__(self, message: str, cutoff: Optional[datetime] = None) -> None:
        super().__init__(message)
        self.cutoff = cutoff
