"""
Wall-clock arithmetic for the 10-minute reporting cadence.

Everything here is a pure function of ``now`` (plus the cadence constants),
so callers can inject arbitrary timestamps. Sub-second precision is ignored:
the board only ever reasons in whole seconds.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

# Reference cadence
BUCKET_MINUTES = 10
PRELOAD_OFFSET_SECONDS = 30     # fetch quietly, after upstream aggregation settles
REVEAL_OFFSET_SECONDS = 60      # start the anticipation sequence
ANTICIPATION_SECONDS = 10
INTERVAL_VIEW_SECONDS = 30
CUMULATIVE_VIEW_SECONDS = 30


@dataclass(frozen=True)
class CadenceConfig:
    bucket_minutes: int = BUCKET_MINUTES
    preload_offset_seconds: int = PRELOAD_OFFSET_SECONDS
    reveal_offset_seconds: int = REVEAL_OFFSET_SECONDS
    anticipation_seconds: int = ANTICIPATION_SECONDS
    interval_view_seconds: int = INTERVAL_VIEW_SECONDS
    cumulative_view_seconds: int = CUMULATIVE_VIEW_SECONDS

    @property
    def bucket_seconds(self) -> int:
        return self.bucket_minutes * 60

    def validate(self) -> tuple[bool, str]:
        if self.bucket_minutes <= 0 or 60 % self.bucket_minutes != 0:
            return False, "bucket_minutes must divide an hour"
        for name in ("preload_offset_seconds", "reveal_offset_seconds"):
            offset = getattr(self, name)
            if not 0 <= offset < self.bucket_seconds:
                return False, f"{name} must fall inside one bucket"
        if self.preload_offset_seconds >= self.reveal_offset_seconds:
            return False, "preload must happen before reveal"
        for name in ("anticipation_seconds", "interval_view_seconds", "cumulative_view_seconds"):
            if getattr(self, name) < 1:
                return False, f"{name} must be at least 1 second"
        return True, "Cadence valid"

    @classmethod
    def from_preferences(cls, prefs) -> "CadenceConfig":
        from system.preferences import (
            KEY_BUCKET_MINUTES,
            KEY_PRELOAD_OFFSET_SECONDS,
            KEY_REVEAL_OFFSET_SECONDS,
            KEY_ANTICIPATION_SECONDS,
            KEY_INTERVAL_VIEW_SECONDS,
            KEY_CUMULATIVE_VIEW_SECONDS,
        )

        return cls(
            bucket_minutes=prefs.get_int(KEY_BUCKET_MINUTES, BUCKET_MINUTES),
            preload_offset_seconds=prefs.get_int(KEY_PRELOAD_OFFSET_SECONDS, PRELOAD_OFFSET_SECONDS),
            reveal_offset_seconds=prefs.get_int(KEY_REVEAL_OFFSET_SECONDS, REVEAL_OFFSET_SECONDS),
            anticipation_seconds=prefs.get_int(KEY_ANTICIPATION_SECONDS, ANTICIPATION_SECONDS),
            interval_view_seconds=prefs.get_int(KEY_INTERVAL_VIEW_SECONDS, INTERVAL_VIEW_SECONDS),
            cumulative_view_seconds=prefs.get_int(KEY_CUMULATIVE_VIEW_SECONDS, CUMULATIVE_VIEW_SECONDS),
        )


DEFAULT_CADENCE = CadenceConfig()


def _seconds_into_bucket(now: datetime, cadence: CadenceConfig) -> int:
    return (now.minute % cadence.bucket_minutes) * 60 + now.second


def _seconds_until_offset(now: datetime, offset: int, cadence: CadenceConfig) -> int:
    return (offset - _seconds_into_bucket(now, cadence)) % cadence.bucket_seconds


def seconds_until_preload_boundary(now: datetime, cadence: CadenceConfig = DEFAULT_CADENCE) -> int:
    """Seconds until the next ``minute % 10 == 0, second == 30`` instant; 0 on it."""
    return _seconds_until_offset(now, cadence.preload_offset_seconds, cadence)


def seconds_until_reveal_boundary(now: datetime, cadence: CadenceConfig = DEFAULT_CADENCE) -> int:
    """Seconds until the next ``minute % 10 == 1, second == 0`` instant; 0 on it."""
    return _seconds_until_offset(now, cadence.reveal_offset_seconds, cadence)


def is_preload_boundary(now: datetime, cadence: CadenceConfig = DEFAULT_CADENCE) -> bool:
    return seconds_until_preload_boundary(now, cadence) == 0


def is_reveal_boundary(now: datetime, cadence: CadenceConfig = DEFAULT_CADENCE) -> bool:
    return seconds_until_reveal_boundary(now, cadence) == 0


def bucket_start(now: datetime, cadence: CadenceConfig = DEFAULT_CADENCE) -> datetime:
    minute = (now.minute // cadence.bucket_minutes) * cadence.bucket_minutes
    return now.replace(minute=minute, second=0, microsecond=0)


def current_cycle_key(now: datetime, cadence: CadenceConfig = DEFAULT_CADENCE) -> str:
    """'HH:MM' of the current bucket start, e.g. 13:27:45 -> '13:20'."""
    start = bucket_start(now, cadence)
    return f"{start.hour:02d}:{start.minute:02d}"


def interval_cutoff(now: datetime, cadence: CadenceConfig = DEFAULT_CADENCE) -> datetime:
    """
    Boundary between settled and still-accumulating data: one bucket before
    the current bucket start. 18:05 -> 17:50, 18:00:00 -> 17:50 (rolls back
    over the hour and over midnight).
    """
    return bucket_start(now, cadence) - timedelta(minutes=cadence.bucket_minutes)
