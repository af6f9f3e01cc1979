# salesboard/phase.py
from enum import Enum, auto
from typing import Optional


class Phase:
    CHARTS = "CHARTS"                           # bar + line charts, held until reveal
    ANTICIPATION = "ANTICIPATION"               # "latest sales arriving" countdown
    INTERVAL_SUMMARY = "INTERVAL_SUMMARY"       # past 10 minutes vs last year
    CUMULATIVE_SUMMARY = "CUMULATIVE_SUMMARY"   # today so far vs last year
    ERROR = "ERROR"                             # initial load failed, waiting for retry

    ALL = (CHARTS, ANTICIPATION, INTERVAL_SUMMARY, CUMULATIVE_SUMMARY, ERROR)
    TIMED = (ANTICIPATION, INTERVAL_SUMMARY, CUMULATIVE_SUMMARY)


class PhaseEvent(Enum):
    """
    Discrete inputs to the phase state machine.
    NOT screens.
    """
    REVEAL = auto()             # reveal boundary or manual refresh
    COUNTDOWN_EXPIRED = auto()  # timed phase reached zero
    LOADED = auto()             # initial load succeeded
    LOAD_FAILED = auto()        # initial load failed


_TRANSITIONS = {
    (Phase.CHARTS, PhaseEvent.REVEAL): Phase.ANTICIPATION,
    (Phase.ANTICIPATION, PhaseEvent.COUNTDOWN_EXPIRED): Phase.INTERVAL_SUMMARY,
    (Phase.INTERVAL_SUMMARY, PhaseEvent.COUNTDOWN_EXPIRED): Phase.CUMULATIVE_SUMMARY,
    (Phase.CUMULATIVE_SUMMARY, PhaseEvent.COUNTDOWN_EXPIRED): Phase.CHARTS,
    (Phase.CHARTS, PhaseEvent.LOAD_FAILED): Phase.ERROR,
    (Phase.ERROR, PhaseEvent.LOADED): Phase.CHARTS,
}


def next_phase(phase: str, event: PhaseEvent) -> Optional[str]:
    """Successor of `phase` on `event`, or None when the event is not accepted there."""
    return _TRANSITIONS.get((phase, event))
