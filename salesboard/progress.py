from typing import Optional
from salesboard.phase import Phase


class DashboardProgress:
    """
    Frontend contract (keep stable).
    Snapshot-safe: do NOT add non-serializable fields.
    """

    def __init__(self):
        self.reset_all()

    def reset_all(self):
        self.phase = Phase.CHARTS
        # whole seconds left in a timed phase; 0 in CHARTS / ERROR
        self.seconds_remaining = 0
        self.next_reveal_seconds = 0

        self.load_state = "loading"   # loading | loaded | error
        self.error: Optional[str] = None
        self.committing = False       # reveal waiting for data

        self.has_staged = False
        self.preloaded_cycle: Optional[str] = None
        self.active_fetched_at: Optional[str] = None
        self.pinned = False

    def to_dict(self) -> dict:
        return dict(self.__dict__)
