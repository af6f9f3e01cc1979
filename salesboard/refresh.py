# salesboard/refresh.py
from datetime import datetime
from typing import Callable

from salesboard.controller import PhaseController
from salesboard.phase import Phase
from system.log_utils import info, warn


class RefreshTrigger:
    """
    Canonical user commands.
    All user-triggered board control MUST go through here.
    """

    def __init__(
        self,
        controller: PhaseController,
        clock: Callable[[], datetime] = datetime.now,
        enabled: bool = True,
    ):
        self._controller = controller
        self._clock = clock
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def trigger_refresh(self) -> tuple[bool, str]:
        info("[REFRESH] Refresh requested")
        if not self._enabled:
            warn("[REFRESH] Refresh rejected: phase is pinned")
            return False, "Refresh disabled while a phase is pinned"

        phase = self._controller.phase
        if phase == Phase.ERROR:
            warn("[REFRESH] Refresh rejected: initial load failed")
            return False, "Initial load failed, use retry"

        if self._controller.progress.load_state != "loaded":
            warn("[REFRESH] Refresh rejected: still loading")
            return False, "Dashboard is still loading"

        if not self._controller.request_reveal(self._clock()):
            warn(f"[REFRESH] Refresh ignored in {phase}")
            return False, f"Cycle already running ({phase})"

        return True, "Refresh started"

    async def retry(self) -> tuple[bool, str]:
        info("[REFRESH] Retry requested")
        ok, msg = await self._controller.recover()
        if not ok:
            warn(f"[REFRESH] Retry rejected: {msg}")
        return ok, msg

    async def perform_action(self, action: str) -> tuple[bool, str]:
        """
        Perform an action by name.
        """
        action_map = {
            "refresh": self.trigger_refresh,
            "retry": self.retry,
        }

        if action not in action_map:
            warn(f"[REFRESH] Unknown action requested: {action}")
            return False, "Unknown action"

        return await action_map[action]()
