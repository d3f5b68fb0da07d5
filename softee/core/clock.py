"""Time sources for the ledger."""
import time
from typing import Optional


class SystemClock:
    """Wall clock truncated to whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to.

    Used by the tests and by the CLI when ``--now`` is given, so that reward
    accrual can be reproduced exactly.
    """

    def __init__(self, start: Optional[int] = None):
        self._now = int(time.time()) if start is None else int(start)

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        self._now = int(timestamp)

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += int(seconds)
        return self._now
