"""
Item Deadline

Time budget of one work item. Every blocking step of the item checks it before it
starts and sizes its own timeouts from what is left, so an item never outlives its
budget in a background thread.
"""

import math
import time
from typing import Callable
from typing import Optional

from tenantdb_api.workflow.exceptions import ItemTimeoutError


class Deadline:
    def __init__(self, seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds or None
        self._clock = clock
        self._expires_at = clock() + self.seconds if self.seconds else None

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when unbounded."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, step: Optional[str] = None) -> None:
        """Raise ItemTimeoutError once the budget is spent."""
        if self.expired:
            raise ItemTimeoutError(self.seconds, step)

    def cap(self, timeout: Optional[float]) -> Optional[float]:
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if timeout is None:
            return remaining
        return min(timeout, remaining)

    def query_timeout(self) -> int:
        """pyodbc query timeout in whole seconds; 0 disables it."""
        remaining = self.remaining()
        if remaining is None:
            return 0
        return max(1, math.ceil(remaining))
