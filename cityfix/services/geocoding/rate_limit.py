import threading
import time
from typing import Callable


class MinIntervalRateLimiter:
    """
    Enforces a minimum delay between successive calls to one provider.

    acquire() reserves the next free slot under a lock and then sleeps
    outside it, so concurrent callers queue up one interval apart. Other
    providers and cache hits never touch this limiter.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval_seconds = max(0.0, float(min_interval_seconds))
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_slot = float("-inf")

    def acquire(self) -> float:
        """Block until the caller may issue its request. Returns seconds waited."""
        with self._lock:
            now = self._clock()
            start = max(now, self._next_slot)
            self._next_slot = start + self.min_interval_seconds
        wait = start - now
        if wait > 0:
            self._sleep(wait)
        return wait
