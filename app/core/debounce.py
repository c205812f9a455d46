"""
Debounce cache for webhook deliveries
Suppresses duplicate checks of the same pull request arriving close together
"""
import time
import threading
from typing import Dict, Optional


DEFAULT_DEBOUNCE_INTERVAL = 5.0


class DebounceCache:
    """
    In-memory map of pull request key -> time it was last checked.
    Only guards a single process; it is not shared across workers.
    """

    def __init__(self, interval: float = DEFAULT_DEBOUNCE_INTERVAL, clock=time.monotonic):
        self.interval = interval
        self._clock = clock
        self._lock = threading.Lock()
        self._seen: Dict[str, float] = {}

    def should_skip(self, key: str, now: Optional[float] = None) -> bool:
        """
        Check-and-insert in one step.

        Stale entries (older than the interval) are dropped first. An unknown key
        is recorded with the current time and the caller should proceed.

        Args:
            key: Pull request key, e.g. "owner/repo#12"
            now: Current time on the cache clock (defaults to the clock)

        Returns:
            True if key was checked within the interval and should be skipped
        """
        with self._lock:
            if now is None:
                now = self._clock()
            for old in [k for k, then in self._seen.items() if now - then > self.interval]:
                del self._seen[old]

            when = self._seen.get(key)
            if when is None:
                self._seen[key] = now
                return False
            return now - when <= self.interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
