"""
Request rate limiting for the HTTP edge.

Fixed-window counters keyed by client address, in the same bucketed style as
a sliding-window counter: each key maps window-start -> count and buckets
outside the current window are pruned lazily.
"""

import time
from collections import defaultdict
from typing import Callable, Dict

from spotjott.errors import RateLimitError


class RateLimiter:
    """
    Allow at most ``max_requests`` per ``window_seconds`` for each key.
    """

    def __init__(self, max_requests: int = 100, window_seconds: int = 900, clock: Callable[[], float] = time.time):
        """
        Initialize rate limiter.

        Args:
            max_requests: Requests allowed per window per key
            window_seconds: Window length in seconds
            clock: Time source, injectable for tests
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # Structure: {key: {window_start: count}}
        self.counters: Dict[str, Dict[int, int]] = defaultdict(lambda: defaultdict(int))
        self._last_cleanup = self._current_window()

    def _current_window(self) -> int:
        now = int(self._clock())
        return now - (now % self.window_seconds)

    def _cleanup_old_buckets(self) -> None:
        """Drop buckets from earlier windows."""
        current = self._current_window()
        if current > self._last_cleanup:
            for key in list(self.counters.keys()):
                buckets = self.counters[key]
                for start in [s for s in buckets if s < current]:
                    del buckets[start]
                if not buckets:
                    del self.counters[key]
            self._last_cleanup = current

    def hit(self, key: str) -> int:
        """
        Count one request for ``key``.

        Returns:
            Requests remaining in the current window

        Raises:
            RateLimitError: when the key is over its allowance
        """
        self._cleanup_old_buckets()
        current = self._current_window()
        bucket = self.counters[key]
        if bucket[current] >= self.max_requests:
            retry_after = max(1, current + self.window_seconds - int(self._clock()))
            raise RateLimitError("Too many requests from this IP, please try again later.", retry_after=retry_after)
        bucket[current] += 1
        return self.max_requests - bucket[current]

    def get_count(self, key: str) -> int:
        self._cleanup_old_buckets()
        if key not in self.counters:
            return 0
        return self.counters[key].get(self._current_window(), 0)

    def reset(self) -> None:
        self.counters.clear()
