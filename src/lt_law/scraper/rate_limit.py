"""Minimum-interval rate limiter for the register API.

The upstream API enforces one global rate limit no matter which caller issues
the request, so a single limiter instance is shared by everything that talks
to it. Clock and sleep are injectable for deterministic tests.
"""
from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(
        self,
        min_interval: float = 1.2,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = Lock()
        self._last: Optional[float] = None

    @property
    def last_call(self) -> Optional[float]:
        return self._last

    def wait(self) -> float:
        """Block until the next call is allowed; returns the time slept."""
        with self._lock:
            slept = 0.0
            if self._last is not None:
                elapsed = self._clock() - self._last
                if elapsed < self.min_interval:
                    slept = self.min_interval - elapsed
                    logger.debug("Rate limit: sleeping %.2fs", slept)
                    self._sleep(slept)
            self._last = self._clock()
            return slept


__all__ = ['RateLimiter']
