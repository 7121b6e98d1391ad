"""Serialized rate governor for Space-Track requests.

Space-Track enforces a hard ceiling of 30 requests per minute and 300 per
hour per account, and rejects bursts outright instead of slowing them down.
Every remote query therefore runs through a single ``Throttle`` that sleeps
a fixed delay after each call.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 12 s keeps a long run under the 300 requests/hour ceiling
DEFAULT_DELAY = 12.0


class Throttle:
    """Run callables one at a time with a minimum delay between them.

    Args:
        delay: Seconds to block after each guarded call.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        delay: float = DEFAULT_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if delay < 0:
            raise ValueError(f"Throttle delay must be >= 0, got {delay}")
        self.delay = delay
        self._sleep = sleep
        self.calls = 0

    def guard(self, func: Callable[[], T]) -> T:
        """Run ``func`` and then wait ``delay`` seconds, even if it raised."""
        self.calls += 1
        try:
            return func()
        finally:
            if self.delay > 0:
                logger.debug("Throttling for %.1f s (call #%d)", self.delay, self.calls)
                self._sleep(self.delay)
