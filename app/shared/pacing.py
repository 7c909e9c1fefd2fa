"""
Request pacing for rate-limited providers.

A fixed-delay scheduler: consecutive requests are spaced by a short
delay, and a longer cooldown is inserted after every N successful
operations. The sleep function is injected so pacing can be verified
without waiting on the wall clock.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RequestPacer:
    """Spaces out calls to an external provider.

    Usage:
        pacer = RequestPacer(spacing_seconds=1.0, cooldown_every=5, cooldown_seconds=60.0)
        for item in batch:
            pacer.wait()
            ...call provider...
            if ok:
                pacer.record_success()
    """

    def __init__(
        self,
        spacing_seconds: float = 1.0,
        cooldown_every: int = 5,
        cooldown_seconds: float = 60.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if cooldown_every < 1:
            raise ValueError(f"cooldown_every must be >= 1, got {cooldown_every}")
        self._spacing = spacing_seconds
        self._cooldown_every = cooldown_every
        self._cooldown = cooldown_seconds
        self._sleep = sleep
        self._requests = 0
        self._successes = 0
        self._cooldown_due = False
        self._total_slept = 0.0

    @property
    def requests(self) -> int:
        return self._requests

    @property
    def successes(self) -> int:
        return self._successes

    @property
    def total_slept(self) -> float:
        return self._total_slept

    def wait(self) -> None:
        """Block until the next request may be sent.

        The first request goes out immediately.
        """
        if self._cooldown_due:
            logger.info(
                "Provider cooldown: sleeping %.1fs after %d successes.",
                self._cooldown,
                self._successes,
            )
            self._pause(self._cooldown)
            self._cooldown_due = False
        elif self._requests > 0:
            self._pause(self._spacing)
        self._requests += 1

    def record_success(self) -> None:
        """Count a successful operation; every Nth one schedules a cooldown."""
        self._successes += 1
        if self._successes % self._cooldown_every == 0:
            self._cooldown_due = True

    def _pause(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)
            self._total_slept += seconds
