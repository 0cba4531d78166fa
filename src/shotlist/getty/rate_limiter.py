"""Fixed inter-request delay for the Getty search queue."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class FixedDelayRateLimiter:
    """Sleeps a constant interval between units of provider work.

    No backoff and no adaptation: the Getty queue is paced by a single
    fixed pause after each person's search pair.
    """

    def __init__(self, delay_seconds: float) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._delay = delay_seconds

    @property
    def delay(self) -> float:
        return self._delay

    async def wait(self) -> None:
        """Sleep for the configured interval."""
        if self._delay > 0:
            logger.debug("Rate limiter: sleeping %.2fs", self._delay)
            await asyncio.sleep(self._delay)
