"""
Retry-until-success engine.

Used to wait for a distributed system to converge: the check is cheap and
idempotent, so it is simply called again on a fixed cadence. There is no
jitter, no backoff and no attempt cap; only the timeout bounds the loop.
"""

import logging
import math
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

T = TypeVar("T")

DEFAULT_INTERVAL = 1.0


class Retrier:
    """
    Calls a check function every ``interval`` seconds until it stops raising.

    The clock and sleep functions are injectable so the schedule can be
    driven by a fake clock in tests. Attempts are logged to ``logger``,
    or to the module logger when none is given.
    """

    def __init__(
        self,
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self.logger = logger or logging.getLogger("meshprobe.retry")

    def retry_for(
        self,
        timeout: float,
        fn: Callable[[], T],
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    ) -> T:
        """
        Retry ``fn`` until it returns or ``timeout`` seconds have passed.

        Args:
            timeout: Overall budget in seconds, measured from the first failure
            fn: Zero-argument check; returning means success, raising means failure
            retry_on: Exception types treated as retryable; anything else propagates

        Returns:
            Whatever ``fn`` returned on its first successful call

        Raises:
            The exception from the last call made before the deadline.
        """
        try:
            return fn()
        except retry_on as e:
            last_error = e

        start = self._clock()
        deadline = start + timeout
        next_tick = start + self.interval
        attempts = 1

        while next_tick <= deadline:
            self._wait_until(next_tick)

            try:
                result = fn()
            except retry_on as e:
                last_error = e
                attempts += 1
                self.logger.debug(f"Attempt {attempts} failed: {e}")
            else:
                self.logger.debug(f"Check succeeded after {attempts + 1} attempts")
                return result

            next_tick = self._next_tick(start, next_tick)

        self._wait_until(deadline)
        self.logger.info(f"Gave up after {timeout}s ({attempts} attempts): {last_error}")
        raise last_error

    def _wait_until(self, when: float) -> None:
        remaining = when - self._clock()
        if remaining > 0:
            self._sleep(remaining)

    def _next_tick(self, start: float, previous: float) -> float:
        """
        Advance to the next tick on the ``start + k * interval`` grid.

        A check that overran several ticks fires once immediately and the
        skipped ticks are dropped, so the cadence never drifts.
        """
        tick = previous + self.interval
        now = self._clock()
        if tick <= now:
            tick = start + math.floor((now - start) / self.interval) * self.interval
        return tick


def retry_for(
    timeout: float,
    fn: Callable[[], T],
    interval: float = DEFAULT_INTERVAL,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """Retry ``fn`` every ``interval`` seconds for up to ``timeout`` seconds."""
    return Retrier(interval=interval).retry_for(timeout, fn, retry_on=retry_on)
