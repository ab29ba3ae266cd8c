"""
GCE Provision - Polling

Poll-with-backoff helper used by every wait in the provisioning flow.

A wait is described by a predicate, a maximum duration and an interval
strategy. The predicate is called until it returns something truthy,
and that value is returned. Running out of time raises PollTimeoutError;
callers translate it into the error that fits their stage.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from gce_provision.core.exceptions import ProvisioningCancelledError


class PollTimeoutError(Exception):
    """Raised by wait_until() when the predicate never came true in time."""

    def __init__(self, description: str, timeout: float, attempts: int):
        self.description = description
        self.timeout = timeout
        self.attempts = attempts
        super().__init__(
            f"Timeout waiting for {description} (>{timeout}s, {attempts} attempts)"
        )


@dataclass(frozen=True)
class Backoff:
    """
    Exponential interval strategy.

    Example:
        Backoff(initial=1, factor=2, maximum=8) yields 1, 2, 4, 8, 8, ...
    """
    initial: float = 1.0
    factor: float = 1.5
    maximum: float = 15.0

    def intervals(self) -> Iterator[float]:
        interval = self.initial
        while True:
            yield interval
            interval = min(interval * self.factor, self.maximum)


def wait_until(predicate: Callable, timeout: Optional[float] = None,
               backoff: Backoff = None, description: str = 'condition',
               cancel_event: threading.Event = None, logger=None,
               sleep: Callable[[float], None] = time.sleep,
               clock: Callable[[], float] = time.monotonic):
    """
    Call predicate until it returns a truthy value.

    Args:
        predicate: Zero-argument callable checked on every attempt
        timeout: Maximum seconds to wait (None waits forever)
        backoff: Interval strategy between attempts
        description: What we are waiting for (for logs and errors)
        cancel_event: Optional event; when set, the wait is abandoned
        logger: Optional logger for debug output
        sleep: Sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        The first truthy value returned by predicate

    Raises:
        PollTimeoutError: If timeout elapsed first
        ProvisioningCancelledError: If cancel_event was set
    """
    backoff = backoff or Backoff()
    start_time = clock()
    attempts = 0

    for interval in backoff.intervals():
        if cancel_event is not None and cancel_event.is_set():
            raise ProvisioningCancelledError(description)

        attempts += 1
        result = predicate()
        if result:
            if logger:
                logger.debug(f"{description}: ready after {attempts} attempt(s)")
            return result

        elapsed = clock() - start_time
        if timeout is not None:
            if elapsed >= timeout:
                raise PollTimeoutError(description, timeout, attempts)
            interval = min(interval, timeout - elapsed)

        if logger:
            logger.debug(f"{description}: not ready, retrying in {interval:.1f}s")

        if cancel_event is not None:
            # Wakes early when cancelled
            if cancel_event.wait(interval):
                raise ProvisioningCancelledError(description)
        else:
            sleep(interval)
