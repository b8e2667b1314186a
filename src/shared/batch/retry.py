"""Exponential backoff policy for caller-driven retries."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.1


@dataclass
class BackoffPolicy:
    """Bounded exponential backoff.

    Attempt ``n`` (starting at 0) waits ``base_delay * 2**n`` seconds, so the
    defaults wait 0.1s, 0.2s and 0.4s before giving up.

    ``deadline`` is an absolute ``clock()`` value; a wait that would end past
    it is refused so the caller can stop early instead of being killed
    mid-request by its runtime.

    Example:
        policy = BackoffPolicy(max_retries=3)
        attempt = 0
        while pending and policy.should_retry(attempt):
            policy.wait(attempt)
            pending = resubmit(pending)
            attempt += 1
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    deadline: Optional[float] = None
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    def delay_for(self, attempt: int) -> float:
        """Return the wait in seconds before retry number *attempt*."""
        return self.base_delay * (2 ** attempt)

    def should_retry(self, attempt: int) -> bool:
        """Whether retry number *attempt* is allowed."""
        if attempt >= self.max_retries:
            return False
        if self.deadline is not None:
            remaining = self.deadline - self.clock()
            if self.delay_for(attempt) >= remaining:
                logger.warning(
                    "Skipping retry %d: %.3fs backoff exceeds remaining %.3fs",
                    attempt + 1,
                    self.delay_for(attempt),
                    max(remaining, 0.0),
                )
                return False
        return True

    def wait(self, attempt: int) -> float:
        """Sleep for the backoff of *attempt* and return the delay used."""
        delay = self.delay_for(attempt)
        self.sleep(delay)
        return delay
