import random
from typing import Optional

from tenacity import RetryCallState, stop_after_attempt, wait_exponential

from pulse.constants import RETRY_BASE_DELAY, RETRY_MAX_ATTEMPTS, RETRY_MAX_DELAY


class RetryPolicy:
    """
    Decides whether and when a failed delivery is attempted again.

    The delay after ``n`` completed attempts is ``base * 2**n`` plus a jitter
    drawn from ``[0, base)``, capped at ``max_delay``. Jitter only ever adds
    to the exponential part, so delays grow strictly until the cap is hit.

    Args:
        max_attempts: Total attempts allowed for one event.
        base_delay: Base delay in seconds.
        max_delay: Upper bound for any delay, in seconds.
        seed: Seed for the jitter source, for reproducible schedules.
    """

    def __init__(
        self,
        max_attempts: int = RETRY_MAX_ATTEMPTS,
        base_delay: float = RETRY_BASE_DELAY,
        max_delay: float = RETRY_MAX_DELAY,
        seed: Optional[int] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if base_delay < 0 or max_delay < 0:
            raise ValueError("Retry delays must not be negative")

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay

        self._stop = stop_after_attempt(max_attempts)
        self._wait = wait_exponential(multiplier=base_delay, exp_base=2, max=max_delay)
        self._random = random.Random(seed)

    def _state(self, attempt_number: int) -> RetryCallState:
        state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})
        state.attempt_number = attempt_number
        return state

    def next_delay(self, attempt_count: int) -> Optional[float]:
        """
        Get the delay before the next attempt.

        Args:
            attempt_count: Number of attempts already made for the event.

        Returns:
            Optional[float]: Seconds to wait, or None when retries are exhausted.
        """
        if self._stop(self._state(attempt_count)):
            return None

        # wait_exponential computes multiplier * exp_base ** (attempt_number - 1)
        delay = self._wait(self._state(attempt_count + 1))
        delay += self._random.uniform(0, self.base_delay)
        return min(delay, self.max_delay)
