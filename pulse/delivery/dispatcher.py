"""
Background delivery of queued events.
"""

import logging
import random
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pulse.constants import REQUEST_TIMEOUT, WORKER_POLL_INTERVAL
from pulse.errors import Rejected, TransportError
from pulse.events import Event, serialize
from pulse.log_codes import (
    DISPATCHER_STARTED,
    DISPATCHER_STOPPED,
    DRAIN_DISCARDED,
    EVENT_DELIVERED,
    EVENT_DROPPED,
    EVENT_RETRY_SCHEDULED,
    EVENT_SAMPLED_OUT,
)
from pulse.transport import Transport

from .queue import DeliveryAttempt, EventQueue, RetrySchedule
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


class DeliveryState(str, Enum):
    """
    Lifecycle of a single event inside the dispatcher.
    """

    PENDING = "pending"
    SENDING = "sending"
    RETRYING = "retrying"
    DELIVERED = "delivered"
    SAMPLED_OUT = "sampled_out"
    DROPPED = "dropped"


TERMINAL_STATES = (
    DeliveryState.DELIVERED,
    DeliveryState.SAMPLED_OUT,
    DeliveryState.DROPPED,
)

StateListener = Callable[[Event, DeliveryState], None]


@dataclass
class DispatcherMetrics:
    """
    Metrics for the dispatcher.
    """

    events_delivered: int = 0
    events_sampled_out: int = 0
    events_retried: int = 0
    events_dropped: int = 0
    attempts_failed: int = 0


class Dispatcher:
    """
    Single worker thread draining the EventQueue into a Transport.

    Failed attempts are parked in a RetrySchedule until they are due, so the
    worker never sleeps inside a retry and the queue keeps moving.

    Args:
        event_queue: The queue fed by the capture API.
        transport: Performs the delivery attempts.
        retry_policy: Decides delays between attempts.
        sample_rate: Probability that a dequeued event is sent.
        request_timeout: Per-attempt timeout handed to the transport.
        seed: Seed for the sampling draws.
        listener: Optional callable notified on every state change.
    """

    def __init__(
        self,
        event_queue: EventQueue,
        transport: Transport,
        retry_policy: Optional[RetryPolicy] = None,
        sample_rate: float = 1.0,
        request_timeout: float = REQUEST_TIMEOUT,
        seed: Optional[int] = None,
        listener: Optional[StateListener] = None,
    ):
        self._queue = event_queue
        self._transport = transport
        self._retry_policy = retry_policy or RetryPolicy()
        self._retries = RetrySchedule()
        self._random = random.Random(seed)
        self._listener = listener

        self.sample_rate = sample_rate
        self.request_timeout = request_timeout

        # Thread management
        self._running = False
        self._stopping = False
        self._deadline: Optional[float] = None
        self._thread: Optional[threading.Thread] = None
        self._stopped_event = threading.Event()

        self.metrics = DispatcherMetrics()

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return

        self._running = True
        self._stopping = False
        self._deadline = None
        self._stopped_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="pulse-dispatcher", daemon=True
        )
        self._thread.start()
        logger.debug(DISPATCHER_STARTED)

    def flush(self, timeout: float) -> bool:
        """
        Wait until every accepted event reached a terminal state.

        Returns:
            bool: True if the queue and retry schedule drained in time.
        """
        return self._queue.join(timeout)

    def stop(self, timeout: float) -> bool:
        """
        Drain pending events for at most ``timeout`` seconds, then stop.

        Events still pending at the deadline are discarded. An in-flight
        request is never interrupted; its own timeout bounds it.

        Returns:
            bool: True if the worker exited before the timeout.
        """
        if not self._running:
            return True

        self._deadline = time.monotonic() + timeout
        self._stopping = True
        stopped = self._stopped_event.wait(timeout + self.request_timeout)
        self._running = False
        return stopped

    def _run(self) -> None:
        try:
            while True:
                if self._stopping and time.monotonic() >= (self._deadline or 0):
                    break

                attempt = self._retries.pop_ready()
                if attempt is not None:
                    self._send(attempt)
                    continue

                if self._stopping and self._queue.empty() and not self._retries:
                    break

                wait = WORKER_POLL_INTERVAL
                due_in = self._retries.next_due_in()
                if due_in is not None:
                    wait = min(wait, due_in)

                event = self._queue.dequeue(timeout=wait)
                if event is None:
                    continue

                try:
                    self._process(event)
                except Exception as e:
                    logger.exception(f"Error processing event {event.id}: {e}")
                    self._finish(event, DeliveryState.DROPPED)
        finally:
            self._discard_pending()
            self._stopped_event.set()
            logger.debug(DISPATCHER_STOPPED, extra={"metrics": self.get_metrics()})

    def _notify(self, event: Event, state: DeliveryState) -> None:
        if self._listener is None:
            return
        try:
            self._listener(event, state)
        except Exception:
            logger.exception("State listener failed for event %s", event.id)

    def _finish(self, event: Event, state: DeliveryState) -> None:
        self._notify(event, state)
        self._queue.task_done()

    def _process(self, event: Event) -> None:
        self._notify(event, DeliveryState.PENDING)

        if self._random.random() >= self.sample_rate:
            self.metrics.events_sampled_out += 1
            logger.debug(EVENT_SAMPLED_OUT, extra={"event_id": event.id})
            self._finish(event, DeliveryState.SAMPLED_OUT)
            return

        self._send(DeliveryAttempt(event=event))

    def _send(self, attempt: DeliveryAttempt) -> None:
        event = attempt.event
        self._notify(event, DeliveryState.SENDING)

        try:
            self._transport.send(serialize(event), self.request_timeout)
        except TransportError as e:
            attempt.attempt_count += 1
            self.metrics.attempts_failed += 1
            self._handle_failure(attempt, e)
            return
        except Exception as e:
            attempt.attempt_count += 1
            self.metrics.attempts_failed += 1
            logger.exception(f"Transport failed unexpectedly for event {event.id}: {e}")
            self._drop(attempt, reason=repr(e))
            return

        attempt.attempt_count += 1
        self.metrics.events_delivered += 1
        logger.debug(
            EVENT_DELIVERED,
            extra={"event_id": event.id, "attempt_count": attempt.attempt_count},
        )
        self._finish(event, DeliveryState.DELIVERED)

    def _handle_failure(self, attempt: DeliveryAttempt, error: TransportError) -> None:
        event = attempt.event

        delay = None
        if error.retryable:
            delay = self._retry_policy.next_delay(attempt.attempt_count)

        if delay is None:
            self._drop(attempt, reason=str(error))
            return

        if isinstance(error, Rejected) and error.retry_after:
            delay = max(delay, error.retry_after)

        attempt.next_retry_at = time.monotonic() + delay
        self._retries.schedule(attempt)
        self.metrics.events_retried += 1
        logger.info(
            EVENT_RETRY_SCHEDULED,
            extra={
                "event_id": event.id,
                "attempt_count": attempt.attempt_count,
                "delay": delay,
                "reason": str(error),
            },
        )
        self._notify(event, DeliveryState.RETRYING)

    def _drop(self, attempt: DeliveryAttempt, reason: str) -> None:
        self.metrics.events_dropped += 1
        # Local diagnostic only; reporting the drop remotely could loop.
        logger.warning(
            EVENT_DROPPED,
            extra={
                "event_id": attempt.event.id,
                "attempt_count": attempt.attempt_count,
                "reason": reason,
            },
        )
        self._finish(attempt.event, DeliveryState.DROPPED)

    def _discard_pending(self) -> None:
        discarded = 0

        for attempt in self._retries.clear():
            self._finish(attempt.event, DeliveryState.DROPPED)
            discarded += 1

        while True:
            event = self._queue.dequeue(timeout=0)
            if event is None:
                break
            self._finish(event, DeliveryState.DROPPED)
            discarded += 1

        if discarded:
            self.metrics.events_dropped += discarded
            logger.warning(DRAIN_DISCARDED, extra={"count": discarded})

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get the current metrics for the dispatcher.

        Returns:
            Dictionary of metrics
        """
        return {
            "events_delivered": self.metrics.events_delivered,
            "events_sampled_out": self.metrics.events_sampled_out,
            "events_retried": self.metrics.events_retried,
            "events_dropped": self.metrics.events_dropped,
            "attempts_failed": self.metrics.attempts_failed,
            "current_queue_size": self._queue.qsize(),
            "pending_retries": len(self._retries),
            "queue_high_water_mark": self._queue.metrics.queue_high_water_mark,
            "events_rejected": self._queue.metrics.events_rejected,
        }
