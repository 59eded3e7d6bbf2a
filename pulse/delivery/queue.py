"""
Holding areas for events awaiting delivery.
"""

import heapq
import itertools
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from pulse.constants import DEFAULT_QUEUE_SIZE
from pulse.events import Event
from pulse.log_codes import QUEUE_FULL

logger = logging.getLogger(__name__)


@dataclass
class QueueMetrics:
    """
    Metrics for the event queue.
    """

    events_accepted: int = 0
    events_rejected: int = 0
    queue_high_water_mark: int = 0


class EventQueue:
    """
    Bounded FIFO of events waiting for the dispatcher.

    Producers never block: when the queue is full the incoming event is
    dropped and the events already accepted keep their place.

    Args:
        max_size: Maximum number of events that can be queued
    """

    def __init__(self, max_size: int = DEFAULT_QUEUE_SIZE):
        self.max_size = max_size
        self._queue: queue.Queue = queue.Queue(maxsize=max_size)
        self.metrics = QueueMetrics()
        self._metrics_lock = threading.Lock()
        self._overflowing = False

    def enqueue(self, event: Event) -> bool:
        """
        Add an event without blocking.

        Only the first drop after the queue last accepted an event is logged,
        so a sustained overload does not flood the caller's log handlers.

        Returns:
            bool: True if the event was accepted, False if it was dropped.
        """
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            with self._metrics_lock:
                self.metrics.events_rejected += 1
                first_drop = not self._overflowing
                self._overflowing = True
            if first_drop:
                logger.warning(QUEUE_FULL, extra={"event_id": event.id})
            return False

        size = self._queue.qsize()
        with self._metrics_lock:
            self.metrics.events_accepted += 1
            self.metrics.queue_high_water_mark = max(
                size, self.metrics.queue_high_water_mark
            )
            self._overflowing = False
        return True

    def dequeue(self, timeout: Optional[float] = None) -> Optional[Event]:
        """
        Take the oldest event, waiting up to ``timeout`` seconds for one.

        Returns:
            Optional[Event]: The event, or None if none arrived in time.
        """
        try:
            if timeout is not None and timeout <= 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def task_done(self) -> None:
        """
        Mark one previously accepted event as finished (delivered, sampled
        out or dropped).
        """
        self._queue.task_done()

    def join(self, timeout: float) -> bool:
        """
        Wait until every accepted event is finished.

        Returns:
            bool: True if all events finished before the timeout.
        """
        deadline = time.monotonic() + timeout
        with self._queue.all_tasks_done:
            while self._queue.unfinished_tasks:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._queue.all_tasks_done.wait(remaining)
        return True

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    def __len__(self) -> int:
        return self._queue.qsize()


@dataclass
class DeliveryAttempt:
    """
    An event waiting for its next delivery attempt.
    """

    event: Event
    attempt_count: int = 0
    next_retry_at: float = 0.0


@dataclass(order=True)
class _ScheduleEntry:
    next_retry_at: float
    sequence: int
    attempt: DeliveryAttempt = field(compare=False)


class RetrySchedule:
    """
    Delayed-ready set of attempts ordered by ``next_retry_at``.

    Owned by the dispatcher thread; it is not safe for concurrent use.
    Times are ``time.monotonic()`` values.
    """

    def __init__(self):
        self._heap: List[_ScheduleEntry] = []
        self._counter = itertools.count()

    def schedule(self, attempt: DeliveryAttempt) -> None:
        entry = _ScheduleEntry(attempt.next_retry_at, next(self._counter), attempt)
        heapq.heappush(self._heap, entry)

    def pop_ready(self, now: Optional[float] = None) -> Optional[DeliveryAttempt]:
        """
        Remove and return the earliest attempt that is due, if any.
        """
        if now is None:
            now = time.monotonic()
        if self._heap and self._heap[0].next_retry_at <= now:
            return heapq.heappop(self._heap).attempt
        return None

    def next_due_in(self, now: Optional[float] = None) -> Optional[float]:
        """
        Seconds until the earliest attempt is due, or None when empty.
        """
        if not self._heap:
            return None
        if now is None:
            now = time.monotonic()
        return max(0.0, self._heap[0].next_retry_at - now)

    def clear(self) -> List[DeliveryAttempt]:
        attempts = [entry.attempt for entry in self._heap]
        self._heap = []
        return attempts

    def __len__(self) -> int:
        return len(self._heap)
