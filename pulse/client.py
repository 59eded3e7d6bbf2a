"""
The pulse client.

A Client owns one delivery pipeline: the bounded queue, the dispatcher thread
and the transport. Capture methods build an event and hand it to the queue;
they never block on delivery and never raise into the caller.
"""

import logging
from types import TracebackType
from typing import Any, Mapping, Optional, Type

from pulse.config import Config
from pulse.constants import DEFAULT_SHUTDOWN_TIMEOUT, UNKNOWN_PANIC_MESSAGE
from pulse.delivery import Dispatcher, EventQueue, RetryPolicy
from pulse.delivery.dispatcher import StateListener
from pulse.events import Event, Level, build_event
from pulse.events.creation import frames_from_tb
from pulse.hooks import PanicHook
from pulse.log_codes import CLIENT_CAPTURE_FAILED, CLIENT_SHUTDOWN
from pulse.transport import HttpTransport, Transport

logger = logging.getLogger(__name__)


class Client:
    """
    Handle returned by ``pulse.initialize``.

    Args:
        config: The validated configuration.
        transport: Transport to deliver with. Defaults to HttpTransport.
        retry_policy: Retry policy for failed attempts.
        seed: Seed for sampling draws.
        listener: Optional callable notified on delivery state changes.
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[Transport] = None,
        retry_policy: Optional[RetryPolicy] = None,
        seed: Optional[int] = None,
        listener: Optional[StateListener] = None,
    ):
        self.config = config
        self.queue = EventQueue(max_size=config.queue_size)
        self.transport = transport or HttpTransport(config)
        self.dispatcher = Dispatcher(
            self.queue,
            self.transport,
            retry_policy=retry_policy,
            sample_rate=config.traces_sample_rate,
            request_timeout=config.request_timeout,
            seed=seed,
            listener=listener,
        )
        self.panic_hook = PanicHook(self.capture_panic)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> "Client":
        self.dispatcher.start()
        return self

    def _enqueue(self, event: Event) -> Optional[str]:
        if self._closed:
            return None
        if not self.queue.enqueue(event):
            return None
        return event.id

    def capture_message(
        self,
        text: str,
        level: Level = Level.INFO,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> Optional[str]:
        """
        Capture a plain message.

        Returns:
            Optional[str]: The event id, or None if the event was not queued.
        """
        try:
            return self._enqueue(build_event(self.config, text, level, extra=extra))
        except Exception:
            logger.exception(CLIENT_CAPTURE_FAILED)
            return None

    def capture_error(
        self,
        error: BaseException,
        extra: Optional[Mapping[str, Any]] = None,
        level: Level = Level.ERROR,
    ) -> Optional[str]:
        """
        Capture an exception together with its cause chain and traceback.

        Returns:
            Optional[str]: The event id, or None if the event was not queued.
        """
        try:
            return self._enqueue(build_event(self.config, error, level, extra=extra))
        except Exception:
            logger.exception(CLIENT_CAPTURE_FAILED)
            return None

    def capture_panic(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Optional[str]:
        """
        Capture an unhandled exception as a fatal event.
        """
        try:
            stack_trace = frames_from_tb(exc_tb)
            if exc_value is None:
                subject = exc_type.__name__ if exc_type else UNKNOWN_PANIC_MESSAGE
                event = build_event(
                    self.config, subject, Level.FATAL, stack_trace=stack_trace or ()
                )
            else:
                event = build_event(
                    self.config, exc_value, Level.FATAL, stack_trace=stack_trace
                )
            return self._enqueue(event)
        except Exception:
            logger.exception(CLIENT_CAPTURE_FAILED)
            return None

    def install_panic_hook(self) -> PanicHook:
        self.panic_hook.install()
        return self.panic_hook

    def uninstall_panic_hook(self) -> None:
        self.panic_hook.uninstall()

    def flush(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> bool:
        """
        Block until every queued event was delivered, sampled out or dropped.

        Returns:
            bool: True if everything was processed before the timeout.
        """
        if not self.dispatcher.running:
            return self.queue.empty()
        return self.dispatcher.flush(timeout)

    def shutdown(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> bool:
        """
        Stop accepting events, drain the queue for at most ``timeout``
        seconds and release the transport.

        Returns:
            bool: True if the drain finished in time.
        """
        if self._closed:
            return True

        self._closed = True
        self.uninstall_panic_hook()
        drained = self.dispatcher.stop(timeout)
        try:
            self.transport.close()
        except Exception:
            logger.exception("Unable to close transport")

        logger.info(CLIENT_SHUTDOWN, extra={"drained": drained, **self.dispatcher.get_metrics()})
        return drained

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc_value, exc_tb) -> None:
        self.shutdown()
