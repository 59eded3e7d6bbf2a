"""
Module level entry points bound to the process-wide client.
"""

import atexit
import logging
import threading
from typing import Any, Mapping, Optional, Union

from pulse.client import Client
from pulse.config import Config
from pulse.constants import DEFAULT_SHUTDOWN_TIMEOUT
from pulse.errors import AlreadyInitialized, InitializationError
from pulse.events import Level
from pulse.hooks import PanicHook
from pulse.log_codes import CLIENT_INITIALIZED
from pulse.transport import Transport

logger = logging.getLogger(__name__)

_client: Optional[Client] = None
_lock = threading.Lock()


def _resolve_config(
    config: Union[Config, Mapping[str, Any], None], options: Mapping[str, Any]
) -> Config:
    if isinstance(config, Config):
        if options:
            raise InitializationError(
                "Pass either a Config instance or keyword options, not both."
            )
        return config

    values = dict(config or {})
    values.update(options)
    values.setdefault("public_key", None)
    values.setdefault("project_id", None)
    return Config(**values)


def initialize(
    config: Union[Config, Mapping[str, Any], None] = None,
    transport: Optional[Transport] = None,
    **options: Any,
) -> Client:
    """
    Initialize the process-wide client and start its dispatcher.

    Args:
        config: A Config, or a mapping of Config fields.
        transport: Transport to deliver with. Defaults to HTTPS delivery.
        **options: Config fields, when no Config instance is given.

    Returns:
        Client: The handle; ``shutdown()`` or leaving its context flushes it.

    Raises:
        MissingField: If public_key or project_id is missing.
        InvalidSampleRate: If traces_sample_rate is outside [0.0, 1.0].
        AlreadyInitialized: If a client is already active.
    """
    global _client

    resolved = _resolve_config(config, options)

    with _lock:
        if _client is not None and not _client.closed:
            raise AlreadyInitialized()

        client = Client(resolved, transport=transport).start()
        _client = client
        atexit.register(_shutdown_at_exit)

    logger.info(CLIENT_INITIALIZED, extra=resolved.as_dict())
    return client


def get_client() -> Optional[Client]:
    # Read without the lock: capture paths, including the panic hook, must
    # never wait on it.
    client = _client
    if client is None or client.closed:
        return None
    return client


def capture_message(
    text: str,
    level: Level = Level.INFO,
    extra: Optional[Mapping[str, Any]] = None,
) -> Optional[str]:
    client = get_client()
    if client is None:
        logger.debug("pulse is not initialized, dropping message")
        return None
    return client.capture_message(text, level=level, extra=extra)


def capture_error(
    error: BaseException, extra: Optional[Mapping[str, Any]] = None
) -> Optional[str]:
    client = get_client()
    if client is None:
        logger.debug("pulse is not initialized, dropping error")
        return None
    return client.capture_error(error, extra=extra)


def install_panic_hook() -> Optional[PanicHook]:
    """
    Capture unhandled exceptions of the process as fatal events.

    Returns:
        Optional[PanicHook]: The installed hook, or None if not initialized.
    """
    client = get_client()
    if client is None:
        logger.warning("pulse is not initialized, panic hook not installed")
        return None
    return client.install_panic_hook()


def uninstall_panic_hook() -> None:
    client = get_client()
    if client is not None:
        client.uninstall_panic_hook()


def flush(timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> bool:
    client = get_client()
    if client is None:
        return True
    return client.flush(timeout)


def shutdown(timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> bool:
    """
    Drain pending events for at most ``timeout`` seconds and release the
    process-wide client. Events still pending afterwards are discarded.

    Returns:
        bool: True if the drain finished in time.
    """
    global _client

    with _lock:
        client = _client
        _client = None
        atexit.unregister(_shutdown_at_exit)

    if client is None:
        return True
    return client.shutdown(timeout)


def _shutdown_at_exit() -> None:
    shutdown(DEFAULT_SHUTDOWN_TIMEOUT)
