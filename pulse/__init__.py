from .api import (
    capture_error,
    capture_message,
    flush,
    get_client,
    initialize,
    install_panic_hook,
    shutdown,
    uninstall_panic_hook,
)
from .client import Client
from .config import Config
from .decorators import capture_errors
from .errors import (
    AlreadyInitialized,
    ConfigError,
    InitializationError,
    InvalidSampleRate,
    MissingField,
    PulseError,
    Rejected,
    TransportError,
    Unreachable,
)
from .events import Event, Level

__all__ = [
    "initialize",
    "capture_message",
    "capture_error",
    "capture_errors",
    "install_panic_hook",
    "uninstall_panic_hook",
    "flush",
    "shutdown",
    "get_client",
    "Client",
    "Config",
    "Event",
    "Level",
    "PulseError",
    "InitializationError",
    "AlreadyInitialized",
    "ConfigError",
    "MissingField",
    "InvalidSampleRate",
    "TransportError",
    "Unreachable",
    "Rejected",
]
